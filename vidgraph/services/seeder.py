from __future__ import annotations
import random
from datetime import timedelta
from typing import Sequence
from faker import Faker
from sqlalchemy.orm import Session

from vidgraph.models import (
    User, Video, Comment, Tweet, Playlist, PlaylistEntry, Subscription, Like,
    LikeTarget, TargetKind, WatchHistoryEntry,
)
from vidgraph.services.passwords import hash_password

SEED = 1337
fake = Faker()


def seed_random_generators(seed: int = SEED) -> None:
    """Make seeded data reproducible across runs."""
    random.seed(seed)
    Faker.seed(seed)
    fake.seed_instance(seed)
    fake.unique.clear()


def make_users(db: Session, n_users: int, password: str = "password") -> list[User]:
    # one hash shared by every seeded account; hashing is deliberately slow
    password_hash = hash_password(password)
    users = []
    for _ in range(n_users):
        username = fake.unique.user_name().lower()
        users.append(User(
            username=username,
            email=f"{username}@{fake.free_email_domain()}",
            full_name=fake.name(),
            avatar=fake.image_url(),
            cover_image=fake.image_url() if random.random() < 0.5 else "",
            password_hash=password_hash,
            created_at=fake.date_time_between(start_date="-180d", end_date="-90d"),
        ))
    db.add_all(users); db.flush()
    return users


def make_videos(db: Session, users: Sequence[User], n_videos: int) -> list[Video]:
    # a few prolific channels, a long tail of occasional uploaders
    weights = [8 if i % 10 == 0 else 1 for i in range(len(users))]
    videos: list[Video] = []
    for _ in range(n_videos):
        owner = random.choices(users, weights=weights, k=1)[0]
        created = fake.date_time_between(start_date="-60d", end_date="now")
        v = Video(
            owner_id=owner.id,
            title=fake.sentence(nb_words=random.randint(3, 8)).rstrip("."),
            description=fake.paragraph(nb_sentences=3),
            video_file=f"https://cdn.example.com/videos/{fake.uuid4()}.mp4",
            thumbnail=fake.image_url(),
            duration=round(random.uniform(15, 3600), 1),
            views=int(random.paretovariate(1.2) * 10),
            is_published=random.random() < 0.9,
            created_at=created,
            updated_at=created,
        )
        db.add(v); videos.append(v)
    db.flush()
    return videos


def make_comments(db: Session, videos: Sequence[Video], users: Sequence[User], max_per_video=8) -> list[Comment]:
    comments: list[Comment] = []
    for v in videos:
        for _ in range(random.randint(0, max_per_video)):
            u = random.choice(users)
            when = v.created_at + timedelta(minutes=random.randint(1, 2000))
            c = Comment(video_id=v.id, owner_id=u.id, content=fake.sentence(), created_at=when, updated_at=when)
            db.add(c); comments.append(c)
    db.flush()
    return comments


def make_tweets(db: Session, users: Sequence[User], n_tweets: int) -> list[Tweet]:
    tweets: list[Tweet] = []
    for _ in range(n_tweets):
        u = random.choice(users)
        when = fake.date_time_between(start_date="-30d", end_date="now")
        t = Tweet(owner_id=u.id, content=fake.sentence(nb_words=random.randint(5, 25)), created_at=when, updated_at=when)
        db.add(t); tweets.append(t)
    db.flush()
    return tweets


def make_subscriptions(db: Session, users: Sequence[User], max_per_user=15) -> int:
    """Each user follows a random handful of other channels, never themselves."""
    count = 0
    for u in users:
        others = [c for c in users if c.id != u.id]
        k = min(len(others), random.randint(0, max_per_user))
        for channel in random.sample(others, k):
            when = fake.date_time_between(start_date="-60d", end_date="now")
            db.add(Subscription(subscriber_id=u.id, channel_id=channel.id, created_at=when))
            count += 1
    db.flush()
    return count


def make_likes(db: Session, users: Sequence[User], videos: Sequence[Video],
               comments: Sequence[Comment], tweets: Sequence[Tweet]) -> int:
    """
    Scatter likes over videos, comments and tweets with ratios ≈ 5:2:1.

    A user likes a given target at most once.
    """
    pools = (
        [(TargetKind.video, [v.id for v in videos])] * 5
        + [(TargetKind.comment, [c.id for c in comments])] * 2
        + [(TargetKind.tweet, [t.id for t in tweets])] * 1
    )
    seen = set()
    for u in users:
        for _ in range(random.randint(0, 30)):
            kind, ids = random.choice(pools)
            if not ids:
                continue
            target = LikeTarget(kind=kind, id=random.choice(ids))
            if (u.id, target) in seen:
                continue
            seen.add((u.id, target))
            like = Like.for_target(u.id, target)
            like.created_at = fake.date_time_between(start_date="-30d", end_date="now")
            db.add(like)
    db.flush()
    return len(seen)


def make_playlists(db: Session, users: Sequence[User], videos: Sequence[Video], frac_with_playlists=0.3) -> list[Playlist]:
    playlists: list[Playlist] = []
    for u in users:
        if random.random() >= frac_with_playlists or not videos:
            continue
        for _ in range(random.randint(1, 3)):
            p = Playlist(
                owner_id=u.id,
                name=fake.catch_phrase(),
                description=fake.sentence(),
                is_public=random.random() < 0.8,
            )
            chosen = random.sample(list(videos), min(len(videos), random.randint(1, 10)))
            for position, v in enumerate(chosen, start=1):
                p.entries.append(PlaylistEntry(video_id=v.id, position=position))
            db.add(p); playlists.append(p)
    db.flush()
    return playlists


def make_watch_history(db: Session, users: Sequence[User], videos: Sequence[Video], max_per_user=20) -> int:
    published = [v for v in videos if v.is_published]
    count = 0
    for u in users:
        k = min(len(published), random.randint(0, max_per_user))
        for v in random.sample(published, k):
            when = v.created_at + timedelta(minutes=random.randint(1, 5000))
            db.add(WatchHistoryEntry(user_id=u.id, video_id=v.id, watched_at=when))
            count += 1
    db.flush()
    return count
