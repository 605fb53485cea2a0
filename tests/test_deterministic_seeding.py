"""Test deterministic seeding functionality."""

import random

from faker import Faker

from vidgraph.models import Like, Subscription, User, Video
from vidgraph.services import seeder
from vidgraph.services.seeder import seed_random_generators


class TestDeterministicSeeding:
    """Test that seeding produces deterministic results."""

    def test_random_seed_deterministic(self):
        """Test that random.seed produces deterministic results."""
        random.seed(1337)
        values1 = [random.randint(1, 100) for _ in range(10)]

        random.seed(1337)
        values2 = [random.randint(1, 100) for _ in range(10)]

        assert values1 == values2

    def test_faker_seed_deterministic(self):
        """Test that Faker.seed_instance produces deterministic results."""
        fake1 = Faker()
        fake1.seed_instance(1337)
        names1 = [fake1.user_name() for _ in range(5)]

        fake2 = Faker()
        fake2.seed_instance(1337)
        names2 = [fake2.user_name() for _ in range(5)]

        assert names1 == names2

    def test_seed_random_generators_function(self):
        """Test that seed_random_generators resets both generators."""
        seed_random_generators()
        random_values1 = [random.randint(1, 100) for _ in range(5)]
        fake_names1 = [seeder.fake.unique.user_name() for _ in range(3)]

        seed_random_generators()
        random_values2 = [random.randint(1, 100) for _ in range(5)]
        fake_names2 = [seeder.fake.unique.user_name() for _ in range(3)]

        assert random_values1 == random_values2
        assert fake_names1 == fake_names2


class TestSeeder:
    """Test that seeded data respects the store's invariants."""

    def test_seed_small_dataset(self, db):
        seed_random_generators()
        users = seeder.make_users(db, 12)
        videos = seeder.make_videos(db, users, 30)
        comments = seeder.make_comments(db, videos, users, max_per_video=3)
        tweets = seeder.make_tweets(db, users, 10)
        seeder.make_subscriptions(db, users, max_per_user=5)
        seeder.make_likes(db, users, videos, comments, tweets)
        seeder.make_playlists(db, users, videos, frac_with_playlists=0.5)
        seeder.make_watch_history(db, users, videos, max_per_user=5)
        db.commit()

        assert db.query(User).count() == 12
        assert db.query(Video).count() == 30
        assert all(s.subscriber_id != s.channel_id for s in db.query(Subscription))
        pairs = [(like.user_id, like.target) for like in db.query(Like)]
        assert len(pairs) == len(set(pairs))

    def test_seeded_users_can_log_in(self, db):
        from vidgraph.services import sessions

        seed_random_generators()
        user = seeder.make_users(db, 1, password="demo")[0]
        db.commit()

        assert sessions.authenticate(db, "demo", username=user.username).id == user.id
