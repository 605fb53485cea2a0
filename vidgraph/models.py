import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint, text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Naive UTC, stored the same way on every backend
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(255), nullable=False, index=True)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), nullable=True)
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    videos = relationship("Video", back_populates="owner")


class Video(Base):
    __tablename__ = "videos"
    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    video_file = Column(String(1024), nullable=False)
    thumbnail = Column(String(1024), nullable=False)
    duration = Column(Float, nullable=False, default=0.0)
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User", back_populates="videos")

    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
    )

Index("idx_videos_published_created", Video.is_published, Video.created_at.desc())
Index("idx_videos_owner_created", Video.owner_id, Video.created_at)


class Comment(Base):
    __tablename__ = "comments"
    id = Column(String(36), primary_key=True, default=new_id)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Tweet(Base):
    __tablename__ = "tweets"
    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Playlist(Base):
    __tablename__ = "playlists"
    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    entries = relationship(
        "PlaylistEntry",
        order_by="PlaylistEntry.position",
        cascade="all, delete-orphan",
    )


class PlaylistEntry(Base):
    __tablename__ = "playlist_entries"
    playlist_id = Column(String(36), ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True)
    # Plain reference: deleting a video leaves the entry behind for readers to skip
    video_id = Column(String(36), primary_key=True)
    position = Column(Integer, nullable=False)
    added_at = Column(DateTime, default=utcnow, nullable=False)


class WatchHistoryEntry(Base):
    __tablename__ = "watch_history"
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    video_id = Column(String(36), primary_key=True)
    watched_at = Column(DateTime, default=utcnow, nullable=False)

Index("idx_watch_history_user_watched", WatchHistoryEntry.user_id, WatchHistoryEntry.watched_at)


class Subscription(Base):
    __tablename__ = "subscriptions"
    id = Column(String(36), primary_key=True, default=new_id)
    subscriber_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
        CheckConstraint("subscriber_id <> channel_id", name="ck_subscriptions_not_self"),
    )


class TargetKind(str, PyEnum):
    video = "video"
    comment = "comment"
    tweet = "tweet"


@dataclass(frozen=True)
class LikeTarget:
    """The one thing a Like points at."""
    kind: TargetKind
    id: str

    @property
    def column_name(self) -> str:
        return f"{self.kind.value}_id"


class Like(Base):
    __tablename__ = "likes"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Target references carry no FK so a deleted target leaves an orphan like
    video_id = Column(String(36), nullable=True, index=True)
    comment_id = Column(String(36), nullable=True, index=True)
    tweet_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_likes_single_target",
        ),
    )

    @classmethod
    def for_target(cls, user_id: str, target: LikeTarget) -> "Like":
        return cls(user_id=user_id, **{target.column_name: target.id})

    @property
    def target(self) -> LikeTarget:
        for kind in TargetKind:
            value = getattr(self, f"{kind.value}_id")
            if value is not None:
                return LikeTarget(kind=kind, id=value)
        raise ValueError(f"Like {self.id} has no target")


# One like per (user, target) for each target kind; each index only covers
# rows where its target column is set.
Index(
    "uq_likes_user_video", Like.user_id, Like.video_id, unique=True,
    postgresql_where=text("video_id IS NOT NULL"), sqlite_where=text("video_id IS NOT NULL"),
)
Index(
    "uq_likes_user_comment", Like.user_id, Like.comment_id, unique=True,
    postgresql_where=text("comment_id IS NOT NULL"), sqlite_where=text("comment_id IS NOT NULL"),
)
Index(
    "uq_likes_user_tweet", Like.user_id, Like.tweet_id, unique=True,
    postgresql_where=text("tweet_id IS NOT NULL"), sqlite_where=text("tweet_id IS NOT NULL"),
)
