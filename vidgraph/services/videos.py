"""Video publishing, playback bookkeeping and owner-only edits."""

import logging
from typing import Any, Dict

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from vidgraph.errors import NotFound
from vidgraph.models import Comment, Like, User, Video, WatchHistoryEntry
from vidgraph.schemas import VideoCreateInput, VideoUpdateInput, parse_id
from vidgraph.services.ownership import assert_owner
from vidgraph.services.projections import video_detail

logger = logging.getLogger(__name__)


def get_owned_video(db: Session, video_id, actor_id: str, action: str = "modify") -> Video:
    """Load a video and check that the actor owns it."""
    video = db.get(Video, parse_id(video_id, "video id"))
    if video is None:
        raise NotFound("Video not found")
    assert_owner(video, actor_id, action)
    return video


def publish_video(db: Session, owner_id: str, data: VideoCreateInput) -> Dict[str, Any]:
    video = Video(
        owner_id=owner_id,
        title=data.title,
        description=data.description,
        video_file=data.video_file,
        thumbnail=data.thumbnail,
        duration=data.duration,
    )
    db.add(video)
    db.flush()
    logger.info("User %s published video %s", owner_id, video.id)
    return video_detail(video)


def _record_watch(db: Session, user_id: str, video_id: str) -> None:
    """Add a video to the user's watch history; a repeat watch is a no-op."""
    dialect = db.get_bind().dialect.name
    values = {"user_id": user_id, "video_id": video_id}
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        if db.get(WatchHistoryEntry, (user_id, video_id)) is None:
            db.add(WatchHistoryEntry(**values))
            db.flush()
        return
    db.execute(insert(WatchHistoryEntry).values(**values).on_conflict_do_nothing())


def _bump_views(db: Session, video_id: str) -> None:
    db.execute(
        update(Video)
        .where(Video.id == video_id)
        .values(views=Video.views + 1)
        .execution_options(synchronize_session=False)
    )


def get_video(db: Session, video_id, viewer_id: str) -> Dict[str, Any]:
    """
    Play a video: count the view, remember it in the viewer's history and
    return it with its owner summary and whether the viewer liked it.
    """
    video_id = parse_id(video_id, "video id")
    video = db.get(Video, video_id)
    if video is None:
        raise NotFound("Video not found")
    if not video.is_published:
        raise NotFound("Video is not published")

    _bump_views(db, video_id)
    _record_watch(db, viewer_id, video_id)
    db.flush()
    db.refresh(video)

    is_liked = db.execute(
        select(Like.id).where(Like.user_id == viewer_id, Like.video_id == video_id)
    ).first() is not None

    data = video_detail(video, db.get(User, video.owner_id))
    data["is_liked"] = is_liked
    return data


def increment_views(db: Session, video_id) -> Dict[str, Any]:
    video_id = parse_id(video_id, "video id")
    video = db.get(Video, video_id)
    if video is None:
        raise NotFound("Video not found")
    _bump_views(db, video_id)
    db.flush()
    db.refresh(video)
    return video_detail(video)


def update_video(db: Session, video_id, actor_id: str, data: VideoUpdateInput) -> Dict[str, Any]:
    video = get_owned_video(db, video_id, actor_id, "edit")
    if data.title is not None:
        video.title = data.title
    if data.description is not None:
        video.description = data.description
    if data.thumbnail is not None:
        video.thumbnail = data.thumbnail
    db.flush()
    return video_detail(video)


def delete_video(db: Session, video_id, actor_id: str) -> None:
    """
    Delete a video and its comments.

    Likes, playlist entries and watch history rows that point at the video are
    left in place; read paths skip them.
    """
    video = get_owned_video(db, video_id, actor_id, "delete")
    db.execute(delete(Comment).where(Comment.video_id == video.id))
    db.delete(video)
    db.flush()
    logger.info("User %s deleted video %s", actor_id, video.id)


def toggle_publish_status(db: Session, video_id, actor_id: str) -> Dict[str, Any]:
    video = get_owned_video(db, video_id, actor_id, "toggle status of")
    video.is_published = not video.is_published
    db.flush()
    return video_detail(video)
