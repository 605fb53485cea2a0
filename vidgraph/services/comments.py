"""Comments on videos."""

from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidgraph.db import store_retry
from vidgraph.errors import NotFound
from vidgraph.models import Comment, User, Video
from vidgraph.schemas import ContentInput, parse_id
from vidgraph.services.ownership import assert_owner
from vidgraph.services.pagination import Page, PageParams
from vidgraph.services.projections import comment_detail


def _get_owned_comment(db: Session, comment_id, actor_id: str, action: str) -> Comment:
    comment = db.get(Comment, parse_id(comment_id, "comment id"))
    if comment is None:
        raise NotFound("Comment not found")
    assert_owner(comment, actor_id, action)
    return comment


@store_retry
def list_video_comments(db: Session, video_id, params: PageParams) -> Page:
    """
    Get comments of a video, newest first, each joined to its author.

    Args:
        db: Database session
        video_id: Video whose comments are listed
        params: Pagination parameters

    Returns:
        Page of comment dicts
    """
    video_id = parse_id(video_id, "video id")
    if db.get(Video, video_id) is None:
        raise NotFound("Video not found")

    total = db.execute(
        select(func.count()).select_from(Comment)
        .join(User, User.id == Comment.owner_id)
        .where(Comment.video_id == video_id)
    ).scalar_one()
    rows = db.execute(
        select(Comment, User)
        .join(User, User.id == Comment.owner_id)
        .where(Comment.video_id == video_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    return Page(
        items=[comment_detail(comment, owner) for comment, owner in rows],
        total_items=total,
        current_page=params.page,
        limit=params.limit,
    )


def add_comment(db: Session, video_id, owner_id: str, data: ContentInput) -> Dict[str, Any]:
    video_id = parse_id(video_id, "video id")
    if db.get(Video, video_id) is None:
        raise NotFound("Video not found")
    comment = Comment(video_id=video_id, owner_id=owner_id, content=data.content)
    db.add(comment)
    db.flush()
    return comment_detail(comment, db.get(User, owner_id))


def update_comment(db: Session, comment_id, actor_id: str, data: ContentInput) -> Dict[str, Any]:
    comment = _get_owned_comment(db, comment_id, actor_id, "edit")
    comment.content = data.content
    db.flush()
    return comment_detail(comment, db.get(User, comment.owner_id))


def delete_comment(db: Session, comment_id, actor_id: str) -> None:
    comment = _get_owned_comment(db, comment_id, actor_id, "delete")
    db.delete(comment)
    db.flush()
