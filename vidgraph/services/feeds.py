"""
Denormalized read models: video feed, channel pages, likes and watch history.

Every view is a read-only join of relation rows with the entities they point
at. A relation whose parent row is gone (a deleted video, say) is dropped by
the inner join rather than reported, and is not counted in ``total_items``.
"""

from typing import Any, Dict, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, aliased

from vidgraph.db import store_retry
from vidgraph.errors import InvalidArgument, NotFound
from vidgraph.models import Like, Subscription, User, Video, WatchHistoryEntry
from vidgraph.schemas import parse_id
from vidgraph.services.pagination import Page, PageParams
from vidgraph.services.projections import iso, owner_summary, video_card, video_detail

SORT_FIELDS = {
    "created_at": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}
SORT_ALIASES = {"createdAt": "created_at"}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sort_clause(sort_by: Optional[str], sort_type: Optional[str]):
    field = SORT_ALIASES.get(sort_by, sort_by) if sort_by else "created_at"
    if field not in SORT_FIELDS:
        raise InvalidArgument(f"Invalid sort field. Must be one of: {sorted(SORT_FIELDS)}")
    direction = (sort_type or "desc").lower()
    if direction not in ("asc", "desc"):
        raise InvalidArgument("sort_type must be 'asc' or 'desc'")
    column = SORT_FIELDS[field]
    if direction == "desc":
        return [column.desc(), Video.id.desc()]
    return [column.asc(), Video.id.asc()]


@store_retry
def video_feed(
    db: Session,
    params: PageParams,
    query: Optional[str] = None,
    owner_id: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_type: Optional[str] = None,
) -> Page:
    """
    Published videos with their owner summary.

    Args:
        db: Database session
        params: Pagination parameters
        query: Case-insensitive substring matched against title or description
        owner_id: Only videos of this channel
        sort_by: One of created_at, views, duration, title (default created_at)
        sort_type: "asc" or "desc" (default desc)

    Returns:
        Page of video dicts
    """
    order = _sort_clause(sort_by, sort_type)
    conditions = [Video.is_published.is_(True)]
    if query and query.strip():
        pattern = f"%{_escape_like(query.strip())}%"
        conditions.append(or_(
            Video.title.ilike(pattern, escape="\\"),
            Video.description.ilike(pattern, escape="\\"),
        ))
    if owner_id:
        conditions.append(Video.owner_id == parse_id(owner_id, "user id"))

    total = db.execute(
        select(func.count()).select_from(Video)
        .join(User, User.id == Video.owner_id)
        .where(*conditions)
    ).scalar_one()
    rows = db.execute(
        select(Video, User)
        .join(User, User.id == Video.owner_id)
        .where(*conditions)
        .order_by(*order)
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    return Page(
        items=[video_detail(video, owner) for video, owner in rows],
        total_items=total,
        current_page=params.page,
        limit=params.limit,
    )


@store_retry
def channel_profile(db: Session, username: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Public channel page for a username with subscription counts.

    Raises:
        InvalidArgument: empty username
        NotFound: no user with that username
    """
    if not username or not username.strip():
        raise InvalidArgument("Username is missing from the request")
    user = db.execute(
        select(User).where(User.username == username.strip().lower())
    ).scalars().first()
    if user is None:
        raise NotFound("Channel does not exist")

    subscribers_count = db.execute(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == user.id)
    ).scalar_one()
    subscribed_to_count = db.execute(
        select(func.count()).select_from(Subscription).where(Subscription.subscriber_id == user.id)
    ).scalar_one()
    is_subscribed = False
    if viewer_id:
        is_subscribed = db.execute(
            select(Subscription.id).where(
                Subscription.channel_id == user.id,
                Subscription.subscriber_id == str(viewer_id),
            )
        ).first() is not None

    return {
        "id": user.id,
        "full_name": user.full_name,
        "username": user.username,
        "email": user.email,
        "avatar": user.avatar,
        "cover_image": user.cover_image,
        "subscribers_count": subscribers_count,
        "channels_subscribed_to_count": subscribed_to_count,
        "is_subscribed": is_subscribed,
    }


@store_retry
def channel_subscribers(db: Session, channel_id, params: PageParams) -> Page:
    """Users subscribed to a channel, most recent subscription first."""
    channel_id = parse_id(channel_id, "channel id")
    if db.get(User, channel_id) is None:
        raise NotFound("Channel not found")

    subscriber = aliased(User)
    base = (
        select(Subscription, subscriber)
        .join(subscriber, subscriber.id == Subscription.subscriber_id)
        .where(Subscription.channel_id == channel_id)
    )
    total = db.execute(select(func.count()).select_from(base.subquery())).scalar_one()
    rows = db.execute(
        base.order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    return Page(
        items=[
            {"subscriber": owner_summary(user), "subscribed_at": iso(sub.created_at)}
            for sub, user in rows
        ],
        total_items=total,
        current_page=params.page,
        limit=params.limit,
    )


@store_retry
def subscribed_channels(db: Session, subscriber_id: str, params: PageParams) -> Page:
    """
    Channels the caller subscribes to, each with its most recent published
    video (or None when the channel has not published anything).

    The latest video is joined through a correlated subquery, so a page is
    read in a single statement.
    """
    channel = aliased(User)
    latest_id = (
        select(Video.id)
        .where(Video.owner_id == channel.id, Video.is_published.is_(True))
        .order_by(Video.created_at.desc(), Video.id.desc())
        .limit(1)
        .correlate(channel)
        .scalar_subquery()
    )
    base = (
        select(Subscription, channel)
        .join(channel, channel.id == Subscription.channel_id)
        .where(Subscription.subscriber_id == subscriber_id)
    )
    total = db.execute(select(func.count()).select_from(base.subquery())).scalar_one()
    rows = db.execute(
        base.add_columns(Video)
        .outerjoin(Video, Video.id == latest_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    items = []
    for sub, user, latest in rows:
        summary = owner_summary(user)
        summary["latest_video"] = video_card(latest) if latest is not None else None
        items.append({"channel": summary, "subscribed_at": iso(sub.created_at)})

    return Page(items=items, total_items=total, current_page=params.page, limit=params.limit)


@store_retry
def liked_videos(db: Session, user_id: str, params: PageParams) -> Page:
    """
    Videos the caller liked, most recent like first.

    Likes whose video was deleted after the like was recorded are excluded.
    """
    owner = aliased(User)
    base = (
        select(Like, Video, owner)
        .join(Video, Video.id == Like.video_id)
        .join(owner, owner.id == Video.owner_id)
        .where(Like.user_id == user_id, Like.video_id.is_not(None))
    )
    total = db.execute(select(func.count()).select_from(base.subquery())).scalar_one()
    rows = db.execute(
        base.order_by(Like.created_at.desc(), Like.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    return Page(
        items=[
            {"liked_at": iso(like.created_at), "video": video_detail(video, video_owner)}
            for like, video, video_owner in rows
        ],
        total_items=total,
        current_page=params.page,
        limit=params.limit,
    )


@store_retry
def watch_history(db: Session, user_id: str, params: PageParams) -> Page:
    """
    The caller's watched videos, most recently added first.

    A video is added once, on first watch; watching it again does not move it.
    """
    if db.get(User, user_id) is None:
        raise NotFound("User not found")

    owner = aliased(User)
    base = (
        select(WatchHistoryEntry, Video, owner)
        .join(Video, Video.id == WatchHistoryEntry.video_id)
        .join(owner, owner.id == Video.owner_id)
        .where(WatchHistoryEntry.user_id == user_id)
    )
    total = db.execute(select(func.count()).select_from(base.subquery())).scalar_one()
    rows = db.execute(
        base.order_by(WatchHistoryEntry.watched_at.desc(), Video.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    items = []
    for entry, video, video_owner in rows:
        data = video_detail(video, video_owner)
        data["watched_at"] = iso(entry.watched_at)
        items.append(data)
    return Page(items=items, total_items=total, current_page=params.page, limit=params.limit)
