"""Creator dashboard: channel totals, trailing-window analytics and own videos."""

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidgraph.db import store_retry
from vidgraph.errors import InvalidArgument
from vidgraph.models import Like, Playlist, Subscription, Video, utcnow
from vidgraph.services.pagination import Page, PageParams
from vidgraph.services.projections import video_card, video_detail

DAY_FORMAT = "%Y-%m-%d"
TOP_VIDEOS = 5
MAX_ANALYTICS_DAYS = 365
VIDEO_STATUSES = ("published", "unpublished")


@store_retry
def get_channel_stats(db: Session, owner_id: str) -> Dict[str, Any]:
    """
    Get lifetime totals for the caller's channel.

    Args:
        db: Database session
        owner_id: Channel owner

    Returns:
        Dict with total videos, views, subscribers, likes and playlists plus the
        five most recent and five most viewed videos. An owner without videos
        gets zeros, not an error.
    """
    owned_ids = select(Video.id).where(Video.owner_id == owner_id)

    total_videos = db.execute(
        select(func.count()).select_from(Video).where(Video.owner_id == owner_id)
    ).scalar_one()
    total_views = db.execute(
        select(func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == owner_id)
    ).scalar_one()
    total_subscribers = db.execute(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == owner_id)
    ).scalar_one()
    total_likes = db.execute(
        select(func.count()).select_from(Like).where(Like.video_id.in_(owned_ids))
    ).scalar_one()
    total_playlists = db.execute(
        select(func.count()).select_from(Playlist).where(Playlist.owner_id == owner_id)
    ).scalar_one()

    recent = db.execute(
        select(Video).where(Video.owner_id == owner_id)
        .order_by(Video.created_at.desc(), Video.id.desc())
        .limit(TOP_VIDEOS)
    ).scalars().all()
    top = db.execute(
        select(Video).where(Video.owner_id == owner_id)
        .order_by(Video.views.desc(), Video.id.desc())
        .limit(TOP_VIDEOS)
    ).scalars().all()

    return {
        "total_videos": total_videos,
        "total_views": int(total_views),
        "total_subscribers": total_subscribers,
        "total_likes": total_likes,
        "total_playlists": total_playlists,
        "recent_videos": [video_card(v) for v in recent],
        "top_videos": [video_card(v) for v in top],
    }


@store_retry
def get_channel_analytics(
    db: Session, owner_id: str, days: int = 30, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Get per-day activity for the trailing ``days`` days.

    Views are attributed to the day a video was created, matching how view
    counts are stored (a running total per video, not per-view events).

    Args:
        db: Database session
        owner_id: Channel owner
        days: Window length, 1 to 365
        now: End of the window (defaults to the current UTC time)

    Returns:
        Dict with ``video_views`` and ``subscriber_growth`` day buckets sorted by
        date, and ``engagement_metrics`` over videos created in the window
    """
    if not isinstance(days, int) or days < 1 or days > MAX_ANALYTICS_DAYS:
        raise InvalidArgument(f"days must be between 1 and {MAX_ANALYTICS_DAYS}")
    since = (now or utcnow()) - timedelta(days=days)

    videos = db.execute(
        select(Video.id, Video.created_at, Video.views)
        .where(Video.owner_id == owner_id, Video.created_at >= since)
    ).all()

    views_by_day: Dict[str, int] = defaultdict(int)
    videos_by_day: Counter = Counter()
    for _, created_at, views in videos:
        day = created_at.strftime(DAY_FORMAT)
        views_by_day[day] += views
        videos_by_day[day] += 1

    subscribed_at = db.execute(
        select(Subscription.created_at)
        .where(Subscription.channel_id == owner_id, Subscription.created_at >= since)
    ).scalars().all()
    subscribers_by_day = Counter(ts.strftime(DAY_FORMAT) for ts in subscribed_at)

    likes_per_video: Dict[str, int] = {}
    if videos:
        likes_per_video = dict(db.execute(
            select(Like.video_id, func.count())
            .where(Like.video_id.in_([video_id for video_id, _, _ in videos]))
            .group_by(Like.video_id)
        ).all())

    total_views = sum(views for _, _, views in videos)
    total_likes = sum(likes_per_video.values())
    count = len(videos)

    return {
        "period": f"{days} days",
        "since": since.isoformat(),
        "video_views": [
            {"date": day, "total_views": views_by_day[day], "video_count": videos_by_day[day]}
            for day in sorted(views_by_day)
        ],
        "subscriber_growth": [
            {"date": day, "new_subscribers": subscribers_by_day[day]}
            for day in sorted(subscribers_by_day)
        ],
        "engagement_metrics": {
            "total_views": total_views,
            "total_likes": total_likes,
            "avg_views_per_video": total_views / count if count else 0.0,
            "avg_likes_per_video": total_likes / count if count else 0.0,
        },
    }


@store_retry
def get_channel_videos(
    db: Session, owner_id: str, params: PageParams, status: Optional[str] = None
) -> Page:
    """
    Get the caller's own videos, newest first, with like counts.

    Args:
        db: Database session
        owner_id: Channel owner
        params: Pagination parameters
        status: "published", "unpublished" or None for both
    """
    conditions = [Video.owner_id == owner_id]
    if status is not None:
        if status not in VIDEO_STATUSES:
            raise InvalidArgument(f"Invalid status. Must be one of: {list(VIDEO_STATUSES)}")
        conditions.append(Video.is_published.is_(status == "published"))

    likes = (
        select(Like.video_id, func.count().label("likes_count"))
        .where(Like.video_id.is_not(None))
        .group_by(Like.video_id)
        .subquery()
    )
    total = db.execute(
        select(func.count()).select_from(Video).where(*conditions)
    ).scalar_one()
    rows = db.execute(
        select(Video, func.coalesce(likes.c.likes_count, 0))
        .outerjoin(likes, likes.c.video_id == Video.id)
        .where(*conditions)
        .order_by(Video.created_at.desc(), Video.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).all()

    items = []
    for video, likes_count in rows:
        data = video_detail(video)
        data["likes_count"] = likes_count
        items.append(data)
    return Page(items=items, total_items=total, current_page=params.page, limit=params.limit)
