"""FastAPI routes for the creator dashboard."""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from vidgraph.db import get_session
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.services.dashboard import (
    MAX_ANALYTICS_DAYS,
    get_channel_analytics,
    get_channel_stats,
    get_channel_videos,
)
from vidgraph.services.pagination import PageParams

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
def channel_stats(user_id: str = Depends(get_current_user_id)) -> Dict:
    """
    Lifetime totals for the caller's channel.

    Returns total videos, views, subscribers, likes and playlists with the
    five most recent and five most viewed videos.
    """
    with get_session() as db:
        stats = get_channel_stats(db, user_id)
    return envelope(stats, "Channel stats fetched successfully")


@router.get("/videos")
def channel_videos(
    params: PageParams = Depends(page_params),
    status: Optional[str] = Query(None, description="published or unpublished; omit for both"),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        page = get_channel_videos(db, user_id, params, status=status)
    return envelope(page.to_dict(), "Channel videos fetched successfully")


@router.get("/analytics")
def channel_analytics(
    days: int = Query(30, ge=1, le=MAX_ANALYTICS_DAYS, description="Trailing window in days"),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    """Per-day views and new subscribers over the trailing window."""
    with get_session() as db:
        analytics = get_channel_analytics(db, user_id, days)
    return envelope(analytics, "Channel analytics fetched successfully")
