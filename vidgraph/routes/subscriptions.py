"""Channel subscriptions."""

from typing import Dict

from fastapi import APIRouter, Depends, Path

from vidgraph.db import get_session
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.services import feeds, toggles
from vidgraph.services.pagination import PageParams

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("/c/{channel_id}")
def toggle_subscription(channel_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    """Subscribe to a channel, or unsubscribe when already subscribed."""
    with get_session() as db:
        result = toggles.toggle_subscription(db, user_id, channel_id)
    message = "Subscribed successfully" if result.active else "Unsubscribed successfully"
    return envelope({"subscribed": result.active, "channel_id": result.target_id}, message)


@router.get("/c/{channel_id}")
def channel_subscribers(
    channel_id: str = Path(...),
    params: PageParams = Depends(page_params),
    _: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        page = feeds.channel_subscribers(db, channel_id, params)
    return envelope(page.to_dict(), "Subscribers fetched successfully")


@router.get("/u")
def subscribed_channels(
    params: PageParams = Depends(page_params),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    """Channels the caller subscribes to, each with its latest published video."""
    with get_session() as db:
        page = feeds.subscribed_channels(db, user_id, params)
    return envelope(page.to_dict(), "Subscribed channels fetched successfully")
