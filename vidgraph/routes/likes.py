"""Like toggles and the caller's liked videos."""

from typing import Dict

from fastapi import APIRouter, Depends, Path

from vidgraph.db import get_session
from vidgraph.models import TargetKind
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.services import feeds, toggles
from vidgraph.services.pagination import PageParams

router = APIRouter(prefix="/likes", tags=["likes"])


def _toggle(user_id: str, kind: TargetKind, target_id: str) -> Dict:
    with get_session() as db:
        result = toggles.toggle_like(db, user_id, kind, target_id)
    label = kind.value.capitalize()
    message = f"{label} liked successfully" if result.active else f"{label} unliked successfully"
    return envelope({"liked": result.active, f"{kind.value}_id": result.target_id}, message)


@router.post("/toggle/v/{video_id}")
def toggle_video_like(video_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    return _toggle(user_id, TargetKind.video, video_id)


@router.post("/toggle/c/{comment_id}")
def toggle_comment_like(comment_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    return _toggle(user_id, TargetKind.comment, comment_id)


@router.post("/toggle/t/{tweet_id}")
def toggle_tweet_like(tweet_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    return _toggle(user_id, TargetKind.tweet, tweet_id)


@router.get("/videos")
def liked_videos(
    params: PageParams = Depends(page_params),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        page = feeds.liked_videos(db, user_id, params)
    return envelope(page.to_dict(), "Liked videos fetched successfully")
