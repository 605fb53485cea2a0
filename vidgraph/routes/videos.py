"""Video feed, playback and owner edits."""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Path, Query

from vidgraph.db import get_session
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.schemas import VideoCreateInput, VideoUpdateInput
from vidgraph.services import feeds, videos
from vidgraph.services.pagination import PageParams

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("/")
def list_videos(
    params: PageParams = Depends(page_params),
    query: Optional[str] = Query(None, description="Search title and description"),
    user_id: Optional[str] = Query(None, description="Only videos of this channel"),
    sort_by: Optional[str] = Query(None, description="created_at, views, duration or title"),
    sort_type: Optional[str] = Query(None, description="asc or desc"),
) -> Dict:
    """
    Published videos with owner summaries.

    Supports case-insensitive search, filtering by channel and sorting.
    """
    with get_session() as db:
        page = feeds.video_feed(
            db, params, query=query, owner_id=user_id, sort_by=sort_by, sort_type=sort_type
        )
    return envelope(page.to_dict(), "Videos fetched successfully")


@router.post("/", status_code=201)
def publish_video(body: VideoCreateInput, user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        video = videos.publish_video(db, user_id, body)
    return envelope(video, "Video published successfully", 201)


@router.get("/{video_id}")
def get_video(video_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    """Play a video: counts a view and records it in the caller's watch history."""
    with get_session() as db:
        video = videos.get_video(db, video_id, user_id)
    return envelope(video, "Video fetched successfully")


@router.patch("/{video_id}")
def update_video(
    body: VideoUpdateInput,
    video_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        video = videos.update_video(db, video_id, user_id, body)
    return envelope(video, "Video updated successfully")


@router.delete("/{video_id}")
def delete_video(video_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        videos.delete_video(db, video_id, user_id)
    return envelope({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}")
def toggle_publish_status(video_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        video = videos.toggle_publish_status(db, video_id, user_id)
    state = "published" if video["is_published"] else "unpublished"
    return envelope(video, f"Video {state} successfully")


@router.post("/{video_id}/views")
def increment_views(video_id: str = Path(...), _: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        video = videos.increment_views(db, video_id)
    return envelope({"views": video["views"]}, "Video views incremented")
