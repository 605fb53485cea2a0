# vidgraph/routes/comments.py
"""FastAPI routes for video comments."""

from typing import Dict

from fastapi import APIRouter, Depends, Path

from vidgraph.db import get_session
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.schemas import ContentInput
from vidgraph.services import comments
from vidgraph.services.pagination import PageParams

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{video_id}")
def list_comments(
    video_id: str = Path(..., description="Video whose comments are listed"),
    params: PageParams = Depends(page_params),
) -> Dict:
    """Public: no access token required."""
    with get_session() as db:
        page = comments.list_video_comments(db, video_id, params)
    return envelope(page.to_dict(), "Comments fetched successfully")


@router.post("/{video_id}", status_code=201)
def add_comment(
    body: ContentInput,
    video_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        comment = comments.add_comment(db, video_id, user_id, body)
    return envelope(comment, "Comment added successfully", 201)


@router.patch("/c/{comment_id}")
def update_comment(
    body: ContentInput,
    comment_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        comment = comments.update_comment(db, comment_id, user_id, body)
    return envelope(comment, "Comment updated successfully")


@router.delete("/c/{comment_id}")
def delete_comment(comment_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        comments.delete_comment(db, comment_id, user_id)
    return envelope({}, "Comment deleted successfully")
