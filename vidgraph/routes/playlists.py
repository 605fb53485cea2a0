"""Playlist management."""

from typing import Dict

from fastapi import APIRouter, Depends, Path

from vidgraph.db import get_session
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.schemas import PlaylistCreateInput, PlaylistUpdateInput
from vidgraph.services import playlists
from vidgraph.services.pagination import PageParams

router = APIRouter(prefix="/playlists", tags=["playlists"])


@router.post("/", status_code=201)
def create_playlist(body: PlaylistCreateInput, user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        playlist = playlists.create_playlist(db, user_id, body)
    return envelope(playlist, "Playlist created successfully", 201)


@router.get("/user/{owner_id}")
def list_user_playlists(
    owner_id: str = Path(...),
    params: PageParams = Depends(page_params),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    """Playlists of a user; private ones are only listed for their owner."""
    with get_session() as db:
        page = playlists.list_user_playlists(db, owner_id, user_id, params)
    return envelope(page.to_dict(), "Playlists fetched successfully")


@router.get("/{playlist_id}")
def get_playlist(playlist_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        playlist = playlists.get_playlist(db, playlist_id, user_id)
    return envelope(playlist, "Playlist fetched successfully")


@router.patch("/{playlist_id}")
def update_playlist(
    body: PlaylistUpdateInput,
    playlist_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        playlist = playlists.update_playlist(db, playlist_id, user_id, body)
    return envelope(playlist, "Playlist updated successfully")


@router.delete("/{playlist_id}")
def delete_playlist(playlist_id: str = Path(...), user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        playlists.delete_playlist(db, playlist_id, user_id)
    return envelope({}, "Playlist deleted successfully")


@router.patch("/add/{video_id}/{playlist_id}")
def add_video(
    video_id: str = Path(...),
    playlist_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        playlist = playlists.add_video(db, playlist_id, video_id, user_id)
    return envelope(playlist, "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}")
def remove_video(
    video_id: str = Path(...),
    playlist_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        playlist = playlists.remove_video(db, playlist_id, video_id, user_id)
    return envelope(playlist, "Video removed from playlist successfully")
