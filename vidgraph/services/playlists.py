"""Playlists: owner-managed ordered sets of videos."""

from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from vidgraph.db import store_retry
from vidgraph.errors import Conflict, NotFound
from vidgraph.models import Playlist, PlaylistEntry, User, Video
from vidgraph.schemas import PlaylistCreateInput, PlaylistUpdateInput, parse_id
from vidgraph.services.ownership import assert_owner, assert_readable
from vidgraph.services.pagination import Page, PageParams
from vidgraph.services.projections import playlist_detail, video_detail


def _get_playlist(db: Session, playlist_id) -> Playlist:
    playlist = db.get(Playlist, parse_id(playlist_id, "playlist id"))
    if playlist is None:
        raise NotFound("Playlist not found")
    return playlist


def _get_owned_playlist(db: Session, playlist_id, actor_id: str, action: str = "modify") -> Playlist:
    playlist = _get_playlist(db, playlist_id)
    assert_owner(playlist, actor_id, action)
    return playlist


def create_playlist(db: Session, owner_id: str, data: PlaylistCreateInput) -> Dict[str, Any]:
    playlist = Playlist(
        owner_id=owner_id,
        name=data.name,
        description=data.description,
        is_public=data.is_public,
    )
    db.add(playlist)
    db.flush()
    return playlist_detail(playlist, db.get(User, owner_id))


@store_retry
def list_user_playlists(db: Session, user_id, viewer_id: str, params: PageParams) -> Page:
    """Playlists of a user, newest first; other viewers only see public ones."""
    user_id = parse_id(user_id, "user id")
    owner = db.get(User, user_id)
    if owner is None:
        raise NotFound("User not found")

    conditions = [Playlist.owner_id == user_id]
    if str(viewer_id) != user_id:
        conditions.append(Playlist.is_public.is_(True))

    total = db.execute(
        select(func.count()).select_from(Playlist).where(*conditions)
    ).scalar_one()
    playlists = db.execute(
        select(Playlist)
        .where(*conditions)
        .order_by(Playlist.created_at.desc(), Playlist.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    ).scalars().all()

    return Page(
        items=[playlist_detail(p, owner) for p in playlists],
        total_items=total,
        current_page=params.page,
        limit=params.limit,
    )


@store_retry
def get_playlist(db: Session, playlist_id, viewer_id: str) -> Dict[str, Any]:
    """
    Get a playlist with its videos in playlist order.

    Entries whose video no longer exists are skipped.
    """
    playlist = _get_playlist(db, playlist_id)
    assert_readable(playlist, viewer_id)

    video_owner = aliased(User)
    rows = db.execute(
        select(Video, video_owner)
        .join(PlaylistEntry, PlaylistEntry.video_id == Video.id)
        .join(video_owner, video_owner.id == Video.owner_id)
        .where(PlaylistEntry.playlist_id == playlist.id)
        .order_by(PlaylistEntry.position)
    ).all()

    data = playlist_detail(playlist, db.get(User, playlist.owner_id))
    data["videos"] = [video_detail(video, owner) for video, owner in rows]
    data["video_ids"] = [video.id for video, _ in rows]
    return data


def update_playlist(db: Session, playlist_id, actor_id: str, data: PlaylistUpdateInput) -> Dict[str, Any]:
    playlist = _get_owned_playlist(db, playlist_id, actor_id, "edit")
    if data.name is not None:
        playlist.name = data.name
    if data.description is not None:
        playlist.description = data.description
    if data.is_public is not None:
        playlist.is_public = data.is_public
    db.flush()
    return playlist_detail(playlist, db.get(User, playlist.owner_id))


def delete_playlist(db: Session, playlist_id, actor_id: str) -> None:
    playlist = _get_owned_playlist(db, playlist_id, actor_id, "delete")
    db.delete(playlist)
    db.flush()


def add_video(db: Session, playlist_id, video_id, actor_id: str) -> Dict[str, Any]:
    """
    Append a video to the end of a playlist.

    Raises:
        NotFound: playlist or video missing
        Forbidden: actor does not own the playlist
        Conflict: video already in the playlist
    """
    playlist = _get_owned_playlist(db, playlist_id, actor_id)
    video_id = parse_id(video_id, "video id")
    if db.get(Video, video_id) is None:
        raise NotFound("Video not found")
    if any(entry.video_id == video_id for entry in playlist.entries):
        raise Conflict("Video is already in the playlist")

    last = db.execute(
        select(func.max(PlaylistEntry.position)).where(PlaylistEntry.playlist_id == playlist.id)
    ).scalar()
    playlist.entries.append(
        PlaylistEntry(playlist_id=playlist.id, video_id=video_id, position=(last or 0) + 1)
    )
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise Conflict("Video is already in the playlist")
    return playlist_detail(playlist, db.get(User, playlist.owner_id))


def remove_video(db: Session, playlist_id, video_id, actor_id: str) -> Dict[str, Any]:
    playlist = _get_owned_playlist(db, playlist_id, actor_id)
    video_id = parse_id(video_id, "video id")
    entry = next((e for e in playlist.entries if e.video_id == video_id), None)
    if entry is None:
        raise NotFound("Video is not in the playlist")
    playlist.entries.remove(entry)
    db.flush()
    return playlist_detail(playlist, db.get(User, playlist.owner_id))
