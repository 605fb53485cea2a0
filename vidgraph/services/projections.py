"""Dict shapes returned by read paths and mutations."""

from datetime import datetime
from typing import Any, Dict, Optional

from vidgraph.models import Comment, Playlist, Tweet, User, Video


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def owner_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "full_name": user.full_name,
        "username": user.username,
        "avatar": user.avatar,
    }


def public_user(user: User) -> Dict[str, Any]:
    """A user without password hash or refresh token."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "full_name": user.full_name,
        "avatar": user.avatar,
        "cover_image": user.cover_image,
        "created_at": iso(user.created_at),
        "updated_at": iso(user.updated_at),
    }


def video_card(video: Video) -> Dict[str, Any]:
    """Compact video shape used in dashboard lists and channel previews."""
    return {
        "id": video.id,
        "title": video.title,
        "thumbnail": video.thumbnail,
        "duration": video.duration,
        "views": video.views,
        "created_at": iso(video.created_at),
    }


def video_detail(video: Video, owner: Optional[User] = None) -> Dict[str, Any]:
    data = {
        "id": video.id,
        "title": video.title,
        "description": video.description,
        "video_file": video.video_file,
        "thumbnail": video.thumbnail,
        "duration": video.duration,
        "views": video.views,
        "is_published": video.is_published,
        "owner_id": video.owner_id,
        "created_at": iso(video.created_at),
        "updated_at": iso(video.updated_at),
    }
    if owner is not None:
        data["owner"] = owner_summary(owner)
    return data


def comment_detail(comment: Comment, owner: Optional[User] = None) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "video_id": comment.video_id,
        "content": comment.content,
        "owner_id": comment.owner_id,
        "owner": owner_summary(owner),
        "created_at": iso(comment.created_at),
        "updated_at": iso(comment.updated_at),
    }


def tweet_detail(tweet: Tweet, owner: Optional[User] = None) -> Dict[str, Any]:
    return {
        "id": tweet.id,
        "content": tweet.content,
        "owner_id": tweet.owner_id,
        "owner": owner_summary(owner),
        "created_at": iso(tweet.created_at),
        "updated_at": iso(tweet.updated_at),
    }


def playlist_detail(playlist: Playlist, owner: Optional[User] = None) -> Dict[str, Any]:
    return {
        "id": playlist.id,
        "name": playlist.name,
        "description": playlist.description,
        "is_public": playlist.is_public,
        "owner_id": playlist.owner_id,
        "owner": owner_summary(owner),
        "video_ids": [entry.video_id for entry in playlist.entries],
        "created_at": iso(playlist.created_at),
        "updated_at": iso(playlist.updated_at),
    }
