"""Authorization checks for mutations of owned content."""

from typing import Any

from vidgraph.errors import Forbidden
from vidgraph.models import Playlist


def is_owner(entity: Any, actor_id: str) -> bool:
    # Opaque identifiers: compare as text, never numerically
    return str(entity.owner_id) == str(actor_id)


def assert_owner(entity: Any, actor_id: str, action: str = "modify") -> None:
    """
    Raise Forbidden unless ``actor_id`` owns ``entity``.

    Args:
        entity: Any owned row (Video, Comment, Tweet, Playlist)
        actor_id: Verified identity of the caller
        action: Verb used in the error message
    """
    if not is_owner(entity, actor_id):
        kind = type(entity).__name__.lower()
        raise Forbidden(f"You can only {action} your own {kind}s")


def assert_readable(playlist: Playlist, actor_id: str) -> None:
    """Public playlists are readable by anyone, private ones only by the owner."""
    if playlist.is_public:
        return
    if not is_owner(playlist, actor_id):
        raise Forbidden("Access denied to this playlist")
