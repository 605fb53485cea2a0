"""
Toggle engine for like and subscription relations.

A relation exists at most once per (actor, target) pair. Uniqueness is owned by
the store (partial unique indexes on likes, a unique constraint on
subscriptions); this module only decides whether a toggle turns the relation
on or off and converges when two toggles race on the same pair.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidgraph.errors import InvalidArgument, InvalidOperation, NotFound, Unknown
from vidgraph.models import Comment, Like, LikeTarget, Subscription, TargetKind, Tweet, User, Video
from vidgraph.schemas import parse_id

logger = logging.getLogger(__name__)

TARGET_MODELS = {
    TargetKind.video: Video,
    TargetKind.comment: Comment,
    TargetKind.tweet: Tweet,
}


class InsertOutcome(str, Enum):
    created = "created"
    duplicate = "duplicate"


@dataclass(frozen=True)
class ToggleResult:
    """Final state of the relation as seen by this toggle."""
    active: bool
    target_kind: str
    target_id: str


def _insert_relation(db: Session, row) -> InsertOutcome:
    """
    Insert a relation row and report a uniqueness violation as a value.

    The transaction is rolled back on violation; toggles only read before
    inserting, so nothing else is lost.
    """
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        return InsertOutcome.duplicate
    return InsertOutcome.created


def _delete_relation(db: Session, model, row_id: str) -> None:
    # Zero matched rows means a concurrent toggle already removed it
    db.execute(delete(model).where(model.id == row_id))
    db.flush()


def _toggle(db: Session, model, find: Callable[[], Optional[object]], build: Callable[[], object]) -> bool:
    existing = find()
    if existing is not None:
        _delete_relation(db, model, existing.id)
        return False

    outcome = _insert_relation(db, build())
    if outcome is InsertOutcome.created:
        return True

    # A concurrent toggle-on inserted the same pair first; this call becomes the toggle-off
    racer = find()
    if racer is None:
        raise Unknown("Relation could not be stored")
    logger.warning("Concurrent %s toggle detected, removing relation %s", model.__tablename__, racer.id)
    _delete_relation(db, model, racer.id)
    return False


def _find_like(db: Session, user_id: str, target: LikeTarget) -> Optional[Like]:
    column = getattr(Like, target.column_name)
    return db.execute(
        select(Like).where(Like.user_id == user_id, column == target.id)
    ).scalars().first()


def _find_subscription(db: Session, subscriber_id: str, channel_id: str) -> Optional[Subscription]:
    return db.execute(
        select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
    ).scalars().first()


def parse_target_kind(kind) -> TargetKind:
    try:
        return TargetKind(kind)
    except ValueError:
        raise InvalidArgument(f"Invalid target kind {kind!r}. Must be one of: {[k.value for k in TargetKind]}")


def toggle_like(db: Session, actor_id: str, target_kind, target_id) -> ToggleResult:
    """
    Like the target if the actor has not liked it yet, otherwise remove the like.

    Args:
        db: Database session
        actor_id: Verified identity of the liker
        target_kind: "video", "comment" or "tweet"
        target_id: Identifier of the liked entity

    Returns:
        ToggleResult with ``active`` True when the like now exists
    """
    actor_id = parse_id(actor_id, "user id")
    kind = parse_target_kind(target_kind)
    target = LikeTarget(kind=kind, id=parse_id(target_id, f"{kind.value} id"))

    if db.get(TARGET_MODELS[kind], target.id) is None:
        raise NotFound(f"{kind.value.capitalize()} not found")

    active = _toggle(
        db,
        Like,
        find=lambda: _find_like(db, actor_id, target),
        build=lambda: Like.for_target(actor_id, target),
    )
    return ToggleResult(active=active, target_kind=kind.value, target_id=target.id)


def toggle_subscription(db: Session, actor_id: str, channel_id) -> ToggleResult:
    """
    Subscribe the actor to a channel, or unsubscribe if already subscribed.

    Raises:
        InvalidOperation: when a user tries to subscribe to themselves
        NotFound: when the channel does not exist
    """
    actor_id = parse_id(actor_id, "user id")
    channel_id = parse_id(channel_id, "channel id")
    if actor_id == channel_id:
        raise InvalidOperation("You cannot subscribe to yourself")

    if db.get(User, channel_id) is None:
        raise NotFound("Channel not found")

    active = _toggle(
        db,
        Subscription,
        find=lambda: _find_subscription(db, actor_id, channel_id),
        build=lambda: Subscription(subscriber_id=actor_id, channel_id=channel_id),
    )
    return ToggleResult(active=active, target_kind="channel", target_id=channel_id)
