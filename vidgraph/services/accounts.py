"""Registration and account maintenance."""

import logging
from typing import Any, Dict

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidgraph.errors import Conflict, InvalidCredentials, NotFound
from vidgraph.models import User
from vidgraph.schemas import AccountUpdateInput, ImageUpdateInput, PasswordChangeInput, RegisterInput
from vidgraph.services.passwords import hash_password, verify_password
from vidgraph.services.projections import public_user

logger = logging.getLogger(__name__)


def _get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def register_user(db: Session, data: RegisterInput) -> Dict[str, Any]:
    """
    Create a user account.

    Raises:
        Conflict: username or email already taken
    """
    existing = db.execute(
        select(User.id).where(or_(User.email == data.email, User.username == data.username))
    ).first()
    if existing:
        raise Conflict("User with email or username already exists")

    user = User(
        full_name=data.full_name,
        email=data.email,
        username=data.username,
        avatar=data.avatar,
        cover_image=data.cover_image or "",
        password_hash=hash_password(data.password),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same name
        db.rollback()
        raise Conflict("User with email or username already exists")

    logger.info("Registered user %s", user.username)
    return public_user(user)


def get_current_user(db: Session, user_id: str) -> Dict[str, Any]:
    return public_user(_get_user(db, user_id))


def change_password(db: Session, user_id: str, data: PasswordChangeInput) -> None:
    user = _get_user(db, user_id)
    if not verify_password(data.old_password, user.password_hash):
        raise InvalidCredentials("Invalid old password provided")
    user.password_hash = hash_password(data.new_password)
    db.flush()


def _email_taken(db: Session, email: str, user_id: str) -> bool:
    return db.execute(
        select(User.id).where(User.email == email, User.id != user_id)
    ).first() is not None


def update_account_details(db: Session, user_id: str, data: AccountUpdateInput) -> Dict[str, Any]:
    user = _get_user(db, user_id)
    if _email_taken(db, data.email, user_id):
        raise Conflict("Email is already in use")
    user.full_name = data.full_name
    user.email = data.email
    try:
        db.flush()
    except IntegrityError:
        # Another account claimed the email after the check above
        db.rollback()
        raise Conflict("Email is already in use")
    return public_user(user)


def update_avatar(db: Session, user_id: str, data: ImageUpdateInput) -> Dict[str, Any]:
    user = _get_user(db, user_id)
    user.avatar = data.url
    db.flush()
    return public_user(user)


def update_cover_image(db: Session, user_id: str, data: ImageUpdateInput) -> Dict[str, Any]:
    user = _get_user(db, user_id)
    user.cover_image = data.url
    db.flush()
    return public_user(user)
