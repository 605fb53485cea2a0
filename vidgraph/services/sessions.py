"""
Session manager: access/refresh token issuance, rotation and revocation.

Access tokens are verified statelessly. A refresh token is only valid while it
equals the single value stored on the user row, so every successful rotation
invalidates the token that was presented.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JOSEError, JWTError, jwt
from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from vidgraph import config
from vidgraph.errors import InvalidArgument, InvalidCredentials, InvalidToken, NotFound, TokenExpired, TokenReused, Unknown
from vidgraph.models import User
from vidgraph.services.passwords import verify_password

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


def _encode(user_id: str, token_type: str, secret: str, ttl: timedelta, **extra: Any) -> str:
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    claims.update(extra)
    try:
        return jwt.encode(claims, secret, algorithm=config.JWT_ALGORITHM)
    except JOSEError as e:
        logger.exception("Token signing failed")
        raise Unknown("Something went wrong while generating tokens") from e


def _decode(token: str, token_type: str, secret: str) -> Dict[str, Any]:
    if not token or not isinstance(token, str):
        raise InvalidToken()
    try:
        payload = jwt.decode(token, secret, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpired() from e
    except JWTError as e:
        raise InvalidToken() from e

    if payload.get("type") != token_type:
        raise InvalidToken("Invalid token type")
    if not str(payload.get("sub", "")).strip():
        raise InvalidToken("Token missing subject")
    return payload


def create_access_token(user: User) -> str:
    return _encode(
        user.id,
        ACCESS_TOKEN_TYPE,
        config.ACCESS_TOKEN_SECRET,
        timedelta(minutes=config.ACCESS_TOKEN_EXPIRY_MINUTES),
        username=user.username,
        email=user.email,
    )


def create_refresh_token(user: User) -> str:
    return _encode(
        user.id,
        REFRESH_TOKEN_TYPE,
        config.REFRESH_TOKEN_SECRET,
        timedelta(days=config.REFRESH_TOKEN_EXPIRY_DAYS),
    )


def issue(db: Session, user_id: str) -> TokenPair:
    """Generate a token pair and make its refresh token the user's active one."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    pair = TokenPair(access_token=create_access_token(user), refresh_token=create_refresh_token(user))
    user.refresh_token = pair.refresh_token
    db.flush()
    return pair


def verify_access(token: str) -> str:
    """
    Verify an access token without touching the store.

    Returns:
        The user id carried by the token

    Raises:
        TokenExpired: the signature is valid but the token expired
        InvalidToken: anything else wrong with the token
    """
    payload = _decode(token, ACCESS_TOKEN_TYPE, config.ACCESS_TOKEN_SECRET)
    return str(payload["sub"])


def rotate(db: Session, refresh_token: str) -> TokenPair:
    """
    Exchange a refresh token for a new pair.

    The stored token is swapped with a conditional UPDATE keyed on the presented
    value, so when two rotations race on one token only one of them wins and the
    other reports reuse.

    Raises:
        InvalidToken: malformed, expired, unknown user, or session revoked
        TokenReused: the token was valid once but has been rotated away
    """
    try:
        payload = _decode(refresh_token, REFRESH_TOKEN_TYPE, config.REFRESH_TOKEN_SECRET)
    except TokenExpired as e:
        raise InvalidToken("Refresh token is expired") from e

    user = db.get(User, str(payload["sub"]))
    if user is None:
        raise InvalidToken("Invalid refresh token")
    if user.refresh_token is None:
        raise InvalidToken("Session has been closed, please log in again")
    if user.refresh_token != refresh_token:
        logger.warning("Refresh token reuse detected for user %s", user.id)
        raise TokenReused()

    pair = TokenPair(access_token=create_access_token(user), refresh_token=create_refresh_token(user))
    result = db.execute(
        update(User)
        .where(User.id == user.id, User.refresh_token == refresh_token)
        .values(refresh_token=pair.refresh_token)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.refresh(user)
        if user.refresh_token is None:
            raise InvalidToken("Session has been closed, please log in again")
        logger.warning("Lost refresh race for user %s", user.id)
        raise TokenReused()

    db.flush()
    db.expire(user, ["refresh_token"])
    return pair


def revoke(db: Session, user_id: str) -> None:
    """Close the user's session; the stored refresh token is cleared."""
    db.execute(
        update(User)
        .where(User.id == user_id)
        .values(refresh_token=None)
        .execution_options(synchronize_session=False)
    )
    db.flush()
    user = db.get(User, user_id)
    if user is not None:
        db.expire(user, ["refresh_token"])


def authenticate(db: Session, password: str, email: Optional[str] = None, username: Optional[str] = None) -> User:
    """
    Resolve a user by email or username and check the password.

    Password comparison is delegated to the hashing collaborator; this function
    only consumes its boolean result.
    """
    clauses = []
    if email:
        clauses.append(User.email == email.strip().lower())
    if username:
        clauses.append(User.username == username.strip().lower())
    if not clauses:
        raise InvalidArgument("email or username is required")

    user = db.execute(select(User).where(or_(*clauses))).scalars().first()
    if user is None:
        raise NotFound("User not found")
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user
