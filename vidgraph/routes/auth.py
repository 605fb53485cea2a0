"""
Account and session endpoints.
"""

from typing import Dict

from fastapi import APIRouter, Depends, Path

from vidgraph.db import get_session
from vidgraph.routes.deps import envelope, get_current_user_id, page_params
from vidgraph.schemas import (
    AccountUpdateInput,
    ImageUpdateInput,
    LoginInput,
    PasswordChangeInput,
    RefreshInput,
    RegisterInput,
)
from vidgraph.services import accounts, feeds, sessions
from vidgraph.services.pagination import PageParams
from vidgraph.services.projections import public_user

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", status_code=201)
def register(body: RegisterInput) -> Dict:
    """Create an account. Avatar and cover image are URLs of already uploaded media."""
    with get_session() as db:
        user = accounts.register_user(db, body)
    return envelope(user, "User registered successfully", 201)


@router.post("/login")
def login(body: LoginInput) -> Dict:
    """
    Log in with email or username and password.

    Returns the user together with a fresh access/refresh token pair. Any
    previously issued refresh token stops working.
    """
    with get_session() as db:
        user = sessions.authenticate(db, body.password, email=body.email, username=body.username)
        pair = sessions.issue(db, user.id)
        data = {"user": public_user(user), **pair.to_dict()}
    return envelope(data, "User logged in successfully")


@router.post("/logout")
def logout(user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        sessions.revoke(db, user_id)
    return envelope({}, "User logged out")


@router.post("/refresh-token")
def refresh_token(body: RefreshInput) -> Dict:
    """Exchange a refresh token for a new pair; each refresh token works once."""
    with get_session() as db:
        pair = sessions.rotate(db, body.refresh_token)
    return envelope(pair.to_dict(), "Access token refreshed")


@router.post("/change-password")
def change_password(body: PasswordChangeInput, user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        accounts.change_password(db, user_id, body)
    return envelope({}, "Password changed successfully")


@router.get("/me")
def current_user(user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        user = accounts.get_current_user(db, user_id)
    return envelope(user, "User fetched successfully")


@router.patch("/account")
def update_account(body: AccountUpdateInput, user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        user = accounts.update_account_details(db, user_id, body)
    return envelope(user, "Account details updated successfully")


@router.patch("/avatar")
def update_avatar(body: ImageUpdateInput, user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        user = accounts.update_avatar(db, user_id, body)
    return envelope(user, "Avatar image updated successfully")


@router.patch("/cover-image")
def update_cover_image(body: ImageUpdateInput, user_id: str = Depends(get_current_user_id)) -> Dict:
    with get_session() as db:
        user = accounts.update_cover_image(db, user_id, body)
    return envelope(user, "Cover image updated successfully")


@router.get("/c/{username}")
def channel_profile(
    username: str = Path(..., description="Channel username"),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        channel = feeds.channel_profile(db, username, viewer_id=user_id)
    return envelope(channel, "User channel fetched successfully")


@router.get("/history")
def watch_history(
    params: PageParams = Depends(page_params),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    with get_session() as db:
        page = feeds.watch_history(db, user_id, params)
    return envelope(page.to_dict(), "Watch history fetched successfully")
