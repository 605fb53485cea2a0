"""Request dependencies shared by the routers."""

from typing import Any, Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vidgraph.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from vidgraph.errors import InvalidToken
from vidgraph.services import sessions
from vidgraph.services.pagination import PageParams

bearer = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> str:
    """Verified identity of the caller, taken from the bearer access token."""
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Unauthorized request")
    return sessions.verify_access(credentials.credentials)


def page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def envelope(data: Any = None, message: str = "Success", status_code: int = 200) -> dict:
    """Body of every successful response."""
    return {"statusCode": status_code, "data": data, "message": message}
