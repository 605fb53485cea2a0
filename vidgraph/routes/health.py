"""
Health check endpoints for monitoring system status.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from vidgraph.db import get_session
from vidgraph.models import User, Video, utcnow

VERSION = "1.0.0"

# Process start, for uptime reporting
STARTED_AT = time.monotonic()

router = APIRouter(prefix="/health", tags=["health"])


def check_database_health() -> Dict[str, str]:
    """
    Check database connectivity.

    Returns:
        Dict with status and optional error details
    """
    try:
        with get_session() as db:
            result = db.execute(text("SELECT 1")).scalar()
            if result == 1:
                return {"status": "ok"}
            return {"status": "down", "error": "Unexpected query result"}
    except SQLAlchemyError as e:
        return {"status": "down", "error": f"Database error: {e}"}


@router.get("/")
def health_check() -> Dict[str, Any]:
    """
    Overall service health.

    Returns:
        Dict containing:
        - status: "ok" | "down"
        - db: database health status
        - version: API version
        - timestamp: current UTC timestamp
        - uptime_seconds: seconds since the process started
    """
    db_health = check_database_health()
    return {
        "status": "ok" if db_health["status"] == "ok" else "down",
        "db": db_health,
        "version": VERSION,
        "timestamp": utcnow().isoformat(),
        "uptime_seconds": round(time.monotonic() - STARTED_AT, 3),
    }


@router.get("/db")
def database_health() -> Dict[str, Any]:
    """Database health with row counts of the main tables."""
    health_status: Dict[str, Any] = dict(check_database_health())
    if health_status["status"] != "ok":
        return health_status

    try:
        with get_session() as db:
            health_status["tables"] = {
                "users": db.execute(select(func.count()).select_from(User)).scalar_one(),
                "videos": db.execute(select(func.count()).select_from(Video)).scalar_one(),
            }
    except SQLAlchemyError as e:
        health_status["error"] = f"Extended check failed: {e}"
    return health_status
