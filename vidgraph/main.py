"""
Main FastAPI application for the vidgraph video platform API.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from vidgraph.config import DEBUG, LOG_LEVEL
from vidgraph.errors import InvalidArgument, StoreUnavailable, Unknown, VidgraphError
from vidgraph.routes.auth import router as auth_router
from vidgraph.routes.comments import router as comments_router
from vidgraph.routes.dashboard import router as dashboard_router
from vidgraph.routes.health import VERSION, router as health_router
from vidgraph.routes.likes import router as likes_router
from vidgraph.routes.playlists import router as playlists_router
from vidgraph.routes.subscriptions import router as subscriptions_router
from vidgraph.routes.tweets import router as tweets_router
from vidgraph.routes.videos import router as videos_router

logger = logging.getLogger(__name__)


def _error_response(exc: VidgraphError, details: str = None) -> JSONResponse:
    content = {
        "statusCode": exc.status_code,
        "data": None,
        "message": exc.message,
        "error_code": exc.error_code,
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=exc.status_code, content=content)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return InvalidArgument.default_message
    first = errors[0]
    # drop the "body"/"query"/"path" prefix
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
    return f"{field}: {first.get('msg', 'invalid value')}"


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="vidgraph API",
        description="Video platform backend: channels, videos, likes, subscriptions and playlists",
        version=VERSION,
        debug=DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(VidgraphError)
    async def vidgraph_exception_handler(request: Request, exc: VidgraphError):
        """Render typed failures with their own status and error code."""
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(InvalidArgument(_validation_message(exc)))

    @app.exception_handler(OperationalError)
    async def operational_exception_handler(request: Request, exc: OperationalError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        return _error_response(StoreUnavailable())

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle SQLAlchemy database errors."""
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return _error_response(
            Unknown("Database operation failed"),
            details=str(exc) if app.debug else None,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unhandled exceptions."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error_response(Unknown(), details=str(exc) if app.debug else None)

    app.include_router(auth_router)
    app.include_router(videos_router)
    app.include_router(comments_router)
    app.include_router(tweets_router)
    app.include_router(likes_router)
    app.include_router(subscriptions_router)
    app.include_router(playlists_router)
    app.include_router(dashboard_router)
    app.include_router(health_router)

    return app


# Create the application instance
app = create_app()


@app.get("/")
async def root():
    return {"message": "vidgraph API", "status": "healthy", "version": VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("vidgraph.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
