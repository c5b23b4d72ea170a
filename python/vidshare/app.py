"""FastAPI application factory.

create_app() wires the collaborators a request needs onto app.state:

- token_service: HS256 access/refresh tokens
- media_relay: Cloudinary, or the in-memory fake when no credentials are set

Tests pass their own token service, session factory and relay.

Middleware order matters. Starlette runs middleware in reverse order of
registration, so add_request_id_middleware() must be called after
create_app() to wrap the auth middleware:

    RequestIDMiddleware -> AuthMiddleware -> route -> AuthMiddleware -> RequestIDMiddleware
"""

from collections.abc import Callable
from uuid import UUID

from fastapi import FastAPI
from sqlalchemy.orm import Session, sessionmaker

from vidshare.api.routes import create_api_router
from vidshare.auth.middleware import AuthMiddleware
from vidshare.auth.tokens import TokenService
from vidshare.config import get_settings
from vidshare.db.session import get_session_factory, set_session_factory
from vidshare.logging import configure_logging, get_logger
from vidshare.middleware.request_id import RequestIDMiddleware
from vidshare.responses import register_exception_handlers
from vidshare.services.users import load_username
from vidshare.storage.media import MediaRelayBase, get_media_relay

configure_logging()

logger = get_logger(__name__)


def create_user_loader() -> Callable[[UUID], str | None]:
    """Lookup used by the auth middleware to reject tokens of deleted users.

    The session factory is resolved per call, so a factory installed after
    the app was built (tests) is honoured.
    """

    def load(user_id: UUID) -> str | None:
        with get_session_factory()() as db:
            return load_username(db, user_id)

    return load


def create_app(
    skip_auth_middleware: bool = False,
    token_service: TokenService | None = None,
    session_factory: sessionmaker[Session] | None = None,
    media_relay: MediaRelayBase | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        skip_auth_middleware: Leave out AuthMiddleware (public-route tests).
        token_service: Defaults to TokenService.from_settings().
        session_factory: Installed as the process-wide factory when given.
        media_relay: Defaults to get_media_relay().
    """
    settings = get_settings()
    if session_factory is not None:
        set_session_factory(session_factory)

    app = FastAPI(
        title="Vidshare API",
        description="Backend API for Vidshare - a video sharing platform",
        version="0.1.0",
    )
    app.state.token_service = token_service or TokenService.from_settings(settings)
    app.state.media_relay = media_relay or get_media_relay(settings)

    register_exception_handlers(app)
    app.include_router(create_api_router())

    if skip_auth_middleware:
        logger.warning("auth_middleware_disabled")
    else:
        app.add_middleware(
            AuthMiddleware,
            verifier=app.state.token_service,
            user_loader=create_user_loader(),
        )

    logger.info(
        "app_created",
        env=settings.vidshare_env.value,
        media_relay=type(app.state.media_relay).__name__,
    )
    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Make RequestIDMiddleware the outermost layer; call after create_app()."""
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
