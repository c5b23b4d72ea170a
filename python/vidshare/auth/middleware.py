"""Access-token authentication.

AuthMiddleware turns a bearer header (or the accessToken cookie set at
login) into a Viewer on request.state. Routes never read tokens themselves;
they depend on get_viewer.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from vidshare.auth.tokens import TokenVerifier
from vidshare.errors import ApiError, ApiErrorCode, UnauthenticatedError
from vidshare.responses import error_response

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

PUBLIC_PATHS = frozenset(
    {
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/users/register",
        "/users/login",
        "/users/refresh-token",
    }
)

UserLoader = Callable[[UUID], str | None]


@dataclass(frozen=True)
class Viewer:
    """The authenticated user acting on a request."""

    user_id: UUID
    username: str


def read_access_token(request: Request) -> str:
    """Bearer header first, then the accessToken cookie.

    Raises:
        UnauthenticatedError: Malformed header or no token at all.
    """
    header = request.headers.get("authorization")
    if header is not None:
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer":
            raise UnauthenticatedError(message="Invalid authorization header format")
    else:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE, "")

    token = token.strip()
    if not token:
        raise UnauthenticatedError(message="Authentication required")
    return token


class AuthMiddleware(BaseHTTPMiddleware):
    """Rejects unauthenticated requests to non-public paths with 401.

    Tokens of users that no longer exist are rejected too: user_loader maps a
    user id to the current username, or None.
    """

    def __init__(
        self, app: ASGIApp, verifier: TokenVerifier, user_loader: UserLoader | None = None
    ):
        super().__init__(app)
        self.verifier = verifier
        self.user_loader = user_loader

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        try:
            request.state.viewer = self._authenticate(request)
        except ApiError as e:
            logger.warning(
                "auth_failure", extra={"reason": e.message, "request_path": request.url.path}
            )
            return JSONResponse(
                status_code=e.status_code,
                content=error_response(e.code, e.message, e.status_code),
            )

        return await call_next(request)

    def _authenticate(self, request: Request) -> Viewer:
        claims = self.verifier.verify(read_access_token(request))
        user_id = UUID(claims["sub"])

        if self.user_loader is None:
            return Viewer(user_id=user_id, username=claims.get("username", ""))

        try:
            username = self.user_loader(user_id)
        except Exception as e:
            logger.exception("user_lookup_failed", extra={"user_id": str(user_id)})
            raise ApiError(ApiErrorCode.E_INTERNAL, "Internal server error") from e
        if username is None:
            raise UnauthenticatedError(message="Invalid access token")
        return Viewer(user_id=user_id, username=username)


def get_viewer(request: Request) -> Viewer:
    """FastAPI dependency for the authenticated viewer.

    Raises:
        UnauthenticatedError: No viewer attached (public path or middleware off).
    """
    viewer = getattr(request.state, "viewer", None)
    if viewer is None:
        raise UnauthenticatedError(message="Authentication required")
    return viewer
