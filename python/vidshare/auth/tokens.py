"""Access/refresh token issuance and verification.

Provides:
- TokenVerifier: Protocol consumed by AuthMiddleware
- TokenService: HS256 JWT implementation backed by PyJWT
- hash_refresh_token: digest stored on the user row (the raw token never is)

Access tokens carry the public identity claims (username, email, full_name)
so clients can render without a round trip. Refresh tokens carry only the
subject and a jti, and are single-use: each refresh rotates the stored hash.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID, uuid4

import jwt
from jwt.exceptions import DecodeError, ExpiredSignatureError, InvalidTokenError

from vidshare.config import Settings
from vidshare.errors import ApiErrorCode, UnauthenticatedError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ISSUER = "vidshare"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Clock skew allowance in seconds
CLOCK_SKEW_SECONDS = 30


class TokenVerifier(Protocol):
    """Protocol for access-token verification."""

    def verify(self, token: str) -> dict[str, Any]:
        """Verify token and return decoded claims.

        Raises:
            UnauthenticatedError: Token is invalid, expired, or malformed.
        """
        ...


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def hash_refresh_token(token: str) -> str:
    """SHA-256 hex digest of a refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenService:
    """Issues and verifies HS256 access and refresh tokens.

    Access and refresh tokens use different secrets so one can never be
    replayed as the other.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl_s: int = 900,
        refresh_ttl_s: int = 864000,
    ):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl_s = access_ttl_s
        self.refresh_ttl_s = refresh_ttl_s

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            access_secret=settings.effective_access_secret,
            refresh_secret=settings.effective_refresh_secret,
            access_ttl_s=settings.access_token_expire_s,
            refresh_ttl_s=settings.refresh_token_expire_s,
        )

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def issue_access_token(
        self, user_id: UUID, username: str, email: str, full_name: str
    ) -> str:
        now = int(time.time())
        payload = {
            "sub": str(user_id),
            "username": username,
            "email": email,
            "full_name": full_name,
            "type": ACCESS_TOKEN_TYPE,
            "iss": ISSUER,
            "iat": now,
            "exp": now + self.access_ttl_s,
        }
        return jwt.encode(payload, self.access_secret, algorithm=ALGORITHM)

    def issue_refresh_token(self, user_id: UUID) -> str:
        now = int(time.time())
        payload = {
            "sub": str(user_id),
            "type": REFRESH_TOKEN_TYPE,
            "jti": str(uuid4()),
            "iss": ISSUER,
            "iat": now,
            "exp": now + self.refresh_ttl_s,
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=ALGORITHM)

    def issue_pair(self, user_id: UUID, username: str, email: str, full_name: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id, username, email, full_name),
            refresh_token=self.issue_refresh_token(user_id),
        )

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(self, token: str) -> dict[str, Any]:
        """Verify an access token (TokenVerifier protocol)."""
        return self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> dict[str, Any]:
        """Verify a refresh token.

        Raises:
            UnauthenticatedError(E_REFRESH_TOKEN_INVALID): on any failure.
        """
        try:
            return self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)
        except UnauthenticatedError as e:
            raise UnauthenticatedError(ApiErrorCode.E_REFRESH_TOKEN_INVALID, e.message) from e

    def _decode(self, token: str, secret: str, expected_type: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                issuer=ISSUER,
                leeway=CLOCK_SKEW_SECONDS,
                options={"require": ["exp", "iss", "sub"]},
            )
        except ExpiredSignatureError as e:
            logger.warning("auth_failure", extra={"reason": "expired_token"})
            raise UnauthenticatedError(message="Token expired") from e
        except DecodeError as e:
            logger.warning("auth_failure", extra={"reason": "decode_error"})
            raise UnauthenticatedError(message="Invalid token format") from e
        except InvalidTokenError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_token", "error": str(e)})
            raise UnauthenticatedError(message="Invalid token") from e

        if payload.get("type") != expected_type:
            logger.warning("auth_failure", extra={"reason": "wrong_token_type"})
            raise UnauthenticatedError(message="Invalid token type")

        try:
            UUID(payload["sub"])
        except (ValueError, TypeError) as e:
            logger.warning("auth_failure", extra={"reason": "invalid_sub"})
            raise UnauthenticatedError(message="Invalid token: sub is not a valid UUID") from e

        return payload
