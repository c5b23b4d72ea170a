"""Test helpers for authentication and common request payloads.

Provides:
- Token minting for test authentication
- Header generation for test requests
- Multipart file tuples for upload endpoints
"""

import time
from uuid import UUID

import jwt

from vidshare.auth.tokens import ALGORITHM, ISSUER, TokenService
from vidshare.db.models import User

TEST_ACCESS_SECRET = "test-access-secret"
TEST_REFRESH_SECRET = "test-refresh-secret"


def auth_headers(token_service: TokenService, user: User) -> dict[str, str]:
    """Authorization header carrying a fresh access token for user."""
    token = token_service.issue_access_token(user.id, user.username, user.email, user.full_name)
    return {"Authorization": f"Bearer {token}"}


def mint_expired_token(user_id: UUID | str, secret: str = TEST_ACCESS_SECRET) -> str:
    """Access token that expired well outside the clock-skew allowance."""
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iss": ISSUER,
        "iat": now - 7200,
        "exp": now - 3600,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def image_file(name: str = "image.png") -> tuple[str, bytes, str]:
    return (name, b"\x89PNG\r\n\x1a\nfake-image-bytes", "image/png")


def video_file(name: str = "clip.mp4") -> tuple[str, bytes, str]:
    return (name, b"\x00\x00\x00\x18ftypmp42fake-video-bytes", "video/mp4")
