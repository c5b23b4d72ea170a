"""User and channel schemas."""

from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from pydantic import Field, model_validator

from vidshare.schemas.common import ApiModel

__all__ = [
    "RegisterParams",
    "LoginRequest",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
    "UpdateAccountRequest",
    "TokensOut",
    "LoginOut",
    "ChannelProfileOut",
]

# =============================================================================
# Request Schemas
# =============================================================================


@dataclass(frozen=True)
class RegisterParams:
    """Multipart registration fields. Files are local temp paths or None."""

    username: str
    email: str
    full_name: str
    password: str
    avatar: Path | None = None
    cover_image: Path | None = None


class LoginRequest(ApiModel):
    """Login by username or email."""

    username: str | None = None
    email: str | None = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        if not (self.username or "").strip() and not (self.email or "").strip():
            raise ValueError("username or email is required")
        return self

    @property
    def identifier(self) -> str:
        return (self.username or self.email or "").strip()


class RefreshTokenRequest(ApiModel):
    """Refresh token in the body; the refreshToken cookie is used when absent."""

    refresh_token: str | None = None


class ChangePasswordRequest(ApiModel):
    old_password: str
    new_password: str


class UpdateAccountRequest(ApiModel):
    full_name: str
    email: str


# =============================================================================
# Response Schemas
# =============================================================================


class TokensOut(ApiModel):
    access_token: str
    refresh_token: str


class LoginOut(TokensOut):
    """Login response: the public user view plus both tokens."""

    user: dict


class ChannelProfileOut(ApiModel):
    """A user as seen on their channel page."""

    id: UUID
    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: str | None
    subscribers_count: int
    subscribed_to_count: int
    is_subscribed: bool
