"""Schemas for comments, tweets and playlists."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from vidshare.schemas.common import ApiModel
from vidshare.schemas.videos import VideoOut

__all__ = [
    "ContentRequest",
    "UpdatePlaylistRequest",
    "CreatePlaylistParams",
    "CommentOut",
    "TweetOut",
    "PlaylistOut",
    "PlaylistDetailOut",
]

# =============================================================================
# Request Schemas
# =============================================================================


class ContentRequest(ApiModel):
    """Body for creating or editing a comment or tweet."""

    content: str


class UpdatePlaylistRequest(ApiModel):
    name: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class CreatePlaylistParams:
    name: str
    description: str
    thumbnail: Path | None = None


# =============================================================================
# Response Schemas
# =============================================================================


class CommentOut(ApiModel):
    id: UUID
    content: str
    video: UUID
    owner: UUID | dict[str, Any]
    created_at: datetime
    updated_at: datetime


class TweetOut(ApiModel):
    id: UUID
    content: str
    owner: UUID | dict[str, Any]
    created_at: datetime
    updated_at: datetime


class PlaylistOut(ApiModel):
    """Playlist with member video ids."""

    id: UUID
    name: str
    description: str
    thumbnail: str
    owner: UUID
    videos: list[UUID]
    created_at: datetime
    updated_at: datetime


class PlaylistDetailOut(PlaylistOut):
    """Playlist with member videos expanded."""

    videos: list[VideoOut]  # type: ignore[assignment]
