"""Video schemas."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Literal
from uuid import UUID

from vidshare.schemas.common import ApiModel

__all__ = [
    "VideoSortField",
    "PublishVideoParams",
    "UpdateVideoParams",
    "VideoOut",
    "VideoPageOut",
    "ViewRecordedOut",
]

VideoSortField = Literal["created_at", "views", "duration", "title"]

# =============================================================================
# Request parameters
# =============================================================================


@dataclass(frozen=True)
class PublishVideoParams:
    """Validated multipart fields for publishing a video.

    Files are already saved to local temp paths; None means the part was absent.
    """

    title: str
    description: str = ""
    video_file: Path | None = None
    thumbnail: Path | None = None
    is_published: bool = True


@dataclass(frozen=True)
class UpdateVideoParams:
    """Partial update; None leaves the field unchanged."""

    title: str | None = None
    description: str | None = None
    thumbnail: Path | None = None


# =============================================================================
# Response Schemas
# =============================================================================


class VideoOut(ApiModel):
    """Video document.

    owner is the owner's id, or the public user view when expanded.
    """

    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    owner: UUID | dict[str, Any]
    created_at: datetime
    updated_at: datetime


class VideoPageOut(ApiModel):
    items: list[VideoOut]
    page: int
    limit: int
    total: int


class ViewRecordedOut(ApiModel):
    views: int
    incremented: bool
