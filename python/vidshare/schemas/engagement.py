"""Schemas for likes, subscriptions and the channel dashboard."""

from datetime import datetime
from uuid import UUID

from vidshare.schemas.common import ApiModel

__all__ = [
    "ToggleOut",
    "VideoLikesOut",
    "ChannelStatsOut",
    "ChannelVideoOut",
]


class ToggleOut(ApiModel):
    """Result of a like/subscribe toggle. active is the new existence state."""

    active: bool


class VideoLikesOut(ApiModel):
    total_likes: int
    is_liked_by_user: bool


class ChannelStatsOut(ApiModel):
    total_subscribers: int
    total_views: int
    total_likes: int


class ChannelVideoOut(ApiModel):
    """One row of the owner's dashboard video table."""

    id: UUID
    title: str
    thumbnail: str
    views: int
    likes: int
    is_published: bool
    created_at: datetime
    updated_at: datetime
