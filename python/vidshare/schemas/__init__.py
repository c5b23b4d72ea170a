"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from vidshare.schemas.common import ApiModel, to_jsonable
from vidshare.schemas.engagement import (
    ChannelStatsOut,
    ChannelVideoOut,
    ToggleOut,
    VideoLikesOut,
)
from vidshare.schemas.social import (
    CommentOut,
    ContentRequest,
    CreatePlaylistParams,
    PlaylistDetailOut,
    PlaylistOut,
    TweetOut,
    UpdatePlaylistRequest,
)
from vidshare.schemas.users import (
    ChangePasswordRequest,
    ChannelProfileOut,
    LoginOut,
    LoginRequest,
    RegisterParams,
    RefreshTokenRequest,
    TokensOut,
    UpdateAccountRequest,
)
from vidshare.schemas.videos import (
    PublishVideoParams,
    UpdateVideoParams,
    VideoOut,
    VideoPageOut,
    VideoSortField,
    ViewRecordedOut,
)

__all__ = [
    "ApiModel",
    "to_jsonable",
    # Users
    "RegisterParams",
    "LoginRequest",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
    "UpdateAccountRequest",
    "TokensOut",
    "LoginOut",
    "ChannelProfileOut",
    # Videos
    "VideoSortField",
    "PublishVideoParams",
    "UpdateVideoParams",
    "VideoOut",
    "VideoPageOut",
    "ViewRecordedOut",
    # Comments, tweets, playlists
    "ContentRequest",
    "UpdatePlaylistRequest",
    "CreatePlaylistParams",
    "CommentOut",
    "TweetOut",
    "PlaylistOut",
    "PlaylistDetailOut",
    # Likes, subscriptions, dashboard
    "ToggleOut",
    "VideoLikesOut",
    "ChannelStatsOut",
    "ChannelVideoOut",
]
