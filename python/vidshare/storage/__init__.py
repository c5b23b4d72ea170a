"""Media host relay.

Provides:
- MediaRelayBase and its Cloudinary / in-memory implementations
- get_media_relay() selecting the implementation from settings
- release_media() for best-effort deletion of released references
"""

from vidshare.storage.cleanup import release_media
from vidshare.storage.media import (
    CloudinaryMediaRelay,
    FakeMediaRelay,
    MediaRelayBase,
    MediaRelayError,
    UploadedMedia,
    discard_media,
    get_media_relay,
)

__all__ = [
    "MediaRelayBase",
    "CloudinaryMediaRelay",
    "FakeMediaRelay",
    "MediaRelayError",
    "UploadedMedia",
    "discard_media",
    "get_media_relay",
    "release_media",
]
