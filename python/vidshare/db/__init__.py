"""Database module for vidshare.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from vidshare.db.engine import create_db_engine, get_engine
from vidshare.db.models import (
    Base,
    Comment,
    Like,
    Playlist,
    PlaylistVideo,
    Subscription,
    Tweet,
    User,
    Video,
    WatchHistoryEntry,
)
from vidshare.db.session import get_db, insert_or_conflict, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "get_db",
    "transaction",
    "insert_or_conflict",
    # Base
    "Base",
    # Models
    "User",
    "WatchHistoryEntry",
    "Video",
    "Comment",
    "Tweet",
    "Playlist",
    "PlaylistVideo",
    "Like",
    "Subscription",
]
