"""Test data factories.

Centralizes helper functions that create database rows for tests.
Each factory knows the full schema requirements for its table,
so individual tests don't need to track NOT NULL constraints.

Every factory commits, so the row is visible to request-scoped sessions
and no transaction is left open on the shared test connection.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from vidshare.auth.passwords import hash_password
from vidshare.db.models import Comment, Playlist, PlaylistVideo, Tweet, User, Video

DEFAULT_PASSWORD = "password123"

FAKE_MEDIA = "https://res.cloudinary.test/fake"

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def at_minute(minute: int) -> datetime:
    """Deterministic timestamp for ordering tests."""
    return BASE_TIME + timedelta(minutes=minute)


# =============================================================================
# Users
# =============================================================================


def create_test_user(
    session: Session,
    username: str | None = None,
    *,
    email: str | None = None,
    full_name: str = "Test User",
    password: str = DEFAULT_PASSWORD,
    cover_image: str | None = None,
) -> User:
    username = username or f"user{uuid4().hex[:10]}"
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        full_name=full_name,
        avatar=f"{FAKE_MEDIA}/image/upload/vidshare/{username}-avatar.png",
        cover_image=cover_image,
        password_hash=hash_password(password, rounds=4),
    )
    session.add(user)
    session.commit()
    return user


# =============================================================================
# Content
# =============================================================================


def create_test_video(
    session: Session,
    owner: User,
    *,
    title: str = "Test video",
    description: str = "A test video",
    views: int = 0,
    is_published: bool = True,
    created_at: datetime | None = None,
) -> Video:
    key = uuid4().hex
    fields: dict[str, Any] = {}
    if created_at is not None:
        fields = {"created_at": created_at, "updated_at": created_at}
    video = Video(
        owner_id=owner.id,
        title=title,
        description=description,
        video_file=f"{FAKE_MEDIA}/video/upload/vidshare/{key}.mp4",
        thumbnail=f"{FAKE_MEDIA}/image/upload/vidshare/{key}.png",
        duration=12.5,
        views=views,
        is_published=is_published,
        **fields,
    )
    session.add(video)
    session.commit()
    return video


def create_test_comment(
    session: Session,
    video: Video,
    owner: User,
    content: str = "Nice video",
    created_at: datetime | None = None,
) -> Comment:
    fields: dict[str, Any] = {}
    if created_at is not None:
        fields = {"created_at": created_at, "updated_at": created_at}
    comment = Comment(content=content, video_id=video.id, owner_id=owner.id, **fields)
    session.add(comment)
    session.commit()
    return comment


def create_test_tweet(
    session: Session, owner: User, content: str = "Hello", created_at: datetime | None = None
) -> Tweet:
    fields: dict[str, Any] = {}
    if created_at is not None:
        fields = {"created_at": created_at, "updated_at": created_at}
    tweet = Tweet(content=content, owner_id=owner.id, **fields)
    session.add(tweet)
    session.commit()
    return tweet


def create_test_playlist(
    session: Session, owner: User, name: str = "Favourites", videos: tuple[Video, ...] = ()
) -> Playlist:
    playlist = Playlist(
        name=name,
        description="A test playlist",
        thumbnail=f"{FAKE_MEDIA}/image/upload/vidshare/{uuid4().hex}.png",
        owner_id=owner.id,
    )
    session.add(playlist)
    session.flush()
    for video in videos:
        session.add(PlaylistVideo(playlist_id=playlist.id, video_id=video.id))
    session.commit()
    return playlist


# =============================================================================
# Reads
# =============================================================================


def refetch(session: Session, model: type, ident: UUID) -> Any:
    """Load the committed state of a row and end the read transaction."""
    row = session.get(model, ident, populate_existing=True)
    session.commit()
    return row
