"""SQLAlchemy ORM models for vidshare.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are dialect-neutral (Uuid, DateTime(timezone=True)) so the same
metadata runs on PostgreSQL in production and SQLite in tests.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


# =============================================================================
# Identity
# =============================================================================


class User(TimestampMixin, Base):
    """User account; also acts as a channel.

    username and email are stored lowercase and are globally unique.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar: Mapped[str] = mapped_column(Text, nullable=False)
    cover_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token_hash: Mapped[str | None] = mapped_column(Text, nullable=True)

    videos: Mapped[list["Video"]] = relationship(
        "Video", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("username = lower(username)", name="ck_users_username_lowercase"),
        CheckConstraint("email = lower(email)", name="ck_users_email_lowercase"),
    )


class WatchHistoryEntry(Base):
    """One watched video in a user's history. seq preserves append order."""

    __tablename__ = "watch_history"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    video_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )
    watched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


# =============================================================================
# Content
# =============================================================================


class Video(TimestampMixin, Base):
    """Uploaded video. Binary media lives on the media host; only refs are stored."""

    __tablename__ = "videos"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    video_file: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner: Mapped["User"] = relationship("User", back_populates="videos")

    __table_args__ = (CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),)


class Comment(TimestampMixin, Base):
    __tablename__ = "comments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    video_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    owner_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    owner: Mapped["User"] = relationship("User")


class Tweet(TimestampMixin, Base):
    __tablename__ = "tweets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    owner_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    owner: Mapped["User"] = relationship("User")


class Playlist(TimestampMixin, Base):
    __tablename__ = "playlists"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail: Mapped[str] = mapped_column(Text, nullable=False)
    owner_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )


class PlaylistVideo(Base):
    """Playlist membership. The composite key gives set semantics."""

    __tablename__ = "playlist_videos"

    playlist_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


# =============================================================================
# Join records
# =============================================================================


class Like(Base):
    """A user's like on exactly one of video, comment or tweet."""

    __tablename__ = "likes"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    liked_by_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    video_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True
    )
    comment_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True
    )
    tweet_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN video_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN comment_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN tweet_id IS NOT NULL THEN 1 ELSE 0 END) = 1",
            name="ck_likes_exactly_one_target",
        ),
        UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_user_comment"),
        UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_user_tweet"),
    )


class Subscription(Base):
    """subscriber follows channel (both are users)."""

    __tablename__ = "subscriptions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    subscriber_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    channel_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_pair"),
    )
