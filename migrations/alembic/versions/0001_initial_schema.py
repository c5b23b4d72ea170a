"""Initial schema - users, videos, comments, tweets, playlists, likes, subscriptions

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Uniqueness constraints on likes, subscriptions and playlist membership back
the toggle engine: concurrent toggles race on the constraint, not on a read.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # Enable pgcrypto extension for gen_random_uuid()
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # ==========================================================================
    # users table
    # ==========================================================================
    op.create_table(
        "users",
        _id_column(),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("avatar", sa.Text(), nullable=False),
        sa.Column("cover_image", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("refresh_token_hash", sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
        sa.CheckConstraint("username = lower(username)", name="ck_users_username_lowercase"),
        sa.CheckConstraint("email = lower(email)", name="ck_users_email_lowercase"),
    )
    op.create_index("ix_users_username", "users", ["username"])

    # ==========================================================================
    # videos table
    # ==========================================================================
    op.create_table(
        "videos",
        _id_column(),
        sa.Column("owner_id", sa.UUID(), nullable=False),
        sa.Column("video_file", sa.Text(), nullable=False),
        sa.Column("thumbnail", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("duration", sa.Float(), server_default="0", nullable=False),
        sa.Column("views", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_published", sa.Boolean(), server_default="true", nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
    )
    op.create_index("ix_videos_owner_id", "videos", ["owner_id"])

    # ==========================================================================
    # watch_history table
    # ==========================================================================
    op.create_table(
        "watch_history",
        sa.Column("seq", sa.Integer(), sa.Identity(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("video_id", sa.UUID(), nullable=False),
        sa.Column(
            "watched_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("seq"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_watch_history_user_id", "watch_history", ["user_id"])

    # ==========================================================================
    # comments and tweets
    # ==========================================================================
    op.create_table(
        "comments",
        _id_column(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("video_id", sa.UUID(), nullable=False),
        sa.Column("owner_id", sa.UUID(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_comments_video_id", "comments", ["video_id"])

    op.create_table(
        "tweets",
        _id_column(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.UUID(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_tweets_owner_id", "tweets", ["owner_id"])

    # ==========================================================================
    # playlists and membership
    # ==========================================================================
    op.create_table(
        "playlists",
        _id_column(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("thumbnail", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.UUID(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_playlists_owner_id", "playlists", ["owner_id"])

    op.create_table(
        "playlist_videos",
        sa.Column("playlist_id", sa.UUID(), nullable=False),
        sa.Column("video_id", sa.UUID(), nullable=False),
        sa.Column(
            "added_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("playlist_id", "video_id"),
        sa.ForeignKeyConstraint(["playlist_id"], ["playlists.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
    )

    # ==========================================================================
    # likes table
    # ==========================================================================
    op.create_table(
        "likes",
        _id_column(),
        sa.Column("liked_by_id", sa.UUID(), nullable=False),
        sa.Column("video_id", sa.UUID(), nullable=True),
        sa.Column("comment_id", sa.UUID(), nullable=True),
        sa.Column("tweet_id", sa.UUID(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["liked_by_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tweet_id"], ["tweets.id"], ondelete="CASCADE"),
        # Constraint: exactly one like target
        sa.CheckConstraint(
            "(CASE WHEN video_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN comment_id IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN tweet_id IS NOT NULL THEN 1 ELSE 0 END) = 1",
            name="ck_likes_exactly_one_target",
        ),
        sa.UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        sa.UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_user_comment"),
        sa.UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_user_tweet"),
    )
    op.create_index("ix_likes_liked_by_id", "likes", ["liked_by_id"])
    op.create_index("ix_likes_video_id", "likes", ["video_id"])

    # ==========================================================================
    # subscriptions table
    # ==========================================================================
    op.create_table(
        "subscriptions",
        _id_column(),
        sa.Column("subscriber_id", sa.UUID(), nullable=False),
        sa.Column("channel_id", sa.UUID(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["subscriber_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["channel_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_pair"),
    )
    op.create_index("ix_subscriptions_subscriber_id", "subscriptions", ["subscriber_id"])
    op.create_index("ix_subscriptions_channel_id", "subscriptions", ["channel_id"])


def downgrade() -> None:
    # Drop tables in reverse order (respecting foreign key dependencies)
    op.drop_table("subscriptions")
    op.drop_table("likes")
    op.drop_table("playlist_videos")
    op.drop_table("playlists")
    op.drop_table("tweets")
    op.drop_table("comments")
    op.drop_table("watch_history")
    op.drop_table("videos")
    op.drop_table("users")

    # Note: We don't drop pgcrypto extension as it may be used by other things
