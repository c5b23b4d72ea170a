"""Like service layer.

A like targets exactly one video, comment or tweet. Toggling goes through
the toggle engine, which keeps at most one like per (user, target).
"""

from uuid import UUID

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session, selectinload

from vidshare.db.models import Comment, Like, Tweet, Video
from vidshare.errors import ApiErrorCode, NotFoundError
from vidshare.schemas.engagement import ToggleOut, VideoLikesOut
from vidshare.schemas.videos import VideoOut
from vidshare.services.toggles import ToggleOutcome, ToggleTarget, toggle
from vidshare.services.user_views import LIKED_VIDEO_OWNER, public_user_view
from vidshare.services.videos import get_visible_video_or_404, video_to_out


def toggle_video_like(db: Session, viewer_id: UUID, video_id: UUID) -> ToggleOut:
    """Raises NotFoundError(E_VIDEO_NOT_FOUND) if the video is missing or hidden."""
    get_visible_video_or_404(db, viewer_id, video_id)
    outcome = toggle(db, viewer_id, ToggleTarget.VIDEO, video_id)
    return ToggleOut(active=outcome == ToggleOutcome.CREATED)


def toggle_comment_like(db: Session, viewer_id: UUID, comment_id: UUID) -> ToggleOut:
    """Raises NotFoundError(E_COMMENT_NOT_FOUND) if the comment is missing."""
    if db.get(Comment, comment_id) is None:
        raise NotFoundError(ApiErrorCode.E_COMMENT_NOT_FOUND, "Comment not found")
    outcome = toggle(db, viewer_id, ToggleTarget.COMMENT, comment_id)
    return ToggleOut(active=outcome == ToggleOutcome.CREATED)


def toggle_tweet_like(db: Session, viewer_id: UUID, tweet_id: UUID) -> ToggleOut:
    """Raises NotFoundError(E_TWEET_NOT_FOUND) if the tweet is missing."""
    if db.get(Tweet, tweet_id) is None:
        raise NotFoundError(ApiErrorCode.E_TWEET_NOT_FOUND, "Tweet not found")
    outcome = toggle(db, viewer_id, ToggleTarget.TWEET, tweet_id)
    return ToggleOut(active=outcome == ToggleOutcome.CREATED)


def get_video_likes(db: Session, viewer_id: UUID, video_id: UUID) -> VideoLikesOut:
    """Like count for a video and whether the viewer is among the likers."""
    get_visible_video_or_404(db, viewer_id, video_id)

    total = db.scalar(select(func.count()).select_from(Like).where(Like.video_id == video_id))
    liked = db.scalar(
        select(exists().where(Like.video_id == video_id, Like.liked_by_id == viewer_id))
    )
    return VideoLikesOut(total_likes=total or 0, is_liked_by_user=bool(liked))


def list_liked_videos(db: Session, viewer_id: UUID) -> list[VideoOut]:
    """Videos the viewer liked, in like order, with a reduced owner view.

    Videos that have since been unpublished by someone else are skipped.
    """
    videos = db.scalars(
        select(Video)
        .join(Like, Like.video_id == Video.id)
        .where(
            Like.liked_by_id == viewer_id,
            Video.is_published.is_(True) | (Video.owner_id == viewer_id),
        )
        .options(selectinload(Video.owner))
        .order_by(Like.created_at, Like.id)
    ).all()
    return [video_to_out(v, public_user_view(v.owner, LIKED_VIDEO_OWNER)) for v in videos]
