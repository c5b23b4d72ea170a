"""Channel dashboard queries for the acting user."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidshare.db.models import Like, Subscription, Video
from vidshare.schemas.engagement import ChannelStatsOut, ChannelVideoOut


def get_channel_stats(db: Session, viewer_id: UUID) -> ChannelStatsOut:
    """Aggregate counters for the viewer's channel.

    total_likes counts likes given by the viewer. Every counter is 0 when
    there is nothing to aggregate.
    """
    total_subscribers = db.scalar(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == viewer_id)
    )
    total_views = db.scalar(
        select(func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == viewer_id)
    )
    total_likes = db.scalar(
        select(func.count()).select_from(Like).where(Like.liked_by_id == viewer_id)
    )
    return ChannelStatsOut(
        total_subscribers=total_subscribers or 0,
        total_views=total_views or 0,
        total_likes=total_likes or 0,
    )


def list_channel_videos(db: Session, viewer_id: UUID) -> list[ChannelVideoOut]:
    """All of the viewer's videos (published or not) with like counts, newest first."""
    like_count = func.count(Like.id).label("likes")
    rows = db.execute(
        select(Video, like_count)
        .outerjoin(Like, Like.video_id == Video.id)
        .where(Video.owner_id == viewer_id)
        .group_by(Video.id)
        .order_by(Video.created_at.desc(), Video.id)
    ).all()

    return [
        ChannelVideoOut(
            id=video.id,
            title=video.title,
            thumbnail=video.thumbnail,
            views=video.views,
            likes=likes,
            is_published=video.is_published,
            created_at=video.created_at,
            updated_at=video.updated_at,
        )
        for video, likes in rows
    ]
