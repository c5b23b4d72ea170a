"""Video service layer.

Service functions correspond 1:1 with route handlers.
Routes are transport-only and call exactly one service function.

Visibility: unpublished videos are visible only to their owner; everyone else
gets 404. Mutations check existence first and only then ownership, so a
missing video is always 404 and someone else's video is 403.
"""

from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from vidshare.auth.permissions import require_owner
from vidshare.db.models import User, Video, WatchHistoryEntry
from vidshare.db.session import transaction
from vidshare.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from vidshare.logging import get_logger
from vidshare.schemas.videos import (
    PublishVideoParams,
    UpdateVideoParams,
    VideoOut,
    VideoPageOut,
    VideoSortField,
    ViewRecordedOut,
)
from vidshare.services.pagination import normalize_pagination, page_offset
from vidshare.services.user_views import OWNER_CARD, public_user_view
from vidshare.storage.cleanup import release_media
from vidshare.storage.media import MediaRelayBase

logger = get_logger(__name__)

RECOMMENDED_LIMIT = 5

_SORT_COLUMNS = {
    "created_at": Video.created_at,
    "createdAt": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


# =============================================================================
# Shared Helpers
# =============================================================================


def video_to_out(video: Video, owner: dict | None = None) -> VideoOut:
    """Convert a Video ORM row; owner defaults to the bare owner id."""
    return VideoOut(
        id=video.id,
        video_file=video.video_file,
        thumbnail=video.thumbnail,
        title=video.title,
        description=video.description,
        duration=video.duration,
        views=video.views,
        is_published=video.is_published,
        owner=owner if owner is not None else video.owner_id,
        created_at=video.created_at,
        updated_at=video.updated_at,
    )


def get_video_or_404(db: Session, video_id: UUID) -> Video:
    video = db.get(Video, video_id)
    if video is None:
        raise NotFoundError(ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found")
    return video


def get_visible_video_or_404(db: Session, viewer_id: UUID, video_id: UUID) -> Video:
    """Load a video the viewer may see (published, or their own)."""
    video = get_video_or_404(db, video_id)
    if not video.is_published and video.owner_id != viewer_id:
        raise NotFoundError(ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found")
    return video


def _require_text(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, f"{field} is required")
    return value


def _increment_views(db: Session, video_id: UUID, viewer_id: UUID) -> bool:
    """Atomic views + 1, skipped when the viewer owns the video."""
    result = db.execute(
        update(Video)
        .where(Video.id == video_id, Video.owner_id != viewer_id)
        .values(views=Video.views + 1, updated_at=Video.updated_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _append_watch_history(db: Session, viewer_id: UUID, video_id: UUID) -> None:
    """Move video_id to the end of the viewer's history."""
    db.execute(
        delete(WatchHistoryEntry).where(
            WatchHistoryEntry.user_id == viewer_id,
            WatchHistoryEntry.video_id == video_id,
        )
    )
    db.add(WatchHistoryEntry(user_id=viewer_id, video_id=video_id))


# =============================================================================
# Queries
# =============================================================================


def list_videos(
    db: Session,
    viewer_id: UUID,
    *,
    query: str | None = None,
    user_id: UUID | None = None,
    sort_by: VideoSortField = "created_at",
    sort_type: str = "desc",
    page: object = None,
    limit: object = None,
) -> VideoPageOut:
    """Search published videos.

    Args:
        db: Database session.
        viewer_id: The acting user.
        query: Case-insensitive substring matched against title and description.
        user_id: Restrict to one owner.
        sort_by: Sort column.
        sort_type: "asc" or "desc" (anything else is treated as desc).
        page: 1-based page (coerced, default 1).
        limit: Page size (coerced, default 10, max 100).

    Returns:
        One page of videos with owner cards, plus the total match count.
    """
    page_num, page_size = normalize_pagination(page, limit)

    conditions = [Video.is_published.is_(True)]
    if query and query.strip():
        needle = query.strip()
        conditions.append(
            Video.title.icontains(needle, autoescape=True)
            | Video.description.icontains(needle, autoescape=True)
        )
    if user_id is not None:
        conditions.append(Video.owner_id == user_id)

    total = db.scalar(select(func.count()).select_from(Video).where(*conditions)) or 0

    column = _SORT_COLUMNS.get(sort_by, Video.created_at)
    ordering = column.asc() if sort_type == "asc" else column.desc()

    videos = db.scalars(
        select(Video)
        .where(*conditions)
        .options(selectinload(Video.owner))
        .order_by(ordering, Video.id)
        .offset(page_offset(page_num, page_size))
        .limit(page_size)
    ).all()

    return VideoPageOut(
        items=[video_to_out(v, public_user_view(v.owner, OWNER_CARD)) for v in videos],
        page=page_num,
        limit=page_size,
        total=total,
    )


def list_channel_public_videos(db: Session, username: str) -> list[VideoOut]:
    """Published videos of one channel, newest first.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): No user with that username.
    """
    user = db.scalar(select(User).where(User.username == username.strip().lower()))
    if user is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")

    videos = db.scalars(
        select(Video)
        .where(Video.owner_id == user.id, Video.is_published.is_(True))
        .order_by(Video.created_at.desc(), Video.id)
    ).all()

    owner = public_user_view(user, OWNER_CARD)
    return [video_to_out(v, owner) for v in videos]


def list_recommended_videos(db: Session) -> list[VideoOut]:
    """Most viewed published videos."""
    videos = db.scalars(
        select(Video)
        .where(Video.is_published.is_(True))
        .options(selectinload(Video.owner))
        .order_by(Video.views.desc(), Video.created_at.desc())
        .limit(RECOMMENDED_LIMIT)
    ).all()
    return [video_to_out(v, public_user_view(v.owner, OWNER_CARD)) for v in videos]


def get_video(db: Session, viewer_id: UUID, video_id: UUID) -> VideoOut:
    """Fetch a video for watching.

    Non-owners bump the view counter by exactly one; the video is appended
    to the viewer's watch history either way.

    Raises:
        NotFoundError(E_VIDEO_NOT_FOUND): Missing, or unpublished and not owned.
    """
    video = get_visible_video_or_404(db, viewer_id, video_id)

    with transaction(db):
        _increment_views(db, video_id, viewer_id)
        _append_watch_history(db, viewer_id, video_id)

    db.refresh(video)
    return video_to_out(video, public_user_view(video.owner, OWNER_CARD))


def record_view(db: Session, viewer_id: UUID, video_id: UUID) -> ViewRecordedOut:
    """Count one view without fetching the video.

    Raises:
        NotFoundError(E_VIDEO_NOT_FOUND): Missing, or unpublished and not owned.
    """
    video = get_visible_video_or_404(db, viewer_id, video_id)

    with transaction(db):
        incremented = _increment_views(db, video_id, viewer_id)

    db.refresh(video)
    return ViewRecordedOut(views=video.views, incremented=incremented)


# =============================================================================
# Mutations
# =============================================================================


def publish_video(
    db: Session, relay: MediaRelayBase, viewer_id: UUID, params: PublishVideoParams
) -> VideoOut:
    """Upload a video and its thumbnail, then create the record.

    Raises:
        InvalidRequestError(E_FIELD_REQUIRED): Title empty.
        InvalidRequestError(E_FILE_REQUIRED): Video file or thumbnail missing.
        UploadError: The media host rejected an upload.
    """
    title = _require_text(params.title, "Title")
    if params.video_file is None:
        raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, "Video file is required")
    if params.thumbnail is None:
        raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, "Thumbnail is required")

    uploaded_video = relay.upload(params.video_file)
    try:
        uploaded_thumbnail = relay.upload(params.thumbnail)
    except Exception:
        release_media(relay, uploaded_video.url)
        raise

    video = Video(
        owner_id=viewer_id,
        title=title,
        description=(params.description or "").strip(),
        video_file=uploaded_video.url,
        thumbnail=uploaded_thumbnail.url,
        duration=uploaded_video.duration or 0,
        is_published=params.is_published,
    )
    try:
        with transaction(db):
            db.add(video)
    except Exception:
        release_media(relay, uploaded_video.url, uploaded_thumbnail.url)
        raise

    logger.info("video_published", video_id=str(video.id), owner_id=str(viewer_id))
    return video_to_out(video)


def update_video(
    db: Session,
    relay: MediaRelayBase,
    viewer_id: UUID,
    video_id: UUID,
    params: UpdateVideoParams,
) -> VideoOut:
    """Partially update title, description and thumbnail.

    The replaced thumbnail is released after the update commits.

    Raises:
        NotFoundError(E_VIDEO_NOT_FOUND): Video missing.
        ForbiddenError(E_FORBIDDEN): Viewer is not the owner.
        InvalidRequestError(E_FIELD_REQUIRED): Title given but empty.
    """
    video = get_video_or_404(db, video_id)
    require_owner(viewer_id, video.owner_id, "Only the owner can edit this video")

    title = _require_text(params.title, "Title") if params.title is not None else None

    old_thumbnail = None
    new_thumbnail = relay.upload(params.thumbnail).url if params.thumbnail else None

    with transaction(db):
        if title is not None:
            video.title = title
        if params.description is not None:
            video.description = params.description.strip()
        if new_thumbnail is not None:
            old_thumbnail = video.thumbnail
            video.thumbnail = new_thumbnail

    release_media(relay, old_thumbnail)
    return video_to_out(video)


def delete_video(db: Session, relay: MediaRelayBase, viewer_id: UUID, video_id: UUID) -> None:
    """Delete a video, then release its media best-effort.

    Comments, likes, playlist memberships and history entries go with it.

    Raises:
        NotFoundError(E_VIDEO_NOT_FOUND): Video missing.
        ForbiddenError(E_FORBIDDEN): Viewer is not the owner.
    """
    video = get_video_or_404(db, video_id)
    require_owner(viewer_id, video.owner_id, "Only the owner can delete this video")

    media_refs = (video.video_file, video.thumbnail)
    with transaction(db):
        db.delete(video)

    logger.info("video_deleted", video_id=str(video_id))
    release_media(relay, *media_refs)


def toggle_publish_status(db: Session, viewer_id: UUID, video_id: UUID) -> VideoOut:
    """Flip is_published.

    Raises:
        NotFoundError(E_VIDEO_NOT_FOUND): Video missing.
        ForbiddenError(E_FORBIDDEN): Viewer is not the owner.
    """
    video = get_video_or_404(db, video_id)
    require_owner(viewer_id, video.owner_id, "Only the owner can publish or unpublish this video")

    with transaction(db):
        video.is_published = not video.is_published

    return video_to_out(video)
