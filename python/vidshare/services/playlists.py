"""Playlist service layer.

Playlist membership is a set: adding a video that is already present is a
no-op. Only the playlist owner can change membership, rename or delete it.
"""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from vidshare.auth.permissions import require_owner
from vidshare.db.models import Playlist, PlaylistVideo, Video
from vidshare.db.session import insert_or_conflict, transaction
from vidshare.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from vidshare.logging import get_logger
from vidshare.schemas.social import CreatePlaylistParams, PlaylistDetailOut, PlaylistOut
from vidshare.services.users import get_user_or_404
from vidshare.services.videos import get_visible_video_or_404, video_to_out
from vidshare.storage.cleanup import release_media
from vidshare.storage.media import MediaRelayBase

logger = get_logger(__name__)


# =============================================================================
# Shared Helpers
# =============================================================================


def _get_playlist_or_404(db: Session, playlist_id: UUID) -> Playlist:
    playlist = db.get(Playlist, playlist_id)
    if playlist is None:
        raise NotFoundError(ApiErrorCode.E_PLAYLIST_NOT_FOUND, "Playlist not found")
    return playlist


def _member_ids(db: Session, playlist_id: UUID) -> list[UUID]:
    return list(
        db.scalars(
            select(PlaylistVideo.video_id)
            .where(PlaylistVideo.playlist_id == playlist_id)
            .order_by(PlaylistVideo.added_at, PlaylistVideo.video_id)
        ).all()
    )


def _playlist_to_out(db: Session, playlist: Playlist) -> PlaylistOut:
    return PlaylistOut(
        id=playlist.id,
        name=playlist.name,
        description=playlist.description,
        thumbnail=playlist.thumbnail,
        owner=playlist.owner_id,
        videos=_member_ids(db, playlist.id),
        created_at=playlist.created_at,
        updated_at=playlist.updated_at,
    )


def _required(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidRequestError(ApiErrorCode.E_FIELD_REQUIRED, f"{field} is required")
    return value


# =============================================================================
# Service Functions
# =============================================================================


def create_playlist(
    db: Session, relay: MediaRelayBase, viewer_id: UUID, params: CreatePlaylistParams
) -> PlaylistOut:
    """Create an empty playlist with an uploaded thumbnail.

    Raises:
        InvalidRequestError(E_FIELD_REQUIRED): Name or description empty.
        InvalidRequestError(E_FILE_REQUIRED): Thumbnail missing.
        UploadError: The media host rejected the thumbnail.
    """
    name = _required(params.name, "Name")
    description = _required(params.description, "Description")
    if params.thumbnail is None:
        raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, "Thumbnail is required")

    thumbnail_url = relay.upload(params.thumbnail).url

    playlist = Playlist(
        name=name, description=description, thumbnail=thumbnail_url, owner_id=viewer_id
    )
    try:
        with transaction(db):
            db.add(playlist)
    except Exception:
        release_media(relay, thumbnail_url)
        raise

    logger.info("playlist_created", playlist_id=str(playlist.id))
    return _playlist_to_out(db, playlist)


def list_user_playlists(db: Session, user_id: UUID) -> list[PlaylistOut]:
    """Raises NotFoundError(E_USER_NOT_FOUND) if the user is missing."""
    get_user_or_404(db, user_id)
    playlists = db.scalars(
        select(Playlist)
        .where(Playlist.owner_id == user_id)
        .order_by(Playlist.created_at.desc(), Playlist.id)
    ).all()
    return [_playlist_to_out(db, p) for p in playlists]


def get_playlist(db: Session, viewer_id: UUID, playlist_id: UUID) -> PlaylistDetailOut:
    """Playlist with its videos expanded.

    Unpublished members are only listed for their owner.
    """
    playlist = _get_playlist_or_404(db, playlist_id)

    videos = db.scalars(
        select(Video)
        .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
        .where(
            PlaylistVideo.playlist_id == playlist_id,
            Video.is_published.is_(True) | (Video.owner_id == viewer_id),
        )
        .order_by(PlaylistVideo.added_at, Video.id)
    ).all()

    return PlaylistDetailOut(
        id=playlist.id,
        name=playlist.name,
        description=playlist.description,
        thumbnail=playlist.thumbnail,
        owner=playlist.owner_id,
        videos=[video_to_out(v) for v in videos],
        created_at=playlist.created_at,
        updated_at=playlist.updated_at,
    )


def add_video_to_playlist(
    db: Session, viewer_id: UUID, video_id: UUID, playlist_id: UUID
) -> PlaylistOut:
    """Add a video; adding it twice leaves a single membership.

    Raises:
        NotFoundError(E_PLAYLIST_NOT_FOUND | E_VIDEO_NOT_FOUND): Either missing.
        ForbiddenError(E_FORBIDDEN): Viewer does not own the playlist.
    """
    playlist = _get_playlist_or_404(db, playlist_id)
    get_visible_video_or_404(db, viewer_id, video_id)
    require_owner(viewer_id, playlist.owner_id, "Only the owner can edit this playlist")

    with transaction(db):
        added = insert_or_conflict(db, PlaylistVideo(playlist_id=playlist_id, video_id=video_id))

    if added:
        logger.info("playlist_video_added", playlist_id=str(playlist_id), video_id=str(video_id))
    return _playlist_to_out(db, playlist)


def remove_video_from_playlist(
    db: Session, viewer_id: UUID, video_id: UUID, playlist_id: UUID
) -> PlaylistOut:
    """Remove a video from a playlist.

    Raises:
        NotFoundError(E_PLAYLIST_NOT_FOUND | E_VIDEO_NOT_FOUND): Either missing,
            or the video is not in the playlist.
        ForbiddenError(E_FORBIDDEN): Viewer does not own the playlist.
    """
    playlist = _get_playlist_or_404(db, playlist_id)
    if db.get(Video, video_id) is None:
        raise NotFoundError(ApiErrorCode.E_VIDEO_NOT_FOUND, "Video not found")
    require_owner(viewer_id, playlist.owner_id, "Only the owner can edit this playlist")

    with transaction(db):
        removed = db.execute(
            delete(PlaylistVideo).where(
                PlaylistVideo.playlist_id == playlist_id,
                PlaylistVideo.video_id == video_id,
            )
        ).rowcount

    if not removed:
        raise NotFoundError(ApiErrorCode.E_VIDEO_NOT_FOUND, "Video is not in this playlist")
    return _playlist_to_out(db, playlist)


def update_playlist(
    db: Session,
    viewer_id: UUID,
    playlist_id: UUID,
    name: str | None = None,
    description: str | None = None,
) -> PlaylistOut:
    """Rename and/or re-describe. Fields left as None are unchanged."""
    playlist = _get_playlist_or_404(db, playlist_id)
    require_owner(viewer_id, playlist.owner_id, "Only the owner can edit this playlist")

    new_name = _required(name, "Name") if name is not None else None
    new_description = _required(description, "Description") if description is not None else None

    with transaction(db):
        if new_name is not None:
            playlist.name = new_name
        if new_description is not None:
            playlist.description = new_description

    return _playlist_to_out(db, playlist)


def delete_playlist(
    db: Session, relay: MediaRelayBase, viewer_id: UUID, playlist_id: UUID
) -> None:
    """Delete a playlist (not its videos) and release its thumbnail."""
    playlist = _get_playlist_or_404(db, playlist_id)
    require_owner(viewer_id, playlist.owner_id, "Only the owner can delete this playlist")

    thumbnail = playlist.thumbnail
    with transaction(db):
        db.delete(playlist)

    release_media(relay, thumbnail)
