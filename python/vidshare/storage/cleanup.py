"""Release of media references that a committed change no longer points to.

MEDIA_CLEANUP_MODE=inline deletes on the request path (best-effort).
MEDIA_CLEANUP_MODE=deferred hands the refs to the purge_media Celery task.
"""

from vidshare.config import MediaCleanupMode, get_settings
from vidshare.logging import get_logger, get_request_id
from vidshare.storage.media import MediaRelayBase, discard_media

logger = get_logger(__name__)


def release_media(relay: MediaRelayBase, *refs: str | None) -> None:
    """Schedule deletion of media refs; never raises on media-host failures."""
    live_refs = [ref for ref in refs if ref]
    if not live_refs:
        return

    settings = get_settings()
    if settings.media_cleanup_mode == MediaCleanupMode.DEFERRED:
        from vidshare.tasks.purge_media import purge_media

        try:
            purge_media.apply_async(
                args=[live_refs], kwargs={"request_id": get_request_id()}, queue="media"
            )
        except Exception as e:
            # Broker down: fall back to inline deletion.
            logger.warning("media_purge_enqueue_failed", error=str(e), count=len(live_refs))
            discard_media(relay, *live_refs)
        return

    discard_media(relay, *live_refs)
