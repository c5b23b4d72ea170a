"""Deferred deletion of released media references.

Enqueued by release_media() when MEDIA_CLEANUP_MODE=deferred. Refs the media
host could not delete are retried a bounded number of times, then dropped
with a warning.
"""

from vidshare.celery import celery_app
from vidshare.logging import clear_task_context, configure_task_logging, get_logger
from vidshare.storage.media import discard_media, get_media_relay

logger = get_logger(__name__)

MAX_RETRIES = 3
RETRY_DELAY_S = 60


@celery_app.task(bind=True, max_retries=MAX_RETRIES, name="purge_media")
def purge_media(self, refs: list[str], request_id: str | None = None) -> dict:
    """Delete media refs from the media host.

    Returns:
        {"deleted": <count>, "failed": <count>}
    """
    configure_task_logging(request_id=request_id, task_name="purge_media", task_id=self.request.id)
    try:
        failed = discard_media(get_media_relay(), *refs)
        logger.info("media_purged", deleted=len(refs) - len(failed), failed=len(failed))

        if failed:
            if self.request.retries < MAX_RETRIES:
                raise self.retry(
                    args=[failed], kwargs={"request_id": request_id}, countdown=RETRY_DELAY_S
                )
            logger.warning("media_purge_gave_up", refs=failed)

        return {"deleted": len(refs) - len(failed), "failed": len(failed)}
    finally:
        clear_task_context()
