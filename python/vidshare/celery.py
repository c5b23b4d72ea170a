"""Celery application configuration.

Central configuration for Celery used by both API (for enqueuing)
and worker (for executing tasks).

Usage:
    from vidshare.tasks import purge_media
    purge_media.apply_async(args=[refs], kwargs={"request_id": request_id}, queue="media")
"""

from celery import Celery

from vidshare.config import get_settings

settings = get_settings()

celery_app = Celery("vidshare")

celery_app.conf.broker_url = settings.effective_celery_broker_url
celery_app.conf.result_backend = settings.effective_celery_result_backend

celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]
celery_app.conf.timezone = "UTC"
celery_app.conf.enable_utc = True

celery_app.conf.task_routes = {
    "purge_media": {"queue": "media"},
}
celery_app.conf.task_default_queue = "default"

celery_app.conf.task_always_eager = False
