"""Celery worker entrypoint.

    celery -A apps.worker.main:celery_app worker -Q media --loglevel=info

Tasks are registered by importing them here; there is no autodiscovery.
Each task takes the enqueuing request's request_id so worker log entries
can be joined with the API access log.
"""

from celery.signals import worker_process_init

from vidshare.celery import celery_app
from vidshare.logging import configure_logging, get_logger
from vidshare.tasks import purge_media  # noqa: F401


@worker_process_init.connect
def setup_worker_logging(**kwargs):
    configure_logging()
    queues = sorted({route["queue"] for route in celery_app.conf.task_routes.values()})
    get_logger(__name__).info("celery_worker_started", queues=queues)


__all__ = ["celery_app"]
