"""Celery worker package (`celery -A apps.worker worker -Q media`)."""

from apps.worker.main import celery_app

__all__ = ["celery_app"]
