"""Celery tasks for vidshare.

Tasks are explicitly imported here to register them with Celery.
No autodiscovery - all tasks must be imported in this module.
"""

from vidshare.tasks.purge_media import purge_media

__all__ = ["purge_media"]
