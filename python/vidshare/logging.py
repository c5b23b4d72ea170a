"""Structured logging for the API and the worker.

Both structlog loggers (get_logger) and plain stdlib loggers
(logging.getLogger(__name__) with extra={...}) end up in the same JSON line
format. Request and task correlation fields live in structlog's contextvars
and are merged into every entry:

- request_id, path, method: set by RequestIDMiddleware
- user_id: set once the auth middleware has attached a viewer
- task_name, task_id: set by Celery tasks

Credentials never reach the output: keys that look like passwords or tokens
are masked by redact_secrets.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, get_contextvars, unbind_contextvars

REQUEST_FIELDS = ("request_id", "user_id", "path", "method")
TASK_FIELDS = ("request_id", "task_name", "task_id")

_SECRET_MARKERS = ("password", "token", "secret", "authorization", "cookie")
REDACTED = "[redacted]"

_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "celery.redirected")


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask values whose key names a credential."""
    for key in list(event_dict):
        lowered = key.lower()
        if any(marker in lowered for marker in _SECRET_MARKERS):
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Route structlog and stdlib logging through one formatter on stdout.

    Args:
        json_format: JSON lines when True, the coloured dev console otherwise.
        level: Root log level.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        # ExtraAdder lifts stdlib `extra=` fields into the event before redaction.
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared_processors],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# =============================================================================
# Request context
# =============================================================================


def set_request_context(
    request_id: str | None,
    user_id: str | None = None,
    path: str | None = None,
    method: str | None = None,
) -> None:
    """Bind request correlation fields; None leaves a field as it was."""
    fields = {"request_id": request_id, "user_id": user_id, "path": path, "method": method}
    bind_contextvars(**{key: value for key, value in fields.items() if value is not None})


def clear_request_context() -> None:
    unbind_contextvars(*REQUEST_FIELDS)


def get_request_id() -> str | None:
    return get_contextvars().get("request_id")


# =============================================================================
# Task context
# =============================================================================


def configure_task_logging(
    request_id: str | None = None,
    task_name: str | None = None,
    task_id: str | None = None,
) -> None:
    """Bind task correlation fields at the start of a Celery task.

    request_id is the id of the HTTP request that enqueued the task, so API
    and worker entries for one user action share it.
    """
    clear_task_context()
    fields = {"request_id": request_id, "task_name": task_name, "task_id": task_id}
    bind_contextvars(**{key: value for key, value in fields.items() if value is not None})


def clear_task_context() -> None:
    unbind_contextvars(*TASK_FIELDS, "user_id")
