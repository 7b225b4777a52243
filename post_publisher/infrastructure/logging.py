"""
Logging for the publisher service.

Every line is JSON with the service name. Lines emitted during a
publishing pass also carry the pass's `run_id` and the correlation id of
the request or scheduler tick that started it.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

import structlog

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def configure_logging(service_name: str, level: str = "INFO") -> None:
    """
    Configure structured logging for the service.

    Args:
        service_name: Added to every log line
        level: Root log level name (DEBUG, INFO, ...)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.getLevelName(level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_service_name(service_name),
            _add_correlation_id,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def _add_service_name(service_name: str):
    def processor(logger, method_name, event_dict):
        event_dict["service"] = service_name
        return event_dict

    return processor


def _add_correlation_id(logger, method_name, event_dict):
    cid = correlation_id.get()
    if cid:
        event_dict.setdefault("correlation_id", cid)
    return event_dict


def set_correlation_id(cid: str) -> None:
    correlation_id.set(cid)


@contextmanager
def publishing_run(trigger: str) -> Iterator[str]:
    """
    Scope the logs of one publishing pass.

    Binds a fresh `run_id` and the trigger name ("http" or "scheduler").
    A scheduler tick has no incoming request, so the run id doubles as
    its correlation id; an HTTP pass keeps the request's.
    """
    run_id = str(uuid4())
    if not correlation_id.get():
        correlation_id.set(run_id)
    with structlog.contextvars.bound_contextvars(run_id=run_id, trigger=trigger):
        yield run_id


class Timer:
    """
    Measures one provider attempt or store round-trip.

        with Timer() as t:
            await gateway.publish(credential, post)
        logger.info("Publish attempt succeeded", duration_ms=t.duration_ms)
    """

    def __init__(self):
        self._start: float = 0
        self._end: float = 0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self._end = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        return round((self._end - self._start) * 1000, 2)


def sanitize_for_logging(value: str | None, visible_chars: int = 8) -> str:
    """Keep only the first characters of an access token."""
    if not value:
        return ""
    if len(value) <= visible_chars:
        return value
    return value[:visible_chars] + "..."
