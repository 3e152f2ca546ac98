"""Logging configuration and the failure log sink.

Handled failures are logged server side only; nothing written here reaches
the response body.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import sys
from typing import Protocol

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("exhandler.failures")


def configure_logging(level: str = "INFO") -> None:
    """Configure process logging for services using the error boundary."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@dataclass(frozen=True)
class FailureLogEvent:
    """One handled failure, as seen by the log sink."""

    kind: str
    request_id: str
    client_ip: str
    api: str
    module: str
    code: str
    description: str | None = None
    exc: BaseException | None = None


class FailureLogSink(Protocol):
    def __call__(self, event: FailureLogEvent) -> None: ...


class LoggingFailureSink:
    """Write handled failures to a standard library logger."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    def __call__(self, event: FailureLogEvent) -> None:
        exc_info = None
        if event.exc is not None:
            exc_info = (type(event.exc), event.exc, event.exc.__traceback__)

        self._logger.error(
            "Exception handled RequestId: %s Type: %s, IP: %s, Api: %s, Module: %s, Code: %s, Desc: %s",
            event.request_id,
            event.kind,
            event.client_ip,
            event.api,
            event.module,
            event.code,
            event.description,
            exc_info=exc_info,
        )
