# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging for EduVerse.

The sync engine and the store/cache adapters log through standard library
loggers, the API through structlog. Both end up in one stdout handler whose
structlog ProcessorFormatter renders every record the same way: colored
console output in development, JSON lines elsewhere.

Once a sync runtime is attached, every event also carries the engine's
current connectivity and the synchronized document path, so a log line
written while offline can be told apart without extra arguments.

Example:
    >>> setup_logging(settings)
    >>> attach_sync_status(runtime.engine.status, settings.sync.document_path)
    >>> get_logger(__name__).info("Dataset written", collections=6)
"""

import logging
import sys
from typing import TYPE_CHECKING, Any, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from src.core.config.settings import Settings
    from src.models.dataset import SyncStatus

HANDLER_NAME = "eduverse"

# Third-party loggers are noisy at DEBUG
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "redis", "asyncio")


class SyncStateProcessor:
    """Adds online and document_path fields from the attached sync status.

    Fields passed explicitly by the caller win.
    """

    def __init__(self) -> None:
        self._status: Optional["SyncStatus"] = None
        self._document_path: Optional[str] = None

    def attach(self, status: "SyncStatus", document_path: str) -> None:
        self._status = status
        self._document_path = document_path

    def detach(self) -> None:
        self._status = None
        self._document_path = None

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        if self._status is not None:
            event_dict.setdefault("online", self._status.online)
            event_dict.setdefault("document_path", self._document_path)
        return event_dict


sync_state = SyncStateProcessor()


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and route stdlib logging through it.

    Safe to call repeatedly: the stdout handler installed by a previous
    call is replaced.

    Args:
        settings: Application settings containing log_level and debug flag.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    console = settings.is_development or settings.debug

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        sync_state,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    final_processors: list[Processor]
    if console:
        final_processors = [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        final_processors = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *final_processors,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
    logging.getLogger("src").setLevel(log_level)


def attach_sync_status(status: "SyncStatus", document_path: str) -> None:
    """Stamp subsequent log events with the engine's connectivity.

    Args:
        status: The engine's shared, in-place updated status.
        document_path: Path of the synchronized document.
    """
    sync_state.attach(status, document_path)


def detach_sync_status() -> None:
    """Stop stamping log events with sync fields."""
    sync_state.detach()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given module name."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind fields to every log call of the current request.

    Example:
        >>> bind_context(collection="batches", record_id="batch_1700000000000")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
