"""structlog setup for the verification pipeline.

Core components log events through ``structlog.get_logger().bind(component=...)``.
While the orchestrator handles a message, ``message_context`` binds the
conversation and message ids as context variables, so every event logged by
the gatekeeper, index, evidence sources and learning log for that message
carries them. Tasks spawned inside the block inherit the binding.

Usage:
    from truth_sentinel.utils.logging import message_context, new_message_id

    with message_context(conversation_id="chat-42", message_id=new_message_id()):
        ...
"""

import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars
from structlog.processors import JSONRenderer

from truth_sentinel.config.settings import settings


def configure_structured_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structlog processors and renderer.

    Console rendering is used only on a TTY with ``log_format == "console"``;
    everything else gets one JSON object per line on stderr.

    Args:
        level: Minimum level name. Defaults to settings.log_level.
        log_format: "console" or "json". Defaults to settings.log_format.
    """
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()

    processors = [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if sys.stderr.isatty() and log_format == "console":
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def new_message_id() -> str:
    """Short random id that ties together the log events of one message."""
    return uuid.uuid4().hex[:12]


@contextmanager
def message_context(
    conversation_id: Optional[str],
    message_id: str,
) -> Iterator[None]:
    """Bind ``message_id`` (and ``conversation_id`` when known) for the block."""
    context = {"message_id": message_id}
    if conversation_id:
        context["conversation_id"] = conversation_id
    with bound_contextvars(**context):
        yield


configure_structured_logging()


__all__ = [
    "configure_structured_logging",
    "message_context",
    "new_message_id",
]
