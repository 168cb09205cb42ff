"""
Structlog logging configuration for bucketfs.

The adapter logs its mutations and delete batches
through structlog. boto3 and its transport stack log through stdlib
``logging``, so the root logger gets a ``ProcessorFormatter`` that renders
both kinds of record as the same console or JSON lines. A single stream
then carries an adapter event and the botocore warning behind it.
"""
import logging
import json
import structlog
from structlog.processors import TimeStamper, add_log_level, JSONRenderer
from structlog.dev import ConsoleRenderer
from structlog.contextvars import merge_contextvars
from structlog.stdlib import ProcessorFormatter
from typing import Any, List

from core.config import settings


def get_renderer() -> Any:
    """Pick a renderer: console output in DEBUG, JSON lines otherwise.

    structlog passes ``default``/``sort_keys`` through to the serializer,
    so the JSON serializer has to accept them.
    """
    if settings.DEBUG:
        return ConsoleRenderer(colors=True)

    def _dumps(obj, default=None, **kwargs):
        return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)
    return JSONRenderer(serializer=_dumps)


def _root_level() -> int:
    """LOG_LEVEL when it names a stdlib level, else DEBUG/INFO from DEBUG."""
    if settings.LOG_LEVEL:
        level = logging.getLevelName(settings.LOG_LEVEL)
        if isinstance(level, int):
            return level
    return logging.DEBUG if settings.DEBUG else logging.INFO


def configure_logging() -> None:
    """Configure structlog and route stdlib logging through the same chain.

    botocore and urllib3 log through stdlib, so their records are rendered
    by the same formatter as the adapter's own events.
    """
    timestamper = TimeStamper(fmt="iso")

    # Shared by structlog.configure and the stdlib ProcessorFormatter
    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        timestamper,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_pre_chain,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = get_renderer()
    formatter = ProcessorFormatter(
        foreign_pre_chain=shared_pre_chain,
        processors=[
            ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_root_level())

    # botocore logs every request and retry at DEBUG; keep its warnings
    # and errors in the stream without drowning the adapter events
    for noisy in ("botocore", "urllib3", "s3transfer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger."""
    return structlog.get_logger(name)


configure_logging()
