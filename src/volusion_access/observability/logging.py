"""Structured logging configuration."""

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any, TextIO

import structlog

from volusion_access.fetch.redact import redact_url_credentials


# Event keys that may hold a store URL
URL_KEYS = ("url", "shop_url")


def redact_urls(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor that strips credentials from any URL-valued key."""
    for key in URL_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = redact_url_credentials(value)
    return event_dict


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for applications using the client.

    The library only emits events; call this once at startup to render
    them. URLs are redacted before rendering, so events logged by
    application code with a raw store URL are safe as well.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_urls,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)


@contextmanager
def store_context(shop_url: str) -> Iterator[None]:
    """Tag every event logged inside the block with the store URL.

    Args:
        shop_url: Store base URL. Credentials are redacted before binding.
    """
    with structlog.contextvars.bound_contextvars(
        shop_url=redact_url_credentials(shop_url)
    ):
        yield
