"""
Logging for unfold.

One "unfold" logger shared by the adapters, retry and the CLI. Extractors
stay silent: anything worth reporting from a walk comes back in the
result (partial_errors, warnings) and the caller decides whether to log it.
"""

import logging
import sys
from typing import Iterable

from models import PartialError

logger = logging.getLogger("unfold")

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """
    Send unfold's records to stderr at the given level.

    stdout is reserved for the CLI's JSON output. Safe to call twice; the
    handler is only attached once.
    """
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)


def log_fetch(resource: str, resource_id: str, **params: object) -> None:
    """Record an outgoing API request, e.g. log_fetch("document", doc_id, fields=...)."""
    extra = " ".join(f"{k}={v}" for k, v in params.items() if v is not None)
    logger.debug(f"fetch {resource} {resource_id} {extra}".rstrip())


def log_fetched(resource: str, resource_id: str, **counts: int) -> None:
    """Record a completed request with whatever sizes are worth knowing."""
    summary = ", ".join(f"{k}={v}" for k, v in counts.items())
    logger.debug(f"fetched {resource} {resource_id}" + (f" ({summary})" if summary else ""))


def log_retry(func_name: str, attempt: int, max_attempts: int, delay_ms: int, reason: str) -> None:
    logger.warning(f"{func_name}: attempt {attempt}/{max_attempts} failed, retrying in {delay_ms}ms: {reason}")


def log_partial_errors(source: str, errors: Iterable[PartialError]) -> None:
    """One warning per undecodable leaf, so a partly-read message is visible."""
    for error in errors:
        logger.warning(f"{source}: part {error.path or '<root>'} skipped: {error.reason}")
