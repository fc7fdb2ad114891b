"""
Retry decorator with exponential backoff.

Used by adapters to ride out transient API failures and to turn whatever
the Google client raises into an UnfoldError.
"""

import time
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from logging_config import logger, log_retry
from models import ErrorKind, UnfoldError

T = TypeVar("T")
P = ParamSpec("P")


RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
)

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({
    429,  # Rate limited
    500,  # Internal server error
    502,  # Bad gateway
    503,  # Service unavailable
    504,  # Gateway timeout
})


def _get_http_status(exception: Exception) -> int | None:
    """
    Extract HTTP status code from exception if available.

    Works with googleapiclient.errors.HttpError (resp.status) and
    requests-style exceptions (status_code).
    """
    resp = getattr(exception, "resp", None)
    if resp is not None and isinstance(getattr(resp, "status", None), int):
        return resp.status

    status = getattr(exception, "status_code", None)
    if isinstance(status, int):
        return status

    return None


def _should_retry(exception: Exception) -> bool:
    if isinstance(exception, UnfoldError):
        return exception.retryable
    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return True
    return _get_http_status(exception) in RETRYABLE_STATUS_CODES


def _convert_to_unfold_error(exception: Exception) -> UnfoldError:
    """Convert an exception to an UnfoldError if not already one."""
    if isinstance(exception, UnfoldError):
        return exception

    status = _get_http_status(exception)
    if status is not None:
        if status == 401:
            return UnfoldError(ErrorKind.AUTH_EXPIRED, str(exception))
        elif status == 403:
            return UnfoldError(ErrorKind.PERMISSION_DENIED, str(exception))
        elif status == 404:
            return UnfoldError(ErrorKind.NOT_FOUND, str(exception))
        elif status == 429:
            return UnfoldError(ErrorKind.RATE_LIMITED, str(exception), retryable=True)
        elif status >= 500:
            return UnfoldError(ErrorKind.NETWORK_ERROR, str(exception), retryable=True)

    if isinstance(exception, (ConnectionError, TimeoutError)):
        return UnfoldError(ErrorKind.NETWORK_ERROR, str(exception), retryable=True)

    if isinstance(exception, FileNotFoundError):
        return UnfoldError(ErrorKind.AUTH_EXPIRED, str(exception))

    return UnfoldError(ErrorKind.UNKNOWN, str(exception))


def with_retry(
    max_attempts: int = 3,
    delay_ms: int = 1000,
    backoff_multiplier: float = 2.0,
    convert_errors: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Retry decorator with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts
        delay_ms: Initial delay in milliseconds
        backoff_multiplier: Multiplier for exponential backoff
        convert_errors: Convert exceptions to UnfoldError on final failure

    Example:
        @with_retry(max_attempts=3, delay_ms=1000)
        def fetch_document(document_id: str):
            return service.documents().get(documentId=document_id).execute()
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not _should_retry(e) or attempt == max_attempts - 1:
                        logger.error(
                            f"{func.__name__} failed after {attempt + 1} attempts: {e}"
                        )
                        if convert_errors and not isinstance(e, UnfoldError):
                            raise _convert_to_unfold_error(e) from e
                        raise

                    wait_ms = int(delay_ms * (backoff_multiplier ** attempt))
                    log_retry(func.__name__, attempt + 1, max_attempts, wait_ms, str(e))
                    time.sleep(wait_ms / 1000)

            raise AssertionError("unreachable: max_attempts must be >= 1")

        return wrapper

    return decorator
