"""Retry helper for flaky network and browser operations."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from ..core.exceptions import RetryError

logger = logging.getLogger("fco_backup.retry")

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3


def retry(
    fn: Callable[[], T],
    on_error: Optional[Callable[[], None]] = None,
    attempts: int = DEFAULT_ATTEMPTS,
) -> T:
    """Call ``fn`` until it succeeds, at most ``attempts`` times.

    ``on_error`` runs between attempts (not after the last one), typically to
    restart whatever resource ``fn`` depends on.

    Raises:
        RetryError: carrying every error raised by ``fn``.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    errors: List[BaseException] = []
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except Exception as exc:
            errors.append(exc)
            if attempt == attempts:
                break
            logger.warning("Retrying because of error %r", exc)
            if on_error is not None:
                on_error()

    raise RetryError(f"Giving up after {attempts} attempts", errors=errors)
