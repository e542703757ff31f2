"""Retrying an operation with capped exponential backoff."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """How many retries to make and how long to wait between them (seconds)."""

    max_retries: int = 3
    initial_wait: float = 1.0
    max_wait: float = 10.0


class RetryCancelled(Exception):
    """Raised when the stop event is set while waiting to retry."""


def default_config() -> RetryConfig:
    """Return the default retry settings: 3 retries, 1 s initial, 10 s cap."""
    return RetryConfig()


def with_backoff(
    operation: Callable[[], T],
    config: Optional[RetryConfig] = None,
    stop: Optional[threading.Event] = None,
    sleep: Optional[Callable[[float], object]] = None,
) -> Optional[T]:
    """Call ``operation`` until it succeeds or the retries are spent.

    The operation fails by raising; its last exception is re-raised once all
    attempts have failed.  Setting ``stop`` aborts the wait between attempts
    with :class:`RetryCancelled`.  ``sleep`` replaces the waiting function.
    """
    cfg = config if config is not None else default_config()
    wait = cfg.initial_wait
    last_error: Optional[BaseException] = None

    for attempt in range(cfg.max_retries + 1):
        if attempt > 0:
            log.info("Retry attempt %d/%d after %ss", attempt, cfg.max_retries, wait)
            if _wait(wait, stop, sleep):
                raise RetryCancelled("retry cancelled") from last_error
            wait = min(wait * 2, cfg.max_wait)

        try:
            return operation()
        except Exception as exc:
            last_error = exc
            log.info(
                "Operation failed (attempt %d/%d): %s",
                attempt + 1,
                cfg.max_retries,
                exc,
            )

    if last_error is not None:
        raise last_error
    return None


def _wait(
    seconds: float,
    stop: Optional[threading.Event],
    sleep: Optional[Callable[[float], object]],
) -> bool:
    """Wait ``seconds``; return True when the stop event cut the wait short."""
    if stop is not None and stop.is_set():
        return True
    if sleep is not None:
        sleep(seconds)
        return stop is not None and stop.is_set()
    if stop is not None:
        return stop.wait(seconds)
    time.sleep(seconds)
    return False