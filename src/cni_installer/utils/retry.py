# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/utils/retry.py

import time
import functools
from typing import Callable


class RetryError(RuntimeError):
    """All attempts failed; the last failure is the __cause__."""


def retry(
    *,
    attempts: int,
    delay: float,
    backoff: float = 1.0,
    max_delay: float | None = None,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception, float], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Retry an idempotent install step.

    attempts:  total number of calls, at least 1
    delay:     seconds before the second call
    backoff:   multiplier applied to the delay after every failure
    max_delay: upper bound for the delay
    on_retry:  callback(attempt, exception, next_delay), not called after the last attempt
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            wait = delay
            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    if attempt == attempts:
                        raise RetryError(
                            f"{fn.__name__} failed after {attempts} attempt(s)"
                        ) from exc
                    if on_retry:
                        on_retry(attempt, exc, wait)
                    sleep(wait)
                    wait = wait * backoff
                    if max_delay is not None:
                        wait = min(wait, max_delay)
        return wrapper
    return decorator
