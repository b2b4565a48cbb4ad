"""Timing decorator for long-running training calls."""

import functools
import logging
import time
from typing import Callable

log = logging.getLogger(__name__)


def measure_time(label: str) -> Callable[[Callable], Callable]:
    """
    Log wall-clock time of the wrapped callable as ``"<label> finished in ..."``.

    The line is emitted at INFO on this module's logger, also when the call
    raises, with ``" (failed)"`` appended.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            failed = True
            try:
                result = func(*args, **kwargs)
                failed = False
                return result
            finally:
                elapsed = time.perf_counter() - start
                suffix = " (failed)" if failed else ""
                log.info(f"{label} finished in {elapsed:.3f} s{suffix}")

        return wrapper

    return decorator
