"""
Process-wide switch for training progress bars.

``SUBTOK_DISABLE_PROGRESS`` set to a truthy value ("1", "true", "yes", "on")
overrides whatever :func:`enable_progress` last said.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager

ENV_VAR = "SUBTOK_DISABLE_PROGRESS"
_TRUTHY = frozenset({"1", "true", "yes", "on"})

_enabled: bool = True


def enable_progress() -> None:
    """Show progress bars while training."""
    global _enabled
    _enabled = True


def disable_progress() -> None:
    """Hide progress bars while training."""
    global _enabled
    _enabled = False


@contextmanager
def progress_disabled() -> Iterator[None]:
    """Hide progress bars inside the ``with`` block, then restore the old setting."""
    global _enabled
    previous = _enabled
    _enabled = False
    try:
        yield
    finally:
        _enabled = previous


def _is_enabled() -> bool:
    if os.environ.get(ENV_VAR, "").strip().lower() in _TRUTHY:
        return False
    return _enabled
