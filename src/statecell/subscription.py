"""Subscription — disposable handle returned by every subscribe().

A Subscription wraps a teardown function. dispose() runs it exactly once;
later calls are no-ops. The handle is also callable, so it can be passed
anywhere a plain disposer function is expected, and it works as a context
manager for scoped cleanup.
"""

from __future__ import annotations

from typing import Callable

Disposer = Callable[[], None]


class Subscription:
    """Idempotent disposable handle."""

    __slots__ = ("_teardown", "_disposed")

    def __init__(self, teardown: Disposer | None = None) -> None:
        self._teardown = teardown
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Run the teardown once. Safe to call any number of times."""
        if self._disposed:
            return
        self._disposed = True
        teardown, self._teardown = self._teardown, None
        if teardown is not None:
            teardown()

    def __call__(self) -> None:
        self.dispose()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Subscription({state})"
