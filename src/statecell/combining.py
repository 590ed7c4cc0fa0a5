"""Windowing and combining stages.

These keep state across several upstream pushes (buffer, sample) or across
several upstream sources (combine_latest, merge). They share the lazy,
ref-counted connection model of the stages in statecell.operators.
"""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import Any, Callable, Generic, TypeVar

from statecell.errors import OperatorConfigError
from statecell.observable import Observable, Observer
from statecell.operators import Stage, _UNSET
from statecell.scheduler import Scheduler, as_seconds, get_default_scheduler
from statecell.subscription import Subscription

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")


class Buffer(Stage[list[T]]):
    """Emit consecutive values in lists of exactly size items.

    A partially filled buffer is dropped when the stage disconnects; it is
    never flushed.
    """

    def __init__(self, source: Observable[T], size: int) -> None:
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise OperatorConfigError(f"buffer size must be a positive int, got {size!r}")
        super().__init__(source)
        self._size = size
        self._pending: list[T] = []

    def _reset(self) -> None:
        self._pending = []

    def _on_next(self, value: T) -> None:
        self._pending.append(value)
        if len(self._pending) >= self._size:
            chunk, self._pending = self._pending, []
            self._emit(chunk)


class Sample(Stage[T]):
    """Emit the most recent upstream value on every scheduler tick.

    Upstream pushes are recorded, not forwarded. Once at least one value has
    arrived, every tick re-emits the latest one, even if it has not changed
    since the previous tick. Ticks run on the scheduler's thread; the
    latest-value slot is guarded by a lock so a tick never reads a torn pair.
    """

    def __init__(
        self,
        source: Observable[T],
        interval: float | timedelta,
        scheduler: Scheduler | None = None,
    ) -> None:
        seconds = as_seconds(interval)
        if seconds <= 0:
            raise OperatorConfigError(f"sample interval must be positive, got {interval!r}")
        super().__init__(source)
        self._interval = seconds
        self._scheduler = scheduler
        self._lock = threading.Lock()
        self._latest: Any = _UNSET
        self._timer: Subscription | None = None

    @property
    def interval(self) -> float:
        return self._interval

    def _reset(self) -> None:
        with self._lock:
            self._latest = _UNSET

    def _connect(self) -> None:
        super()._connect()
        if self._connected:
            scheduler = self._scheduler or get_default_scheduler()
            self._timer = scheduler.schedule_periodic(self._interval, self._tick)

    def _disconnect(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.dispose()
        super()._disconnect()

    def _on_next(self, value: T) -> None:
        with self._lock:
            self._latest = value

    def _tick(self) -> None:
        with self._lock:
            latest = self._latest
        if latest is not _UNSET:
            self._emit(latest)


class CombineLatest(Stage[V], Generic[T, U, V]):
    """Combine the latest value from each of two sources.

    Nothing is emitted until both sources have pushed at least once. After
    that, every push from either side emits combiner(latest_a, latest_b).
    """

    def __init__(
        self,
        first: Observable[T],
        second: Observable[U],
        combiner: Callable[[T, U], V],
    ) -> None:
        super().__init__(first, second)
        self._combiner = combiner
        self._latest: list[Any] = [_UNSET, _UNSET]

    def _reset(self) -> None:
        self._latest = [_UNSET, _UNSET]

    def _receiver(self, index: int) -> Observer[Any]:
        def _on_source(value: Any) -> None:
            self._latest[index] = value
            first, second = self._latest
            if first is not _UNSET and second is not _UNSET:
                self._emit(self._combiner(first, second))

        return _on_source


class Merge(Stage[T]):
    """Forward every push from every source, in arrival order."""

    def __init__(self, *sources: Observable[T]) -> None:
        if not sources:
            raise OperatorConfigError("merge needs at least one source")
        super().__init__(*sources)

    def _on_next(self, value: T) -> None:
        self._emit(value)
