"""Observable — the push-based notification capability.

Everything that can be subscribed to (StateContainer, Store, every operator
stage) is an Observable. The only required operation is subscribe(); the
chaining methods below build operator stages on top of it:

    store.filter(lambda v: v > 0).map(lambda v: v * 2).distinct_until_changed()

Each chaining method returns a new Observable that wraps this one. Nothing
connects upstream until the returned stage gets its first subscriber.

ObserverRegistry is the shared bookkeeping for "who is listening": ordered,
one entry per subscribe() call, and safe to mutate from inside a push.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from statecell.subscription import Subscription

if TYPE_CHECKING:
    from statecell.scheduler import Scheduler

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")

Observer = Callable[[T], None]


class ObserverRegistry(Generic[T]):
    """Ordered observer list with snapshot-and-liveness emission.

    emit() iterates over a copy of the entries taken when the push starts.
    An observer added during the push is not in the copy, so it first hears
    from the next push. An observer disposed during the push is still in the
    copy, but its Subscription is marked disposed and it is skipped.
    """

    __slots__ = ("_entries", "_on_empty")

    def __init__(self, on_empty: Callable[[], None] | None = None) -> None:
        self._entries: list[tuple[Subscription, Observer[T]]] = []
        self._on_empty = on_empty

    def add(self, observer: Observer[T]) -> Subscription:
        def _remove() -> None:
            try:
                self._entries.remove(entry)
            except ValueError:
                return  # already cleared
            if not self._entries and self._on_empty is not None:
                self._on_empty()

        subscription = Subscription(_remove)
        entry = (subscription, observer)
        self._entries.append(entry)
        return subscription

    def emit(self, value: T) -> None:
        for subscription, observer in list(self._entries):
            if not subscription.disposed:
                observer(value)

    def dispose_all(self) -> None:
        """Dispose every live registration without firing on_empty."""
        entries, self._entries = self._entries, []
        for subscription, _ in entries:
            subscription.dispose()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)


class Observable(ABC, Generic[T]):
    """Something that pushes values to observers until they dispose."""

    __slots__ = ()

    @abstractmethod
    def subscribe(self, observer: Observer[T]) -> Subscription:
        """Register observer. Returns a handle that unregisters it."""

    # --- Operator pipeline ---

    def filter(self, predicate: Callable[[T], bool]) -> Observable[T]:
        """Only pass values where predicate returns True."""
        from statecell.operators import Filter

        return Filter(self, predicate)

    def map(self, fn: Callable[[T], U]) -> Observable[U]:
        """Transform values through fn."""
        from statecell.operators import Map

        return Map(self, fn)

    def skip(self, count: int) -> Observable[T]:
        from statecell.operators import Skip

        return Skip(self, count)

    def take(self, count: int) -> Observable[T]:
        """Forward the first count values, then disconnect from upstream."""
        from statecell.operators import Take

        return Take(self, count)

    def distinct_until_changed(self) -> Observable[T]:
        """Suppress values equal to the previously forwarded one."""
        from statecell.operators import DistinctUntilChanged

        return DistinctUntilChanged(self)

    def scan(self, accumulator: Callable[[T, T], T]) -> Observable[T]:
        """Running fold, seeded with the first value."""
        from statecell.operators import Scan

        return Scan(self, accumulator)

    def start_with(self, seed: T) -> Observable[T]:
        from statecell.operators import StartWith

        return StartWith(self, seed)

    def tap(self, side_effect: Callable[[T], Any]) -> Observable[T]:
        """Call side_effect with each value, then forward it unchanged."""
        from statecell.operators import Tap

        return Tap(self, side_effect)

    # --- Windowing / combining ---

    def buffer(self, size: int) -> Observable[list[T]]:
        """Group consecutive values into lists of exactly size items."""
        from statecell.combining import Buffer

        return Buffer(self, size)

    def sample(
        self,
        interval: float | timedelta,
        scheduler: Scheduler | None = None,
    ) -> Observable[T]:
        """Emit the latest known value on every scheduler tick."""
        from statecell.combining import Sample

        return Sample(self, interval, scheduler)

    def combine_latest(
        self,
        other: Observable[U],
        combiner: Callable[[T, U], V],
    ) -> Observable[V]:
        """Combine the latest value of each source whenever either pushes."""
        from statecell.combining import CombineLatest

        return CombineLatest(self, other, combiner)

    def merge(self, *others: Observable[T]) -> Observable[T]:
        """Interleave pushes from this and the other sources."""
        from statecell.combining import Merge

        return Merge(self, *others)
