"""Operator stages — derived Observables built on one or more upstreams.

Every stage is itself an Observable. Connection is lazy and shared:

- The first downstream subscribe connects to the upstream source(s).
- Later subscribers join that connection and see only subsequent pushes.
- When the last downstream subscription disposes, the stage disposes its
  upstream subscriptions and forgets its accumulator state. The next
  subscriber starts a fresh connection.

Because connecting to a StateContainer replays its current value, the
first subscriber of a chain sees the current value flow through every stage.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from statecell.errors import OperatorConfigError
from statecell.observable import Observable, Observer, ObserverRegistry
from statecell.subscription import Subscription

T = TypeVar("T")
U = TypeVar("U")


def _check_count(name: str, count: int) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise OperatorConfigError(f"{name} count must be an int, got {count!r}")
    if count < 0:
        raise OperatorConfigError(f"{name} count must be >= 0, got {count}")
    return count


class Stage(Observable[U], Generic[U]):
    """Base for operator stages. Subclasses implement _on_next()."""

    def __init__(self, *sources: Observable[Any]) -> None:
        self._sources = sources
        self._observers: ObserverRegistry[U] = ObserverRegistry(on_empty=self._release)
        self._upstream: list[Subscription] = []
        self._connected = False
        self._completed = False

    @property
    def connected(self) -> bool:
        return self._connected

    def subscribe(self, observer: Observer[U]) -> Subscription:
        if self._connected and any(sub.disposed for sub in self._upstream):
            # An upstream container was disposed under us. Reconnecting
            # surfaces the DisposedError to this caller.
            self._disconnect()
        subscription = self._observers.add(observer)
        try:
            self._on_subscribe(observer)
            if subscription.disposed:
                # Observer left while handling the seed; nothing to connect for.
                return subscription
            if not self._connected and not self._completed:
                self._connect()
        except BaseException:
            subscription.dispose()
            raise
        return subscription

    # --- Hooks ---

    def _on_subscribe(self, observer: Observer[U]) -> None:
        """Called for each new downstream observer, before connecting."""

    def _reset(self) -> None:
        """Clear accumulator state. Called on connect and on release."""

    def _on_next(self, value: Any) -> None:
        raise NotImplementedError

    def _receiver(self, index: int) -> Observer[Any]:
        """Callback to subscribe on the index-th source."""
        return self._on_next

    # --- Connection lifecycle ---

    def _connect(self) -> None:
        self._connected = True
        self._reset()
        try:
            for index, source in enumerate(self._sources):
                sub = source.subscribe(self._receiver(index))
                if not self._connected:
                    # Completed or released during the replay.
                    sub.dispose()
                    return
                self._upstream.append(sub)
        except BaseException:
            self._disconnect()
            raise

    def _disconnect(self) -> None:
        self._connected = False
        upstream, self._upstream = self._upstream, []
        for sub in upstream:
            sub.dispose()

    def _complete(self) -> None:
        """Stop listening upstream while keeping downstream observers."""
        self._completed = True
        self._disconnect()

    def _release(self) -> None:
        """Last downstream observer left."""
        self._completed = False
        self._disconnect()
        self._reset()

    def _emit(self, value: U) -> None:
        self._observers.emit(value)


class Filter(Stage[T]):
    def __init__(self, source: Observable[T], predicate: Callable[[T], bool]) -> None:
        super().__init__(source)
        self._predicate = predicate

    def _on_next(self, value: T) -> None:
        if self._predicate(value):
            self._emit(value)


class Map(Stage[U], Generic[T, U]):
    def __init__(self, source: Observable[T], fn: Callable[[T], U]) -> None:
        super().__init__(source)
        self._fn = fn

    def _on_next(self, value: T) -> None:
        self._emit(self._fn(value))


class Skip(Stage[T]):
    def __init__(self, source: Observable[T], count: int) -> None:
        super().__init__(source)
        self._count = _check_count("skip", count)
        self._remaining = self._count

    def _reset(self) -> None:
        self._remaining = self._count

    def _on_next(self, value: T) -> None:
        if self._remaining > 0:
            self._remaining -= 1
            return
        self._emit(value)


class Take(Stage[T]):
    """Forward the first count pushes, then disconnect from upstream.

    take(0) never connects at all.
    """

    def __init__(self, source: Observable[T], count: int) -> None:
        super().__init__(source)
        self._count = _check_count("take", count)
        self._remaining = self._count

    def _reset(self) -> None:
        self._remaining = self._count

    def _connect(self) -> None:
        if self._count == 0:
            self._completed = True
            return
        super()._connect()

    def _on_next(self, value: T) -> None:
        if self._remaining <= 0:
            return
        self._remaining -= 1
        self._emit(value)
        if self._remaining == 0:
            self._complete()


_UNSET = object()


class DistinctUntilChanged(Stage[T]):
    """Forward a value only if it differs from the last one forwarded."""

    def __init__(self, source: Observable[T]) -> None:
        super().__init__(source)
        self._last: Any = _UNSET

    def _reset(self) -> None:
        self._last = _UNSET

    def _on_next(self, value: T) -> None:
        last = self._last
        if last is not _UNSET and (last is value or last == value):
            return
        self._last = value
        self._emit(value)


class Scan(Stage[T]):
    """Running fold. The first value seeds the accumulator and is forwarded as is."""

    def __init__(self, source: Observable[T], accumulator: Callable[[T, T], T]) -> None:
        super().__init__(source)
        self._accumulator = accumulator
        self._acc: Any = _UNSET

    def _reset(self) -> None:
        self._acc = _UNSET

    def _on_next(self, value: T) -> None:
        if self._acc is _UNSET:
            self._acc = value
        else:
            self._acc = self._accumulator(self._acc, value)
        self._emit(self._acc)


class StartWith(Stage[T]):
    """Push seed to each new subscriber before relaying upstream."""

    def __init__(self, source: Observable[T], seed: T) -> None:
        super().__init__(source)
        self._seed = seed

    def _on_subscribe(self, observer: Observer[T]) -> None:
        observer(self._seed)

    def _on_next(self, value: T) -> None:
        self._emit(value)


class Tap(Stage[T]):
    def __init__(self, source: Observable[T], side_effect: Callable[[T], Any]) -> None:
        super().__init__(source)
        self._side_effect = side_effect

    def _on_next(self, value: T) -> None:
        self._side_effect(value)
        self._emit(value)
