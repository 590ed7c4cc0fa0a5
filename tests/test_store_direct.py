"""Tests for Store without a reducer — direct mutation through the container."""

from dataclasses import dataclass, replace

import pytest

from statecell import DisposedError, NoReducerError, Store


class Counter:
    """Domain wrapper: mutation methods over a reducer-less store."""

    def __init__(self, initial: int = 0) -> None:
        self.store: Store[int, object] = Store(initial)

    @property
    def value(self) -> int:
        return self.store.state

    def _apply(self, fn) -> None:
        cell = self.store.container
        cell.set(fn(cell.get()))

    def increment(self) -> None:
        self._apply(lambda v: v + 1)

    def decrement(self) -> None:
        self._apply(lambda v: v - 1)

    def increment_by(self, amount: int) -> None:
        self._apply(lambda v: v + amount)

    def reset(self) -> None:
        self.store.container.set(0)

    def set_value(self, value: int) -> None:
        self.store.container.set(value)


@dataclass(frozen=True)
class Person:
    name: str
    age: int


class People:
    def __init__(self) -> None:
        self.store: Store[Person, object] = Store(Person("", 0))

    def update_name(self, name: str) -> None:
        cell = self.store.container
        cell.set(replace(cell.get(), name=name))

    def update_age(self, age: int) -> None:
        cell = self.store.container
        cell.set(replace(cell.get(), age=age))


class TestDirectMutation:
    def test_initial_state(self):
        assert Counter().value == 0

    def test_custom_initial_state(self):
        assert Store(42).state == 42

    def test_increment(self):
        c = Counter()
        c.increment()
        assert c.value == 1

    def test_decrement(self):
        c = Counter()
        c.set_value(5)
        c.decrement()
        assert c.value == 4

    def test_increment_by(self):
        c = Counter()
        c.set_value(10)
        c.increment_by(7)
        assert c.value == 17

    def test_reset(self):
        c = Counter()
        c.set_value(100)
        c.reset()
        assert c.value == 0

    def test_sequence(self):
        c = Counter()
        c.increment()
        c.increment()
        c.increment_by(5)
        c.decrement()
        assert c.value == 6

    def test_string_state(self):
        store = Store("")
        for part in ("Hello", " ", "World"):
            store.container.set(store.state + part)
        assert store.state == "Hello World"

    def test_record_state(self):
        people = People()
        people.update_name("Alice")
        people.update_age(30)
        assert people.store.state == Person("Alice", 30)


class TestSubscribe:
    def test_receives_initial_state(self):
        c = Counter()
        received = []
        c.store.subscribe(received.append)
        assert received == [0]

    def test_receives_mutations(self):
        c = Counter()
        received = []
        c.store.subscribe(received.append)
        c.increment()
        c.increment()
        assert received == [0, 1, 2]

    def test_receives_set_values(self):
        c = Counter()
        received = []
        c.store.subscribe(received.append)
        c.set_value(10)
        c.set_value(20)
        assert received == [0, 10, 20]

    def test_operators_see_mutations(self):
        c = Counter()
        received = []
        c.store.map(lambda v: v * 10).subscribe(received.append)
        c.increment()
        assert received == [0, 10]


class TestNoReducer:
    @pytest.mark.parametrize("event", [object(), "inc", None, 0])
    def test_dispatch_always_raises(self, event):
        store = Store(0)
        with pytest.raises(NoReducerError):
            store.dispatch(event)

    def test_dispatch_raises_every_time(self):
        store = Store(0)
        for _ in range(3):
            with pytest.raises(NoReducerError):
                store.dispatch("inc")
        assert store.state == 0

    def test_no_reducer_error_is_runtime_error(self):
        with pytest.raises(RuntimeError):
            Store(0).dispatch("inc")

    def test_distinct_from_disposed_error(self):
        store = Store(0)
        with pytest.raises(NoReducerError) as info:
            store.dispatch("inc")
        assert not isinstance(info.value, DisposedError)

    def test_has_no_reducer(self):
        store = Store(0)
        assert not store.has_reducer
        assert "direct" in repr(store)


class TestDispose:
    def test_subscribe_after_dispose_raises(self):
        c = Counter()
        c.store.dispose()
        with pytest.raises(DisposedError):
            c.store.subscribe(lambda v: None)

    def test_dispose_twice(self):
        c = Counter()
        c.store.dispose()
        c.store.dispose()
