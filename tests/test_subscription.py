"""Tests for Subscription and ObserverRegistry."""

from statecell import Subscription
from statecell.observable import ObserverRegistry


class TestSubscription:
    def test_dispose_runs_teardown_once(self):
        calls = []
        sub = Subscription(lambda: calls.append(1))
        sub.dispose()
        sub.dispose()
        assert calls == [1]

    def test_disposed_flag(self):
        sub = Subscription()
        assert not sub.disposed
        sub.dispose()
        assert sub.disposed

    def test_callable_like_a_disposer(self):
        calls = []
        sub = Subscription(lambda: calls.append(1))
        sub()
        sub()
        assert calls == [1]
        assert sub.disposed

    def test_context_manager(self):
        calls = []
        with Subscription(lambda: calls.append(1)) as sub:
            assert not sub.disposed
        assert sub.disposed
        assert calls == [1]

    def test_repr(self):
        sub = Subscription()
        assert "active" in repr(sub)
        sub.dispose()
        assert "disposed" in repr(sub)


class TestObserverRegistry:
    def test_emits_in_registration_order(self):
        registry = ObserverRegistry()
        log = []
        registry.add(lambda v: log.append(("a", v)))
        registry.add(lambda v: log.append(("b", v)))
        registry.emit(1)
        assert log == [("a", 1), ("b", 1)]

    def test_same_callback_twice_is_two_registrations(self):
        registry = ObserverRegistry()
        log = []
        first = registry.add(log.append)
        registry.add(log.append)
        registry.emit(1)
        assert log == [1, 1]
        first.dispose()
        registry.emit(2)
        assert log == [1, 1, 2]

    def test_on_empty_fires_when_last_removed(self):
        emptied = []
        registry = ObserverRegistry(on_empty=lambda: emptied.append(True))
        a = registry.add(lambda v: None)
        b = registry.add(lambda v: None)
        a.dispose()
        assert emptied == []
        b.dispose()
        assert emptied == [True]
        b.dispose()
        assert emptied == [True]

    def test_dispose_all_skips_on_empty(self):
        emptied = []
        registry = ObserverRegistry(on_empty=lambda: emptied.append(True))
        subs = [registry.add(lambda v: None) for _ in range(3)]
        registry.dispose_all()
        assert len(registry) == 0
        assert all(sub.disposed for sub in subs)
        assert emptied == []

    def test_removal_during_emit_skips_removed(self):
        registry = ObserverRegistry()
        log = []
        holder = {}

        def first(v):
            log.append(("first", v))
            holder["second"].dispose()

        registry.add(first)
        holder["second"] = registry.add(lambda v: log.append(("second", v)))
        registry.emit(1)
        assert log == [("first", 1)]

    def test_added_during_emit_waits_for_next(self):
        registry = ObserverRegistry()
        log = []

        def first(v):
            log.append(("first", v))
            if v == 1:
                registry.add(lambda x: log.append(("late", x)))

        registry.add(first)
        registry.emit(1)
        assert log == [("first", 1)]
        registry.emit(2)
        assert log == [("first", 1), ("first", 2), ("late", 2)]
