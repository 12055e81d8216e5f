"""
Tests for the in-process event bus.
"""
from clinic_records.core.events import EventBus


class TestEventBus:

    def test_emit_without_listeners_is_noop(self):
        EventBus().emit("patients_changed")

    def test_multiple_listeners_all_called(self):
        bus = EventBus()
        calls = []
        bus.add_listener("patients_changed", lambda: calls.append("a"))
        bus.add_listener("patients_changed", lambda: calls.append("b"))

        bus.emit("patients_changed")

        assert sorted(calls) == ["a", "b"]

    def test_remove_listener(self):
        bus = EventBus()
        calls = []

        def listener():
            calls.append(1)

        bus.add_listener("x", listener)
        bus.remove_listener("x", listener)
        bus.emit("x")

        assert calls == []
        assert bus.listener_count("x") == 0

    def test_unsubscribe_handle(self):
        bus = EventBus()
        calls = []
        unsubscribe = bus.add_listener("x", lambda: calls.append(1))

        unsubscribe()
        bus.emit("x")

        assert calls == []

    def test_remove_unknown_listener_is_harmless(self):
        EventBus().remove_listener("never-registered", lambda: None)

    def test_failing_listener_does_not_block_others(self):
        bus = EventBus()
        calls = []

        def broken():
            raise RuntimeError("boom")

        bus.add_listener("x", broken)
        bus.add_listener("x", lambda: calls.append("ok"))

        bus.emit("x")

        assert calls == ["ok"]

    def test_events_are_independent(self):
        bus = EventBus()
        calls = []
        bus.add_listener("a", lambda: calls.append("a"))

        bus.emit("b")

        assert calls == []

    def test_emit_passes_arguments(self):
        bus = EventBus()
        received = []
        bus.add_listener("x", lambda *args: received.append(args))

        bus.emit("x", 1, "two")

        assert received == [(1, "two")]
