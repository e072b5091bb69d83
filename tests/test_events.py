import gc
from pathlib import Path

import pytest

import events
from events import AppEvent, EventBus, event_bus


@pytest.fixture(autouse=True)
def clean_bus():
    event_bus.clear()
    yield
    event_bus.clear()


class Listener:
    def __init__(self):
        self.calls = []

    def on_event(self, data):
        self.calls.append(data)


class TestEventBus:
    def test_singleton(self):
        assert EventBus() is event_bus

    def test_emit_reaches_subscriber(self):
        listener = Listener()
        event_bus.subscribe(AppEvent.CLIENT_SELECTED, listener.on_event)
        event_bus.emit(AppEvent.CLIENT_SELECTED, "c1")
        assert listener.calls == ["c1"]

    def test_other_events_ignored(self):
        listener = Listener()
        event_bus.subscribe(AppEvent.CLIENT_SELECTED, listener.on_event)
        event_bus.emit(AppEvent.CLIENT_DELETED, "c1")
        assert listener.calls == []

    def test_unsubscribe(self):
        listener = Listener()
        sub = event_bus.subscribe(AppEvent.FILTER_CHANGED, listener.on_event)
        sub.unsubscribe()
        assert not sub.active
        event_bus.emit(AppEvent.FILTER_CHANGED)
        assert listener.calls == []

    def test_bound_methods_are_weak(self):
        listener = Listener()
        event_bus.subscribe(AppEvent.FILTER_CHANGED, listener.on_event)
        del listener
        gc.collect()
        # No error and nothing left to call
        event_bus.emit(AppEvent.FILTER_CHANGED)
        assert event_bus._listeners[AppEvent.FILTER_CHANGED] == {}

    def test_lambda_kept_alive_by_subscription(self):
        received = []
        sub = event_bus.subscribe(AppEvent.TIMER_TICK, lambda data: received.append(data))
        gc.collect()
        event_bus.emit(AppEvent.TIMER_TICK, 1)
        assert received == [1]
        sub.unsubscribe()

    def test_handler_error_does_not_stop_others(self):
        received = []

        def broken(_):
            raise RuntimeError("boom")

        sub1 = event_bus.subscribe(AppEvent.DATA_RESET, broken, strong=True)
        sub2 = event_bus.subscribe(AppEvent.DATA_RESET, lambda data: received.append(data))
        event_bus.emit(AppEvent.DATA_RESET, "x")
        assert received == ["x"]
        sub1.unsubscribe()
        sub2.unsubscribe()


class TestEventCatalog:
    def test_every_event_has_an_emitter(self):
        root = Path(events.__file__).parent
        sources = "\n".join(p.read_text(encoding="utf-8") for p in root.rglob("*.py"))
        silent = [e.name for e in AppEvent if f"emit(AppEvent.{e.name}" not in sources]
        assert silent == []
