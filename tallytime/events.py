from enum import Enum, auto
from typing import Any, Callable, Dict, Optional
import inspect
import logging
import threading
import uuid
import weakref

logger = logging.getLogger(__name__)


class AppEvent(Enum):
    """Application-wide events for the observer pattern."""
    CLIENT_CREATED = auto()
    CLIENT_UPDATED = auto()
    CLIENT_ARCHIVED = auto()
    CLIENT_DELETED = auto()
    CLIENT_SELECTED = auto()
    CLIENTS_LOADED = auto()
    CLIENTS_IMPORTED = auto()
    TIMER_STARTED = auto()
    TIMER_STOPPED = auto()
    TIMER_TICK = auto()
    ENTRY_UPDATED = auto()
    ENTRY_DELETED = auto()
    CLIENT_TIME_RESET = auto()
    FILTER_CHANGED = auto()
    DATA_RESET = auto()


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to detach.

    For lambdas and closures the handle keeps the callback alive, so it must
    be stored for as long as the subscription should stay active.
    """

    def __init__(
        self,
        bus: "EventBus",
        event: AppEvent,
        subscription_id: str,
        strong_ref: Optional[Callable[[Any], None]] = None,
    ):
        self._bus = bus
        self._event = event
        self._id = subscription_id
        self._strong_ref = strong_ref
        self._active = True

    @property
    def id(self) -> str:
        return self._id

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._bus._remove(self._event, self._id)
            self._active = False
            self._strong_ref = None


def _make_ref(callback: Callable[[Any], None], on_dead: Callable[[Any], None]):
    """Weak reference to a callback; builtins that refuse weakrefs are held strongly."""
    if inspect.ismethod(callback):
        return weakref.WeakMethod(callback, on_dead)
    try:
        return weakref.ref(callback, on_dead)
    except TypeError:
        return lambda: callback


class EventBus:
    """Singleton event bus between services and UI components.

    Bound-method subscribers are held weakly and disappear with their owner,
    so views that are rebuilt do not need to unsubscribe explicitly.
    """
    _instance: Optional["EventBus"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "EventBus":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._listeners: Dict[AppEvent, Dict[str, Callable]] = {}
        return cls._instance

    def subscribe(
        self,
        event: AppEvent,
        callback: Callable[[Any], None],
        strong: bool = False,
    ) -> Subscription:
        """Subscribe a callback to an event.

        Lambdas and closures are always kept alive through the returned
        Subscription; bound methods are weak unless strong=True.

        Example:
            event_bus.subscribe(AppEvent.TIMER_TICK, self._on_tick)
            self._sub = event_bus.subscribe(AppEvent.FILTER_CHANGED, lambda _: self.refresh())
        """
        listeners = self._listeners.setdefault(event, {})
        subscription_id = str(uuid.uuid4())

        is_lambda = getattr(callback, "__name__", "") == "<lambda>"
        is_closure = not inspect.ismethod(callback) and getattr(callback, "__closure__", None) is not None
        if (is_lambda or is_closure) and not strong:
            logger.debug(f"EventBus: holding {event.name} callback strongly; keep the Subscription")
            strong = True

        def on_dead(_ref) -> None:
            logger.debug(f"EventBus: {event.name} subscriber was garbage collected")
            self._remove(event, subscription_id)

        listeners[subscription_id] = _make_ref(callback, on_dead)
        return Subscription(self, event, subscription_id, strong_ref=callback if strong else None)

    def _remove(self, event: AppEvent, subscription_id: str) -> None:
        listeners = self._listeners.get(event)
        if listeners is not None:
            listeners.pop(subscription_id, None)

    def emit(self, event: AppEvent, data: Any = None) -> None:
        """Call every live subscriber of ``event``; handler errors are logged."""
        for sub_id, ref in list(self._listeners.get(event, {}).items()):
            callback = ref()
            if callback is None:
                self._remove(event, sub_id)
                continue
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Error in event handler for {event.name}: {e}")

    def clear(self) -> None:
        self._listeners.clear()


event_bus = EventBus()
