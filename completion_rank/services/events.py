"""EventBus: decoupled notifications between the editor layer and rankers.

The editor layer emits cursor and config events; long-lived objects such as
a WordDistance session subscribe to what they need.

Usage:
    # Editor glue (emit events)
    EventBus.get().emit(CursorMovedEvent(bufnr=1, line=3, character=4))

    # Subscribers
    bus = EventBus.get()
    bus.subscribe(CursorMovedEvent, self._on_cursor_moved, weak=True)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, TypeVar
import inspect
import logging
import weakref

logger = logging.getLogger(__name__)

# Event type variable for generic typing
E = TypeVar("E", bound="Event")


@dataclass
class Event:
    """Base class for all events."""

    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CursorMovedEvent(Event):
    """Emitted by the editor layer when the cursor moves."""

    bufnr: int = 0
    line: int = 0
    character: int = 0


@dataclass
class CompletionSessionEndedEvent(Event):
    """Emitted when the popup closes or the session is cancelled."""

    bufnr: int = 0


@dataclass
class ConfigChangedEvent(Event):
    """Emitted when configuration is updated."""

    key: str = ""  # Which config section changed


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """Central event bus.

    Singleton pattern ensures one bus per process. Weak subscriptions are
    dropped automatically once the handler's owner is garbage collected.
    """

    _instance: "EventBus | None" = None

    def __init__(self) -> None:
        self._subscribers: dict[type[Event], list[EventHandler]] = {}
        self._weak_subscribers: dict[type[Event], list[weakref.ref]] = {}

    @classmethod
    def get(cls) -> "EventBus":
        """Get the singleton event bus instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    def subscribe(
        self,
        event_type: type[E],
        handler: Callable[[E], None],
        weak: bool = False,
    ) -> None:
        """Subscribe to an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callback function to invoke when event is emitted
            weak: Use weak reference (auto-cleanup when handler owner is GC'd)
        """
        if weak:
            # Bound methods are recreated on every attribute access
            ref = weakref.WeakMethod(handler) if inspect.ismethod(handler) else weakref.ref(handler)
            self._weak_subscribers.setdefault(event_type, []).append(ref)
        else:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)

    def unsubscribe(
        self,
        event_type: type[E],
        handler: Callable[[E], None],
    ) -> None:
        """Unsubscribe from an event type (strong or weak)."""
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(handler)
            except ValueError:
                pass  # Handler not in list
        if event_type in self._weak_subscribers:
            self._weak_subscribers[event_type] = [
                ref for ref in self._weak_subscribers[event_type]
                if ref() is not None and ref() != handler
            ]

    def emit(self, event: Event) -> None:
        """Emit an event to all subscribers.

        Logs errors but doesn't let one subscriber's failure affect others.
        """
        event_type = type(event)

        for handler in list(self._subscribers.get(event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error for {event_type.__name__}: {e}")

        for ref in list(self._weak_subscribers.get(event_type, [])):
            handler = ref()
            if handler is None:
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error for {event_type.__name__}: {e}")

        # Drop dead refs (handlers may also have unsubscribed while dispatching)
        if event_type in self._weak_subscribers:
            self._weak_subscribers[event_type] = [
                ref for ref in self._weak_subscribers[event_type] if ref() is not None
            ]

    def subscriber_count(self, event_type: type[Event]) -> int:
        """Get number of live subscribers for an event type."""
        strong = len(self._subscribers.get(event_type, []))
        weak = len([r for r in self._weak_subscribers.get(event_type, []) if r() is not None])
        return strong + weak

    def clear(self) -> None:
        """Clear all subscribers (for testing)."""
        self._subscribers.clear()
        self._weak_subscribers.clear()
