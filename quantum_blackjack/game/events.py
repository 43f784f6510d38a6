"""Game events for the presentation layer."""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 500


class EventType(Enum):
    """Types of game events."""

    # Round flow
    ROUND_STATE_CHANGED = auto()
    ROUND_RESULT = auto()
    BET_PLACED = auto()
    BANKROLL_CHANGED = auto()

    # Cards
    CARD_DEALT = auto()
    DEALER_REVEALS = auto()
    DECK_SHUFFLED = auto()
    HAND_VALUE_CHANGED = auto()

    # Quantum operations
    CARD_SUPERPOSED = auto()
    CARD_COLLAPSED = auto()
    CARDS_ENTANGLED = auto()
    ENTANGLEMENT_PENDING = auto()
    ENTANGLEMENT_CANCELLED = auto()
    CHIP_COUNT_CHANGED = auto()

    # Feedback
    NOTIFICATION = auto()
    INVALID_ACTION = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable game event.

    Events are the only channel from the engine to renderers, audio and UI.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Event emitter with a pending presentation queue.

    Handlers are called synchronously. Every event is also queued until the
    renderer drains it, so animations can be played in order after the
    engine has already finished the transition. Both the queue and the
    history are bounded; once full, the oldest events are dropped.

    A handler that raises is logged and skipped; it never interrupts the
    engine or the remaining handlers.
    """

    def __init__(
        self,
        max_pending: int = DEFAULT_BUFFER_SIZE,
        max_history: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        """
        Initialize the event emitter.

        Args:
            max_pending: Most undrained events kept for the renderer
            max_history: Most events kept in the history
        """
        if max_pending < 1 or max_history < 1:
            raise ValueError("Event buffers must hold at least one event")
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._event_history: deque[GameEvent] = deque(maxlen=max_history)
        self._pending: deque[GameEvent] = deque(maxlen=max_pending)

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Unsubscribe a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """Record, queue and dispatch an event."""
        self._event_history.append(event)
        self._pending.append(event)
        logger.debug("Event %s", event)

        handlers = self._handlers.get(event.event_type, []) + self._handlers.get(None, [])
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed on %s", handler, event.event_type.name)

    def emit_new(
        self,
        event_type: EventType,
        **data: Any,
    ) -> GameEvent:
        """
        Create and emit a new event.

        Args:
            event_type: Type of event
            **data: Event data

        Returns:
            The created event
        """
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    def drain_pending(self, limit: int | None = None) -> list[GameEvent]:
        """
        Take queued events in emission order.

        Args:
            limit: Maximum number of events to take, or None for all
        """
        count = len(self._pending) if limit is None else min(limit, len(self._pending))
        return [self._pending.popleft() for _ in range(count)]

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def history(self) -> list[GameEvent]:
        """Return the event history."""
        return list(self._event_history)

    def clear_history(self) -> None:
        """Clear the event history."""
        self._event_history.clear()
