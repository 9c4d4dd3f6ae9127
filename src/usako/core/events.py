"""
Event bus for the arcade.

Input events flow from the window into the active simulation; game events
(start, score, milestone, game over) flow back out to the UI. Delivery is
synchronous so an input is applied before the next frame is drawn.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
import logging
import time

logger = logging.getLogger(__name__)


class EventType(Enum):
    # Input (from the window)
    JUMP_OR_SELECT = auto()
    CROUCH_START = auto()
    CROUCH_END = auto()
    RESTART = auto()
    EXIT_TO_MENU = auto()

    # Game (from the simulations and the manager)
    GAME_STARTED = auto()
    GAME_OVER = auto()
    SCORE_CHANGED = auto()
    MILESTONE = auto()
    SCORE_SUBMITTED = auto()
    SCORES_CLEARED = auto()

    # Navigation
    STATE_CHANGED = auto()


INPUT_EVENTS = frozenset({
    EventType.JUMP_OR_SELECT,
    EventType.CROUCH_START,
    EventType.CROUCH_END,
    EventType.RESTART,
    EventType.EXIT_TO_MENU,
})


@dataclass
class Event:
    """
    A single published event.

    Attributes:
        type: What happened
        data: Payload, e.g. ``{"mode": "runner", "score": 100}``
        source: Who published it ("keyboard", "mode_flappy", ...)
        timestamp: Wall-clock creation time
    """
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub shared by the window, the manager and the modes.

    Handlers run on the publishing thread in subscription order, typed
    handlers before catch-all ones. A handler that raises is logged and
    skipped.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._typed: defaultdict[EventType, list[Handler]] = defaultdict(list)
        self._catch_all: list[Handler] = []
        self._history: deque[Event] = deque(maxlen=history_limit)

    @staticmethod
    def _remover(handlers: list[Handler], handler: Handler) -> Callable[[], None]:
        def unsubscribe() -> None:
            try:
                handlers.remove(handler)
            except ValueError:
                pass

        return unsubscribe

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """
        Call ``handler`` for every event of ``event_type``.

        Returns:
            Function that undoes the subscription
        """
        self._typed[event_type].append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {event_type.name}")
        return self._remover(self._typed[event_type], handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Call ``handler`` for every event; returns the unsubscribe function."""
        self._catch_all.append(handler)
        return self._remover(self._catch_all, handler)

    def emit(self, event: Event) -> None:
        self._history.append(event)

        # Copy so handlers may unsubscribe while being called
        for handler in [*self._typed.get(event.type, ()), *self._catch_all]:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler failed on {event.type.name}: {e}")

    def get_history(self, event_type: EventType | None = None, limit: int = 10) -> list[Event]:
        """Most recent events, oldest first, optionally of one type."""
        events = [e for e in self._history if event_type is None or e.type == event_type]
        return events[-limit:]

    def clear_history(self) -> None:
        self._history.clear()


def jump_event(source: str = "keyboard") -> Event:
    return Event(EventType.JUMP_OR_SELECT, source=source)


def crouch_event(pressed: bool, source: str = "keyboard") -> Event:
    """Crouch key went down (``pressed``) or up."""
    return Event(EventType.CROUCH_START if pressed else EventType.CROUCH_END, source=source)


def restart_event(source: str = "keyboard") -> Event:
    return Event(EventType.RESTART, source=source)


def exit_event(source: str = "keyboard") -> Event:
    return Event(EventType.EXIT_TO_MENU, source=source)
