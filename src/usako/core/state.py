"""
Navigation state machine.

States:
    TITLE: Picking a game or the ranking
    FLAPPY: The flappy simulation owns the screen
    RUNNER: The runner simulation owns the screen
    RANKING: Both leaderboards side by side

Every screen is entered from TITLE and leaves back to TITLE.
"""

from enum import Enum, auto
from typing import Callable, Optional
import logging

from .events import Event, EventBus, EventType

logger = logging.getLogger(__name__)


class State(Enum):
    TITLE = auto()
    FLAPPY = auto()
    RUNNER = auto()
    RANKING = auto()


Listener = Callable[[State, State], None]


class StateMachine:
    """
    Current screen plus the table of allowed moves.

    Listeners receive ``(old, new)`` after each accepted transition; with an
    event bus attached a ``STATE_CHANGED`` event is published as well.
    """

    TRANSITIONS: dict[State, frozenset[State]] = {
        State.TITLE: frozenset({State.FLAPPY, State.RUNNER, State.RANKING}),
        State.FLAPPY: frozenset({State.TITLE}),
        State.RUNNER: frozenset({State.TITLE}),
        State.RANKING: frozenset({State.TITLE}),
    }

    def __init__(self, initial_state: State = State.TITLE, event_bus: Optional[EventBus] = None) -> None:
        self._state = initial_state
        self._listeners: list[Listener] = []
        self.event_bus = event_bus
        logger.info(f"Navigation starts at {initial_state.name}")

    @property
    def state(self) -> State:
        return self._state

    def can_transition(self, to_state: State) -> bool:
        return to_state in self.TRANSITIONS[self._state]

    def transition(self, to_state: State) -> bool:
        """
        Move to ``to_state`` if the table allows it.

        Returns:
            False (and a warning) for a refused move
        """
        if not self.can_transition(to_state):
            logger.warning(f"Refused transition {self._state.name} -> {to_state.name}")
            return False
        self._move(to_state)
        return True

    def reset(self) -> None:
        """Jump straight back to TITLE, bypassing the table."""
        self._move(State.TITLE)

    def _move(self, to_state: State) -> None:
        old, self._state = self._state, to_state
        logger.info(f"{old.name} -> {to_state.name}")

        for listener in list(self._listeners):
            try:
                listener(old, to_state)
            except Exception as e:
                logger.error(f"State listener failed on {old.name} -> {to_state.name}: {e}")

        if self.event_bus is not None:
            self.event_bus.emit(Event(
                EventType.STATE_CHANGED,
                data={"from": old.name, "to": to_state.name},
                source="navigation",
            ))

    def add_listener(self, callback: Listener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)
