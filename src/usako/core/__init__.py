"""Core framework components for the arcade."""

from .state import State, StateMachine
from .events import EventBus, Event, EventType
from .physics import Box

__all__ = ["State", "StateMachine", "EventBus", "Event", "EventType", "Box"]
