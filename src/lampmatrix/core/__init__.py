"""Core framework components for lampmatrix."""

from .state import PlaybackState, StateMachine
from .events import EventBus, Event, EventType

__all__ = ["PlaybackState", "StateMachine", "EventBus", "Event", "EventType"]
