"""
Playback state machine.

States:
    IDLE: No session
    RUNNING: A session owns the lamp
    STOPPED: Session ended by Stop
    TIMED_OUT: Animated session ended by its timeout
    COMPLETED: Static display ended by its timeout

Every terminal state returns to IDLE once the lamp is powered off.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    """Scheduler states."""
    IDLE = auto()
    RUNNING = auto()
    STOPPED = auto()
    TIMED_OUT = auto()
    COMPLETED = auto()


@dataclass
class StateContext:
    """Details of the current or most recent session."""
    script_name: str | None = None
    interval: float = 0.0
    timeout: float = 0.0
    end_reason: str | None = None


Listener = Callable[[PlaybackState, PlaybackState, StateContext], None]


class StateMachine:
    """
    Tracks playback state and validates transitions.

    Listeners are notified after each successful transition.
    """

    VALID_TRANSITIONS: list[tuple[PlaybackState, PlaybackState]] = [
        (PlaybackState.IDLE, PlaybackState.RUNNING),

        (PlaybackState.RUNNING, PlaybackState.STOPPED),
        (PlaybackState.RUNNING, PlaybackState.TIMED_OUT),
        (PlaybackState.RUNNING, PlaybackState.COMPLETED),

        (PlaybackState.STOPPED, PlaybackState.IDLE),
        (PlaybackState.TIMED_OUT, PlaybackState.IDLE),
        (PlaybackState.COMPLETED, PlaybackState.IDLE),
    ]

    def __init__(self) -> None:
        self._state = PlaybackState.IDLE
        self._context = StateContext()
        self._listeners: list[Listener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def context(self) -> StateContext:
        return self._context

    @property
    def is_idle(self) -> bool:
        return self._state == PlaybackState.IDLE

    def can_transition(self, to_state: PlaybackState) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: PlaybackState, **context_updates: object) -> bool:
        """
        Attempt to transition to a new state.

        Args:
            to_state: Target state
            **context_updates: StateContext fields to update

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_state):
            logger.warning(
                f"Invalid transition: {self._state.name} -> {to_state.name}"
            )
            return False

        old_state = self._state
        self._state = to_state

        for key, value in context_updates.items():
            if hasattr(self._context, key):
                setattr(self._context, key, value)

        logger.debug(f"State transition: {old_state.name} -> {to_state.name}")

        for listener in self._listeners:
            try:
                listener(old_state, to_state, self._context)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")

        return True

    def reset(self) -> None:
        """Force the machine back to IDLE, keeping the context."""
        old_state = self._state
        self._state = PlaybackState.IDLE

        for listener in self._listeners:
            try:
                listener(old_state, PlaybackState.IDLE, self._context)
            except Exception as e:
                logger.error(f"Error in state listener during reset: {e}")

        logger.info("StateMachine reset to IDLE")

    def add_listener(self, callback: Listener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)
