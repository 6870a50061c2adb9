"""Playback scheduler: plays a compiled script on the lamp.

At most one session runs at a time. A session renders frames on a fixed
cadence (or shows frame 0 once when the interval is zero) until it is
stopped or its timeout elapses. Whatever ends it, the lamp is powered off
before the scheduler reports idle again.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from lampmatrix.core.errors import AlreadyRunning, DeviceLinkError, NotRunning
from lampmatrix.core.events import Event, EventBus, EventType
from lampmatrix.core.state import PlaybackState, StateMachine
from lampmatrix.hardware.base import DeviceLink
from lampmatrix.script.compiler import Script

logger = logging.getLogger(__name__)

_END_REASONS = {
    PlaybackState.STOPPED: "stopped",
    PlaybackState.TIMED_OUT: "timed_out",
    PlaybackState.COMPLETED: "completed",
}


@dataclass
class PlaybackSession:
    """One run of a script.

    Attributes:
        script: Frames being played
        interval: Seconds between frames, 0 for a static display
        timeout: Seconds until the session ends by itself, 0 for never
        cursor: Index of the next frame to render
        frames_rendered: Frames the lamp accepted
        render_errors: Frames the lamp did not accept
    """

    script: Script
    interval: float
    timeout: float
    started_at: float = 0.0
    cursor: int = 0
    frames_rendered: int = 0
    render_errors: int = 0
    end_state: Optional[PlaybackState] = None
    stop_requested: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    finished: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    task: Optional[asyncio.Task[None]] = field(default=None, repr=False)

    @property
    def is_static(self) -> bool:
        return self.interval == 0

    def time_left(self, now: float) -> Optional[float]:
        """Seconds until timeout, or None when there is no timeout."""
        if self.timeout <= 0:
            return None
        return max(0.0, self.started_at + self.timeout - now)


class PlaybackScheduler:
    """Owns the lamp while a script plays.

    Usage:
        scheduler = PlaybackScheduler(device)
        await scheduler.start(script, interval=0.5, timeout=30)
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        device: DeviceLink,
        event_bus: EventBus | None = None,
    ) -> None:
        self._device = device
        self.event_bus = event_bus or EventBus()
        self.state_machine = StateMachine()
        self._lock = asyncio.Lock()
        self._session: Optional[PlaybackSession] = None

    @property
    def device(self) -> DeviceLink:
        return self._device

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._session is not None

    @property
    def state(self) -> PlaybackState:
        return self.state_machine.state

    async def start(
        self,
        script: Script,
        interval: float = 0.5,
        timeout: float = 0.0,
    ) -> PlaybackSession:
        """Power the lamp on, enter direct mode and begin playback.

        Returns as soon as the playback task is launched.

        Args:
            script: Compiled script
            interval: Seconds between frames; 0 shows frame 0 until stopped
            timeout: Seconds before the session ends by itself; 0 = never

        Raises:
            AlreadyRunning: A session is active (it is left untouched)
            DeviceLinkError: The lamp rejected power on or direct mode
        """
        if interval < 0:
            raise ValueError(f"interval must be >= 0: {interval}")
        if timeout < 0:
            raise ValueError(f"timeout must be >= 0: {timeout}")

        async with self._lock:
            if self._session is not None:
                raise AlreadyRunning(self._session.script.name)

            try:
                await self._device.set_power(True)
            except DeviceLinkError as e:
                logger.error(f"Failed to turn on lamp: {e}")
                raise DeviceLinkError(f"failed to turn on lamp: {e}", stage="start") from e

            try:
                await self._device.enter_direct_mode()
            except DeviceLinkError as e:
                logger.error(f"Failed to set direct mode: {e}")
                raise DeviceLinkError(f"failed to set direct mode: {e}", stage="start") from e

            session = PlaybackSession(
                script=script,
                interval=interval,
                timeout=timeout,
                started_at=asyncio.get_running_loop().time(),
            )
            self._session = session
            self.state_machine.transition(
                PlaybackState.RUNNING,
                script_name=script.name,
                interval=interval,
                timeout=timeout,
                end_reason=None,
            )

            session.task = asyncio.create_task(
                self._run(session), name=f"playback-{script.name}"
            )

        await self._emit(EventType.PLAYBACK_STARTED, {
            "script": script.name,
            "frames": len(script),
            "interval": interval,
            "timeout": timeout,
        })
        logger.info(
            f"Playing {script.name}: {len(script)} frame(s), "
            f"interval {interval:g}s, timeout {timeout:g}s"
        )
        return session

    async def stop(self) -> PlaybackState:
        """Signal the active session to end and wait until it has.

        Returns:
            The state the session ended in

        Raises:
            NotRunning: No session is active
        """
        async with self._lock:
            session = self._session
            if session is None:
                raise NotRunning()
            session.stop_requested.set()

        await session.finished.wait()
        return session.end_state

    async def wait(self) -> Optional[PlaybackState]:
        """Wait for the active session (if any) to end on its own."""
        session = self._session
        if session is None:
            return None
        await session.finished.wait()
        return session.end_state

    async def close(self) -> None:
        """Stop any active session and release the device link."""
        if self._session is not None:
            try:
                await self.stop()
            except NotRunning:
                pass
        await self._device.close()

    def status(self) -> dict[str, Any]:
        """Snapshot for front ends."""
        session = self._session
        return {
            "running": session is not None,
            "state": self.state.name.lower(),
            "script": session.script.name if session else None,
            "interval_ms": int(round(session.interval * 1000)) if session else None,
            "timeout_s": session.timeout if session else None,
            "frame": session.cursor if session else None,
            "frames_rendered": session.frames_rendered if session else None,
        }

    # Playback loop

    async def _run(self, session: PlaybackSession) -> None:
        end_state = PlaybackState.STOPPED
        try:
            if session.is_static:
                await self._render(session, 0)
                outcome = await self._wait(session, None)
                end_state = (
                    PlaybackState.COMPLETED
                    if outcome == PlaybackState.TIMED_OUT
                    else PlaybackState.STOPPED
                )
            else:
                end_state = await self._animate(session)
        finally:
            await self._finish(session, end_state)

    async def _animate(self, session: PlaybackSession) -> PlaybackState:
        loop = asyncio.get_running_loop()
        frame_count = len(session.script.frames)
        next_tick = loop.time()

        while True:
            await self._render(session, session.cursor)
            session.cursor = (session.cursor + 1) % frame_count

            # Missed ticks are dropped, not replayed
            now = loop.time()
            next_tick += session.interval
            while next_tick < now:
                next_tick += session.interval

            outcome = await self._wait(session, next_tick - now)
            if outcome is not None:
                return outcome

    async def _wait(
        self,
        session: PlaybackSession,
        delay: Optional[float],
    ) -> Optional[PlaybackState]:
        """Race the next tick against stop and timeout.

        Returns None when the tick wins, otherwise the terminal state.
        """
        remaining = session.time_left(asyncio.get_running_loop().time())
        limits = [d for d in (delay, remaining) if d is not None]

        try:
            if limits:
                await asyncio.wait_for(session.stop_requested.wait(), timeout=min(limits))
            else:
                await session.stop_requested.wait()
        except asyncio.TimeoutError:
            if remaining is not None and (delay is None or remaining <= delay):
                return PlaybackState.TIMED_OUT
            return None

        return PlaybackState.STOPPED

    async def _render(self, session: PlaybackSession, index: int) -> None:
        frame = session.script.frames[index]
        try:
            await self._device.send_frame(frame.to_wire())
        except DeviceLinkError as e:
            e.stage = "render"
            session.render_errors += 1
            logger.warning(f"Error setting matrix (frame {index}): {e}")
            await self._emit(EventType.RENDER_ERROR, {
                "script": session.script.name,
                "index": index,
                "stage": "render",
                "error": str(e),
            })
            return

        session.frames_rendered += 1
        logger.debug(f"Rendered frame {index} of {session.script.name}")
        await self._emit(EventType.FRAME_RENDERED, {
            "script": session.script.name,
            "index": index,
        })

    async def _finish(self, session: PlaybackSession, end_state: PlaybackState) -> None:
        try:
            try:
                await self._device.set_power(False)
            except DeviceLinkError as e:
                e.stage = "stop"
                logger.error(f"Failed to turn off lamp: {e}")
                await self._emit(EventType.POWER_OFF_ERROR, {
                    "script": session.script.name,
                    "stage": "stop",
                    "error": str(e),
                })

            async with self._lock:
                session.end_state = end_state
                self._session = None
                self.state_machine.transition(end_state, end_reason=_END_REASONS[end_state])
                self.state_machine.transition(PlaybackState.IDLE)

            logger.info(f"Script {session.script.name} {_END_REASONS[end_state]}, lamp off")
            await self._emit(EventType.PLAYBACK_ENDED, {
                "script": session.script.name,
                "reason": _END_REASONS[end_state],
                "frames_rendered": session.frames_rendered,
            })
        finally:
            if session.end_state is None:
                session.end_state = end_state
            if self._session is session:
                self._session = None
            if not self.state_machine.is_idle:
                self.state_machine.reset()
            session.finished.set()

    async def _emit(self, event_type: EventType, data: dict[str, Any]) -> None:
        await self.event_bus.emit_async(Event(event_type, data=data, source="scheduler"))
