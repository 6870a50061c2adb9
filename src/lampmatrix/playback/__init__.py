"""Playback of compiled scripts."""

from lampmatrix.playback.scheduler import PlaybackScheduler, PlaybackSession

__all__ = ["PlaybackScheduler", "PlaybackSession"]
