"""Shared fixtures."""

import pytest

from lampmatrix.core.events import EventBus
from lampmatrix.hardware.yeelight import MockDeviceLink
from lampmatrix.playback.scheduler import PlaybackScheduler
from lampmatrix.script.compiler import compile_script

THREE_FRAMES = """\
FILL red

FILL green

FILL blue
"""


@pytest.fixture
def device():
    return MockDeviceLink()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def scheduler(device, event_bus):
    return PlaybackScheduler(device, event_bus=event_bus)


@pytest.fixture
def three_frames():
    return compile_script(THREE_FRAMES, name="rgb")
