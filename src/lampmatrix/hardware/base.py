"""
Abstract device link.

This is the contract the playback scheduler relies on. Both the network
driver and the mock link implement it.
"""

from abc import ABC, abstractmethod


class DeviceLink(ABC):
    """Command channel to a lamp with a 5x5 LED matrix.

    Each coroutine raises DeviceLinkError when the command cannot be
    delivered.
    """

    @abstractmethod
    async def send_frame(self, wire: str) -> None:
        """
        Display one frame.

        Args:
            wire: 100-character wire encoding of a 5x5 matrix
        """
        ...

    @abstractmethod
    async def set_power(self, on: bool) -> None:
        """Turn the lamp on or off."""
        ...

    @abstractmethod
    async def enter_direct_mode(self) -> None:
        """Switch the lamp to direct per-cell control."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None
