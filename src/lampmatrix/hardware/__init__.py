"""Device links for lampmatrix."""

from lampmatrix.hardware.base import DeviceLink
from lampmatrix.hardware.yeelight import YeelightLink, MockDeviceLink, create_device_link

__all__ = [
    "DeviceLink",
    "YeelightLink",
    "MockDeviceLink",
    "create_device_link",
]
