"""Yeelight lamp driver for lampmatrix.

Speaks the lamp's LAN control protocol: one JSON object per line over TCP.

    -> {"id": 1, "method": "set_power", "params": ["on", "smooth", 200]}\r\n
    <- {"id": 1, "result": ["ok"]}\r\n

A fresh connection is opened for every command. If the lamp does not
answer within the response timeout the command is treated as delivered
and an empty Response is returned; the lamp frequently stays silent for
`update_leds`.

Override the address with env var: YEELIGHT_ADDR=192.168.1.20:55443
"""

import asyncio
import json
import logging
import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar, Optional

from lampmatrix.core.errors import DeviceLinkError
from lampmatrix.graphics.color import Color
from lampmatrix.hardware.base import DeviceLink

logger = logging.getLogger(__name__)

DEFAULT_PORT = 55443
DEFAULT_CONNECT_TIMEOUT = 3.0
DEFAULT_RESPONSE_TIMEOUT = 0.5
DEFAULT_SMOOTH_MS = 200


# =============================================================================
# COMMAND PARAMETERS
# =============================================================================

class FlowMode(IntEnum):
    """Kind of a single color flow state."""
    COLOR = 1
    TEMPERATURE = 2
    SLEEP = 7


class FlowAction(IntEnum):
    """What the lamp does once a color flow finishes."""
    RECOVER = 0  # Back to the state before the flow
    STAY = 1     # Keep the last flow state
    OFF = 2      # Turn off


@dataclass(frozen=True)
class FlowState:
    """One step of a color flow."""
    duration: int  # ms, lamp minimum is 50
    mode: FlowMode
    value: int
    brightness: int

    def expression(self) -> str:
        return f"{self.duration},{int(self.mode)},{self.value},{self.brightness}"


class CommandParams:
    """Parameters for one command kind; `method` names the RPC."""

    method: ClassVar[str] = ""

    def params(self) -> list[Any]:
        return []


@dataclass(frozen=True)
class SetPower(CommandParams):
    method: ClassVar[str] = "set_power"
    on: bool
    smooth: int = DEFAULT_SMOOTH_MS

    def params(self) -> list[Any]:
        return ["on" if self.on else "off", "smooth", self.smooth]


@dataclass(frozen=True)
class UpdateLeds(CommandParams):
    method: ClassVar[str] = "update_leds"
    wire: str

    def params(self) -> list[Any]:
        return [self.wire]


@dataclass(frozen=True)
class ActivateFxMode(CommandParams):
    method: ClassVar[str] = "activate_fx_mode"
    mode: str = "direct"

    def params(self) -> list[Any]:
        return [{"mode": self.mode}]


@dataclass(frozen=True)
class SetRgb(CommandParams):
    method: ClassVar[str] = "set_rgb"
    value: int
    smooth: int = DEFAULT_SMOOTH_MS

    def params(self) -> list[Any]:
        return [self.value, "smooth", self.smooth]


@dataclass(frozen=True)
class SetBright(CommandParams):
    method: ClassVar[str] = "set_bright"
    value: int
    smooth: int = DEFAULT_SMOOTH_MS

    def params(self) -> list[Any]:
        return [self.value, "smooth", self.smooth]


@dataclass(frozen=True)
class SetColorTemperature(CommandParams):
    method: ClassVar[str] = "set_ct_abx"
    value: int
    smooth: int = DEFAULT_SMOOTH_MS

    def params(self) -> list[Any]:
        return [self.value, "smooth", self.smooth]


@dataclass(frozen=True)
class Toggle(CommandParams):
    method: ClassVar[str] = "toggle"


@dataclass(frozen=True)
class GetProp(CommandParams):
    method: ClassVar[str] = "get_prop"
    names: tuple[str, ...]

    def params(self) -> list[Any]:
        return list(self.names)


@dataclass(frozen=True)
class CronAdd(CommandParams):
    """Power off after `minutes`."""
    method: ClassVar[str] = "cron_add"
    minutes: int

    def params(self) -> list[Any]:
        return [0, self.minutes]


@dataclass(frozen=True)
class StartColorFlow(CommandParams):
    method: ClassVar[str] = "start_cf"
    count: int  # 0 = forever
    action: FlowAction
    states: tuple[FlowState, ...]

    def params(self) -> list[Any]:
        expression = ",".join(s.expression() for s in self.states)
        return [self.count, int(self.action), expression]


@dataclass(frozen=True)
class StopColorFlow(CommandParams):
    method: ClassVar[str] = "stop_cf"


@dataclass(frozen=True)
class SetName(CommandParams):
    method: ClassVar[str] = "set_name"
    name: str

    def params(self) -> list[Any]:
        return [self.name]


def _generate_id() -> int:
    return random.randint(1, 2 ** 31 - 1)


@dataclass
class Command:
    """A request with its generated identifier."""
    params: CommandParams
    id: int = field(default_factory=_generate_id)

    def to_json(self) -> str:
        return json.dumps({
            "id": self.id,
            "method": self.params.method,
            "params": self.params.params(),
        }, separators=(",", ":"))


@dataclass
class Response:
    """A lamp reply. Empty when the lamp did not answer in time."""
    id: int = 0
    result: Any = None
    error: Any = None

    @classmethod
    def from_json(cls, data: str) -> "Response":
        payload = json.loads(data)
        if not isinstance(payload, dict):
            raise ValueError(f"response is not an object: {data!r}")
        return cls(
            id=payload.get("id", 0),
            result=payload.get("result"),
            error=payload.get("error"),
        )

    @property
    def is_empty(self) -> bool:
        return self.result is None and self.error is None


def parse_address(address: str) -> tuple[str, int]:
    """Split `host[:port]`."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, DEFAULT_PORT
    try:
        return host, int(port)
    except ValueError:
        raise DeviceLinkError(f"invalid lamp address: {address!r}") from None


# =============================================================================
# NETWORK LINK
# =============================================================================

class YeelightLink(DeviceLink):
    """Driver for a Yeelight lamp with a 5x5 matrix (e.g. Cube Matrix).

    Usage:
        link = YeelightLink("192.168.1.20:55443")
        await link.set_power(True)
        await link.enter_direct_mode()
        await link.send_frame(matrix.to_wire())
    """

    def __init__(
        self,
        address: str,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        smooth: int = DEFAULT_SMOOTH_MS,
    ) -> None:
        self.address = address
        self._host, self._port = parse_address(address)
        self.connect_timeout = connect_timeout
        self.response_timeout = response_timeout
        self.smooth = smooth

    async def send_command(self, params: CommandParams) -> Response:
        """Send one command and wait briefly for its reply.

        Raises:
            DeviceLinkError: Connect, write or read failure, or an error reply
        """
        command = Command(params=params)
        payload = command.to_json()

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError:
            raise DeviceLinkError(f"timed out connecting to {self.address}") from None
        except OSError as e:
            raise DeviceLinkError(f"failed to connect to {self.address}: {e}") from e

        try:
            logger.debug(f"-> {payload}")
            writer.write(payload.encode("utf-8") + b"\r\n")
            await writer.drain()

            try:
                line = await asyncio.wait_for(reader.readline(), timeout=self.response_timeout)
            except asyncio.TimeoutError:
                logger.debug(f"No reply to {params.method} within {self.response_timeout}s")
                return Response(id=command.id)
            except ValueError as e:
                # Reply longer than the stream buffer limit
                raise DeviceLinkError(f"oversized reply to {params.method}: {e}") from e

            if not line:
                raise DeviceLinkError(f"connection closed by {self.address} before reply")

            text = line.decode("utf-8", errors="replace").strip()
            logger.debug(f"<- {text}")
            try:
                response = Response.from_json(text)
            except ValueError as e:
                logger.warning(f"Unparseable reply to {params.method}: {e}")
                return Response(id=command.id)

        except OSError as e:
            raise DeviceLinkError(f"{params.method} failed: {e}") from e

        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

        if response.error is not None:
            raise DeviceLinkError(f"{params.method} rejected by lamp: {response.error}")
        return response

    # Contract

    async def send_frame(self, wire: str) -> None:
        await self.send_command(UpdateLeds(wire))

    async def set_power(self, on: bool) -> None:
        await self.send_command(SetPower(on, smooth=self.smooth))

    async def enter_direct_mode(self) -> None:
        await self.send_command(ActivateFxMode("direct"))

    # Wrapper methods

    async def set_rgb(self, color: Color) -> None:
        await self.send_command(SetRgb(color.value, smooth=self.smooth))

    async def set_bright(self, value: int) -> None:
        await self.send_command(SetBright(value, smooth=self.smooth))

    async def set_color_temperature(self, kelvin: int) -> None:
        await self.send_command(SetColorTemperature(kelvin, smooth=self.smooth))

    async def toggle(self) -> None:
        await self.send_command(Toggle())

    async def get_properties(self, *names: str) -> list[Any]:
        """Query properties; empty list if the lamp stayed silent."""
        response = await self.send_command(GetProp(tuple(names)))
        return list(response.result or [])

    async def _get_property(self, name: str) -> Optional[str]:
        values = await self.get_properties(name)
        return str(values[0]) if values else None

    async def is_on(self) -> bool:
        return await self._get_property("power") == "on"

    async def get_bright(self) -> Optional[int]:
        value = await self._get_property("bright")
        return int(value) if value else None

    async def get_hex_color(self) -> Optional[str]:
        value = await self._get_property("rgb")
        return Color(int(value)).to_hex() if value else None

    async def sleep_timer(self, minutes: int) -> None:
        await self.send_command(CronAdd(minutes))

    async def start_color_flow(
        self,
        states: list[FlowState],
        count: int = 0,
        action: FlowAction = FlowAction.RECOVER,
    ) -> None:
        await self.send_command(StartColorFlow(count, action, tuple(states)))

    async def stop_color_flow(self) -> None:
        await self.send_command(StopColorFlow())

    async def set_name(self, name: str) -> None:
        await self.send_command(SetName(name))


# =============================================================================
# MOCK LINK
# =============================================================================

class MockDeviceLink(DeviceLink):
    """In-memory lamp for tests and running without hardware.

    Records every call. Operations named in `fail_on` ("send_frame",
    "set_power", "enter_direct_mode") raise DeviceLinkError.
    """

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on: set[str] = set(fail_on or ())
        self.frames: list[str] = []
        self.power_calls: list[bool] = []
        self.direct_mode_calls = 0
        self.calls: list[str] = []
        self.is_on = False
        logger.info("Mock device link initialized")

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise DeviceLinkError(f"mock {operation} failure")

    async def send_frame(self, wire: str) -> None:
        self._record("send_frame")
        self.frames.append(wire)
        logger.debug(f"Mock frame: {wire}")

    async def set_power(self, on: bool) -> None:
        self._record("set_power")
        self.power_calls.append(on)
        self.is_on = on

    async def enter_direct_mode(self) -> None:
        self._record("enter_direct_mode")
        self.direct_mode_calls += 1


def create_device_link(
    address: str = "",
    mock: bool = False,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
    smooth: int = DEFAULT_SMOOTH_MS,
) -> DeviceLink:
    """Factory function to create the appropriate device link.

    Args:
        address: Lamp `host[:port]`
        mock: Force mock mode

    Returns:
        DeviceLink instance
    """
    if mock:
        return MockDeviceLink()

    if not address:
        raise DeviceLinkError("lamp address is not set (YEELIGHT_ADDR)")

    return YeelightLink(
        address,
        connect_timeout=connect_timeout,
        response_timeout=response_timeout,
        smooth=smooth,
    )
