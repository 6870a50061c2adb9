"""Tests for the Yeelight driver against a local fake lamp."""

import asyncio
import json

import pytest

from lampmatrix.core.errors import DeviceLinkError
from lampmatrix.hardware.yeelight import (
    DEFAULT_PORT,
    Command,
    CronAdd,
    FlowAction,
    FlowMode,
    FlowState,
    MockDeviceLink,
    Response,
    SetPower,
    StartColorFlow,
    YeelightLink,
    create_device_link,
    parse_address,
)


class FakeLamp:
    """TCP server that records requests and answers with `reply`.

    `reply` is a callable taking the request dict and returning a line to
    send back, or None to stay silent.
    """

    def __init__(self, reply=None):
        self.requests = []
        self.raw = []
        self.reply = reply or (lambda request: json.dumps({"id": request["id"], "result": ["ok"]}))
        self._server = None
        self.port = 0

    async def start(self):
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self):
        self._server.close()
        await self._server.wait_closed()

    async def _handle(self, reader, writer):
        line = await reader.readline()
        if line:
            self.raw.append(line)
            request = json.loads(line)
            self.requests.append(request)
            answer = self.reply(request)
            if answer is not None:
                writer.write(answer.encode() + b"\r\n")
                await writer.drain()
            else:
                await reader.read()
        writer.close()

    def link(self, **kwargs):
        kwargs.setdefault("response_timeout", 0.2)
        return YeelightLink(f"127.0.0.1:{self.port}", **kwargs)


@pytest.fixture
async def lamp():
    lamp = FakeLamp()
    await lamp.start()
    yield lamp
    await lamp.stop()


async def test_set_power_request(lamp):
    await lamp.link().set_power(True)

    assert lamp.raw[0].endswith(b"\r\n")
    request = lamp.requests[0]
    assert request["method"] == "set_power"
    assert request["params"] == ["on", "smooth", 200]
    assert isinstance(request["id"], int) and request["id"] > 0


async def test_power_off_uses_configured_smooth(lamp):
    await lamp.link(smooth=500).set_power(False)
    assert lamp.requests[0]["params"] == ["off", "smooth", 500]


async def test_send_frame_and_direct_mode(lamp):
    link = lamp.link()
    wire = "AAAA" * 25

    await link.enter_direct_mode()
    await link.send_frame(wire)

    assert lamp.requests[0]["method"] == "activate_fx_mode"
    assert lamp.requests[0]["params"] == [{"mode": "direct"}]
    assert lamp.requests[1]["method"] == "update_leds"
    assert lamp.requests[1]["params"] == [wire]


async def test_silent_lamp_is_not_an_error(lamp):
    lamp.reply = lambda request: None

    response = await lamp.link(response_timeout=0.05).send_command(SetPower(True))

    assert response.is_empty
    assert len(lamp.requests) == 1


async def test_error_reply_raises(lamp):
    lamp.reply = lambda request: json.dumps(
        {"id": request["id"], "error": {"code": -1, "message": "unsupported method"}}
    )

    with pytest.raises(DeviceLinkError) as exc:
        await lamp.link().send_frame("AAAA" * 25)

    assert "update_leds" in str(exc.value)


async def test_unparseable_reply_is_ignored(lamp):
    lamp.reply = lambda request: "not json"

    response = await lamp.link().send_command(SetPower(False))

    assert response.is_empty


async def test_property_queries(lamp):
    values = {"power": "on", "bright": "80", "rgb": str(0xFF8800)}
    lamp.reply = lambda request: json.dumps(
        {"id": request["id"], "result": [values[request["params"][0]]]}
    )
    link = lamp.link()

    assert await link.is_on() is True
    assert await link.get_bright() == 80
    assert await link.get_hex_color() == "ff8800"
    assert lamp.requests[0] == {"id": lamp.requests[0]["id"], "method": "get_prop", "params": ["power"]}


async def test_oversized_reply_raises_device_error(lamp):
    lamp.reply = lambda request: "x" * 70000

    with pytest.raises(DeviceLinkError) as exc:
        await lamp.link().send_frame("AAAA" * 25)

    assert "oversized" in str(exc.value)


async def test_connection_refused():
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()

    link = YeelightLink(f"127.0.0.1:{port}", connect_timeout=0.5)
    with pytest.raises(DeviceLinkError):
        await link.set_power(True)


class TestCommands:
    def test_json_is_compact(self):
        command = Command(SetPower(True, smooth=300), id=7)
        assert command.to_json() == '{"id":7,"method":"set_power","params":["on","smooth",300]}'

    def test_ids_are_positive(self):
        assert all(Command(SetPower(True)).id > 0 for _ in range(20))

    def test_cron_add(self):
        assert CronAdd(15).params() == [0, 15]

    def test_color_flow_expression(self):
        params = StartColorFlow(
            count=4,
            action=FlowAction.STAY,
            states=(
                FlowState(1000, FlowMode.COLOR, 0xFF0000, 100),
                FlowState(500, FlowMode.SLEEP, 0, 0),
            ),
        )
        assert params.method == "start_cf"
        assert params.params() == [4, 1, "1000,1,16711680,100,500,7,0,0"]

    def test_response_from_json(self):
        response = Response.from_json('{"id": 3, "result": ["ok"]}')
        assert response.id == 3
        assert response.result == ["ok"]
        assert not response.is_empty


class TestAddress:
    def test_host_and_port(self):
        assert parse_address("192.168.1.20:1234") == ("192.168.1.20", 1234)

    def test_default_port(self):
        assert parse_address("192.168.1.20") == ("192.168.1.20", DEFAULT_PORT)

    def test_invalid_port(self):
        with pytest.raises(DeviceLinkError):
            parse_address("lamp:abc")


class TestFactory:
    def test_mock(self):
        assert isinstance(create_device_link(mock=True), MockDeviceLink)

    def test_network(self):
        link = create_device_link("10.0.0.5", response_timeout=1.5)
        assert isinstance(link, YeelightLink)
        assert link.response_timeout == 1.5

    def test_missing_address(self):
        with pytest.raises(DeviceLinkError):
            create_device_link("")
