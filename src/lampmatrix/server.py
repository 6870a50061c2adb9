"""HTTP front end.

Routes:
    GET /yeelight                    script names, one per line
    GET /yeelight/status             scheduler status as JSON
    GET /yeelight/{name}/run         start (query: interval ms, timeout s)
    GET /yeelight/{name}/stop        stop the running script
"""

import logging
from typing import Optional

from aiohttp import web

from lampmatrix.core.errors import (
    AlreadyRunning,
    DeviceLinkError,
    NotRunning,
    ParseError,
    ScriptNotFound,
)
from lampmatrix.playback.scheduler import PlaybackScheduler
from lampmatrix.script.library import ScriptLibrary

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 500
DEFAULT_TIMEOUT_S = 0


def _non_negative_int(request: web.Request, name: str, default: int) -> int:
    raw = request.query.get(name, "")
    if raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise web.HTTPBadRequest(text=f"Invalid {name}: {raw}\n") from None
    if value < 0:
        raise web.HTTPBadRequest(text=f"Invalid {name}: {raw}\n")
    return value


class ControlServer:
    """HTTP server mapping requests onto the playback scheduler."""

    def __init__(
        self,
        scheduler: PlaybackScheduler,
        library: ScriptLibrary,
        host: str = "0.0.0.0",
        port: int = 3048,
        default_interval_ms: int = DEFAULT_INTERVAL_MS,
    ) -> None:
        self.scheduler = scheduler
        self.library = library
        self.host = host
        self.port = port
        self.default_interval_ms = default_interval_ms
        self.app = web.Application()
        self._setup_routes()
        self._runner: Optional[web.AppRunner] = None

    def _setup_routes(self) -> None:
        """Setup HTTP routes."""
        self.app.router.add_get("/yeelight", self._handle_list)
        self.app.router.add_get("/yeelight/status", self._handle_status)
        self.app.router.add_get("/yeelight/{name}/{action}", self._handle_action)

    async def _handle_list(self, request: web.Request) -> web.Response:
        """Return available script names."""
        try:
            names = self.library.names()
        except ScriptNotFound as e:
            return web.Response(text=f"Failed to read scripts directory: {e}\n", status=500)
        return web.Response(text="\n".join(names) + "\n")

    async def _handle_status(self, request: web.Request) -> web.Response:
        return web.json_response(self.scheduler.status())

    async def _handle_action(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        action = request.match_info["action"]

        if action == "run":
            return await self._handle_run(request, name)
        if action == "stop":
            return await self._handle_stop(name)
        return web.Response(text="Unknown action\n", status=404)

    async def _handle_run(self, request: web.Request, name: str) -> web.Response:
        interval_ms = _non_negative_int(request, "interval", self.default_interval_ms)
        timeout_s = _non_negative_int(request, "timeout", DEFAULT_TIMEOUT_S)

        try:
            script = self.library.load(name)
        except ScriptNotFound:
            return web.Response(text=f"Script not found: {name}\n", status=404)
        except ParseError as e:
            return web.Response(text=f"Failed to compile script: {e}\n", status=422)

        # A new run replaces whatever is playing
        try:
            await self.scheduler.stop()
        except NotRunning:
            pass

        try:
            await self.scheduler.start(
                script,
                interval=interval_ms / 1000,
                timeout=float(timeout_s),
            )
        except AlreadyRunning as e:
            # Another run request started a script first
            return web.Response(text=f"Failed to run script: {e}\n", status=409)
        except DeviceLinkError as e:
            return web.Response(text=f"Failed to run script: {e}\n", status=502)

        return web.Response(
            text=f"Script {name} started (interval: {interval_ms}ms, timeout: {timeout_s}s)\n"
        )

    async def _handle_stop(self, name: str) -> web.Response:
        try:
            await self.scheduler.stop()
        except NotRunning as e:
            return web.Response(text=f"Failed to stop script: {e}\n", status=409)
        return web.Response(text=f"Script {name} stopped\n")

    async def start(self) -> None:
        """Start the web server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Starting HTTP server on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the web server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("HTTP server stopped")
