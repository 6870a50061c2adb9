"""
Main entry point for lampmatrix.

Runs a single script from the command line, or serves the HTTP front end
when --http is given or YEELIGHT_HTTP is set.
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from lampmatrix.config.settings import Settings, get_settings
from lampmatrix.core.errors import LampMatrixError, NotRunning
from lampmatrix.hardware.yeelight import create_device_link
from lampmatrix.playback.scheduler import PlaybackScheduler
from lampmatrix.script.library import ScriptLibrary

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lampmatrix",
        description="Play 5x5 matrix animation scripts on a Yeelight lamp.",
        epilog=(
            "Environment variables:\n"
            "  YEELIGHT_ADDR     lamp address host:port (required unless --mock)\n"
            "  YEELIGHT_HTTP     HTTP server address (default :3048); "
            "setting it starts HTTP mode\n"
            "  YEELIGHT_SCRIPTS  path to scripts folder (default ./scripts)"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--http", action="store_true", help="Run in HTTP server mode")
    parser.add_argument("--mock", action="store_true", help="Use a mock lamp instead of the network")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument(
        "--preview",
        type=Path,
        metavar="OUT",
        help="Write the script's frames to an image (.gif animates) and exit",
    )
    parser.add_argument("script", nargs="?", help="Script name (with or without .txt)")
    parser.add_argument("interval_ms", nargs="?", type=int, help="Milliseconds between frames (0 = static)")
    parser.add_argument("timeout_s", nargs="?", type=int, default=0, help="Seconds to play (0 = until stopped)")
    return parser


def _make_scheduler(settings: Settings, mock: bool) -> PlaybackScheduler:
    device = create_device_link(
        settings.addr,
        mock=mock,
        connect_timeout=settings.connect_timeout,
        response_timeout=settings.response_timeout,
        smooth=settings.smooth,
    )
    return PlaybackScheduler(device)


async def run_cli(
    settings: Settings,
    script_name: str,
    interval_ms: int,
    timeout_s: int,
    mock: bool,
) -> None:
    """Play one script until Enter is pressed or the timeout passes."""
    library = ScriptLibrary(settings.scripts)
    script = library.load(script_name)
    scheduler = _make_scheduler(settings, mock)

    print(f"Running script: {script.name} (interval: {interval_ms}ms, timeout: {timeout_s}s)")
    await scheduler.start(script, interval=interval_ms / 1000, timeout=float(timeout_s))

    try:
        if timeout_s == 0:
            print("Press Enter to stop the script...")
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, sys.stdin.readline)
            try:
                await scheduler.stop()
            except NotRunning:
                pass
        else:
            await scheduler.wait()
    finally:
        await scheduler.close()

    print("Script finished.")


async def run_http(settings: Settings, mock: bool) -> None:
    """Serve the HTTP front end until SIGINT/SIGTERM."""
    from lampmatrix.server import ControlServer

    host, port = settings.http_host_port()
    scheduler = _make_scheduler(settings, mock)
    server = ControlServer(
        scheduler,
        ScriptLibrary(settings.scripts),
        host=host,
        port=port,
        default_interval_ms=settings.default_interval_ms,
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass  # Windows: KeyboardInterrupt still ends the run

    await server.start()
    try:
        await stop.wait()
        logger.info("Shutting down server...")
    finally:
        try:
            await scheduler.stop()
        except NotRunning:
            pass
        except LampMatrixError as e:
            logger.error(f"Failed to stop script during shutdown: {e}")
        await server.stop()
        await scheduler.device.close()

    logger.info("Server stopped")


def preview(settings: Settings, script_name: str, out: Path, interval_ms: int) -> None:
    """Export a script's frames without touching the lamp."""
    from lampmatrix.graphics.export import export_frames

    script = ScriptLibrary(settings.scripts).load(script_name)
    export_frames(script.frames, out, duration_ms=interval_ms or 500)
    print(f"Wrote {len(script)} frame(s) to {out}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    setup_logging(args.debug or settings.debug)
    mock = args.mock or settings.mock
    interval_ms = args.interval_ms if args.interval_ms is not None else settings.default_interval_ms

    if interval_ms < 0 or args.timeout_s < 0:
        parser.error("interval_ms and timeout_s must be >= 0")

    try:
        if args.preview:
            if not args.script:
                parser.error("--preview requires a script name")
            preview(settings, args.script, args.preview, interval_ms)
        elif args.http or settings.http_mode:
            asyncio.run(run_http(settings, mock))
        elif args.script:
            asyncio.run(run_cli(settings, args.script, interval_ms, args.timeout_s, mock))
        else:
            parser.print_help()

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except LampMatrixError as e:
        logger.error(f"{e.stage} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
