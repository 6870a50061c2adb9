#!/usr/bin/env python3
"""
Check a Yeelight matrix lamp by hand.

Walks through power, plain color, brightness and a few matrix frames so
each part of the link can be confirmed by eye.

Usage:
    YEELIGHT_ADDR=192.168.1.20 PYTHONPATH=src python scripts/lamp_check.py
    PYTHONPATH=src python scripts/lamp_check.py 192.168.1.20:55443
"""

import asyncio
import os
import sys

sys.path.insert(0, "src")

from lampmatrix.core.errors import DeviceLinkError
from lampmatrix.graphics import primitives
from lampmatrix.graphics.color import NAMED_COLORS
from lampmatrix.graphics.matrix import SIZE, Matrix
from lampmatrix.hardware.yeelight import FlowMode, FlowState, YeelightLink


async def check_properties(link):
    """Print what the lamp reports about itself."""
    print(f"  power:  {'on' if await link.is_on() else 'off/unknown'}")
    print(f"  bright: {await link.get_bright()}")
    print(f"  rgb:    {await link.get_hex_color()}")


async def check_solid_colors(link, delay=0.8):
    """Whole-lamp colors outside direct mode."""
    for name in ("red", "green", "blue", "white"):
        print(f"  {name.upper()}...")
        await link.set_rgb(NAMED_COLORS[name])
        await asyncio.sleep(delay)


async def check_brightness(link, delay=0.6):
    for level in (10, 40, 70, 100):
        print(f"    Brightness: {level}")
        await link.set_bright(level)
        await asyncio.sleep(delay)


async def check_row_sweep(link, delay=0.3):
    """Light one row at a time in direct mode."""
    print("  Row sweep...")
    await link.enter_direct_mode()

    for row in range(SIZE):
        m = Matrix.make()
        primitives.draw_row(m, row, NAMED_COLORS["green"])
        await link.send_frame(m.to_wire())
        await asyncio.sleep(delay)


async def check_corners(link, delay=1.5):
    """One distinct color per corner, to confirm orientation."""
    print("  Corners: red top-left, green top-right, blue bottom-left, white bottom-right")
    m = Matrix.make()
    primitives.draw_pixel(m, 0, 0, NAMED_COLORS["red"])
    primitives.draw_pixel(m, SIZE - 1, 0, NAMED_COLORS["green"])
    primitives.draw_pixel(m, 0, SIZE - 1, NAMED_COLORS["blue"])
    primitives.draw_pixel(m, SIZE - 1, SIZE - 1, NAMED_COLORS["white"])
    await link.send_frame(m.to_wire())
    await asyncio.sleep(delay)


async def check_color_flow(link, duration=4.0):
    print("  Color flow (4 sec)...")
    states = [
        FlowState(1000, FlowMode.COLOR, NAMED_COLORS["red"].value, 100),
        FlowState(1000, FlowMode.COLOR, NAMED_COLORS["blue"].value, 100),
    ]
    await link.start_color_flow(states)
    await asyncio.sleep(duration)
    await link.stop_color_flow()


async def run(address):
    link = YeelightLink(address)

    print("Powering on...")
    await link.set_power(True)

    try:
        print("Reading properties...")
        await check_properties(link)

        print("Testing solid colors...")
        await check_solid_colors(link)

        print("Testing brightness levels...")
        await check_brightness(link)

        print("Testing color flow...")
        await check_color_flow(link)

        print("Testing matrix...")
        await check_row_sweep(link)
        await check_corners(link)

    finally:
        print("Cleaning up...")
        await link.set_power(False)


def main():
    print("=" * 50)
    print("Yeelight Matrix Lamp Check")
    print("=" * 50)

    address = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("YEELIGHT_ADDR", "")
    if not address:
        print("Set YEELIGHT_ADDR or pass host[:port] as the first argument.")
        sys.exit(2)

    print(f"\nLamp: {address}\n")

    try:
        asyncio.run(run(address))
    except KeyboardInterrupt:
        print("\n\nCheck interrupted by user.")
    except DeviceLinkError as e:
        print(f"\nLamp error: {e}")
        sys.exit(1)

    print("Done.")


if __name__ == "__main__":
    main()
