"""
Animation script compiler.

A script is plain text, one command per line:

    # comment            // also a comment
    FILL blue
    PIXEL 2 2 #ff0000
                         <- blank line ends the frame
    ROTATE 90

Commands (case-insensitive, x = column, y = row, both 0-4):

    FILL color                 CLEAR
    PIXEL x y color            ROW row color          COL col color
    CIRCLE x y radius color    RING x y radius color
    RECT x1 y1 x2 y2 color     LINE x1 y1 x2 y2 color
    CROSS x y size color       ROTATE degrees
    SHIFT UP|DOWN|LEFT|RIGHT   DIM factor(0.0-1.0)

Colors are one of the named colors, `#rrggbb` or bare `rrggbb`.

Each frame starts all black. A blank line after at least one command
captures the frame; leading and repeated blank lines do nothing.
"""

from dataclasses import dataclass
import math
import logging
from pathlib import Path
import re
from typing import Callable

from lampmatrix.core.errors import EmptyScript, InvalidColor, ParseError
from lampmatrix.graphics import primitives
from lampmatrix.graphics.color import BLACK, NAMED_COLORS, Color
from lampmatrix.graphics.matrix import SIZE, Frame, Matrix
from lampmatrix.graphics.primitives import Direction

logger = logging.getLogger(__name__)

_HEX6 = re.compile(r"[0-9a-f]{6}")


@dataclass(frozen=True)
class Script:
    """A compiled animation.

    Attributes:
        name: Script identifier
        frames: Frames in playback order (never empty)
    """

    name: str
    frames: tuple[Frame, ...]

    def __post_init__(self) -> None:
        if not self.frames:
            raise EmptyScript()

    def __len__(self) -> int:
        return len(self.frames)


class _LineError(Exception):
    """Raised by argument parsers; turned into ParseError with the line number."""


def parse_color(token: str) -> Color:
    """Resolve a color token: named color, `#rrggbb`, or bare `rrggbb`."""
    lowered = token.lower()
    named = NAMED_COLORS.get(lowered)
    if named is not None:
        return named

    if lowered.startswith("#"):
        if not _HEX6.fullmatch(lowered[1:]):
            raise InvalidColor(f"invalid hex color: {token}")
        return Color.from_hex(lowered[1:])

    if _HEX6.fullmatch(lowered):
        return Color.from_hex(lowered)

    raise InvalidColor(f"unknown color: {token}")


def _color(token: str) -> Color:
    try:
        return parse_color(token)
    except InvalidColor as e:
        raise _LineError(str(e)) from e


def _int(token: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise _LineError(f"invalid {what}: {token}") from None


def _coord(token: str, axis: str) -> int:
    value = _int(token, f"{axis} coordinate")
    if not 0 <= value < SIZE:
        raise _LineError(f"invalid {axis} coordinate: {token}")
    return value


def _point(x: str, y: str) -> tuple[int, int]:
    return _coord(x, "x"), _coord(y, "y")


def _non_negative(token: str, what: str) -> int:
    value = _int(token, what)
    if value < 0:
        raise _LineError(f"invalid {what}: {token}")
    return value


def _float(token: str, what: str) -> float:
    try:
        value = float(token)
    except ValueError:
        raise _LineError(f"invalid {what}: {token}") from None
    if not math.isfinite(value):
        raise _LineError(f"invalid {what}: {token}")
    return value


# Command handlers take the in-progress matrix and the argument tokens and
# return the matrix to continue with (a new one for ROTATE and SHIFT).
Handler = Callable[[Matrix, list[str]], Matrix]


def _fill(m: Matrix, args: list[str]) -> Matrix:
    m.replace_all(_color(args[0]))
    return m


def _clear(m: Matrix, args: list[str]) -> Matrix:
    m.replace_all(BLACK)
    return m


def _pixel(m: Matrix, args: list[str]) -> Matrix:
    x, y = _point(args[0], args[1])
    primitives.draw_pixel(m, x, y, _color(args[2]))
    return m


def _row(m: Matrix, args: list[str]) -> Matrix:
    row = _int(args[0], "row number")
    if not 0 <= row < SIZE:
        raise _LineError(f"invalid row number: {args[0]}")
    primitives.draw_row(m, row, _color(args[1]))
    return m


def _col(m: Matrix, args: list[str]) -> Matrix:
    col = _int(args[0], "column number")
    if not 0 <= col < SIZE:
        raise _LineError(f"invalid column number: {args[0]}")
    primitives.draw_col(m, col, _color(args[1]))
    return m


def _circle(m: Matrix, args: list[str]) -> Matrix:
    x, y = _point(args[0], args[1])
    radius = _non_negative(args[2], "radius")
    primitives.draw_circle(m, x, y, radius, _color(args[3]))
    return m


def _ring(m: Matrix, args: list[str]) -> Matrix:
    x, y = _point(args[0], args[1])
    radius = _non_negative(args[2], "radius")
    primitives.draw_ring(m, x, y, radius, _color(args[3]))
    return m


def _rect(m: Matrix, args: list[str]) -> Matrix:
    x1, y1 = _point(args[0], args[1])
    x2, y2 = _point(args[2], args[3])
    primitives.draw_rect(m, x1, y1, x2, y2, _color(args[4]))
    return m


def _line(m: Matrix, args: list[str]) -> Matrix:
    x1, y1 = _point(args[0], args[1])
    x2, y2 = _point(args[2], args[3])
    primitives.draw_line(m, x1, y1, x2, y2, _color(args[4]))
    return m


def _cross(m: Matrix, args: list[str]) -> Matrix:
    x, y = _point(args[0], args[1])
    size = _non_negative(args[2], "size")
    primitives.draw_cross(m, x, y, size, _color(args[3]))
    return m


def _rotate(m: Matrix, args: list[str]) -> Matrix:
    return m.rotate(_float(args[0], "degrees"))


def _shift(m: Matrix, args: list[str]) -> Matrix:
    try:
        direction = Direction(args[0].upper())
    except ValueError:
        raise _LineError(f"invalid direction: {args[0]} (expected UP, DOWN, LEFT or RIGHT)") from None
    return primitives.shift(m, direction)


def _dim(m: Matrix, args: list[str]) -> Matrix:
    factor = _float(args[0], "dim factor")
    if not 0.0 <= factor <= 1.0:
        raise _LineError("invalid dim factor (must be 0.0-1.0)")
    primitives.dim(m, factor)
    return m


# name -> (handler, argument count, usage)
COMMANDS: dict[str, tuple[Handler, int, str]] = {
    "FILL": (_fill, 1, "color"),
    "CLEAR": (_clear, 0, ""),
    "PIXEL": (_pixel, 3, "x y color"),
    "ROW": (_row, 2, "row color"),
    "COL": (_col, 2, "column color"),
    "CIRCLE": (_circle, 4, "x y radius color"),
    "RING": (_ring, 4, "x y radius color"),
    "RECT": (_rect, 5, "x1 y1 x2 y2 color"),
    "LINE": (_line, 5, "x1 y1 x2 y2 color"),
    "CROSS": (_cross, 4, "x y size color"),
    "ROTATE": (_rotate, 1, "degrees"),
    "SHIFT": (_shift, 1, "direction"),
    "DIM": (_dim, 1, "factor"),
}


def _is_comment(line: str) -> bool:
    return line.startswith("#") or line.startswith("//")


def compile_script(text: str, name: str = "script") -> Script:
    """Compile script text into frames.

    Args:
        text: Script source
        name: Name given to the resulting Script

    Returns:
        Compiled Script with at least one frame

    Raises:
        ParseError: On the first malformed line
        EmptyScript: If no frame was produced
    """
    frames: list[Frame] = []
    current = Matrix.make(BLACK)
    has_content = False
    line_num = 0

    for line_num, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()

        if not line:
            if has_content:
                frames.append(current.freeze())
                current = Matrix.make(BLACK)
                has_content = False
            continue

        if _is_comment(line):
            continue

        parts = line.split()
        cmd = parts[0].upper()
        args = parts[1:]

        entry = COMMANDS.get(cmd)
        if entry is None:
            raise ParseError(line_num, f"unknown command: {parts[0]}")

        handler, arg_count, usage = entry
        if len(args) != arg_count:
            if arg_count == 0:
                raise ParseError(line_num, f"{cmd} takes no arguments")
            raise ParseError(line_num, f"{cmd} requires {usage}")

        try:
            current = handler(current, args)
        except _LineError as e:
            raise ParseError(line_num, str(e)) from None

        has_content = True

    if has_content:
        frames.append(current.freeze())

    if not frames:
        raise EmptyScript(line_num)

    logger.debug(f"Compiled script {name!r}: {len(frames)} frame(s)")
    return Script(name=name, frames=tuple(frames))


def load_script(path: str | Path, name: str | None = None) -> Script:
    """Read and compile a script file."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return compile_script(text, name=name or path.stem)
