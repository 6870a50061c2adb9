"""Drawing primitives for the 5x5 lamp matrix.

All coordinates are (x, y) = (column, row). Primitives paint in place,
except `shift` which returns a new matrix.
"""

from enum import Enum

import numpy as np

from lampmatrix.graphics.color import BLACK, Color
from lampmatrix.graphics.matrix import SIZE, Matrix, Vector

# Cells within this distance of the radius belong to a ring
RING_TOLERANCE = 0.8


class Direction(Enum):
    """Shift directions."""

    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


def draw_pixel(matrix: Matrix, x: int, y: int, color: Color) -> None:
    """Paint one cell."""
    matrix.set(Vector(row=y, column=x), color)


def draw_row(matrix: Matrix, row: int, color: Color) -> None:
    """Paint all five cells of a row."""
    if not 0 <= row < SIZE:
        raise IndexError(f"row out of range: {row}")
    matrix.cells[row, :] = color.value


def draw_col(matrix: Matrix, col: int, color: Color) -> None:
    """Paint all five cells of a column."""
    if not 0 <= col < SIZE:
        raise IndexError(f"column out of range: {col}")
    matrix.cells[:, col] = color.value


def draw_rect(
    matrix: Matrix,
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    color: Color,
) -> None:
    """Fill the inclusive box between two corners.

    Corners may be given in any order. The box is clipped to the grid.

    Args:
        matrix: Target matrix
        x1, y1: First corner
        x2, y2: Opposite corner
        color: Fill color
    """
    left, right = sorted((x1, x2))
    top, bottom = sorted((y1, y2))

    left = max(0, left)
    top = max(0, top)
    right = min(SIZE - 1, right)
    bottom = min(SIZE - 1, bottom)

    if left > right or top > bottom:
        return

    matrix.cells[top:bottom + 1, left:right + 1] = color.value


def _distances(cx: int, cy: int) -> np.ndarray:
    y_indices, x_indices = np.ogrid[:SIZE, :SIZE]
    return np.sqrt((x_indices - cx) ** 2 + (y_indices - cy) ** 2)


def draw_circle(matrix: Matrix, cx: int, cy: int, radius: int, color: Color) -> None:
    """Filled disk: every cell whose center distance is <= radius."""
    mask = _distances(cx, cy) <= radius
    matrix.cells[mask] = color.value


def draw_ring(matrix: Matrix, cx: int, cy: int, radius: int, color: Color) -> None:
    """Every cell whose center distance is within RING_TOLERANCE of radius."""
    mask = np.abs(_distances(cx, cy) - radius) < RING_TOLERANCE
    matrix.cells[mask] = color.value


def draw_line(
    matrix: Matrix,
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    color: Color,
) -> None:
    """Draw a line using Bresenham's algorithm.

    Both endpoints are painted; cells outside the grid are skipped.

    Args:
        matrix: Target matrix
        x1, y1: Start point
        x2, y2: End point
        color: Line color
    """
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy

    x, y = x1, y1

    while True:
        if 0 <= x < SIZE and 0 <= y < SIZE:
            matrix.cells[y, x] = color.value

        if x == x2 and y == y2:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def draw_cross(matrix: Matrix, cx: int, cy: int, size: int, color: Color) -> None:
    """Horizontal and vertical strokes of length 2*size+1 through (cx, cy)."""
    for i in range(-size, size + 1):
        x = cx + i
        if 0 <= x < SIZE and 0 <= cy < SIZE:
            matrix.cells[cy, x] = color.value

    for i in range(-size, size + 1):
        y = cy + i
        if 0 <= y < SIZE and 0 <= cx < SIZE:
            matrix.cells[y, cx] = color.value


def shift(matrix: Matrix, direction: Direction | str, fill: Color = BLACK) -> Matrix:
    """Move every cell one step in `direction`.

    The row or column vacated by the move is filled with `fill`; nothing
    wraps around.
    """
    direction = Direction(direction.upper()) if isinstance(direction, str) else direction
    src = matrix.cells
    result = Matrix.make(fill)
    dst = result.cells

    if direction is Direction.UP:
        dst[:-1, :] = src[1:, :]
    elif direction is Direction.DOWN:
        dst[1:, :] = src[:-1, :]
    elif direction is Direction.LEFT:
        dst[:, :-1] = src[:, 1:]
    else:
        dst[:, 1:] = src[:, :-1]

    return result


def dim(matrix: Matrix, factor: float) -> None:
    """Scale every channel by `factor` (0.0 to 1.0), truncating.

    Channels are treated as unsigned 8-bit values throughout.
    """
    if not 0.0 <= factor <= 1.0:
        raise ValueError(f"dim factor must be between 0.0 and 1.0: {factor}")

    cells = matrix.cells
    channels = np.stack(
        [(cells >> 16) & 0xFF, (cells >> 8) & 0xFF, cells & 0xFF]
    ).astype(np.float64)
    scaled = np.floor(channels * factor).astype(np.uint32)
    cells[:, :] = (scaled[0] << 16) | (scaled[1] << 8) | scaled[2]
