"""
5x5 color matrix model.

Cells are stored as packed 24-bit colors in a (5, 5) numpy array indexed
[row, column]. Wire order is row-major: row 0 columns 0..4, then row 1, ...
"""

from dataclasses import dataclass
import math
from typing import Iterable, Iterator

import numpy as np
from numpy.typing import NDArray

from lampmatrix.graphics.color import BLACK, PACKED_WIDTH, Color

SIZE = 5
CELL_COUNT = SIZE * SIZE
WIRE_LENGTH = CELL_COUNT * PACKED_WIDTH

Cells = NDArray[np.uint32]


@dataclass(frozen=True)
class Vector:
    """A cell address."""

    row: int
    column: int

    @property
    def index(self) -> int:
        """Flat row-major index."""
        return self.row * SIZE + self.column

    def in_bounds(self) -> bool:
        return 0 <= self.row < SIZE and 0 <= self.column < SIZE


CENTER = Vector(2, 2)


def _check(vector: Vector) -> None:
    if not vector.in_bounds():
        raise IndexError(f"cell out of range: row={vector.row} column={vector.column}")


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class Matrix:
    """Mutable 5x5 grid of colors.

    Usage:
        m = Matrix.make(BLACK)
        m.set(Vector(0, 4), Color(0xFF0000))
        m.to_wire()  # 100 characters
    """

    def __init__(self, cells: Cells | None = None) -> None:
        if cells is None:
            cells = np.zeros((SIZE, SIZE), dtype=np.uint32)
        elif cells.shape != (SIZE, SIZE):
            raise ValueError(f"matrix must be {SIZE}x{SIZE}, got {cells.shape}")
        self._cells = cells.astype(np.uint32, copy=True)

    @classmethod
    def make(cls, fill: Color = BLACK) -> "Matrix":
        return cls(np.full((SIZE, SIZE), fill.value, dtype=np.uint32))

    @classmethod
    def from_colors(cls, colors: Iterable[Color]) -> "Matrix":
        values = [c.value for c in colors]
        if len(values) != CELL_COUNT:
            raise ValueError(f"expected {CELL_COUNT} colors, got {len(values)}")
        return cls(np.array(values, dtype=np.uint32).reshape(SIZE, SIZE))

    @classmethod
    def from_hex_colors(cls, colors: Iterable[str]) -> "Matrix":
        return cls.from_colors(Color.from_hex(c) for c in colors)

    @classmethod
    def from_wire(cls, text: str) -> "Matrix":
        """Inverse of `to_wire`."""
        if len(text) != WIRE_LENGTH:
            raise ValueError(f"wire encoding must be {WIRE_LENGTH} characters, got {len(text)}")
        return cls.from_colors(
            Color.from_packed4(text[i:i + PACKED_WIDTH])
            for i in range(0, WIRE_LENGTH, PACKED_WIDTH)
        )

    @property
    def cells(self) -> Cells:
        """Underlying [row, column] array (mutable view)."""
        return self._cells

    def get(self, vector: Vector) -> Color:
        _check(vector)
        return Color(int(self._cells[vector.row, vector.column]))

    def set(self, vector: Vector, color: Color) -> None:
        _check(vector)
        self._cells[vector.row, vector.column] = color.value

    def replace_all(self, color: Color) -> None:
        self._cells[:, :] = color.value

    def colors(self) -> Iterator[Color]:
        """Cells in row-major order."""
        for value in self._cells.flat:
            yield Color(int(value))

    def to_wire(self) -> str:
        return "".join(c.to_packed4() for c in self.colors())

    def to_rows(self) -> list[list[str]]:
        """Hex strings per row, for logging and debugging."""
        return [[f"{int(v):06x}" for v in row] for row in self._cells]

    def is_blank(self) -> bool:
        return not self._cells.any()

    def copy(self) -> "Matrix":
        return Matrix(self._cells)

    def freeze(self) -> "Frame":
        return Frame(self._cells)

    def rotate(
        self,
        angle: float,
        center: Vector = CENTER,
        mirror_negative: bool = True,
    ) -> "Matrix":
        """Rotate by `angle` degrees about `center`, returning a new matrix.

        Each source cell is mapped forward with the standard 2D rotation and
        rounded to the nearest cell. With `mirror_negative` the absolute value
        of each rotated coordinate is taken before rounding, which reflects
        negative targets back into the grid (lamp-compatible output).
        Without it, negative targets are clipped. Targets beyond the grid are
        always dropped. Cells nothing maps onto stay black, and when several
        sources land on one cell the last in row-major order wins.
        """
        result = Matrix.make(BLACK)
        a = math.radians(angle)
        cos_a, sin_a = math.cos(a), math.sin(a)
        cx, cy = float(center.column), float(center.row)

        for y in range(SIZE):
            for x in range(SIZE):
                nx = cx + ((x - cx) * cos_a - (y - cy) * sin_a)
                ny = cy + ((x - cx) * sin_a + (y - cy) * cos_a)
                if mirror_negative:
                    nx, ny = abs(nx), abs(ny)
                target = Vector(row=_round_half_away(ny), column=_round_half_away(nx))
                if target.in_bounds():
                    result._cells[target.row, target.column] = self._cells[y, x]

        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Matrix, Frame)):
            return NotImplemented
        return bool(np.array_equal(self._cells, other.cells))

    def __repr__(self) -> str:
        return f"Matrix({self.to_rows()})"


class Frame:
    """Immutable matrix snapshot captured at compile time."""

    __slots__ = ("_cells",)

    def __init__(self, cells: Cells) -> None:
        frozen = np.array(cells, dtype=np.uint32, copy=True)
        if frozen.shape != (SIZE, SIZE):
            raise ValueError(f"frame must be {SIZE}x{SIZE}, got {frozen.shape}")
        frozen.setflags(write=False)
        self._cells = frozen

    @property
    def cells(self) -> Cells:
        """Read-only [row, column] array."""
        return self._cells

    def get(self, vector: Vector) -> Color:
        _check(vector)
        return Color(int(self._cells[vector.row, vector.column]))

    def to_wire(self) -> str:
        return "".join(Color(int(v)).to_packed4() for v in self._cells.flat)

    def thaw(self) -> Matrix:
        """Mutable copy."""
        return Matrix(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Matrix, Frame)):
            return NotImplemented
        return bool(np.array_equal(self._cells, other.cells))

    def __hash__(self) -> int:
        return hash(self._cells.tobytes())

    def __repr__(self) -> str:
        rows = [[f"{int(v):06x}" for v in row] for row in self._cells]
        return f"Frame({rows})"
