"""Colors, the 5x5 matrix model and drawing primitives."""

from lampmatrix.graphics.color import Color, NAMED_COLORS, BLACK
from lampmatrix.graphics.matrix import Matrix, Frame, Vector
from lampmatrix.graphics.primitives import (
    Direction,
    draw_pixel,
    draw_row,
    draw_col,
    draw_rect,
    draw_circle,
    draw_ring,
    draw_line,
    draw_cross,
    shift,
    dim,
)

__all__ = [
    # Model
    "Color",
    "NAMED_COLORS",
    "BLACK",
    "Matrix",
    "Frame",
    "Vector",
    # Primitives
    "Direction",
    "draw_pixel",
    "draw_row",
    "draw_col",
    "draw_rect",
    "draw_circle",
    "draw_ring",
    "draw_line",
    "draw_cross",
    "shift",
    "dim",
]
