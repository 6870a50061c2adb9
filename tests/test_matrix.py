"""Tests for the 5x5 matrix model."""

import pytest

from lampmatrix.graphics.color import BLACK, Color
from lampmatrix.graphics.matrix import WIRE_LENGTH, Matrix, Vector

RED = Color(0xFF0000)
BLUE = Color(0x0000FF)


def count(matrix, color):
    return sum(1 for c in matrix.colors() if c == color)


def test_make_fills_every_cell():
    m = Matrix.make(RED)
    assert count(m, RED) == 25
    assert m.get(Vector(4, 4)) == RED


def test_vector_index_is_row_major():
    assert Vector(0, 0).index == 0
    assert Vector(1, 0).index == 5
    assert Vector(4, 3).index == 23


@pytest.mark.parametrize("vector", [Vector(5, 0), Vector(0, 5), Vector(-1, 2), Vector(2, -1)])
def test_out_of_range_access_raises(vector):
    m = Matrix.make()
    with pytest.raises(IndexError):
        m.get(vector)
    with pytest.raises(IndexError):
        m.set(vector, RED)


def test_replace_all():
    m = Matrix.make(RED)
    m.replace_all(BLUE)
    assert count(m, BLUE) == 25


def test_wire_encoding_is_row_major():
    m = Matrix.make()
    m.set(Vector(row=0, column=1), RED)
    m.set(Vector(row=1, column=0), BLUE)

    wire = m.to_wire()
    assert len(wire) == WIRE_LENGTH == 100
    assert wire[4:8] == "/wAA"
    assert wire[20:24] == "AAD/"
    assert wire[:4] == "AAAA"


def test_wire_round_trip():
    m = Matrix.make(Color(0x123456))
    m.set(Vector(3, 2), RED)
    assert Matrix.from_wire(m.to_wire()) == m


def test_from_hex_colors():
    m = Matrix.from_hex_colors(["#ff0000"] + ["000000"] * 24)
    assert m.get(Vector(0, 0)) == RED
    with pytest.raises(ValueError):
        Matrix.from_hex_colors(["#ff0000"] * 24)


class TestRotate:
    def test_quarter_turn_about_center(self):
        m = Matrix.make()
        m.set(Vector(row=0, column=2), RED)

        rotated = m.rotate(90)

        assert rotated.get(Vector(row=2, column=4)) == RED
        assert count(rotated, RED) == 1

    def test_half_turn(self):
        m = Matrix.make()
        m.set(Vector(0, 0), RED)
        assert m.rotate(180).get(Vector(4, 4)) == RED

    def test_full_turn_is_identity(self):
        m = Matrix.make()
        m.set(Vector(1, 3), RED)
        m.set(Vector(4, 0), BLUE)
        assert m.rotate(360) == m

    def test_negative_targets_are_mirrored(self):
        m = Matrix.make()
        m.set(Vector(row=1, column=0), RED)

        rotated = m.rotate(90, center=Vector(0, 0))

        assert rotated.get(Vector(row=0, column=1)) == RED

    def test_negative_targets_clipped_without_mirroring(self):
        m = Matrix.make()
        m.set(Vector(row=1, column=0), RED)

        rotated = m.rotate(90, center=Vector(0, 0), mirror_negative=False)

        assert count(rotated, RED) == 0

    def test_returns_new_matrix(self):
        m = Matrix.make()
        m.set(Vector(0, 2), RED)
        m.rotate(90)
        assert m.get(Vector(0, 2)) == RED


class TestFrame:
    def test_freeze_is_a_snapshot(self):
        m = Matrix.make(RED)
        frame = m.freeze()
        m.replace_all(BLUE)

        assert frame.get(Vector(0, 0)) == RED
        assert frame.to_wire() == "/wAA" * 25

    def test_frame_cells_are_read_only(self):
        frame = Matrix.make().freeze()
        with pytest.raises(ValueError):
            frame.cells[0, 0] = 1

    def test_thaw_gives_mutable_copy(self):
        frame = Matrix.make(RED).freeze()
        m = frame.thaw()
        m.set(Vector(0, 0), BLACK)

        assert frame.get(Vector(0, 0)) == RED
        assert m != frame

    def test_equality_with_matrix(self):
        m = Matrix.make(BLUE)
        assert m.freeze() == m
        assert hash(m.freeze()) == hash(Matrix.make(BLUE).freeze())
