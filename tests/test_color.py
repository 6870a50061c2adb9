"""Tests for the color codec."""

import pytest

from lampmatrix.core.errors import InvalidColor
from lampmatrix.graphics.color import NAMED_COLORS, PACKED_ALPHABET, Color


class TestHex:
    @pytest.mark.parametrize("text, value", [
        ("#FF8800", 0xFF8800),
        ("ff8800", 0xFF8800),
        ("  #00ff00 ", 0x00FF00),
        ("#000000", 0),
        ("abc", 0xABC),
    ])
    def test_parse(self, text, value):
        assert Color.from_hex(text).value == value

    @pytest.mark.parametrize("text", ["", "#", "zzzzzz", "#12345g", "0x1234", "ff_00_00", "1000000"])
    def test_rejects_malformed_or_oversized(self, text):
        with pytest.raises(InvalidColor):
            Color.from_hex(text)

    def test_round_trip_normalizes_case(self):
        for text in ("A1B2C3", "#deadBE", "00ff00"):
            assert Color.from_hex(text).to_hex() == text.lstrip("#").lower()

    def test_to_hex_is_zero_padded(self):
        assert Color(0x0000FF).to_hex() == "0000ff"
        assert str(Color(0x0000FF)) == "#0000ff"


class TestRGB:
    def test_packs_channels(self):
        assert Color.from_rgb(0x12, 0x34, 0x56).value == 0x123456

    @pytest.mark.parametrize("rgb", [(0, 0, 0), (255, 255, 255), (128, 0, 200), (1, 254, 127)])
    def test_round_trip(self, rgb):
        assert Color.from_rgb(*rgb).to_rgb() == rgb

    @pytest.mark.parametrize("rgb", [(256, 0, 0), (0, -1, 0), (0, 0, 300)])
    def test_rejects_out_of_range_channel(self, rgb):
        with pytest.raises(InvalidColor):
            Color.from_rgb(*rgb)


class TestPacked4:
    @pytest.mark.parametrize("value, packed", [
        (0x000000, "AAAA"),
        (0x000001, "AAAB"),
        (0x000040, "AABA"),
        (0xFF0000, "/wAA"),
        (0xFFFFFF, "////"),
    ])
    def test_encoding(self, value, packed):
        assert Color(value).to_packed4() == packed

    def test_output_alphabet_and_width(self):
        for value in (0, 1, 63, 64, 4095, 4096, 0x7FFFFF, 0x800000, 0xFFFFFF):
            packed = Color(value).to_packed4()
            assert len(packed) == 4
            assert all(ch in PACKED_ALPHABET for ch in packed)

    def test_decoding_inverts_encoding(self):
        for value in range(0, 0x1000000, 0x10101):
            assert Color.from_packed4(Color(value).to_packed4()).value == value
        assert Color.from_packed4("////").value == 0xFFFFFF

    @pytest.mark.parametrize("text", ["AAA", "AAAAA", "AA*A", "AA A"])
    def test_decoding_rejects_bad_input(self, text):
        with pytest.raises(InvalidColor):
            Color.from_packed4(text)


def test_value_must_fit_24_bits():
    with pytest.raises(InvalidColor):
        Color(-1)
    with pytest.raises(InvalidColor):
        Color(0x1000000)


def test_invalid_color_is_value_error():
    with pytest.raises(ValueError):
        Color.from_hex("nope")


def test_named_palette():
    assert len(NAMED_COLORS) == 10
    assert NAMED_COLORS["orange"].to_hex() == "ffa500"
    assert NAMED_COLORS["purple"].to_hex() == "800080"
    assert NAMED_COLORS["black"].value == 0
