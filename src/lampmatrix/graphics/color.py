"""
24-bit RGB colors and their encodings.

The lamp receives each cell as four characters drawn from a 64-symbol
alphabet, most significant digit first:

    value = d0 * 64**3 + d1 * 64**2 + d2 * 64 + d3

This looks like base64 but is not: there is no byte grouping or padding,
and the digit order is fixed by the device firmware.
"""

from dataclasses import dataclass
import re

from lampmatrix.core.errors import InvalidColor

PACKED_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PACKED_WIDTH = 4
MAX_VALUE = 0xFFFFFF

_PACKED_INDEX = {ch: i for i, ch in enumerate(PACKED_ALPHABET)}
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


@dataclass(frozen=True, order=True)
class Color:
    """A 24-bit RGB color.

    Attributes:
        value: Packed color, 0xRRGGBB
    """

    value: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise InvalidColor(f"color value must be an integer: {self.value!r}")
        if not 0 <= self.value <= MAX_VALUE:
            raise InvalidColor(f"color value out of 24-bit range: {self.value:#x}")

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """Parse `#rrggbb`, `rrggbb` or any shorter hex string.

        Leading/trailing `#` and whitespace are stripped. Values that do not
        fit in 24 bits are rejected rather than truncated.
        """
        digits = text.strip().strip("#").strip()
        if not digits or not _HEX_DIGITS.fullmatch(digits):
            raise InvalidColor(f"invalid hex color: {text!r}")
        value = int(digits, 16)
        if value > MAX_VALUE:
            raise InvalidColor(f"hex color out of 24-bit range: {text!r}")
        return cls(value)

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> "Color":
        for name, channel in (("r", r), ("g", g), ("b", b)):
            if not 0 <= channel <= 255:
                raise InvalidColor(f"channel {name} out of range 0-255: {channel}")
        return cls((int(r) << 16) | (int(g) << 8) | int(b))

    @classmethod
    def from_packed4(cls, text: str) -> "Color":
        """Decode the 4-character wire encoding."""
        if len(text) != PACKED_WIDTH:
            raise InvalidColor(f"packed color must be {PACKED_WIDTH} characters: {text!r}")
        value = 0
        for ch in text:
            digit = _PACKED_INDEX.get(ch)
            if digit is None:
                raise InvalidColor(f"invalid packed color character {ch!r} in {text!r}")
            value = value * 64 + digit
        return cls(value)

    def to_hex(self) -> str:
        return f"{self.value:06x}"

    def to_rgb(self) -> tuple[int, int, int]:
        return (
            (self.value >> 16) & 0xFF,
            (self.value >> 8) & 0xFF,
            self.value & 0xFF,
        )

    def to_packed4(self) -> str:
        """Encode as four alphabet digits, most significant first."""
        chars = []
        remainder = self.value
        for weight in (64 ** 3, 64 ** 2, 64, 1):
            digit, remainder = divmod(remainder, weight)
            chars.append(PACKED_ALPHABET[digit])
        return "".join(chars)

    def __str__(self) -> str:
        return f"#{self.to_hex()}"


BLACK = Color(0x000000)

NAMED_COLORS: dict[str, Color] = {
    "red": Color(0xFF0000),
    "green": Color(0x00FF00),
    "blue": Color(0x0000FF),
    "white": Color(0xFFFFFF),
    "yellow": Color(0xFFFF00),
    "cyan": Color(0x00FFFF),
    "magenta": Color(0xFF00FF),
    "orange": Color(0xFFA500),
    "purple": Color(0x800080),
    "black": BLACK,
}
