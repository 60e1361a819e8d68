"""32-bit colors and the display's 64-color palette.

Provides:
    - ``Color``: four independent 8-bit channels, parsed from hex strings
    - ``PaletteColor``: one byte, 2 bits per channel (``a:2 r:2 g:2 b:2``)
    - ``ColorPolicy``: how 8-bit channels are reduced to the 4 palette levels

Palette levels are ``{0, 85, 170, 255}``; the packed field stores the level
index ``level // 85``.  The all-zero byte means "nothing" (no paint) and is
also produced whenever the alpha channel quantizes to zero.

Palette caveat:
    A packed color whose RGB bits are all zero is palette black.  The display
    cannot tell a black fill from no fill, so the converter treats black
    fills as transparent (see ``PaletteColor.is_black``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from svg2pdc.errors import InvalidColorError

PALETTE_STEP = 85

_HEX_RE = re.compile(r"[0-9a-fA-F]{6}(?:[0-9a-fA-F]{2})?")


class ColorPolicy(str, Enum):
    """Channel reduction policy."""

    TRUNCATE = "truncate"
    NEAREST = "nearest"


@dataclass(frozen=True, slots=True)
class Color:
    """RGBA color with 8-bit channels."""

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for ch, val in (("r", self.r), ("g", self.g), ("b", self.b), ("a", self.a)):
            if not 0 <= val <= 255:
                raise ValueError(f"Color channel {ch} must be in [0, 255], got {val}")

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#RRGGBB`` or ``#RRGGBBAA`` (leading ``#`` optional).

        >>> Color.from_hex("#ff0000") == Color.from_hex("ff0000ff")
        True
        >>> Color.from_hex("00ff00").with_opacity(0xF0) == Color.from_hex("00ff00f0")
        True
        """
        digits = text.strip().lstrip("#")
        if _HEX_RE.fullmatch(digits) is None:
            raise InvalidColorError(text)
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        a = int(digits[6:8], 16) if len(digits) == 8 else 255
        return cls(r, g, b, a)

    def with_opacity(self, opacity: int) -> Color:
        """Same RGB with the alpha channel replaced."""
        return Color(self.r, self.g, self.b, opacity)


def _truncate_level(channel: int) -> int:
    return (channel // PALETTE_STEP) * PALETTE_STEP


def _nearest_level(channel: int) -> int:
    # (channel + 42) / 85 never lands on a half, so round() has no ties.
    return round((channel + 42) / PALETTE_STEP) * PALETTE_STEP


@dataclass(frozen=True, slots=True)
class PaletteColor:
    """Packed palette color byte.

    Bit layout (most significant first)::

        0b aa rr gg bb
    """

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFF:
            raise ValueError(f"PaletteColor must fit in a byte, got {self.value}")

    @classmethod
    def nothing(cls) -> PaletteColor:
        return cls(0)

    @classmethod
    def pack(cls, a: int, r: int, g: int, b: int) -> PaletteColor:
        """Pack four 0..3 level indices."""
        for ch, val in (("a", a), ("r", r), ("g", g), ("b", b)):
            if not 0 <= val <= 3:
                raise ValueError(f"Palette index {ch} must be in [0, 3], got {val}")
        return cls((a << 6) | (r << 4) | (g << 2) | b)

    @classmethod
    def from_color(cls, color: Color, policy: ColorPolicy) -> PaletteColor:
        """Quantize *color* onto the palette.

        ``TRUNCATE`` floors each channel to a palette level.  ``NEAREST``
        rounds ``(channel + 42) / 85``, which lifts every non-zero channel
        to at least the first level.  A zero alpha level short-circuits to
        ``nothing()``.
        """
        level = _truncate_level if policy is ColorPolicy.TRUNCATE else _nearest_level
        a = level(color.a)
        if a == 0:
            return cls.nothing()
        return cls.pack(
            a // PALETTE_STEP,
            level(color.r) // PALETTE_STEP,
            level(color.g) // PALETTE_STEP,
            level(color.b) // PALETTE_STEP,
        )

    @property
    def a(self) -> int:
        return (self.value & 0b1100_0000) >> 6

    @property
    def r(self) -> int:
        return (self.value & 0b0011_0000) >> 4

    @property
    def g(self) -> int:
        return (self.value & 0b0000_1100) >> 2

    @property
    def b(self) -> int:
        return self.value & 0b0000_0011

    @property
    def is_black(self) -> bool:
        """All RGB bits are zero, whatever the alpha."""
        return self.value & 0b0011_1111 == 0

    def to_color(self) -> Color:
        """Expand back to 8-bit channels (palette levels)."""
        return Color(
            self.r * PALETTE_STEP,
            self.g * PALETTE_STEP,
            self.b * PALETTE_STEP,
            self.a * PALETTE_STEP,
        )


def quantize(color: Color, policy: ColorPolicy) -> Color:
    """Snap *color* to palette levels without packing it."""
    return PaletteColor.from_color(color, policy).to_color()


def num_colors_to_bitdepth(num_colors: int) -> Optional[int]:
    """Smallest palette bit depth that holds *num_colors* entries."""
    if 1 <= num_colors <= 2:
        return 1
    if 3 <= num_colors <= 4:
        return 2
    if 5 <= num_colors <= 16:
        return 4
    if 17 <= num_colors <= 256:
        return 8
    return None
