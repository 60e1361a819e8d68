"""Tests for svg2pdc.color.

Validates hex parsing, both quantization policies, palette packing and the
zero-alpha short circuit.
"""

from __future__ import annotations

import itertools

import pytest

from svg2pdc.color import (
    Color,
    ColorPolicy,
    PaletteColor,
    num_colors_to_bitdepth,
    quantize,
)
from svg2pdc.errors import InvalidColorError


# ---------------------------------------------------------------------------
# Hex parsing
# ---------------------------------------------------------------------------


class TestFromHex:
    def test_six_digits_default_alpha(self) -> None:
        assert Color.from_hex("#ff0000") == Color(255, 0, 0, 255)

    def test_eight_digits(self) -> None:
        assert Color.from_hex("#11223380") == Color(0x11, 0x22, 0x33, 0x80)

    def test_hash_optional_and_case_insensitive(self) -> None:
        assert Color.from_hex(" 00FF00 ") == Color(0, 255, 0)

    @pytest.mark.parametrize("text", ["", "#", "#fff", "#gg0000", "red", "#ff00001", "#ff0000ff00"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(InvalidColorError, match="Invalid color string"):
            Color.from_hex(text)

    @pytest.mark.parametrize("hex6", ["000000", "ff0000", "12ab9f", "ffffff"])
    @pytest.mark.parametrize("alpha", [0, 1, 127, 128, 255])
    def test_with_opacity_matches_eight_digit_form(self, hex6: str, alpha: int) -> None:
        assert Color.from_hex(hex6).with_opacity(alpha) == Color.from_hex(f"{hex6}{alpha:02x}")

    def test_channel_range_validated(self) -> None:
        with pytest.raises(ValueError, match="channel r"):
            Color(256, 0, 0)


# ---------------------------------------------------------------------------
# Quantization
# ---------------------------------------------------------------------------


class TestQuantize:
    def test_red_truncate_packs_to_f0(self) -> None:
        packed = PaletteColor.from_color(Color.from_hex("#ff0000"), ColorPolicy.TRUNCATE)
        assert (packed.a, packed.r, packed.g, packed.b) == (3, 3, 0, 0)
        assert packed.value == 0xF0

    @pytest.mark.parametrize(
        "channel, truncated, nearest",
        [
            (0, 0, 0),
            (1, 0, 85),
            (42, 0, 85),
            (43, 0, 85),
            (84, 0, 85),
            (127, 85, 170),
            (128, 85, 170),
            (170, 170, 170),
            (171, 170, 255),
            (212, 170, 255),
            (213, 170, 255),
            (255, 255, 255),
        ],
    )
    def test_levels(self, channel: int, truncated: int, nearest: int) -> None:
        color = Color(channel, channel, channel)
        assert quantize(color, ColorPolicy.TRUNCATE) == Color(truncated, truncated, truncated)
        assert quantize(color, ColorPolicy.NEAREST) == Color(nearest, nearest, nearest)

    def test_zero_alpha_is_nothing(self) -> None:
        color = Color(255, 255, 255, 84)
        assert PaletteColor.from_color(color, ColorPolicy.TRUNCATE) == PaletteColor.nothing()
        # 84 rounds up to the first level under NEAREST
        assert PaletteColor.from_color(color, ColorPolicy.NEAREST).value == 0x7F

    def test_nearest_lifts_faint_alpha(self) -> None:
        faint = Color(255, 255, 255, 1)
        assert PaletteColor.from_color(faint, ColorPolicy.NEAREST).value == 0x7F
        clear = Color(255, 255, 255, 0)
        assert PaletteColor.from_color(clear, ColorPolicy.NEAREST) == PaletteColor.nothing()

    @pytest.mark.parametrize("policy", list(ColorPolicy))
    def test_idempotent(self, policy: ColorPolicy) -> None:
        for r, g, b, a in itertools.product(range(0, 256, 37), repeat=4):
            once = quantize(Color(r, g, b, a), policy)
            assert quantize(once, policy) == once


# ---------------------------------------------------------------------------
# Palette packing
# ---------------------------------------------------------------------------


class TestPaletteColor:
    def test_pack_unpack_all_fields(self) -> None:
        for a, r, g, b in itertools.product(range(4), repeat=4):
            packed = PaletteColor.pack(a, r, g, b)
            assert (packed.a, packed.r, packed.g, packed.b) == (a, r, g, b)

    def test_pack_rejects_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="Palette index g"):
            PaletteColor.pack(3, 0, 4, 0)

    def test_nothing_is_zero(self) -> None:
        assert PaletteColor.nothing().value == 0

    def test_is_black_ignores_alpha(self) -> None:
        assert PaletteColor.pack(3, 0, 0, 0).is_black
        assert PaletteColor.pack(1, 0, 0, 0).is_black
        assert not PaletteColor.pack(3, 0, 0, 1).is_black

    def test_to_color(self) -> None:
        assert PaletteColor(0xF0).to_color() == Color(255, 0, 0, 255)


# ---------------------------------------------------------------------------
# Bit depth
# ---------------------------------------------------------------------------


class TestBitDepth:
    @pytest.mark.parametrize(
        "n, depth",
        [(0, None), (1, 1), (2, 1), (3, 2), (4, 2), (5, 4), (16, 4), (17, 8), (256, 8), (257, None)],
    )
    def test_num_colors_to_bitdepth(self, n: int, depth: object) -> None:
        assert num_colors_to_bitdepth(n) == depth
