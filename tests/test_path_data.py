"""Tests for svg2pdc.converter.path_data.

Validates the path grammar (separators, exponents, compact arc flags,
implicit commands, error offsets) and the endpoint reduction with
flooring and closure.
"""

from __future__ import annotations

import pytest

from svg2pdc.converter.path_data import (
    ClosePath,
    CurveTo,
    EllipticalArc,
    HorizontalLineTo,
    LineTo,
    MoveTo,
    Quadratic,
    SmoothCurveTo,
    SmoothQuadratic,
    VerticalLineTo,
    parse_path_data,
    path_points,
    segment_endpoint,
)
from svg2pdc.errors import PathDataError
from svg2pdc.geometry import Point


def _points(d: str, floor: bool = True) -> tuple[list[Point], bool]:
    return path_points(parse_path_data(d), floor=floor)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsePathData:
    def test_basic_relative(self) -> None:
        assert parse_path_data("M 10 10 l 10 0 l 0 10 z") == [
            MoveTo(10, 10),
            LineTo(10, 0, True),
            LineTo(0, 10, True),
            ClosePath(True),
        ]

    def test_compact_numbers(self) -> None:
        assert parse_path_data("M10-5L.5.5") == [MoveTo(10, -5), LineTo(0.5, 0.5)]

    def test_exponents_and_commas(self) -> None:
        assert parse_path_data("M1e1,2E-1") == [MoveTo(10.0, 0.2)]

    def test_implicit_lineto_after_moveto(self) -> None:
        assert parse_path_data("M 0 0 1 1 2 2") == [MoveTo(0, 0), LineTo(1, 1), LineTo(2, 2)]
        assert parse_path_data("m 1 1 2 2") == [MoveTo(1, 1, True), LineTo(2, 2, True)]

    def test_implicit_repeat(self) -> None:
        assert parse_path_data("M0 0 H 1 2 v3") == [
            MoveTo(0, 0),
            HorizontalLineTo(1),
            HorizontalLineTo(2),
            VerticalLineTo(3, True),
        ]

    def test_compact_arc_flags(self) -> None:
        assert parse_path_data("M0 0a1 1 0 011 1") == [
            MoveTo(0, 0),
            EllipticalArc(1, 1, 0, False, True, 1, 1, True),
        ]

    def test_all_curve_kinds(self) -> None:
        segments = parse_path_data("M0 0 C1 1 2 2 3 3 S4 4 5 5 Q6 6 7 7 T8 8")
        assert segments[1:] == [
            CurveTo(1, 1, 2, 2, 3, 3),
            SmoothCurveTo(4, 4, 5, 5),
            Quadratic(6, 6, 7, 7),
            SmoothQuadratic(8, 8),
        ]

    def test_relative_horizontal_and_vertical(self) -> None:
        assert parse_path_data("M10 10 h5 v3") == [
            MoveTo(10, 10),
            HorizontalLineTo(5, True),
            VerticalLineTo(3, True),
        ]

    def test_multiple_subpaths(self) -> None:
        assert parse_path_data("M0 0 L1 1 z m 2 2 l 1 0 Z") == [
            MoveTo(0, 0),
            LineTo(1, 1),
            ClosePath(True),
            MoveTo(2, 2, True),
            LineTo(1, 0, True),
            ClosePath(False),
        ]

    @pytest.mark.parametrize("d", [None, "", "   "])
    def test_empty(self, d: str) -> None:
        assert parse_path_data(d) == []

    @pytest.mark.parametrize(
        "d, match",
        [
            ("L 1 1", "must start with a move-to"),
            ("z", "must start with a move-to"),
            ("M 1", "Malformed command arguments"),
            ("M 0 0 H", "Expected a number"),
            ("M 0 0 L z", "Expected a number"),
            ("M 0 0 X 1", "Unexpected 'X' at offset 6"),
            ("M 0 0 A 1 1 0 2 0 1 1", "Expected an arc flag"),
            ("M 0 0 a 1 1 0 2 0 1 1", "Malformed command arguments"),
            ("M 0 0 Z 1", "Malformed command arguments"),
            ("M 0 0 L 1 1 ;", "Unexpected ';' at offset 12"),
            ("5 5", "Unexpected '5' at offset 0"),
        ],
    )
    def test_malformed(self, d: str, match: str) -> None:
        with pytest.raises(PathDataError, match=match):
            parse_path_data(d)


# ---------------------------------------------------------------------------
# Endpoint reduction
# ---------------------------------------------------------------------------


class TestSegmentEndpoint:
    def test_absolute_replaces(self) -> None:
        assert segment_endpoint(LineTo(1, 1), Point(5, 5)) == Point(1, 1)

    def test_relative_accumulates(self) -> None:
        assert segment_endpoint(LineTo(1, 1, True), Point(2, 3)) == Point(3, 4)

    def test_horizontal_keeps_y(self) -> None:
        assert segment_endpoint(HorizontalLineTo(7), Point(2, 3)) == Point(7, 3)

    def test_relative_horizontal_offsets_both_axes(self) -> None:
        assert segment_endpoint(HorizontalLineTo(7, True), Point(2, 3)) == Point(9, 6)

    def test_vertical_keeps_x(self) -> None:
        assert segment_endpoint(VerticalLineTo(7), Point(2, 3)) == Point(2, 7)

    def test_relative_vertical_offsets_both_axes(self) -> None:
        assert segment_endpoint(VerticalLineTo(7, True), Point(2, 3)) == Point(4, 10)

    def test_arc_keeps_only_destination(self) -> None:
        arc = EllipticalArc(5, 5, 30, True, False, 4, 4, True)
        assert segment_endpoint(arc, Point(1, 1)) == Point(5, 5)

    def test_close_path_has_no_endpoint(self) -> None:
        assert segment_endpoint(ClosePath(), Point(1, 1)) is None


class TestPathPoints:
    def test_closed_triangle_drops_duplicate(self) -> None:
        points, is_open = _points("M 10 10 l 10 0 l 0 10 z")
        assert points == [Point(10, 10), Point(20, 10), Point(20, 20)]
        assert is_open is False

    def test_open_path(self) -> None:
        points, is_open = _points("M 1 2 H 4 V 6")
        assert points == [Point(1, 2), Point(4, 2), Point(4, 6)]
        assert is_open is True

    def test_explicit_return_to_start_is_closed(self) -> None:
        points, is_open = _points("M 0 0 L 5 0 L 5 5 L 0 0")
        assert points == [Point(0, 0), Point(5, 0), Point(5, 5)]
        assert is_open is False

    def test_close_keeps_current_point(self) -> None:
        points, is_open = _points("M0 0 L10 0 L10 10 z l5 5")
        assert points == [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 0), Point(15, 15)]
        assert is_open is True

    def test_relative_horizontal_adds_current_point(self) -> None:
        points, is_open = _points("M10 10 h5")
        assert points == [Point(10, 10), Point(15, 20)]
        assert is_open is True

    def test_relative_vertical_adds_current_point(self) -> None:
        points, _ = _points("M 1 2 h 3 v 4")
        assert points == [Point(1, 2), Point(4, 4), Point(8, 8)]

    def test_close_at_start_appends_nothing(self) -> None:
        points, is_open = _points("M 0 0 L 4 0 L 0 0 z")
        assert points == [Point(0, 0), Point(4, 0)]
        assert is_open is False

    def test_curves_reduce_to_endpoints(self) -> None:
        points, _ = _points("M0 0 C 1 1 2 2 3 3 S 4 4 5 5 Q 6 6 7 7 T 8 8 A 1 1 0 0 1 9 9")
        assert points == [Point(i, i) for i in (0, 3, 5, 7, 8, 9)]

    def test_points_are_floored(self) -> None:
        points, _ = _points("M 0.7 0.2 L 11.6 -0.2")
        assert points == [Point(0, 0), Point(11, -1)]

    def test_floor_disabled(self) -> None:
        points, _ = _points("M 0.5 1.5 L 3 3", floor=False)
        assert points[0] == Point(0.5, 1.5)

    def test_flooring_can_close_a_path(self) -> None:
        points, is_open = _points("M 1 1 L 5 1 L 1.9 1.4")
        assert points == [Point(1, 1), Point(5, 1)]
        assert is_open is False

    def test_empty_path_is_closed(self) -> None:
        assert _points("") == ([], False)

    def test_single_point_collapses(self) -> None:
        assert _points("M 5 5") == ([], False)
