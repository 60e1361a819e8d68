"""SVG path data (the ``d`` attribute) -- parsing and endpoint reduction.

The display has no curve primitive, so every segment is reduced to the
single point it ends on; control points and arc parameters are parsed for
syntax and then discarded.

Tokenizing is done by ``svgelements.SVGLexicalParser``, which drives a
builder with one callback per command.  ``_SegmentBuilder`` records those
callbacks as the segment dataclasses below, keeping relative values
relative.

Reduction (``path_points``)::

    current = (0, 0)
    for each segment:
        absolute    -> point = segment end
        relative    -> point = current + segment end
        H / V       -> the omitted axis comes from current
        relative h  -> (x, current.y) + current
        relative v  -> (current.x, y) + current
        Z           -> append first point if current differs
    floor every point (legacy encoder compatibility)
    open = first != last; a closed path drops its duplicated last point

Relative ``h``/``v`` add the current point to both axes and ``Z`` leaves
the current point where it was.  Both match the legacy encoder's output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from svgelements import SVGLexicalParser

from svg2pdc.errors import PathDataError
from svg2pdc.geometry import ORIGIN, Point


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MoveTo:
    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class LineTo:
    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class HorizontalLineTo:
    x: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class VerticalLineTo:
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class CurveTo:
    x1: float
    y1: float
    x2: float
    y2: float
    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class SmoothCurveTo:
    x2: float
    y2: float
    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class Quadratic:
    x1: float
    y1: float
    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class SmoothQuadratic:
    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class EllipticalArc:
    rx: float
    ry: float
    x_axis_rotation: float
    large_arc: bool
    sweep: bool
    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True, slots=True)
class ClosePath:
    relative: bool = False


PathSegment = Union[
    MoveTo,
    LineTo,
    HorizontalLineTo,
    VerticalLineTo,
    CurveTo,
    SmoothCurveTo,
    Quadratic,
    SmoothQuadratic,
    EllipticalArc,
    ClosePath,
]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def _pair(coord) -> tuple[float, float]:
    # An inline close in place of a coordinate arrives as the string "z".
    if not isinstance(coord, tuple) or None in coord:
        raise PathDataError("Expected a number")
    return coord


def _number(value) -> float:
    if value is None:
        raise PathDataError("Expected a number")
    return value


class _SegmentBuilder:
    """Receives ``SVGLexicalParser`` callbacks and collects segments."""

    # Without a current point the lexer hands relative coordinates through
    # unchanged.
    current_point = None

    def __init__(self) -> None:
        self.segments: list[PathSegment] = []

    def _add(self, segment: PathSegment) -> None:
        if not self.segments and not isinstance(segment, MoveTo):
            command = type(segment).__name__
            raise PathDataError(f"Path data must start with a move-to, got {command}")
        self.segments.append(segment)

    def start(self) -> None:
        self.segments = []

    def move(self, end, relative: bool = False) -> None:
        self._add(MoveTo(*_pair(end), relative))

    def line(self, end, relative: bool = False) -> None:
        self._add(LineTo(*_pair(end), relative))

    def horizontal(self, x, relative: bool = False) -> None:
        self._add(HorizontalLineTo(_number(x), relative))

    def vertical(self, y, relative: bool = False) -> None:
        self._add(VerticalLineTo(_number(y), relative))

    def cubic(self, control1, control2, end, relative: bool = False) -> None:
        self._add(CurveTo(*_pair(control1), *_pair(control2), *_pair(end), relative))

    def smooth_cubic(self, control2, end, relative: bool = False) -> None:
        self._add(SmoothCurveTo(*_pair(control2), *_pair(end), relative))

    def quad(self, control, end, relative: bool = False) -> None:
        self._add(Quadratic(*_pair(control), *_pair(end), relative))

    def smooth_quad(self, end, relative: bool = False) -> None:
        self._add(SmoothQuadratic(*_pair(end), relative))

    def arc(self, rx, ry, rotation, large_arc, sweep, end, relative: bool = False) -> None:
        if large_arc is None or sweep is None:
            raise PathDataError("Expected an arc flag (0 or 1)")
        self._add(
            EllipticalArc(
                _number(rx),
                _number(ry),
                _number(rotation),
                large_arc,
                sweep,
                *_pair(end),
                relative,
            )
        )

    def closed(self, relative: bool = False) -> None:
        self._add(ClosePath(relative))


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_path_data(data: Optional[str]) -> list[PathSegment]:
    """Parse path data into segments.

    Parameters
    ----------
    data : str or None
        Contents of a ``d`` attribute.  ``None`` and blank strings yield an
        empty list.

    Returns
    -------
    list[PathSegment]
        Segments in document order; implicit commands are made explicit.

    Raises
    ------
    PathDataError
        If the data does not start with a move-to, contains an unknown
        command, or a command has missing or malformed arguments.
    """
    if data is None:
        return []

    lexer = SVGLexicalParser()
    builder = _SegmentBuilder()
    try:
        lexer.parse(builder, data)
    except PathDataError as exc:
        raise PathDataError(f"{exc} at offset {lexer.pos}: {data!r}") from None
    except ValueError:
        raise PathDataError(
            f"Malformed command arguments at offset {lexer.pos}: {data!r}"
        ) from None

    # The lexer stops silently at the first character it cannot read.
    rest = data[lexer.pos:]
    if rest.strip(" \t\r\n\f,"):
        offset = len(data) - len(rest.lstrip(" \t\r\n\f,"))
        raise PathDataError(f"Unexpected {data[offset]!r} at offset {offset}: {data!r}")

    return builder.segments


# ---------------------------------------------------------------------------
# Reduction
# ---------------------------------------------------------------------------


def segment_endpoint(segment: PathSegment, current: Point) -> Optional[Point]:
    """Point a segment ends on, given the *current* point.

    Returns ``None`` for ``ClosePath``, whose target depends on the whole
    path rather than on the segment.
    """
    if isinstance(segment, ClosePath):
        return None
    if isinstance(segment, HorizontalLineTo):
        if segment.relative:
            return Point(segment.x, current.y) + current
        return Point(segment.x, current.y)
    if isinstance(segment, VerticalLineTo):
        if segment.relative:
            return Point(current.x, segment.y) + current
        return Point(current.x, segment.y)

    target = Point(segment.x, segment.y)
    return current + target if segment.relative else target


def path_points(
    segments: list[PathSegment],
    *,
    floor: bool = True,
) -> tuple[list[Point], bool]:
    """Reduce *segments* to a vertex list and an open flag.

    Parameters
    ----------
    segments : list[PathSegment]
        Output of :func:`parse_path_data`.
    floor : bool
        Floor each vertex to whole pixels before the open/closed decision.
        ``True`` reproduces the legacy encoder's output.

    Returns
    -------
    points : list[Point]
        Vertices; a closed path does not repeat its first vertex.
    open : bool
        ``False`` when the first and last vertices coincide (also for an
        empty path).
    """
    points: list[Point] = []
    current = ORIGIN

    for segment in segments:
        end = segment_endpoint(segment, current)
        if end is None:
            first = points[0] if points else ORIGIN
            if points and current != first:
                points.append(first)
            continue
        points.append(end)
        current = end

    if floor:
        points = [p.floor() for p in points]

    first = points[0] if points else ORIGIN
    last = points[-1] if points else ORIGIN
    is_open = first != last
    if not is_open and points:
        points.pop()
    return points, is_open
