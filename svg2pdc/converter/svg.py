"""SVG scene walker -- source documents to draw-command images.

The walker descends the element tree from the document root carrying two
accumulators, both passed by value:

    - the translation (viewBox origin plus every ``translate()`` above)
    - the ``GroupStyle`` built from container presentation attributes

Containers (``g``, ``layer``) merge and recurse.  Shapes (``path``,
``circle``, ``polyline``, ``polygon``, ``line``, ``rect``) become one draw
command each.  Any other element is logged and skipped with its subtree;
elements with ``display="none"`` are skipped silently.

Shape points are quantized *without* the accumulated translation, which is
stored in the command's ``DrawOptions`` and applied by the encoder.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import replace
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

import numpy as np

from svg2pdc.color import ColorPolicy
from svg2pdc.converter.path_data import parse_path_data, path_points
from svg2pdc.converter.style import GroupStyle, parse_translation, resolve_shape_style
from svg2pdc.errors import (
    DocumentParseError,
    InvalidPointListError,
    InvalidViewBoxError,
    UnsupportedCircleError,
)
from svg2pdc.geometry import (
    DevicePoint,
    GridPolicy,
    Point,
    Precision,
    to_device_point,
)
from svg2pdc.pdc.commands import CircleCommand, DrawCommand, DrawOptions, Image, PathCommand

logger = logging.getLogger(__name__)

CONTAINER_TAGS = frozenset({"g", "layer"})

_NUMBER_SPLIT_RE = re.compile(r"[\s,]+")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _local_name(name: str) -> str:
    """Strip an ``{namespace}`` prefix from a tag or attribute name."""
    return name.rsplit("}", 1)[-1]


def _attributes(element: ET.Element) -> dict[str, str]:
    return {_local_name(k): v for k, v in element.attrib.items()}


def _numbers(text: str) -> list[float]:
    """Numbers separated by whitespace and/or commas."""
    return [float(tok) for tok in _NUMBER_SPLIT_RE.split(text.strip()) if tok]


def _require_float(
    attrs: Mapping[str, str],
    name: str,
    error: Callable[[str], Exception],
    default: Optional[float] = None,
) -> float:
    raw = attrs.get(name)
    if raw is None:
        if default is not None:
            return default
        raise error(f"Missing attribute {name!r}")
    try:
        return float(raw)
    except ValueError:
        raise error(f"Attribute {name!r} is not a number: {raw!r}") from None


def _view_box(root: Mapping[str, str]) -> tuple[float, float, float, float]:
    """``(min_x, min_y, width, height)`` of the root element.

    Falls back to ``width``/``height`` (missing means 0, ``px`` allowed)
    when there is no ``viewBox``.
    """
    raw = root.get("viewBox")
    if raw is not None:
        try:
            values = _numbers(raw)
        except ValueError:
            raise InvalidViewBoxError(f"viewBox is not numeric: {raw!r}") from None
        if len(values) != 4:
            raise InvalidViewBoxError(
                f"viewBox needs 4 numbers, got {len(values)}: {raw!r}"
            )
        min_x, min_y, width, height = values
        if not (width > 0 and height > 0):
            raise InvalidViewBoxError(f"viewBox size must be positive: {raw!r}")
        return min_x, min_y, width, height

    size = []
    for name in ("width", "height"):
        text = root.get(name, "0").strip()
        if text.endswith("px"):
            text = text[:-2]
        try:
            size.append(float(text))
        except ValueError:
            raise InvalidViewBoxError(
                f"Root {name} is not a number: {root.get(name)!r}"
            ) from None
    return 0.0, 0.0, size[0], size[1]


def _radius(value: float) -> int:
    if np.isnan(value):
        return 0
    return int(min(max(float(np.trunc(np.float32(value))), 0.0), 65535.0))


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------


class SvgConverter:
    """Convert SVG documents to ``Image`` objects.

    Parameters
    ----------
    precision : Precision
        Grid for path points and the image size.  Circles always use
        normal precision.
    floor_path_points : bool
        Floor ``path`` vertices to whole pixels before quantization.  The
        default reproduces the legacy encoder byte for byte.
    """

    def __init__(
        self,
        precision: Precision = Precision.NORMAL,
        *,
        floor_path_points: bool = True,
    ) -> None:
        self.precision = precision
        self.floor_path_points = floor_path_points
        self._shape_builders = {
            "path": self._path,
            "circle": self._circle,
            "polyline": self._polyline,
            "polygon": self._polygon,
            "line": self._line,
            "rect": self._rect,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_svg_image(
        self,
        content: Union[str, bytes],
        color_policy: ColorPolicy = ColorPolicy.NEAREST,
        grid_policy: GridPolicy = GridPolicy.REQUIRE_EXACT,
    ) -> Image:
        """Convert one document.

        Parameters
        ----------
        content : str or bytes
            Document text.
        color_policy : ColorPolicy
            Channel reduction for every paint.
        grid_policy : GridPolicy
            Off-grid handling for every coordinate.

        Returns
        -------
        Image
            Size from the root viewBox and one command per drawn shape.

        Raises
        ------
        ConversionError
            Any subclass; conversion stops at the first failure.
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            raise DocumentParseError(f"Malformed document: {exc}") from exc

        min_x, min_y, width, height = _view_box(_attributes(root))
        translation = Point(-min_x, -min_y)
        size = to_device_point(Point(width, height), self.precision, grid_policy)

        commands = self._walk(root, translation, GroupStyle(), color_policy, grid_policy)
        logger.debug(
            "Converted document: size=(%d, %d), %d command(s)",
            size.x,
            size.y,
            len(commands),
        )
        return Image(size=size, commands=tuple(commands))

    # ------------------------------------------------------------------
    # Internal: tree walk
    # ------------------------------------------------------------------

    def _walk(
        self,
        node: ET.Element,
        translation: Point,
        group: GroupStyle,
        color_policy: ColorPolicy,
        grid_policy: GridPolicy,
    ) -> list[DrawCommand]:
        commands: list[DrawCommand] = []
        for child in node:
            if not isinstance(child.tag, str):
                continue
            attrs = _attributes(child)
            if attrs.get("display", "").strip() == "none":
                continue
            tag = _local_name(child.tag)
            if not tag:
                continue

            if tag in CONTAINER_TAGS:
                commands.extend(
                    self._walk(
                        child,
                        parse_translation(attrs.get("transform")) + translation,
                        group.merged(attrs),
                        color_policy,
                        grid_policy,
                    )
                )
                continue

            builder = self._shape_builders.get(tag)
            if builder is None:
                logger.warning("Skipping unsupported tag: %s", tag)
                continue

            style = resolve_shape_style(group, attrs, color_policy)
            options = DrawOptions(
                translate=parse_translation(attrs.get("transform")) + translation,
                stroke_width=style.stroke_width,
                stroke_color=style.stroke_color.value,
                fill_color=style.fill_color.value,
                precision=self.precision,
                grid_policy=grid_policy,
            )
            commands.append(builder(attrs, options))
        return commands

    # ------------------------------------------------------------------
    # Shape builders
    # ------------------------------------------------------------------

    def _quantize(self, points: list[Point], options: DrawOptions) -> tuple[DevicePoint, ...]:
        return tuple(
            to_device_point(p, options.precision, options.grid_policy) for p in points
        )

    def _path(self, attrs: Mapping[str, str], options: DrawOptions) -> DrawCommand:
        segments = parse_path_data(attrs.get("d"))
        points, is_open = path_points(segments, floor=self.floor_path_points)
        return PathCommand(self._quantize(points, options), is_open, options)

    def _circle(self, attrs: Mapping[str, str], options: DrawOptions) -> DrawCommand:
        cx = _require_float(attrs, "cx", UnsupportedCircleError)
        cy = _require_float(attrs, "cy", UnsupportedCircleError)
        radius_name = "r" if "r" in attrs else "z"
        radius = _require_float(attrs, radius_name, UnsupportedCircleError)

        options = replace(options, precision=Precision.NORMAL)
        center = to_device_point(Point(cx, cy), Precision.NORMAL, options.grid_policy)
        return CircleCommand(center, _radius(radius), options)

    def _point_list(self, attrs: Mapping[str, str]) -> list[Point]:
        raw = attrs.get("points")
        if raw is None:
            raise InvalidPointListError("Missing attribute 'points'")
        try:
            values = _numbers(raw)
        except ValueError:
            raise InvalidPointListError(f"Non-numeric point list: {raw!r}") from None
        if len(values) % 2:
            raise InvalidPointListError(
                f"Point list has an odd number of coordinates: {raw!r}"
            )
        return [Point(x, y) for x, y in zip(values[::2], values[1::2])]

    def _polyline(self, attrs: Mapping[str, str], options: DrawOptions) -> DrawCommand:
        points = self._point_list(attrs)
        return PathCommand(self._quantize(points, options), True, options)

    def _polygon(self, attrs: Mapping[str, str], options: DrawOptions) -> DrawCommand:
        points = self._point_list(attrs)
        return PathCommand(self._quantize(points, options), False, options)

    def _line(self, attrs: Mapping[str, str], options: DrawOptions) -> DrawCommand:
        x1, y1, x2, y2 = (
            _require_float(attrs, name, InvalidPointListError)
            for name in ("x1", "y1", "x2", "y2")
        )
        points = [Point(x1, y1), Point(x2, y2)]
        return PathCommand(self._quantize(points, options), True, options)

    def _rect(self, attrs: Mapping[str, str], options: DrawOptions) -> DrawCommand:
        x = _require_float(attrs, "x", InvalidPointListError, default=0.0)
        y = _require_float(attrs, "y", InvalidPointListError, default=0.0)
        width = _require_float(attrs, "width", InvalidPointListError)
        height = _require_float(attrs, "height", InvalidPointListError)

        origin = Point(x, y)
        across = Point(width, 0.0)
        down = Point(0.0, height)
        corners = [origin, origin + across, origin + across + down, origin + down]
        return PathCommand(self._quantize(corners, options), False, options)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def convert(
    document_text: Union[str, bytes],
    color_policy: ColorPolicy = ColorPolicy.NEAREST,
    grid_policy: GridPolicy = GridPolicy.REQUIRE_EXACT,
    precision: Precision = Precision.NORMAL,
    *,
    floor_path_points: bool = True,
) -> Image:
    """Convert a document to an ``Image``; see ``SvgConverter``."""
    converter = SvgConverter(precision, floor_path_points=floor_path_points)
    return converter.parse_svg_image(document_text, color_policy, grid_policy)


def convert_file(
    path: Union[str, Path],
    color_policy: ColorPolicy = ColorPolicy.NEAREST,
    grid_policy: GridPolicy = GridPolicy.REQUIRE_EXACT,
    precision: Precision = Precision.NORMAL,
    *,
    floor_path_points: bool = True,
) -> Image:
    """Read the document at *path* and convert it.

    The raw bytes go to the XML parser, which honours the encoding
    declaration; undecodable input is a ``DocumentParseError``.

    Raises
    ------
    OSError
        If the file cannot be read.
    ConversionError
        As for :func:`convert`.
    """
    content = Path(path).read_bytes()
    logger.debug("Read %s (%d bytes)", path, len(content))
    return convert(
        content, color_policy, grid_policy, precision, floor_path_points=floor_path_points
    )
