"""Presentation style resolution for the scene walker.

Two layers of style exist:

    - ``GroupStyle``: the accumulator inherited down the tree.  Containers
      merge their own presentation attributes on top of it.
    - ``ShapeStyle``: the final, quantized stroke/fill of one shape, built
      from the group style, the shape's ``style`` attribute and its
      presentation attributes (increasing precedence).

Opacity:
    ``opacity`` and ``*-opacity`` values override (they do not compound)
    through group nesting.  At the shape they multiply::

        alpha = trunc(opacity * component_opacity * color.alpha)

    in single precision, saturated to ``[0, 255]``.

Palette rules applied to the result:
    - palette-black fills become "nothing"
    - no stroke color forces stroke width 0, and stroke width 0 forces
      stroke color "nothing"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Mapping, Optional

import numpy as np
from svgelements import (
    REGEX_TRANSFORM_PARAMETER,
    REGEX_TRANSFORM_TEMPLATE,
    SVG_TRANSFORM_MATRIX,
    SVG_TRANSFORM_ROTATE,
    SVG_TRANSFORM_SCALE,
    SVG_TRANSFORM_SKEW_X,
    SVG_TRANSFORM_SKEW_Y,
    SVG_TRANSFORM_TRANSLATE,
    Length,
)

from svg2pdc.color import Color, ColorPolicy, PaletteColor
from svg2pdc.errors import InvalidAttributeError, TransformError
from svg2pdc.geometry import ORIGIN, Point

DEFAULT_STROKE_WIDTH = 1

NO_PAINT = frozenset({"", "none", "transparent"})

_ARG_SPLIT_RE = re.compile(r"\s*,\s*|\s+")
_LIST_SEPARATORS = " \t\r\n\f,"

# Accepted argument counts per SVG 1.1 transform function.
_TRANSFORM_ARITY = {
    SVG_TRANSFORM_MATRIX: (6,),
    SVG_TRANSFORM_TRANSLATE: (1, 2),
    SVG_TRANSFORM_SCALE: (1, 2),
    SVG_TRANSFORM_ROTATE: (1, 3),
    SVG_TRANSFORM_SKEW_X: (1,),
    SVG_TRANSFORM_SKEW_Y: (1,),
}


# ---------------------------------------------------------------------------
# Attribute parsing
# ---------------------------------------------------------------------------


def parse_style_attribute(text: Optional[str]) -> dict[str, str]:
    """Split ``key: value; key: value`` into a dict.

    Keys and values are trimmed; empty entries are ignored.  Entries without
    a colon map to an empty value.
    """
    result: dict[str, str] = {}
    if not text:
        return result
    for entry in text.split(";"):
        if not entry.strip():
            continue
        key, _, value = entry.partition(":")
        result[key.strip()] = value.strip()
    return result


def parse_opacity(name: str, value: str) -> float:
    """Parse an opacity-like number (``0.5`` or ``50%``)."""
    text = value.strip()
    try:
        if text.endswith("%"):
            return float(text[:-1]) / 100.0
        return float(text)
    except ValueError:
        raise InvalidAttributeError(name, value) from None


def parse_stroke_width(value: str) -> int:
    """Parse a stroke width, dropping unit suffixes.

    Only digits and ``.`` are kept (``"2px"`` -> 2).  The number is
    truncated and saturated to ``[0, 255]``.

    Raises
    ------
    InvalidAttributeError
        If nothing numeric remains.
    """
    digits = "".join(c for c in value if c.isdigit() or c == ".")
    try:
        width = float(digits)
    except ValueError:
        raise InvalidAttributeError("stroke-width", value) from None
    return int(min(max(width, 0.0), 255.0))


def parse_translation(transform: Optional[str]) -> Point:
    """Translation of the first ``translate()`` in a transform list.

    Other transform functions are validated and ignored.  ``ty`` defaults
    to 0.  An absent or blank attribute is the zero translation.  Function
    names are matched case-insensitively, as ``svgelements.Matrix`` does.

    Raises
    ------
    TransformError
        If the list is malformed, names an unsupported function, or a
        function has the wrong arity or a non-numeric argument.
    """
    if transform is None:
        return ORIGIN

    text = transform.lower()
    if REGEX_TRANSFORM_TEMPLATE.sub("", text).strip(_LIST_SEPARATORS):
        raise TransformError(f"Failed to parse transform: {transform!r}")

    translation: Optional[Point] = None
    for op, raw_args in REGEX_TRANSFORM_TEMPLATE.findall(text):
        if op not in _TRANSFORM_ARITY:
            raise TransformError(f"Unsupported transform {op!r}: {transform!r}")
        args = _ARG_SPLIT_RE.split(raw_args.strip())
        if any(REGEX_TRANSFORM_PARAMETER.fullmatch(a) is None for a in args):
            raise TransformError(
                f"Non-numeric {op} argument in transform: {transform!r}"
            )
        if len(args) not in _TRANSFORM_ARITY[op]:
            raise TransformError(
                f"{op} takes {' or '.join(map(str, _TRANSFORM_ARITY[op]))} "
                f"argument(s), got {len(args)}: {transform!r}"
            )
        if op == SVG_TRANSFORM_TRANSLATE and translation is None:
            tx, ty = (_length(a, transform) for a in (*args, "0")[:2])
            translation = Point(tx, ty)

    return translation if translation is not None else ORIGIN


def _length(value: str, transform: str) -> float:
    # Units that need a document context (%, em, mm, ...) stay unresolved.
    amount = Length(value).value()
    if not isinstance(amount, (int, float)):
        raise TransformError(f"Unsupported translate unit {value!r}: {transform!r}")
    return float(amount)


# ---------------------------------------------------------------------------
# Group style
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GroupStyle:
    """Inherited presentation values; ``None`` means unspecified."""

    opacity: Optional[float] = None
    fill: Optional[str] = None
    fill_opacity: Optional[float] = None
    stroke: Optional[str] = None
    stroke_opacity: Optional[float] = None
    stroke_width: Optional[int] = None

    def merged(self, attrs: Mapping[str, str]) -> GroupStyle:
        """Copy with a container's presentation attributes on top."""
        updates: dict[str, object] = {}
        if "opacity" in attrs:
            updates["opacity"] = parse_opacity("opacity", attrs["opacity"])
        if "fill" in attrs:
            updates["fill"] = attrs["fill"]
        if "fill-opacity" in attrs:
            updates["fill_opacity"] = parse_opacity("fill-opacity", attrs["fill-opacity"])
        if "stroke" in attrs:
            updates["stroke"] = attrs["stroke"]
        if "stroke-opacity" in attrs:
            updates["stroke_opacity"] = parse_opacity(
                "stroke-opacity", attrs["stroke-opacity"]
            )
        if "stroke-width" in attrs:
            updates["stroke_width"] = parse_stroke_width(attrs["stroke-width"])
        return replace(self, **updates) if updates else self


# ---------------------------------------------------------------------------
# Shape style
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ShapeStyle:
    """Quantized stroke and fill of a single shape."""

    stroke_width: int
    stroke_color: PaletteColor
    fill_color: PaletteColor


def _alpha(opacity: float, component: float, base: int) -> int:
    value = np.float32(opacity) * np.float32(component) * np.float32(base)
    if np.isnan(value):
        return 0
    return int(min(max(float(np.trunc(value)), 0.0), 255.0))


def resolve_paint(
    value: Optional[str],
    opacity: float,
    component_opacity: float,
    policy: ColorPolicy,
) -> PaletteColor:
    """Quantize a paint value with its effective opacity.

    Raises
    ------
    InvalidColorError
        If *value* is neither absent, ``none``/``transparent``, nor hex.
    """
    if value is None or value.strip().lower() in NO_PAINT:
        return PaletteColor.nothing()
    color = Color.from_hex(value)
    color = color.with_opacity(_alpha(opacity, component_opacity, color.a))
    return PaletteColor.from_color(color, policy)


def resolve_shape_style(
    group: GroupStyle,
    attrs: Mapping[str, str],
    policy: ColorPolicy,
) -> ShapeStyle:
    """Layer a shape's own style over *group* and quantize it.

    Parameters
    ----------
    group : GroupStyle
        Inherited style.
    attrs : Mapping[str, str]
        The shape's attributes (namespace-free names).
    policy : ColorPolicy
        Channel reduction policy.

    Returns
    -------
    ShapeStyle
        Palette colors and stroke width, after the palette rules.
    """
    own = parse_style_attribute(attrs.get("style"))
    own.update({k.lower(): v.lower() for k, v in attrs.items() if k != "style"})

    def number(name: str, inherited: Optional[float]) -> float:
        if name in own:
            return parse_opacity(name, own[name])
        return 1.0 if inherited is None else inherited

    opacity = number("opacity", group.opacity)
    stroke_opacity = number("stroke-opacity", group.stroke_opacity)
    fill_opacity = number("fill-opacity", group.fill_opacity)

    if "stroke-width" in own:
        stroke_width = parse_stroke_width(own["stroke-width"])
    elif group.stroke_width is not None:
        stroke_width = group.stroke_width
    else:
        stroke_width = DEFAULT_STROKE_WIDTH

    stroke = resolve_paint(
        own.get("stroke", group.stroke), opacity, stroke_opacity, policy
    )
    fill = resolve_paint(own.get("fill", group.fill), opacity, fill_opacity, policy)

    if fill.is_black:
        fill = PaletteColor.nothing()
    if stroke == PaletteColor.nothing():
        stroke_width = 0
    if stroke_width == 0:
        stroke = PaletteColor.nothing()

    return ShapeStyle(stroke_width=stroke_width, stroke_color=stroke, fill_color=fill)
