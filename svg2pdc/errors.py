"""Failure taxonomy for SVG → PDC conversion.

Every failure surfaced by :func:`svg2pdc.convert` derives from
:class:`ConversionError`, so callers can catch one type.  Conversion is
all-or-nothing: the first error aborts the whole document.

Only two situations are *not* errors: unsupported element tags (logged and
skipped) and off-grid coordinates under the lenient grid policies (snapped,
optionally with a warning).
"""

from __future__ import annotations

from typing import Any


class ConversionError(Exception):
    """Base class for every conversion and encoding failure."""

    pass


class DocumentParseError(ConversionError):
    """The source document is not well-formed XML."""

    pass


class InvalidColorError(ConversionError):
    """A paint value is not a supported ``#RRGGBB`` / ``#RRGGBBAA`` color."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid color string: {value!r}")
        self.value = value


class InvalidViewBoxError(ConversionError):
    """The root ``viewBox`` (or its width/height fallback) is unusable."""

    pass


class UnsupportedCircleError(ConversionError):
    """A circle is missing its center or radius, or they are not numbers."""

    pass


class InvalidPointListError(ConversionError):
    """A point list or shape corner attribute cannot be parsed."""

    pass


class InvalidAttributeError(ConversionError):
    """A numeric presentation attribute cannot be resolved."""

    def __init__(self, name: str, value: str) -> None:
        super().__init__(f"Invalid value for attribute {name!r}: {value!r}")
        self.name = name
        self.value = value


class PathDataError(ConversionError):
    """Path data (the ``d`` attribute) is malformed."""

    pass


class TransformError(ConversionError):
    """A ``transform`` attribute is malformed."""

    pass


class InvalidPointError(ConversionError):
    """A coordinate is off the device grid under the strict grid policy.

    Parameters
    ----------
    point : Point
        The offending source-space point.
    nearest : Point
        The nearest point that lies on the grid.
    """

    def __init__(self, point: Any, nearest: Any) -> None:
        super().__init__(
            f"Invalid point. Point: {point!r}, nearest valid: {nearest!r}"
        )
        self.point = point
        self.nearest = nearest


class UnsupportedOperationError(ConversionError):
    """An operation the converter deliberately does not implement."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Unsupported operation: {operation!r}")
        self.operation = operation


class EncodeError(ConversionError):
    """A value does not fit its field in the binary layout."""

    pass
