"""Source-space points and device-grid quantization.

The target display addresses pixels on a fixed sub-pixel grid:

    - ``Precision.NORMAL`` snaps to multiples of 0.5
    - ``Precision.PRECISE`` snaps to multiples of 0.125 and stores the
      result pre-scaled by 8

Quantization (``to_device_point``)::

    nearest = round(p * k) / k            # k = 2 (normal) or 8 (precise)
    p       = grid_policy(p, nearest)     # snap, warn+snap or reject
    d       = round(p - (0.5, 0.5))       # pixel centre → pixel index
    d       = d * 8   (precise only)
    device  = saturate_u16(d)

All arithmetic is single precision (``numpy.float32``) and ``round`` adds
``float32`` machine epsilon before rounding half away from zero.  Both are
legacy behaviours of the existing PDC tooling and are externally observable in
the emitted bytes, so they must not be "fixed".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from svg2pdc.errors import InvalidPointError

logger = logging.getLogger(__name__)

_EPSILON = np.finfo(np.float32).eps
_HALF = np.float32(0.5)
_ONE = np.float32(1.0)

PRECISE_SCALE = np.float32(8.0)
U16_MAX = 0xFFFF


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


class Precision(str, Enum):
    """Snapping grid granularity."""

    NORMAL = "normal"
    PRECISE = "precise"

    @property
    def grid(self) -> np.float32:
        """Grid steps per pixel (2 for normal, 8 for precise)."""
        return np.float32(2.0) if self is Precision.NORMAL else np.float32(8.0)


class GridPolicy(str, Enum):
    """What to do with a coordinate that is not on the snapping grid."""

    CONVERT_SILENTLY = "convert_silently"
    CONVERT_WITH_WARNING = "convert_with_warning"
    REQUIRE_EXACT = "require_exact"


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


def round_half_away(value: np.float32) -> np.float32:
    """Round a float32 after biasing it by float32 epsilon.

    Ties round away from zero.  The epsilon is added in single precision,
    so it is absorbed for magnitudes above ~1.
    """
    biased = np.float32(np.float32(value) + _EPSILON)
    whole = np.trunc(biased)
    if abs(biased - whole) >= _HALF:
        whole = whole + np.copysign(_ONE, biased)
    return np.float32(whole)


def _saturate_u16(value: np.float32) -> int:
    if np.isnan(value):
        return 0
    return int(min(max(float(value), 0.0), float(U16_MAX)))


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Point:
    """Source-space point with single-precision coordinates."""

    x: np.float32
    y: np.float32

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", np.float32(self.x))
        object.__setattr__(self, "y", np.float32(self.y))

    def __repr__(self) -> str:
        return f"Point(x={float(self.x):g}, y={float(self.y):g})"

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point:
        k = np.float32(factor)
        return Point(self.x * k, self.y * k)

    def __truediv__(self, divisor: float) -> Point:
        k = np.float32(divisor)
        return Point(self.x / k, self.y / k)

    def round(self) -> Point:
        return Point(round_half_away(self.x), round_half_away(self.y))

    def floor(self) -> Point:
        return Point(np.floor(self.x), np.floor(self.y))

    def nearest_valid(self, precision: Precision) -> Point:
        """Nearest point on the snapping grid of *precision*."""
        k = precision.grid
        return (self * k).round() / k

    def to_device(
        self,
        precision: Precision = Precision.NORMAL,
        policy: GridPolicy = GridPolicy.REQUIRE_EXACT,
    ) -> DevicePoint:
        return to_device_point(self, precision, policy)


ORIGIN = Point(0.0, 0.0)
_PIXEL_CENTRE = Point(-0.5, -0.5)


@dataclass(frozen=True, slots=True)
class DevicePoint:
    """Unsigned 16-bit device coordinates; the only serialized form."""

    x: int
    y: int

    def __post_init__(self) -> None:
        for name, val in (("x", self.x), ("y", self.y)):
            if not 0 <= val <= U16_MAX:
                raise ValueError(
                    f"DevicePoint {name} must be in [0, {U16_MAX}], got {val}"
                )

    def to_point(self, precision: Precision = Precision.NORMAL) -> Point:
        """Map back to source space (precise coordinates are pre-scaled)."""
        point = Point(self.x, self.y)
        if precision is Precision.PRECISE:
            return point / PRECISE_SCALE
        return point


# ---------------------------------------------------------------------------
# Quantization
# ---------------------------------------------------------------------------


def to_device_point(
    point: Point,
    precision: Precision = Precision.NORMAL,
    policy: GridPolicy = GridPolicy.REQUIRE_EXACT,
) -> DevicePoint:
    """Quantize a source-space point onto the device grid.

    Parameters
    ----------
    point : Point
        Source-space coordinates.
    precision : Precision
        Snapping grid (0.5 for normal, 0.125 for precise).
    policy : GridPolicy
        Handling of points that are not already on the grid.

    Returns
    -------
    DevicePoint
        Device coordinates, pre-scaled by 8 for precise mode.  Negative and
        overflowing values saturate to ``[0, 65535]``.

    Raises
    ------
    InvalidPointError
        If *point* is off the grid and *policy* is ``REQUIRE_EXACT``.
    """
    nearest = point.nearest_valid(precision)
    if point != nearest:
        if policy is GridPolicy.REQUIRE_EXACT:
            raise InvalidPointError(point, nearest)
        if policy is GridPolicy.CONVERT_WITH_WARNING:
            logger.warning(
                "Point %r is not a valid device coordinate. "
                "Using nearest valid point %r",
                point,
                nearest,
            )
        point = nearest

    shifted = (point + _PIXEL_CENTRE).round()
    if precision is Precision.PRECISE:
        shifted = shifted * PRECISE_SCALE
    return DevicePoint(_saturate_u16(shifted.x), _saturate_u16(shifted.y))
