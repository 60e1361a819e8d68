"""PDC draw commands -- the vocabulary between the scene walker and the encoder.

Every command is an immutable, slotted dataclass.  The command set is
closed and fixed by the wire format, so ``DrawCommand`` is a union of the
two variants rather than an open base class.

Coordinates
-----------
Points are stored as ``DevicePoint`` *without* the accumulated group
translation.  The translation travels in ``DrawOptions.translate`` and is
applied by the encoder, which re-quantizes every point with the command's
precision and grid policy.

Ordering
--------
``Image.commands`` order is serialization order and has no other meaning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Union

from svg2pdc.geometry import ORIGIN, DevicePoint, GridPolicy, Point, Precision

# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DrawOptions:
    """Per-command style and quantization settings.

    Parameters
    ----------
    translate : Point
        Source-space offset added to every point at encode time.
    stroke_width : int
        Stroke width in pixels, 0..255.  0 means no stroke.
    stroke_color, fill_color : int
        Packed ``PaletteColor`` bytes.  0 means nothing.
    precision : Precision
        Grid used for this command's points.
    grid_policy : GridPolicy
        Off-grid handling when the encoder re-quantizes translated points.
    """

    translate: Point = ORIGIN
    stroke_width: int = 0
    stroke_color: int = 0
    fill_color: int = 0
    precision: Precision = Precision.NORMAL
    grid_policy: GridPolicy = GridPolicy.REQUIRE_EXACT

    def __post_init__(self) -> None:
        for name in ("stroke_width", "stroke_color", "fill_color"):
            val = getattr(self, name)
            if not 0 <= val <= 0xFF:
                raise ValueError(f"DrawOptions {name} must be in [0, 255], got {val}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PathCommand:
    """Polyline or polygon.

    Parameters
    ----------
    points : tuple[DevicePoint, ...]
        Ordered vertices.  A closed path does not repeat its first vertex.
    open : bool
        ``False`` when the display should join the last vertex to the first.
    options : DrawOptions
        Style and quantization settings.
    """

    points: tuple[DevicePoint, ...]
    open: bool
    options: DrawOptions = field(default_factory=DrawOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))


@dataclass(frozen=True, slots=True)
class CircleCommand:
    """Circle; always encoded at normal precision."""

    center: DevicePoint
    radius: int
    options: DrawOptions = field(default_factory=DrawOptions)

    def __post_init__(self) -> None:
        if not 0 <= self.radius <= 0xFFFF:
            raise ValueError(f"Circle radius must be in [0, 65535], got {self.radius}")


DrawCommand = Union[PathCommand, CircleCommand]
"""One draw command; the set of variants is closed."""


# ---------------------------------------------------------------------------
# Image
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Image:
    """Draw-command image: device size plus ordered commands."""

    size: DevicePoint
    commands: tuple[DrawCommand, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "commands", tuple(self.commands))

    def serialize(self, sink: BinaryIO) -> None:
        """Write the ``PDCI`` container to a binary *sink*.

        Raises
        ------
        EncodeError
            If a count or value does not fit its wire field.
        InvalidPointError
            If a translated point is off-grid under ``REQUIRE_EXACT``.
        OSError
            Propagated from *sink*.
        """
        from svg2pdc.pdc.encoder import PDCEncoder

        PDCEncoder().write(self, sink)

    def to_bytes(self) -> bytes:
        from svg2pdc.pdc.encoder import PDCEncoder

        return PDCEncoder().encode(self)

    def describe(self) -> str:
        """Human-readable listing of the image (verbose output)."""
        lines = [f"Size: ({self.size.x}, {self.size.y})", "Commands:"]
        for command in self.commands:
            lines.extend(_describe_command(command))
        return "\n".join(lines)


def _describe_command(command: DrawCommand) -> list[str]:
    opts = command.options
    if isinstance(command, PathCommand):
        lines = ["Path:", "  Points (translated):"]
        for point in command.points:
            lines.append(f"    {point.to_point(opts.precision) + opts.translate!r}")
        lines.append(f"  Open: {command.open}")
    else:
        center = command.center.to_point(Precision.NORMAL) + opts.translate
        lines = ["Circle:", f"  Center: {center!r}", f"  Radius: {command.radius}"]
    lines.extend([
        "  Options:",
        f"    Translate: {opts.translate!r}",
        f"    Stroke Width: {opts.stroke_width}",
        f"    Stroke Color: {opts.stroke_color}",
        f"    Fill Color: {opts.fill_color}",
        f"    Precision: {opts.precision.value}",
        f"    Grid Policy: {opts.grid_policy.value}",
    ])
    return lines
