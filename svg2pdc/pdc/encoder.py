"""PDC encoder -- draw-command images to the ``PDCI`` binary container.

Container layout (little-endian throughout)::

    "PDCI" | payload_length:u32 | payload

    payload = version:u8 (=1) | reserved:u8 (=0)
            | size.x:u16 | size.y:u16 | command_count:u16
            | command[command_count]

Commands::

    path   = type(1|3) | 0 | stroke_color | stroke_width | fill_color
             | open:u8 | 0 | point_count:u16 | (x:u16, y:u16) * point_count
    circle = type(2)   | 0 | stroke_color | stroke_width | fill_color
             | radius:u16 | center.x:u16 | center.y:u16

Translation:
    Commands carry their points untranslated.  The encoder maps every
    stored point back to source space, adds ``DrawOptions.translate`` and
    quantizes again with the command's precision and grid policy, so an
    off-grid translation is subject to the same policy as the shape itself.
    Circle centers are always quantized at normal precision.
"""

from __future__ import annotations

import logging
import struct
from io import BytesIO
from typing import BinaryIO

from svg2pdc.errors import EncodeError
from svg2pdc.geometry import DevicePoint, Precision, to_device_point
from svg2pdc.pdc.commands import CircleCommand, DrawCommand, DrawOptions, Image, PathCommand

logger = logging.getLogger(__name__)

MAGIC = b"PDCI"
DRAW_COMMAND_VERSION = 1

TYPE_PATH = 1
TYPE_CIRCLE = 2
TYPE_PRECISE_PATH = 3

_U16_MAX = 0xFFFF

_CONTAINER = struct.Struct("<4sI")
_HEADER = struct.Struct("<BBHHH")
_PATH_HEAD = struct.Struct("<BBBBBBBH")
_CIRCLE = struct.Struct("<BBBBBHHH")
_POINT = struct.Struct("<HH")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _translated(point: DevicePoint, opts: DrawOptions, precision: Precision) -> DevicePoint:
    """Re-quantize a stored point with the command's translation applied."""
    source = point.to_point(precision) + opts.translate
    return to_device_point(source, precision, opts.grid_policy)


def _check_count(what: str, count: int) -> None:
    if count > _U16_MAX:
        raise EncodeError(f"Too many {what}: {count} exceeds {_U16_MAX}")


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------


class PDCEncoder:
    """Serialize ``Image`` objects to PDC bytes.

    The encoder is stateless; one instance can encode any number of
    images.
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encode(self, image: Image) -> bytes:
        """Encode *image* to a complete ``PDCI`` container.

        Parameters
        ----------
        image : Image
            Image to serialize.

        Returns
        -------
        bytes
            Magic, payload length and payload.

        Raises
        ------
        EncodeError
            If the command count or a point count exceeds 65535.
        InvalidPointError
            If a translated point is off-grid under ``REQUIRE_EXACT``.
        """
        _check_count("commands", len(image.commands))
        buf = BytesIO()
        buf.write(
            _HEADER.pack(
                DRAW_COMMAND_VERSION, 0, image.size.x, image.size.y, len(image.commands)
            )
        )
        for command in image.commands:
            buf.write(self.encode_command(command))

        payload = buf.getvalue()
        logger.debug(
            "Encoded %d command(s), payload %d bytes", len(image.commands), len(payload)
        )
        return _CONTAINER.pack(MAGIC, len(payload)) + payload

    def write(self, image: Image, sink: BinaryIO) -> None:
        """Encode *image* and write it to *sink*.

        The image is fully encoded before the first write, so an encoding
        failure leaves *sink* untouched.  ``OSError`` from *sink* propagates.
        """
        sink.write(self.encode(image))

    def encode_command(self, command: DrawCommand) -> bytes:
        """Encode a single draw command (no container framing)."""
        if isinstance(command, PathCommand):
            return self._encode_path(command)
        if isinstance(command, CircleCommand):
            return self._encode_circle(command)
        raise EncodeError(f"Unsupported draw command: {type(command).__name__}")

    # ------------------------------------------------------------------
    # Individual encoders
    # ------------------------------------------------------------------

    def _encode_path(self, command: PathCommand) -> bytes:
        opts = command.options
        _check_count("path points", len(command.points))
        kind = TYPE_PRECISE_PATH if opts.precision is Precision.PRECISE else TYPE_PATH

        buf = BytesIO()
        buf.write(
            _PATH_HEAD.pack(
                kind,
                0,
                opts.stroke_color,
                opts.stroke_width,
                opts.fill_color,
                1 if command.open else 0,
                0,
                len(command.points),
            )
        )
        for point in command.points:
            device = _translated(point, opts, opts.precision)
            buf.write(_POINT.pack(device.x, device.y))
        return buf.getvalue()

    def _encode_circle(self, command: CircleCommand) -> bytes:
        opts = command.options
        center = _translated(command.center, opts, Precision.NORMAL)
        return _CIRCLE.pack(
            TYPE_CIRCLE,
            0,
            opts.stroke_color,
            opts.stroke_width,
            opts.fill_color,
            command.radius,
            center.x,
            center.y,
        )
