"""PDC draw-command model and binary encoder."""

from svg2pdc.pdc.commands import CircleCommand, DrawCommand, DrawOptions, Image, PathCommand
from svg2pdc.pdc.encoder import PDCEncoder

__all__ = [
    "CircleCommand",
    "DrawCommand",
    "DrawOptions",
    "Image",
    "PathCommand",
    "PDCEncoder",
]
