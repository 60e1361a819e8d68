"""SVG to PDC draw-command converter.

Converts SVG documents into the compact ``PDCI`` binary draw-command format
used by small palette displays.

Public API::

    from svg2pdc import convert, ColorPolicy, GridPolicy, Precision
    image = convert(svg_text, ColorPolicy.TRUNCATE, GridPolicy.REQUIRE_EXACT, Precision.NORMAL)
    with open("icon.pdc", "wb") as f:
        image.serialize(f)
"""

__version__ = "0.1.0"

from svg2pdc.color import Color, ColorPolicy, PaletteColor
from svg2pdc.converter import SvgConverter, convert, convert_file
from svg2pdc.errors import ConversionError
from svg2pdc.geometry import DevicePoint, GridPolicy, Point, Precision, to_device_point
from svg2pdc.pdc import CircleCommand, DrawOptions, Image, PathCommand, PDCEncoder

__all__ = [
    "__version__",
    "CircleCommand",
    "Color",
    "ColorPolicy",
    "ConversionError",
    "DevicePoint",
    "DrawOptions",
    "GridPolicy",
    "Image",
    "PaletteColor",
    "PathCommand",
    "PDCEncoder",
    "Point",
    "Precision",
    "SvgConverter",
    "convert",
    "convert_file",
    "to_device_point",
]
