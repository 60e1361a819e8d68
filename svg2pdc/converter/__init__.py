"""SVG document to draw-command conversion.

Layers (lowest first):
    - path_data: path grammar and endpoint reduction
    - style: group style accumulation and shape style resolution
    - svg: the scene walker and the ``convert`` entry points
"""

from svg2pdc.converter.svg import SvgConverter, convert, convert_file

__all__ = ["SvgConverter", "convert", "convert_file"]
