"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Atomic I/O and YAML loading (fs)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (converter, pdc, scripts).

Convenience imports:
    from svg2pdc.utils import fs
    from svg2pdc.utils.logging_config import setup_logging, push_context
"""

from . import fs
from . import logging_config
