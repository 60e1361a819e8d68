"""``python -m svg2pdc``."""

from svg2pdc.scripts.convert import main

raise SystemExit(main())
