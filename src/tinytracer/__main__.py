"""Allow running the renderer with ``python -m tinytracer``."""

import sys

from tinytracer.app import main

sys.exit(main())
