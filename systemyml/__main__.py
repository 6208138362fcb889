"""Allow running as ``python -m systemyml``."""

import sys

from .main import main

sys.exit(main())
