"""Allow running catly as `python -m catly`."""

import sys

from catly.cli import main

sys.exit(main())
