"""Allow running as python -m ticktrace."""

import sys

from ticktrace.cli import main

sys.exit(main())
