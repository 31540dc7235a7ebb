"""Allow running the exporter with ``python -m nodepool_exporter``."""

import sys

from nodepool_exporter.app import main

sys.exit(main())
