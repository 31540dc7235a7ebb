"""Nodepool Exporter - Prometheus exporter for nodepool availability."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("nodepool-exporter")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source without pip install)
    __version__ = "0.0.0.dev0"

# Re-export core public API
from nodepool_exporter.app import main
from nodepool_exporter.collector import NodepoolCollector, Target

# NOTE: Update this list when adding new exports to this module.
__all__ = [
    "__version__",
    "NodepoolCollector",
    "Target",
    "main",
]
