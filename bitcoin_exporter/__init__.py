"""Prometheus exporter for Bitcoin Core node metrics."""
from .version import __version__

__all__ = ["__version__"]
