"""Central version metadata for bitcoin-exporter.

Resolution order for get_version():
1. Env override BITCOIN_EXPORTER_VERSION (e.g., injected by CI)
2. __version__ constant below
"""
from __future__ import annotations

import os

__version__ = "0.3.0"
PROGRAM_NAME = "bitcoin-exporter"

def get_version() -> str:
    return os.environ.get("BITCOIN_EXPORTER_VERSION", __version__)

__all__ = ["__version__", "PROGRAM_NAME", "get_version"]
