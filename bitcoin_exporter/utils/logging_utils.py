"""Unified logging utilities for bitcoin-exporter."""
from __future__ import annotations

import logging
import sys

from .env_flags import is_truthy_env

DEFAULT_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
# Minimal console format (message only), enabled with BITCOIN_EXPORTER_MINIMAL_CONSOLE=1.
MINIMAL_CONSOLE_FORMAT = '%(message)s'

SUPPRESSED_LOGGERS = [
    'urllib3', 'requests',
]

def setup_logging(level: str = 'INFO', log_file: str | None = None, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure root logging.

    Console handler goes to stderr with DEFAULT_FORMAT unless a custom fmt is
    passed or the minimal console env flag is set. File handler (if a path is
    given) always uses DEFAULT_FORMAT. Calling again replaces the previous
    handlers instead of stacking them.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()

    if fmt == DEFAULT_FORMAT and is_truthy_env('BITCOIN_EXPORTER_MINIMAL_CONSOLE'):
        console_fmt = MINIMAL_CONSOLE_FORMAT
    else:
        console_fmt = fmt

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level)
    console.setFormatter(logging.Formatter(console_fmt))
    root.addHandler(console)

    if log_file:
        fh = logging.FileHandler(log_file, encoding='utf-8')
        fh.setLevel(log_level)
        fh.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(fh)

    # Third-party chatter stays at WARNING even in verbose mode.
    for name in SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return root

__all__ = ['setup_logging', 'DEFAULT_FORMAT', 'MINIMAL_CONSOLE_FORMAT']
