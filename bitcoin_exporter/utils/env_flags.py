"""Environment flag helpers.

Interprets environment variables as boolean feature flags using the canonical
truthy set {"1","true","yes","on"} (case-insensitive), plus typed getters used
by the configuration overrides.
"""
from __future__ import annotations

import os

TRUTHY_SET: set[str] = {"1", "true", "yes", "on"}

def is_truthy(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in TRUTHY_SET

def is_truthy_env(name: str, default: str | None = None) -> bool:
    return is_truthy(os.getenv(name, default or ''))

def get_str(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == '':
        return default
    return v

def get_float(name: str, default: float | None = None) -> float | None:
    v = get_str(name)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        return default

__all__ = [
    'TRUTHY_SET',
    'is_truthy',
    'is_truthy_env',
    'get_str',
    'get_float',
]
