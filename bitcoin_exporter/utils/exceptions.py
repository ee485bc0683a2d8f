"""bitcoin-exporter exception hierarchy.

A small exception tree separating routine, per-scrape failures (RPC errors,
swallowed by collectors) from programming errors (registry misuse) and
startup problems (configuration).
"""
from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter exceptions."""


class ConfigError(ExporterError):
    """Configuration file missing, unreadable or incomplete."""


class RpcError(ExporterError):
    """Any failure of a single daemon RPC call."""


class RpcTransportError(RpcError):
    """Connection, timeout or HTTP failure without a usable JSON-RPC reply."""


class RpcCallError(RpcError):
    """The daemon answered with a JSON-RPC error object."""

    def __init__(self, code: int | None, message: str, method: str | None = None) -> None:
        self.code = code
        self.message = message
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(f"{prefix}RPC error {code}: {message}")


class RpcDecodeError(RpcError):
    """The reply did not have the shape expected for the method."""


class NoEstimateError(RpcError):
    """estimatesmartfee succeeded but reported no fee rate."""


class RegistryError(ExporterError):
    """Metric registry misuse. Always a programming error."""


class DuplicateNameError(RegistryError):
    """A metric with the same name is already registered."""


class CounterDecreaseError(RegistryError):
    """A counter was asked to move backwards."""


class RegistryMisuseError(RegistryError):
    """Operation not valid for the metric kind or label schema."""


class EncoderError(ExporterError):
    """The registry could not be serialized to the exposition format."""


__all__ = [
    "ExporterError",
    "ConfigError",
    "RpcError",
    "RpcTransportError",
    "RpcCallError",
    "RpcDecodeError",
    "NoEstimateError",
    "RegistryError",
    "DuplicateNameError",
    "CounterDecreaseError",
    "RegistryMisuseError",
    "EncoderError",
]
