"""Collector protocol.

A collector is a named, independent unit of scrape work. `run()` issues its
RPC calls through `ctx.attempt()` and writes derived values only for calls
that succeeded, so a failed call leaves the metrics it feeds untouched.
"""
from __future__ import annotations

from typing import Protocol

from ..metrics.registry import MetricsRegistry
from ..rpc.client import RpcApi
from .context import ScrapeContext


class Collector(Protocol):
    name: str = "collector"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


__all__ = ["Collector"]
