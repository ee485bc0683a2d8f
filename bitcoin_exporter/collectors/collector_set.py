"""Ordered collector set.

Runs every collector sequentially against the shared registry. RPC failures
never escape a collector (see ScrapeContext.attempt); an RpcError raised
directly by a collector is also absorbed here so the remaining collectors
still run. Any other exception is a programming error and propagates.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from ..metrics.registry import MetricsRegistry
from ..rpc.client import RpcApi
from ..utils.exceptions import RpcError
from .base import Collector
from .bans import BanListCollector
from .context import ScrapeContext
from .network import HashRateCollector, SmartFeeCollector
from .node import LatestBlockCollector, NodeStatusCollector
from .stats import (
    ChainTipsCollector,
    ChainTxStatsCollector,
    MemoryInfoCollector,
    MempoolInfoCollector,
    NetTotalsCollector,
)

logger = logging.getLogger(__name__)


def default_collectors() -> list[Collector]:
    return [
        NodeStatusCollector(),
        LatestBlockCollector(),
        SmartFeeCollector(),
        HashRateCollector(),
        BanListCollector(),
        ChainTxStatsCollector(),
        ChainTipsCollector(),
        MemoryInfoCollector(),
        MempoolInfoCollector(),
        NetTotalsCollector(),
    ]


class CollectorSet:
    def __init__(self, collectors: Iterable[Collector] | None = None) -> None:
        self._collectors: tuple[Collector, ...] = tuple(
            default_collectors() if collectors is None else collectors)
        names = [c.name for c in self._collectors]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate collector names: {names}")

    @property
    def names(self) -> list[str]:
        return [c.name for c in self._collectors]

    def __len__(self) -> int:
        return len(self._collectors)

    def run(self, rpc: RpcApi, metrics: MetricsRegistry) -> ScrapeContext:
        ctx = ScrapeContext(metrics)
        for collector in self._collectors:
            with ctx.time_phase(collector.name):
                try:
                    collector.run(rpc, metrics, ctx)
                except RpcError as e:
                    ctx.record_failure(collector.name, e)
        ctx.emit_consolidated_log()
        return ctx


__all__ = ["CollectorSet", "default_collectors"]
