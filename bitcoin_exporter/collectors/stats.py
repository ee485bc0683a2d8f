"""Single-call node statistics collectors.

chain_tx_stats, chain_tips, memory_info, mempool_info and net_totals each
make exactly one RPC call and write its fields only when it succeeds.
"""
from __future__ import annotations

from ..metrics.registry import MetricsRegistry
from ..rpc.client import RpcApi
from .base import Collector
from .context import ScrapeContext


class ChainTxStatsCollector(Collector):
    name = "chain_tx_stats"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        stats = ctx.attempt("getchaintxstats", rpc.get_chain_tx_stats)
        if stats is not None:
            metrics.set("bitcoin_txcount", stats.txcount)


class ChainTipsCollector(Collector):
    name = "chain_tips"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        tips = ctx.attempt("getchaintips", rpc.get_chain_tips)
        if tips is not None:
            metrics.set("bitcoin_num_chaintips", len(tips))


class MemoryInfoCollector(Collector):
    name = "memory_info"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        mem = ctx.attempt("getmemoryinfo", rpc.get_memory_info)
        if mem is None:
            return
        metrics.set("bitcoin_meminfo_used", mem.used)
        metrics.set("bitcoin_meminfo_free", mem.free)
        metrics.set("bitcoin_meminfo_total", mem.total)
        metrics.set("bitcoin_meminfo_locked", mem.locked)
        metrics.set("bitcoin_meminfo_chunks_used", mem.chunks_used)
        metrics.set("bitcoin_meminfo_chunks_free", mem.chunks_free)


class MempoolInfoCollector(Collector):
    name = "mempool_info"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        pool = ctx.attempt("getmempoolinfo", rpc.get_mempool_info)
        if pool is None:
            return
        metrics.set("bitcoin_mempool_bytes", pool.bytes)
        metrics.set("bitcoin_mempool_size", pool.size)
        metrics.set("bitcoin_mempool_usage", pool.usage)
        if pool.unbroadcast_count is not None:
            metrics.set("bitcoin_mempool_unbroadcast", pool.unbroadcast_count)


class NetTotalsCollector(Collector):
    name = "net_totals"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        totals = ctx.attempt("getnettotals", rpc.get_net_totals)
        if totals is None:
            return
        metrics.set("bitcoin_total_bytes_recv", totals.total_bytes_recv)
        metrics.set("bitcoin_total_bytes_sent", totals.total_bytes_sent)


__all__ = [
    "ChainTxStatsCollector",
    "ChainTipsCollector",
    "MemoryInfoCollector",
    "MempoolInfoCollector",
    "NetTotalsCollector",
]
