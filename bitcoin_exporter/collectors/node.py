"""Node status and latest-block collectors.

node_status
  getnetworkinfo, getblockchaininfo and uptime. The uptime gauge is labeled
  with values from the two info calls, so it needs all three; the blockchain
  gauges depend only on getblockchaininfo and the peer/warning metrics only
  on getnetworkinfo.

latest_block
  getblockchaininfo for the best block hash, then getblockstats. The eight
  block gauges are written together or not at all.
"""
from __future__ import annotations

import logging

from ..metrics.registry import MetricsRegistry
from ..rpc.client import RpcApi
from .base import Collector
from .context import ScrapeContext

logger = logging.getLogger(__name__)


class NodeStatusCollector(Collector):
    name = "node_status"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        network = ctx.attempt("getnetworkinfo", rpc.get_network_info)
        chain = ctx.attempt("getblockchaininfo", rpc.get_blockchain_info)

        if network is not None and chain is not None:
            uptime = ctx.attempt("uptime", rpc.uptime)
            if uptime is not None:
                metrics.set("bitcoin_uptime", uptime,
                            (str(network.version), str(network.protocol_version), chain.chain))

        if chain is not None:
            metrics.set("bitcoin_blocks", chain.blocks)
            metrics.set("bitcoin_difficulty", chain.difficulty)
            metrics.set("bitcoin_size_on_disk", chain.size_on_disk)
            metrics.set("bitcoin_verification_progress", chain.verification_progress)

        if network is not None:
            metrics.set("bitcoin_peers", network.connections)
            # Absent on some daemon versions; leave the gauge as it was.
            if network.connections_in is not None:
                metrics.set("bitcoin_conn_in", network.connections_in)
            if network.connections_out is not None:
                metrics.set("bitcoin_conn_out", network.connections_out)
            if network.warnings:
                logger.debug("daemon warnings: %s", "; ".join(network.warnings))
                metrics.increment("bitcoin_warnings")


class LatestBlockCollector(Collector):
    name = "latest_block"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        chain = ctx.attempt("getblockchaininfo", rpc.get_blockchain_info)
        if chain is None:
            return
        stats = ctx.attempt("getblockstats", rpc.get_block_stats, chain.best_block_hash)
        if stats is None:
            return
        metrics.set("bitcoin_latest_block_size", stats.total_size)
        metrics.set("bitcoin_latest_block_txs", stats.txs)
        metrics.set("bitcoin_latest_block_height", stats.height)
        metrics.set("bitcoin_latest_block_weight", stats.total_weight)
        metrics.set("bitcoin_latest_block_inputs", stats.ins)
        metrics.set("bitcoin_latest_block_outputs", stats.outs)
        metrics.set("bitcoin_latest_block_value", stats.total_out_btc)
        metrics.set("bitcoin_latest_block_fee", stats.total_fee_btc)


__all__ = ["NodeStatusCollector", "LatestBlockCollector"]
