"""Fee-rate and network hash-rate collectors.

Each horizon/window is its own RPC call and its own gauge; one failing call
only skips that gauge.
"""
from __future__ import annotations

from ..metrics.descriptors import HASHPS_WINDOWS, SMART_FEE_TARGETS
from ..metrics.registry import MetricsRegistry
from ..rpc.client import RpcApi
from ..utils.exceptions import NoEstimateError
from .base import Collector
from .context import ScrapeContext


def _fee_rate(rpc: RpcApi, target: int) -> int:
    est = rpc.estimate_smart_fee(target)
    rate = est.fee_rate_sat_per_kvb
    if rate is None:
        detail = "; ".join(est.errors) or "no feerate in reply"
        raise NoEstimateError(f"estimatesmartfee({target}): {detail}")
    return rate


class SmartFeeCollector(Collector):
    name = "smart_fee"

    def __init__(self, targets: tuple[int, ...] = SMART_FEE_TARGETS) -> None:
        self.targets = targets

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        for target in self.targets:
            rate = ctx.attempt(f"estimatesmartfee({target})", _fee_rate, rpc, target)
            if rate is not None:
                metrics.set(f"bitcoin_est_smart_fee_{target}", rate)


class HashRateCollector(Collector):
    name = "hashrate"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        for metric_name, nblocks, _doc in HASHPS_WINDOWS:
            hashps = ctx.attempt(f"getnetworkhashps({nblocks})", rpc.get_network_hash_ps, nblocks)
            if hashps is not None:
                metrics.set(metric_name, hashps)


__all__ = ["SmartFeeCollector", "HashRateCollector"]
