"""Ban list collector.

Every ban the daemon reports upserts two gauges keyed by (address, reason).
Bans that disappear from the list (expired or removed) are not deleted from
the registry; their series keep the last reported values.
"""
from __future__ import annotations

from ..metrics.registry import MetricsRegistry
from ..rpc.client import RpcApi
from .base import Collector
from .context import ScrapeContext

DEFAULT_BAN_REASON = "manually added"


class BanListCollector(Collector):
    name = "bans"

    def run(self, rpc: RpcApi, metrics: MetricsRegistry, ctx: ScrapeContext) -> None:
        banned = ctx.attempt("listbanned", rpc.list_banned)
        if banned is None:
            return
        for ban in banned:
            labels = (ban.address, ban.ban_reason or DEFAULT_BAN_REASON)
            metrics.set("bitcoin_ban_created", ban.ban_created, labels)
            metrics.set("bitcoin_banned_until", ban.banned_until, labels)


__all__ = ["BanListCollector", "DEFAULT_BAN_REASON"]
