"""Test doubles shared across the suite."""
from __future__ import annotations

from bitcoin_exporter.rpc.models import (
    BannedPeer,
    BlockchainInfo,
    BlockStats,
    ChainTip,
    ChainTxStats,
    LockedMemoryInfo,
    MempoolInfo,
    NetTotals,
    NetworkInfo,
    SmartFeeEstimate,
)
from bitcoin_exporter.utils.exceptions import RpcCallError, RpcTransportError

BEST_HASH = "00000000000000000002a7c4c1e48d76c5a37902165a270156b7a8d72728a054"


def healthy_network_info(**overrides) -> NetworkInfo:
    base = dict(version=250000, subversion="/Satoshi:25.0.0/", protocol_version=70016,
                connections=10, connections_in=2, connections_out=8, warnings=())
    base.update(overrides)
    return NetworkInfo(**base)


def healthy_blockchain_info(**overrides) -> BlockchainInfo:
    base = dict(chain="main", blocks=800000, best_block_hash=BEST_HASH, difficulty=55e12,
                size_on_disk=550_000_000_000, verification_progress=0.9999)
    base.update(overrides)
    return BlockchainInfo(**base)


class FakeRpc:
    """In-memory stand-in for BitcoinRpcClient.

    `fail` holds method names that raise RpcTransportError; `calls` records
    every method invoked, in order, with its arguments.
    """

    def __init__(self, fail=(), **overrides) -> None:
        self.fail = set(fail)
        self.calls: list[tuple[str, tuple]] = []
        self.network_info = healthy_network_info()
        self.blockchain_info = healthy_blockchain_info()
        self.uptime_seconds = 86400
        self.block_stats = BlockStats(height=800000, total_size=1_500_000, txs=3000,
                                      total_weight=3_990_000, ins=7000, outs=9000,
                                      total_out=250_000_000_000, total_fee=12_500_000)
        self.fee_rates = {2: 0.00021, 3: 0.00015, 5: 0.0001, 20: 0.00005}
        self.hashps = {-1: 4.1e20, 1: 3.9e20, 120: 4.0e20}
        self.banned: list[BannedPeer] = [
            BannedPeer(address="10.0.0.1/32", ban_created=1700000000, banned_until=1700086400),
        ]
        self.txcount = 900_000_000
        self.chain_tips = [ChainTip(height=800000, hash=BEST_HASH, branchlen=0, status="active")]
        self.memory = LockedMemoryInfo(used=1024, free=64512, total=65536, locked=65536,
                                       chunks_used=4, chunks_free=1)
        self.mempool = MempoolInfo(size=5000, bytes=2_000_000, usage=9_000_000, unbroadcast_count=0)
        self.net_totals = NetTotals(total_bytes_recv=123456, total_bytes_sent=654321)
        for k, v in overrides.items():
            setattr(self, k, v)

    def _enter(self, method: str, *args):
        self.calls.append((method, args))
        if method in self.fail:
            raise RpcTransportError(f"{method}: connection refused")

    @property
    def methods_called(self) -> list[str]:
        return [m for m, _ in self.calls]

    def uptime(self) -> int:
        self._enter("uptime")
        return self.uptime_seconds

    def get_blockchain_info(self) -> BlockchainInfo:
        self._enter("getblockchaininfo")
        return self.blockchain_info

    def get_network_info(self) -> NetworkInfo:
        self._enter("getnetworkinfo")
        return self.network_info

    def get_block_stats(self, hash_or_height, stats=None) -> BlockStats:
        self._enter("getblockstats", hash_or_height)
        return self.block_stats

    def estimate_smart_fee(self, conf_target: int) -> SmartFeeEstimate:
        self._enter("estimatesmartfee", conf_target)
        rate = self.fee_rates.get(conf_target)
        if rate is None:
            return SmartFeeEstimate(blocks=conf_target, fee_rate_btc_per_kvb=None,
                                    errors=("Insufficient data or no feerate found",))
        return SmartFeeEstimate(blocks=conf_target, fee_rate_btc_per_kvb=rate)

    def get_network_hash_ps(self, nblocks: int = 120, height: int = -1) -> float:
        self._enter("getnetworkhashps", nblocks)
        if nblocks not in self.hashps:
            raise RpcCallError(-8, "Invalid nblocks", "getnetworkhashps")
        return self.hashps[nblocks]

    def list_banned(self) -> list[BannedPeer]:
        self._enter("listbanned")
        return list(self.banned)

    def get_chain_tx_stats(self) -> ChainTxStats:
        self._enter("getchaintxstats")
        return ChainTxStats(txcount=self.txcount)

    def get_chain_tips(self) -> list[ChainTip]:
        self._enter("getchaintips")
        return list(self.chain_tips)

    def get_memory_info(self) -> LockedMemoryInfo:
        self._enter("getmemoryinfo")
        return self.memory

    def get_mempool_info(self) -> MempoolInfo:
        self._enter("getmempoolinfo")
        return self.mempool

    def get_net_totals(self) -> NetTotals:
        self._enter("getnettotals")
        return self.net_totals


ALL_METHODS = (
    "uptime", "getblockchaininfo", "getnetworkinfo", "getblockstats", "estimatesmartfee",
    "getnetworkhashps", "listbanned", "getchaintxstats", "getchaintips", "getmemoryinfo",
    "getmempoolinfo", "getnettotals",
)


def parse_exposition(body: bytes) -> dict[str, dict[tuple, float]]:
    """Map family name -> {sorted label items: value} using prometheus_client's parser."""
    from prometheus_client.parser import text_string_to_metric_families

    out: dict[str, dict[tuple, float]] = {}
    for family in text_string_to_metric_families(body.decode("utf-8")):
        samples = out.setdefault(family.name, {})
        for s in family.samples:
            if s.name.endswith("_created"):
                continue
            samples[tuple(sorted(s.labels.items()))] = s.value
    return out
