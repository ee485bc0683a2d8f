"""Metric descriptor catalogue.

Data-driven description of every metric the exporter publishes. Descriptors
are immutable and registered once at startup by `build_registry()`; the
`group` field names the collector that owns the metric (exporter-internal
metrics use group "exporter").
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

__all__ = [
    "MetricDescriptor",
    "MetricType",
    "GAUGE",
    "COUNTER",
    "NODE_STATUS_DESCRIPTORS",
    "LATEST_BLOCK_DESCRIPTORS",
    "SMART_FEE_DESCRIPTORS",
    "HASHRATE_DESCRIPTORS",
    "BAN_DESCRIPTORS",
    "CHAIN_DESCRIPTORS",
    "MEMORY_DESCRIPTORS",
    "MEMPOOL_DESCRIPTORS",
    "NET_TOTALS_DESCRIPTORS",
    "EXPORTER_DESCRIPTORS",
    "ALL_DESCRIPTORS",
    "SMART_FEE_TARGETS",
    "HASHPS_WINDOWS",
    "descriptors_for_group",
]

MetricType = str  # "gauge" | "counter"
GAUGE: MetricType = "gauge"
COUNTER: MetricType = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    documentation: str
    mtype: MetricType
    labels: Sequence[str] = ()
    group: str = "exporter"

    def __post_init__(self) -> None:
        if self.mtype not in (GAUGE, COUNTER):
            raise ValueError(f"unsupported metric type {self.mtype!r} for {self.name}")
        # Normalize so equal schemas compare equal regardless of list/tuple input.
        object.__setattr__(self, "labels", tuple(self.labels))


def _g(name: str, doc: str, group: str, labels: Sequence[str] = ()) -> MetricDescriptor:
    return MetricDescriptor(name, doc, GAUGE, labels, group)


NODE_STATUS_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_uptime", "Number of seconds the Bitcoin daemon has been running", "node_status",
       ("version", "protocol", "chain")),
    _g("bitcoin_blocks", "Block height", "node_status"),
    _g("bitcoin_difficulty", "Difficulty", "node_status"),
    _g("bitcoin_size_on_disk", "Estimated size of the block and undo files", "node_status"),
    _g("bitcoin_verification_progress", "Estimate of verification progress [0..1]", "node_status"),
    _g("bitcoin_peers", "Number of peers", "node_status"),
    _g("bitcoin_conn_in", "Number of connections in", "node_status"),
    _g("bitcoin_conn_out", "Number of connections out", "node_status"),
    MetricDescriptor("bitcoin_warnings", "Number of network or blockchain warnings detected",
                     COUNTER, group="node_status"),
]

LATEST_BLOCK_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_latest_block_size", "Size of latest block in bytes", "latest_block"),
    _g("bitcoin_latest_block_txs", "Number of transactions in latest block", "latest_block"),
    _g("bitcoin_latest_block_height", "Height or index of latest block", "latest_block"),
    _g("bitcoin_latest_block_weight", "Weight of latest block according to BIP 141", "latest_block"),
    _g("bitcoin_latest_block_inputs", "Number of inputs in transactions of latest block", "latest_block"),
    _g("bitcoin_latest_block_outputs", "Number of outputs in transactions of latest block", "latest_block"),
    _g("bitcoin_latest_block_value", "Bitcoin value of all transactions in the latest block", "latest_block"),
    _g("bitcoin_latest_block_fee", "Total fee to process the latest block", "latest_block"),
]

SMART_FEE_TARGETS: tuple[int, ...] = (2, 3, 5, 20)

SMART_FEE_DESCRIPTORS: list[MetricDescriptor] = [
    _g(f"bitcoin_est_smart_fee_{t}",
       f"Estimated smart fee per kilobyte for confirmation in {t} blocks", "smart_fee")
    for t in SMART_FEE_TARGETS
]

# (metric name, getnetworkhashps nblocks, help)
HASHPS_WINDOWS: tuple[tuple[str, int, str], ...] = (
    ("bitcoin_hashps_neg1", -1, "Estimated network hash rate per second since the last difficulty change"),
    ("bitcoin_hashps_1", 1, "Estimated network hash rate per second for the last block"),
    ("bitcoin_hashps", 120, "Estimated network hash rate per second for the last 120 blocks"),
)

HASHRATE_DESCRIPTORS: list[MetricDescriptor] = [
    _g(name, doc, "hashrate") for name, _nblocks, doc in HASHPS_WINDOWS
]

BAN_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_ban_created", "Time the ban was created", "bans", ("address", "reason")),
    _g("bitcoin_banned_until", "Time the ban expires", "bans", ("address", "reason")),
]

CHAIN_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_txcount", "Number of TX since the genesis block", "chain_tx_stats"),
    _g("bitcoin_num_chaintips", "Number of known blockchain branches", "chain_tips"),
]

MEMORY_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_meminfo_used", "Number of bytes used", "memory_info"),
    _g("bitcoin_meminfo_free", "Number of bytes available", "memory_info"),
    _g("bitcoin_meminfo_total", "Number of bytes managed", "memory_info"),
    _g("bitcoin_meminfo_locked", "Number of bytes locked", "memory_info"),
    _g("bitcoin_meminfo_chunks_used", "Number of allocated chunks", "memory_info"),
    _g("bitcoin_meminfo_chunks_free", "Number of unused chunks", "memory_info"),
]

MEMPOOL_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_mempool_bytes", "Size of mempool in bytes", "mempool_info"),
    _g("bitcoin_mempool_size", "Number of unconfirmed transactions in mempool", "mempool_info"),
    _g("bitcoin_mempool_usage", "Total memory usage for the mempool", "mempool_info"),
    _g("bitcoin_mempool_unbroadcast", "Number of transactions waiting for acknowledgment", "mempool_info"),
]

NET_TOTALS_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_total_bytes_recv", "Total bytes received", "net_totals"),
    _g("bitcoin_total_bytes_sent", "Total bytes sent", "net_totals"),
]

EXPORTER_DESCRIPTORS: list[MetricDescriptor] = [
    _g("bitcoin_rpc_active", "Number of RPC calls being processed", "exporter"),
    MetricDescriptor("bitcoin_exporter_errors", "Number of errors encountered by the exporter",
                     COUNTER, ("type",), "exporter"),
    MetricDescriptor("bitcoin_exporter_process_time", "Time spent processing metrics from bitcoin node",
                     COUNTER, group="exporter"),
]

ALL_DESCRIPTORS: list[MetricDescriptor] = [
    *NODE_STATUS_DESCRIPTORS,
    *LATEST_BLOCK_DESCRIPTORS,
    *SMART_FEE_DESCRIPTORS,
    *HASHRATE_DESCRIPTORS,
    *BAN_DESCRIPTORS,
    *CHAIN_DESCRIPTORS,
    *MEMORY_DESCRIPTORS,
    *MEMPOOL_DESCRIPTORS,
    *NET_TOTALS_DESCRIPTORS,
    *EXPORTER_DESCRIPTORS,
]


def descriptors_for_group(group: str) -> list[MetricDescriptor]:
    return [d for d in ALL_DESCRIPTORS if d.group == group]
