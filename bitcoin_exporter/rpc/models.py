"""Typed views of the Bitcoin Core RPC replies the exporter consumes.

Each model is built from the raw JSON `result` with `from_json`; a reply that
lacks a required field raises RpcDecodeError so the calling collector treats
it like any other failed call. Optional fields (present only in some daemon
versions or configurations) stay None.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..utils.exceptions import RpcDecodeError

SATOSHIS_PER_BTC = 100_000_000


def _require(obj: Any, key: str, model: str) -> Any:
    if not isinstance(obj, Mapping):
        raise RpcDecodeError(f"{model}: expected object, got {type(obj).__name__}")
    try:
        return obj[key]
    except KeyError:
        raise RpcDecodeError(f"{model}: missing field {key!r}") from None


def _number(obj: Any, key: str, model: str) -> float:
    v = _require(obj, key, model)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise RpcDecodeError(f"{model}: field {key!r} is not a number")
    return v


def _optional_number(obj: Mapping[str, Any], key: str) -> float | None:
    v = obj.get(key)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return v


@dataclass(frozen=True)
class NetworkInfo:
    version: int
    subversion: str
    protocol_version: int
    connections: int
    connections_in: int | None
    connections_out: int | None
    warnings: tuple[str, ...]

    @classmethod
    def from_json(cls, obj: Any) -> NetworkInfo:
        m = "getnetworkinfo"
        raw_warnings = obj.get("warnings", "") if isinstance(obj, Mapping) else ""
        # Older daemons report a single string, newer ones a list of strings.
        if isinstance(raw_warnings, str):
            warnings = (raw_warnings,) if raw_warnings else ()
        elif isinstance(raw_warnings, list):
            warnings = tuple(str(w) for w in raw_warnings if w)
        else:
            warnings = ()
        return cls(
            version=int(_number(obj, "version", m)),
            subversion=str(obj.get("subversion", "")),
            protocol_version=int(_number(obj, "protocolversion", m)),
            connections=int(_number(obj, "connections", m)),
            connections_in=_opt_int(obj, "connections_in"),
            connections_out=_opt_int(obj, "connections_out"),
            warnings=warnings,
        )


def _opt_int(obj: Mapping[str, Any], key: str) -> int | None:
    v = _optional_number(obj, key)
    return None if v is None else int(v)


@dataclass(frozen=True)
class BlockchainInfo:
    chain: str
    blocks: int
    best_block_hash: str
    difficulty: float
    size_on_disk: int
    verification_progress: float

    @classmethod
    def from_json(cls, obj: Any) -> BlockchainInfo:
        m = "getblockchaininfo"
        return cls(
            chain=str(_require(obj, "chain", m)),
            blocks=int(_number(obj, "blocks", m)),
            best_block_hash=str(_require(obj, "bestblockhash", m)),
            difficulty=float(_number(obj, "difficulty", m)),
            size_on_disk=int(_number(obj, "size_on_disk", m)),
            verification_progress=float(_number(obj, "verificationprogress", m)),
        )


@dataclass(frozen=True)
class BlockStats:
    height: int
    total_size: int
    txs: int
    total_weight: int
    ins: int
    outs: int
    total_out: int  # satoshis
    total_fee: int  # satoshis

    @classmethod
    def from_json(cls, obj: Any) -> BlockStats:
        m = "getblockstats"
        return cls(
            height=int(_number(obj, "height", m)),
            total_size=int(_number(obj, "total_size", m)),
            txs=int(_number(obj, "txs", m)),
            total_weight=int(_number(obj, "total_weight", m)),
            ins=int(_number(obj, "ins", m)),
            outs=int(_number(obj, "outs", m)),
            total_out=int(_number(obj, "total_out", m)),
            total_fee=int(_number(obj, "totalfee", m)),
        )

    @property
    def total_out_btc(self) -> float:
        return self.total_out / SATOSHIS_PER_BTC

    @property
    def total_fee_btc(self) -> float:
        return self.total_fee / SATOSHIS_PER_BTC


@dataclass(frozen=True)
class SmartFeeEstimate:
    blocks: int
    fee_rate_btc_per_kvb: float | None
    errors: tuple[str, ...] = ()

    @classmethod
    def from_json(cls, obj: Any) -> SmartFeeEstimate:
        m = "estimatesmartfee"
        errors = obj.get("errors") if isinstance(obj, Mapping) else None
        return cls(
            blocks=int(_number(obj, "blocks", m)),
            fee_rate_btc_per_kvb=_optional_number(obj, "feerate"),
            errors=tuple(str(e) for e in errors) if isinstance(errors, list) else (),
        )

    @property
    def fee_rate_sat_per_kvb(self) -> int | None:
        if self.fee_rate_btc_per_kvb is None:
            return None
        return round(self.fee_rate_btc_per_kvb * SATOSHIS_PER_BTC)


@dataclass(frozen=True)
class BannedPeer:
    address: str
    ban_created: int
    banned_until: int
    ban_reason: str | None = None

    @classmethod
    def from_json(cls, obj: Any) -> BannedPeer:
        m = "listbanned"
        reason = obj.get("ban_reason") if isinstance(obj, Mapping) else None
        return cls(
            address=str(_require(obj, "address", m)),
            ban_created=int(_number(obj, "ban_created", m)),
            banned_until=int(_number(obj, "banned_until", m)),
            ban_reason=str(reason) if reason else None,
        )


@dataclass(frozen=True)
class ChainTxStats:
    txcount: int

    @classmethod
    def from_json(cls, obj: Any) -> ChainTxStats:
        return cls(txcount=int(_number(obj, "txcount", "getchaintxstats")))


@dataclass(frozen=True)
class ChainTip:
    height: int
    hash: str
    branchlen: int
    status: str

    @classmethod
    def from_json(cls, obj: Any) -> ChainTip:
        m = "getchaintips"
        return cls(
            height=int(_number(obj, "height", m)),
            hash=str(_require(obj, "hash", m)),
            branchlen=int(_number(obj, "branchlen", m)),
            status=str(_require(obj, "status", m)),
        )


@dataclass(frozen=True)
class LockedMemoryInfo:
    used: int
    free: int
    total: int
    locked: int
    chunks_used: int
    chunks_free: int

    @classmethod
    def from_json(cls, obj: Any) -> LockedMemoryInfo:
        m = "getmemoryinfo"
        locked = _require(obj, "locked", m)
        return cls(
            used=int(_number(locked, "used", m)),
            free=int(_number(locked, "free", m)),
            total=int(_number(locked, "total", m)),
            locked=int(_number(locked, "locked", m)),
            chunks_used=int(_number(locked, "chunks_used", m)),
            chunks_free=int(_number(locked, "chunks_free", m)),
        )


@dataclass(frozen=True)
class MempoolInfo:
    size: int
    bytes: int
    usage: int
    unbroadcast_count: int | None

    @classmethod
    def from_json(cls, obj: Any) -> MempoolInfo:
        m = "getmempoolinfo"
        return cls(
            size=int(_number(obj, "size", m)),
            bytes=int(_number(obj, "bytes", m)),
            usage=int(_number(obj, "usage", m)),
            unbroadcast_count=_opt_int(obj, "unbroadcastcount"),
        )


@dataclass(frozen=True)
class NetTotals:
    total_bytes_recv: int
    total_bytes_sent: int

    @classmethod
    def from_json(cls, obj: Any) -> NetTotals:
        m = "getnettotals"
        return cls(
            total_bytes_recv=int(_number(obj, "totalbytesrecv", m)),
            total_bytes_sent=int(_number(obj, "totalbytessent", m)),
        )


__all__ = [
    "SATOSHIS_PER_BTC",
    "NetworkInfo",
    "BlockchainInfo",
    "BlockStats",
    "SmartFeeEstimate",
    "BannedPeer",
    "ChainTxStats",
    "ChainTip",
    "LockedMemoryInfo",
    "MempoolInfo",
    "NetTotals",
]
