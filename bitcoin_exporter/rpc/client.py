"""JSON-RPC client for Bitcoin Core.

Thin synchronous transport over `requests`: one HTTP POST per call with basic
auth, JSON-RPC 1.0 envelope, and typed result decoding via `models`.

Every call fails independently with an RpcError subclass:
  RpcTransportError - connection refused, timeout, non-JSON HTTP failure
  RpcCallError      - daemon replied with an `error` object (code, message)
  RpcDecodeError    - reply did not match the expected result shape

Bitcoin Core answers RPC-level errors with HTTP 500 (or 404 for unknown
methods) and a JSON body, so the body is inspected before the status code.

The client is shared by concurrently running scrapes. `requests.Session` is
not documented as thread-safe, so each thread gets its own session.
"""
from __future__ import annotations

import itertools
import logging
import threading
from contextlib import nullcontext
from typing import Any, Protocol

import requests

from ..utils.exceptions import RpcCallError, RpcDecodeError, RpcTransportError
from .models import (
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

logger = logging.getLogger(__name__)


class RpcApi(Protocol):
    """Logical operations the collectors consume."""

    def uptime(self) -> int: ...
    def get_blockchain_info(self) -> BlockchainInfo: ...
    def get_network_info(self) -> NetworkInfo: ...
    def get_block_stats(self, hash_or_height: str | int, stats: list[str] | None = None) -> BlockStats: ...
    def estimate_smart_fee(self, conf_target: int) -> SmartFeeEstimate: ...
    def get_network_hash_ps(self, nblocks: int = 120, height: int = -1) -> float: ...
    def list_banned(self) -> list[BannedPeer]: ...
    def get_chain_tx_stats(self) -> ChainTxStats: ...
    def get_chain_tips(self) -> list[ChainTip]: ...
    def get_memory_info(self) -> LockedMemoryInfo: ...
    def get_mempool_info(self) -> MempoolInfo: ...
    def get_net_totals(self) -> NetTotals: ...


class BitcoinRpcClient:
    def __init__(self, url: str, user: str, password: str, *,
                 timeout: float = 30.0, in_flight: Any = None) -> None:
        self.url = url
        self._auth = (user, password)
        self.timeout = timeout
        # Optional prometheus Gauge tracking calls currently being processed.
        self._in_flight = in_flight
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()
        self._local = threading.local()

    def _session(self) -> requests.Session:
        s = getattr(self._local, "session", None)
        if s is None:
            s = requests.Session()
            s.auth = self._auth
            s.headers.update({"Content-Type": "application/json"})
            self._local.session = s
        return s

    def _next_id(self) -> int:
        with self._ids_lock:
            return next(self._ids)

    def call(self, method: str, *params: Any) -> Any:
        """Issue one RPC call and return the raw `result` value."""
        payload = {"jsonrpc": "1.0", "id": self._next_id(), "method": method, "params": list(params)}
        tracker = self._in_flight.track_inprogress() if self._in_flight is not None else nullcontext()
        with tracker:
            try:
                resp = self._session().post(self.url, json=payload, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                raise RpcTransportError(f"{method}: {e}") from e
        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            if resp.status_code == 401:
                raise RpcTransportError(f"{method}: HTTP 401 unauthorized (check rpc user/password)")
            if resp.status_code >= 400:
                raise RpcTransportError(f"{method}: HTTP {resp.status_code}")
            raise RpcDecodeError(f"{method}: reply is not a JSON-RPC object")
        err = body.get("error")
        if err is not None:
            if isinstance(err, dict):
                raise RpcCallError(err.get("code"), str(err.get("message", "")), method)
            raise RpcCallError(None, str(err), method)
        if "result" not in body:
            raise RpcDecodeError(f"{method}: reply has no result")
        logger.debug("rpc %s ok", method)
        return body["result"]

    # --- typed operations ---

    def uptime(self) -> int:
        v = self.call("uptime")
        if isinstance(v, bool) or not isinstance(v, int):
            raise RpcDecodeError("uptime: result is not an integer")
        return v

    def get_blockchain_info(self) -> BlockchainInfo:
        return BlockchainInfo.from_json(self.call("getblockchaininfo"))

    def get_network_info(self) -> NetworkInfo:
        return NetworkInfo.from_json(self.call("getnetworkinfo"))

    def get_block_stats(self, hash_or_height: str | int, stats: list[str] | None = None) -> BlockStats:
        if stats:
            return BlockStats.from_json(self.call("getblockstats", hash_or_height, stats))
        return BlockStats.from_json(self.call("getblockstats", hash_or_height))

    def estimate_smart_fee(self, conf_target: int) -> SmartFeeEstimate:
        return SmartFeeEstimate.from_json(self.call("estimatesmartfee", conf_target))

    def get_network_hash_ps(self, nblocks: int = 120, height: int = -1) -> float:
        v = self.call("getnetworkhashps", nblocks, height)
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise RpcDecodeError("getnetworkhashps: result is not a number")
        return float(v)

    def list_banned(self) -> list[BannedPeer]:
        v = self.call("listbanned")
        if not isinstance(v, list):
            raise RpcDecodeError("listbanned: result is not a list")
        return [BannedPeer.from_json(item) for item in v]

    def get_chain_tx_stats(self) -> ChainTxStats:
        return ChainTxStats.from_json(self.call("getchaintxstats"))

    def get_chain_tips(self) -> list[ChainTip]:
        v = self.call("getchaintips")
        if not isinstance(v, list):
            raise RpcDecodeError("getchaintips: result is not a list")
        return [ChainTip.from_json(item) for item in v]

    def get_memory_info(self) -> LockedMemoryInfo:
        return LockedMemoryInfo.from_json(self.call("getmemoryinfo"))

    def get_mempool_info(self) -> MempoolInfo:
        return MempoolInfo.from_json(self.call("getmempoolinfo"))

    def get_net_totals(self) -> NetTotals:
        return NetTotals.from_json(self.call("getnettotals"))


__all__ = ["RpcApi", "BitcoinRpcClient"]
