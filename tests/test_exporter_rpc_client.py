from __future__ import annotations

import pytest
import requests
from prometheus_client import CollectorRegistry, Gauge

from bitcoin_exporter.rpc.client import BitcoinRpcClient
from bitcoin_exporter.utils.exceptions import RpcCallError, RpcDecodeError, RpcTransportError


class _Resp:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _Recorder:
    def __init__(self, replies):
        self.replies = replies
        self.requests = []

    def __call__(self, session, url, json=None, timeout=None):
        self.requests.append({"url": url, "json": json, "timeout": timeout, "auth": session.auth})
        reply = self.replies[json["method"]]
        if isinstance(reply, Exception):
            raise reply
        return reply


def _ok(result):
    return _Resp(200, {"result": result, "error": None, "id": 1})


@pytest.fixture()
def wire(monkeypatch):
    def _install(replies):
        rec = _Recorder(replies)

        def _post(session, url, json=None, timeout=None):
            return rec(session, url, json=json, timeout=timeout)

        monkeypatch.setattr(requests.Session, "post", _post)
        return rec
    return _install


def _client(**kw):
    return BitcoinRpcClient("http://127.0.0.1:8332", "user", "pw", timeout=7, **kw)


def test_envelope_auth_and_timeout(wire):
    rec = wire({"getnetworkhashps": _ok(4.2e20)})
    assert _client().get_network_hash_ps(120) == 4.2e20
    req = rec.requests[0]
    assert req["json"]["jsonrpc"] == "1.0"
    assert req["json"]["method"] == "getnetworkhashps"
    assert req["json"]["params"] == [120, -1]
    assert req["auth"] == ("user", "pw")
    assert req["timeout"] == 7


def test_request_ids_increase(wire):
    rec = wire({"uptime": _ok(10)})
    c = _client()
    c.uptime()
    c.uptime()
    assert [r["json"]["id"] for r in rec.requests] == [1, 2]


def test_typed_results(wire):
    wire({
        "getblockchaininfo": _ok({
            "chain": "main", "blocks": 800000, "bestblockhash": "ab" * 32, "difficulty": 55e12,
            "size_on_disk": 1, "verificationprogress": 0.99, "headers": 800000,
        }),
        "getnetworkinfo": _ok({
            "version": 250000, "subversion": "/Satoshi:25.0.0/", "protocolversion": 70016,
            "connections": 10, "connections_in": 3, "connections_out": 7, "warnings": "",
        }),
        "getblockstats": _ok({
            "height": 800000, "total_size": 10, "txs": 2, "total_weight": 40, "ins": 1,
            "outs": 3, "total_out": 150_000_000, "totalfee": 5_000,
        }),
        "estimatesmartfee": _ok({"feerate": 0.00012, "blocks": 2}),
        "listbanned": _ok([{"address": "1.2.3.4/32", "ban_created": 5, "banned_until": 6,
                            "ban_duration": 1, "time_remaining": 1}]),
        "getchaintips": _ok([{"height": 1, "hash": "aa", "branchlen": 0, "status": "active"}]),
        "getmemoryinfo": _ok({"locked": {"used": 1, "free": 2, "total": 3, "locked": 4,
                                         "chunks_used": 5, "chunks_free": 6}}),
        "getmempoolinfo": _ok({"loaded": True, "size": 1, "bytes": 2, "usage": 3}),
        "getnettotals": _ok({"totalbytesrecv": 11, "totalbytessent": 22}),
        "getchaintxstats": _ok({"txcount": 99, "time": 0}),
    })
    c = _client()
    assert c.get_blockchain_info().best_block_hash == "ab" * 32
    ni = c.get_network_info()
    assert (ni.connections_in, ni.connections_out, ni.warnings) == (3, 7, ())
    bs = c.get_block_stats("ab" * 32)
    assert bs.total_out_btc == 1.5
    assert c.estimate_smart_fee(2).fee_rate_sat_per_kvb == 12000
    assert c.list_banned()[0].ban_reason is None
    assert len(c.get_chain_tips()) == 1
    assert c.get_memory_info().chunks_free == 6
    assert c.get_mempool_info().unbroadcast_count is None
    assert c.get_net_totals().total_bytes_sent == 22
    assert c.get_chain_tx_stats().txcount == 99


def test_warnings_list_form(wire):
    wire({"getnetworkinfo": _ok({
        "version": 270000, "subversion": "", "protocolversion": 70016, "connections": 1,
        "warnings": ["This is a pre-release test build"],
    })})
    ni = _client().get_network_info()
    assert ni.warnings == ("This is a pre-release test build",)
    assert ni.connections_in is None


def test_rpc_error_object(wire):
    wire({"getblockstats": _Resp(500, {"result": None, "error": {"code": -5, "message": "Block not found"}})})
    with pytest.raises(RpcCallError) as ei:
        _client().get_block_stats(1)
    assert ei.value.code == -5
    assert "Block not found" in str(ei.value)


def test_connection_failure(wire):
    wire({"uptime": requests.exceptions.ConnectionError("refused")})
    with pytest.raises(RpcTransportError):
        _client().uptime()


@pytest.mark.parametrize("status", [401, 403, 503])
def test_http_failure_without_json(wire, status):
    wire({"uptime": _Resp(status, None)})
    with pytest.raises(RpcTransportError):
        _client().uptime()


def test_missing_field_is_decode_error(wire):
    wire({"getnettotals": _ok({"totalbytesrecv": 1})})
    with pytest.raises(RpcDecodeError):
        _client().get_net_totals()


def test_wrong_result_type_is_decode_error(wire):
    wire({"listbanned": _ok({"not": "a list"}), "uptime": _ok("soon")})
    with pytest.raises(RpcDecodeError):
        _client().list_banned()
    with pytest.raises(RpcDecodeError):
        _client().uptime()


def test_in_flight_gauge_returns_to_zero(wire):
    reg = CollectorRegistry()
    g = Gauge("rpc_active_test", "in flight", registry=reg)
    wire({"uptime": _ok(1), "getnettotals": requests.exceptions.Timeout("slow")})
    c = _client(in_flight=g)
    c.uptime()
    with pytest.raises(RpcTransportError):
        c.get_net_totals()
    assert reg.get_sample_value("rpc_active_test") == 0
