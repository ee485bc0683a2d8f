"""Pytest configuration for bitcoin-exporter.

1. Ensure project root on sys.path.
2. Fresh metric registry per test (registries are private CollectorRegistry
   instances, so nothing leaks through prometheus_client's global REGISTRY).
3. Fake RPC fixtures and a free-port helper for HTTP tests.
"""
from __future__ import annotations

import contextlib
import socket
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bitcoin_exporter.collectors.context import ScrapeContext, reset_failure_log_state  # noqa: E402
from bitcoin_exporter.metrics.registry import build_registry  # noqa: E402
from tests._helpers import ALL_METHODS, FakeRpc  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_failure_log_state():
    reset_failure_log_state()
    yield
    reset_failure_log_state()


@pytest.fixture()
def metrics():
    return build_registry()


@pytest.fixture()
def ctx(metrics):
    return ScrapeContext(metrics)


@pytest.fixture()
def fake_rpc():
    return FakeRpc()


@pytest.fixture()
def dead_rpc():
    return FakeRpc(fail=ALL_METHODS)


@pytest.fixture()
def free_port() -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]
