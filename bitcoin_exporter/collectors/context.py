"""Per-scrape context for the collector set.

Holds the shared registry plus per-step timing and failure bookkeeping for a
single scrape. `attempt()` is the collector boundary for RPC failures: it
returns the call result, or None after counting and logging the failure.
"""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from ..metrics.registry import MetricsRegistry
from ..utils.exceptions import (
    NoEstimateError,
    RpcCallError,
    RpcDecodeError,
    RpcError,
    RpcTransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ERRORS_METRIC = "bitcoin_exporter_errors"

# Steps that already logged a WARNING; later failures of the same step log at DEBUG.
_seen_first_failure: set[str] = set()
_seen_lock = threading.Lock()


def classify_rpc_error(exc: BaseException) -> str:
    if isinstance(exc, NoEstimateError):
        return 'no_estimate'
    if isinstance(exc, RpcTransportError):
        return 'transport'
    if isinstance(exc, RpcCallError):
        return 'rpc'
    if isinstance(exc, RpcDecodeError):
        return 'decode'
    return 'unknown'


def reset_failure_log_state() -> None:
    with _seen_lock:
        _seen_first_failure.clear()


@dataclass
class ScrapeContext:
    metrics: MetricsRegistry
    started: float = field(default_factory=time.perf_counter)
    phase_times: dict[str, float] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    calls: int = 0

    def attempt(self, step: str, fn: Callable[..., T], *args: Any) -> T | None:
        """Run one RPC call; on RpcError record it and return None."""
        self.calls += 1
        try:
            return fn(*args)
        except RpcError as e:
            self.record_failure(step, e)
            return None

    def record_failure(self, step: str, exc: BaseException) -> None:
        category = classify_rpc_error(exc)
        self.failures[step] = category
        if ERRORS_METRIC in self.metrics:
            self.metrics.increment(ERRORS_METRIC, labels=(category,))
        with _seen_lock:
            first = step not in _seen_first_failure
            _seen_first_failure.add(step)
        if first:
            logger.warning("%s failed (%s): %s", step, category, exc)
        else:
            logger.debug("%s failed (%s): %s", step, category, exc)

    def time_phase(self, name: str) -> _PhaseTimer:
        """Context manager accumulating wall time under `name`.

        Example:
            with ctx.time_phase('node_status'):
                ...
        """
        return _PhaseTimer(self, name)

    def record(self, name: str, seconds: float) -> None:
        self.phase_times[name] = self.phase_times.get(name, 0.0) + seconds

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.started

    @property
    def ok(self) -> bool:
        return not self.failures

    def emit_consolidated_log(self) -> None:
        if not self.phase_times:
            return
        total = sum(self.phase_times.values()) or 0.0
        parts = []
        for phase, secs in sorted(self.phase_times.items(), key=lambda x: -x[1]):
            pct = (secs / total * 100.0) if total else 0.0
            parts.append(f"{phase}={secs:.3f}s({pct:.1f}%)")
        line = "SCRAPE_TIMING " + " | ".join(parts) + f" | total={total:.3f}s calls={self.calls} failed={len(self.failures)}"
        logger.debug(line)


class _PhaseTimer:
    def __init__(self, ctx: ScrapeContext, name: str):
        self.ctx = ctx; self.name = name; self.t0 = 0.0
    def __enter__(self):
        self.t0 = time.perf_counter()
        return self
    def __exit__(self, exc_type, exc, tb):
        self.ctx.record(self.name, time.perf_counter() - self.t0)
        return False


__all__ = ["ScrapeContext", "classify_rpc_error", "reset_failure_log_state"]
