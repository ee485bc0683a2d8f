"""Scrape handler: one request in, one response out.

Transport independent so it can be driven by the HTTP server or directly by
tests. Only `GET /metrics` triggers collection; every other method/path gets
an empty 200 (not 404) and touches nothing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..collectors.collector_set import CollectorSet
from ..metrics.exposition import TextEncoder
from ..metrics.registry import MetricsRegistry
from ..rpc.client import RpcApi
from ..utils.exceptions import EncoderError

logger = logging.getLogger(__name__)

METRICS_PATH = "/metrics"
PROCESS_TIME_METRIC = "bitcoin_exporter_process_time"


@dataclass(frozen=True)
class ScrapeResponse:
    status: int
    body: bytes = b""
    content_type: str | None = None


class ScrapeHandler:
    def __init__(self, rpc: RpcApi, metrics: MetricsRegistry, *,
                 collectors: CollectorSet | None = None,
                 encoder: TextEncoder | None = None) -> None:
        self._rpc = rpc
        self._metrics = metrics
        self._collectors = collectors if collectors is not None else CollectorSet()
        self._encoder = encoder if encoder is not None else TextEncoder()

    @property
    def metrics(self) -> MetricsRegistry:
        return self._metrics

    def handle(self, method: str, path: str, client: str = "-") -> ScrapeResponse:
        route = urlsplit(path).path
        if method != "GET" or route != METRICS_PATH:
            logger.warning("  [%s] %s %s", client, method, route)
            return ScrapeResponse(200)
        return self.scrape()

    def scrape(self) -> ScrapeResponse:
        ctx = self._collectors.run(self._rpc, self._metrics)
        if PROCESS_TIME_METRIC in self._metrics:
            self._metrics.increment(PROCESS_TIME_METRIC, ctx.elapsed)
        if ctx.failures:
            logger.debug("scrape finished with %d failed calls: %s",
                         len(ctx.failures), ", ".join(sorted(ctx.failures)))
        try:
            body = self._encoder.encode(self._metrics.snapshot())
        except EncoderError:
            logger.error("metrics encoding failed", exc_info=True)
            return ScrapeResponse(500)
        return ScrapeResponse(200, body, self._encoder.format_type)


__all__ = ["ScrapeHandler", "ScrapeResponse", "METRICS_PATH"]
