"""Text exposition encoder.

Adapter between a registry snapshot and prometheus_client's text format
writer. The snapshot is replayed as metric families through a throwaway
collector so the encoder only ever sees the point-in-time view the scrape
handler took, never the live registry.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from ..utils.exceptions import EncoderError
from .descriptors import COUNTER
from .registry import MetricSnapshot

logger = logging.getLogger(__name__)


class _SnapshotCollector:
    def __init__(self, snapshot: Sequence[MetricSnapshot]) -> None:
        self._snapshot = snapshot

    def collect(self) -> Iterator[Metric]:
        for snap in self._snapshot:
            d = snap.descriptor
            family_cls = CounterMetricFamily if d.mtype == COUNTER else GaugeMetricFamily
            family = family_cls(d.name, d.documentation, labels=list(d.labels))
            for label_values, value in snap.samples:
                family.add_metric(list(label_values), value)
            yield family


class TextEncoder:
    """Encodes snapshots into the Prometheus text exposition format."""

    format_type: str = CONTENT_TYPE_LATEST

    def encode(self, snapshot: Sequence[MetricSnapshot]) -> bytes:
        try:
            return generate_latest(_SnapshotCollector(snapshot))  # type: ignore[arg-type]
        except Exception as e:  # noqa: BLE001 - any writer failure fails this request only
            raise EncoderError(f"exposition encoding failed: {e}") from e


__all__ = ["TextEncoder"]
