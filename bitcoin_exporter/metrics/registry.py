"""Process-wide metric registry.

`MetricsRegistry` owns a private prometheus_client `CollectorRegistry` and a
name -> handle table built from `MetricDescriptor`s. Collectors write through
`set` / `increment`; the scrape handler reads a `snapshot()` and hands it to
the encoder.

Semantics:
  * Names are unique. Registering a name twice raises DuplicateNameError.
  * A handle is stable for the life of the registry. Labeled children are
    created on first write and never removed, so a tuple the daemon stops
    reporting keeps its last value.
  * Counters only move forward: `set` on a counter raises RegistryMisuseError
    and a negative delta raises CounterDecreaseError.
  * Each write and each sample read is atomic (prometheus_client guards every
    value with its own lock). Snapshots are not cross-metric transactions.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Gauge

from ..utils.exceptions import (
    CounterDecreaseError,
    DuplicateNameError,
    RegistryMisuseError,
)
from .descriptors import ALL_DESCRIPTORS, COUNTER, GAUGE, MetricDescriptor

logger = logging.getLogger(__name__)

LabelValues = Sequence[str] | Mapping[str, str]

_TYPE_MAP = {
    GAUGE: Gauge,
    COUNTER: Counter,
}


@dataclass(frozen=True)
class MetricHandle:
    descriptor: MetricDescriptor
    collector: Any  # prometheus_client Gauge | Counter

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def is_counter(self) -> bool:
        return self.descriptor.mtype == COUNTER


@dataclass(frozen=True)
class MetricSnapshot:
    descriptor: MetricDescriptor
    samples: list[tuple[tuple[str, ...], float]]


class MetricsRegistry:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry if registry is not None else CollectorRegistry()
        self._handles: dict[str, MetricHandle] = {}
        self._lock = threading.Lock()

    # --- registration ---

    def register(self, descriptor: MetricDescriptor) -> MetricHandle:
        with self._lock:
            if descriptor.name in self._handles:
                raise DuplicateNameError(f"metric {descriptor.name!r} already registered")
            ctor = _TYPE_MAP[descriptor.mtype]
            try:
                collector = ctor(descriptor.name, descriptor.documentation,
                                 labelnames=list(descriptor.labels), registry=self._registry)
            except ValueError as e:
                # prometheus_client also rejects clashes on derived names (e.g. foo vs foo_total).
                raise DuplicateNameError(f"metric {descriptor.name!r}: {e}") from e
            handle = MetricHandle(descriptor, collector)
            self._handles[descriptor.name] = handle
        logger.debug("registered %s %s labels=%s", descriptor.mtype, descriptor.name, list(descriptor.labels))
        return handle

    def register_all(self, descriptors: Iterable[MetricDescriptor]) -> list[MetricHandle]:
        return [self.register(d) for d in descriptors]

    def handle(self, name: str) -> MetricHandle:
        try:
            return self._handles[name]
        except KeyError:
            raise RegistryMisuseError(f"metric {name!r} is not registered") from None

    def names(self) -> list[str]:
        with self._lock:
            return list(self._handles)

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    # --- writes ---

    def _resolve(self, handle: MetricHandle | str) -> MetricHandle:
        return self.handle(handle) if isinstance(handle, str) else handle

    def _child(self, handle: MetricHandle, labels: LabelValues) -> Any:
        schema = handle.descriptor.labels
        if isinstance(labels, Mapping):
            if set(labels) != set(schema):
                raise RegistryMisuseError(
                    f"{handle.name}: labels {sorted(labels)} do not match schema {list(schema)}")
            if not schema:
                return handle.collector
            return handle.collector.labels(**{k: str(v) for k, v in labels.items()})
        values = tuple(labels)
        if len(values) != len(schema):
            raise RegistryMisuseError(
                f"{handle.name}: expected {len(schema)} label values, got {len(values)}")
        if not schema:
            return handle.collector
        return handle.collector.labels(*(str(v) for v in values))

    def set(self, handle: MetricHandle | str, value: float, labels: LabelValues = ()) -> None:
        h = self._resolve(handle)
        if h.is_counter:
            raise RegistryMisuseError(f"{h.name} is a counter; use increment()")
        self._child(h, labels).set(float(value))

    def increment(self, handle: MetricHandle | str, delta: float = 1.0, labels: LabelValues = ()) -> None:
        h = self._resolve(handle)
        if delta < 0:
            raise CounterDecreaseError(f"{h.name}: negative delta {delta}")
        self._child(h, labels).inc(delta)

    # --- reads ---

    def _samples(self, handle: MetricHandle) -> list[tuple[tuple[str, ...], float]]:
        d = handle.descriptor
        out: list[tuple[tuple[str, ...], float]] = []
        for family in handle.collector.collect():
            wanted = {family.name, family.name + "_total"} if handle.is_counter else {family.name}
            for s in family.samples:
                if s.name not in wanted:
                    continue
                out.append((tuple(s.labels[k] for k in d.labels), float(s.value)))
        return out

    def snapshot(self) -> list[MetricSnapshot]:
        """Registration-ordered view of every metric and its current samples."""
        with self._lock:
            handles = list(self._handles.values())
        return [MetricSnapshot(h.descriptor, self._samples(h)) for h in handles]

    def value(self, name: str, labels: Sequence[str] = ()) -> float | None:
        """Current value of one instance, or None if the label tuple was never written."""
        key = tuple(str(v) for v in labels)
        for lv, v in self._samples(self.handle(name)):
            if lv == key:
                return v
        return None

    def label_tuples(self, name: str) -> set[tuple[str, ...]]:
        return {lv for lv, _ in self._samples(self.handle(name))}


def build_registry(descriptors: Iterable[MetricDescriptor] = ALL_DESCRIPTORS) -> MetricsRegistry:
    """Create a registry with the full exporter catalogue registered."""
    reg = MetricsRegistry()
    reg.register_all(descriptors)
    return reg


__all__ = ["MetricsRegistry", "MetricHandle", "MetricSnapshot", "build_registry"]
