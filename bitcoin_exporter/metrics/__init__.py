"""Metrics facade: descriptors, registry and exposition encoder."""
from .descriptors import ALL_DESCRIPTORS, MetricDescriptor
from .exposition import TextEncoder
from .registry import MetricHandle, MetricSnapshot, MetricsRegistry, build_registry

__all__ = [
    "ALL_DESCRIPTORS",
    "MetricDescriptor",
    "MetricHandle",
    "MetricSnapshot",
    "MetricsRegistry",
    "TextEncoder",
    "build_registry",
]
