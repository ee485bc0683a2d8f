"""Scrape-time collectors for Bitcoin Core metrics."""
from .base import Collector
from .collector_set import CollectorSet, default_collectors
from .context import ScrapeContext

__all__ = ["Collector", "CollectorSet", "ScrapeContext", "default_collectors"]
