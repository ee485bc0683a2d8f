from .http_server import MetricsServer
from .scrape import METRICS_PATH, ScrapeHandler, ScrapeResponse

__all__ = ["MetricsServer", "ScrapeHandler", "ScrapeResponse", "METRICS_PATH"]
