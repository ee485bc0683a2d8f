"""HTTP surface for the scrape handler.

Stdlib ThreadingHTTPServer: one thread per connection, so concurrent scrapes
run their collector sequences in parallel against the shared registry. The
request handler only translates between HTTP and `ScrapeHandler`.
"""
from __future__ import annotations

import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from .scrape import ScrapeHandler, ScrapeResponse

logger = logging.getLogger(__name__)


class _MetricsRequestHandler(BaseHTTPRequestHandler):
    server_version = "BitcoinExporter/0.3"
    sys_version = ""

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003 - BaseHTTPRequestHandler API
        logger.debug("%s - %s", self.address_string(), format % args)

    def _scrape_handler(self) -> ScrapeHandler:
        return self.server.scrape_handler  # type: ignore[attr-defined]

    def _send(self, resp: ScrapeResponse, *, head_only: bool = False) -> None:
        self.send_response(resp.status)
        if resp.content_type:
            self.send_header("Content-Type", resp.content_type)
        self.send_header("Content-Length", str(len(resp.body)))
        self.end_headers()
        if resp.body and not head_only:
            self.wfile.write(resp.body)

    def _dispatch(self) -> None:
        client = f"{self.client_address[0]}:{self.client_address[1]}"
        try:
            resp = self._scrape_handler().handle(self.command, self.path, client)
        except Exception:  # noqa: BLE001 - keep serving; one bad scrape must not kill the thread
            logger.exception("unhandled error serving %s %s", self.command, self.path)
            resp = ScrapeResponse(500)
        self._send(resp, head_only=self.command == "HEAD")

    def __getattr__(self, name: str) -> Any:
        # BaseHTTPRequestHandler looks up do_<METHOD>; every verb, custom ones included, lands here.
        if name.startswith("do_"):
            return self._dispatch
        raise AttributeError(name)


class _Server(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address: tuple[str, int], scrape_handler: ScrapeHandler) -> None:
        super().__init__(address, _MetricsRequestHandler)
        self.scrape_handler = scrape_handler


class MetricsServer:
    def __init__(self, scrape_handler: ScrapeHandler, host: str = "127.0.0.1", port: int = 9898) -> None:
        self._server = _Server((host, port), scrape_handler)
        self._thread: threading.Thread | None = None
        self._serving = threading.Event()

    @property
    def server_address(self) -> tuple[str, int]:
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    @property
    def url(self) -> str:
        host, port = self.server_address
        return f"http://{host}:{port}"

    def serve_forever(self) -> None:
        """Block serving requests until stop() is called from another thread."""
        self._serving.set()
        try:
            self._server.serve_forever()
        finally:
            self._serving.clear()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._serving.set()
        self._thread = threading.Thread(target=self.serve_forever, name="MetricsServer", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Shutdown server and close the listening socket. Idempotent."""
        if self._serving.is_set():
            self._server.shutdown()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        self._server.server_close()

    def __enter__(self) -> MetricsServer:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False


__all__ = ["MetricsServer"]
