"""bitcoin-exporter entry point.

Export Bitcoin Core metrics in Prometheus format: loads the YAML config,
builds the metric registry and RPC client, and serves `GET /metrics` until
interrupted (SIGINT/SIGTERM).
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Sequence

from .collectors.collector_set import CollectorSet
from .config.loader import DEFAULT_CONFIG_PATH, load_config
from .metrics.registry import build_registry
from .rpc.client import BitcoinRpcClient
from .server.http_server import MetricsServer
from .server.scrape import ScrapeHandler
from .utils.exceptions import ConfigError
from .utils.logging_utils import setup_logging
from .version import PROGRAM_NAME, get_version

logger = logging.getLogger(__name__)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description='Export bitcoin core metrics to prometheus format',
    )
    parser.add_argument('-c', '--config', default=DEFAULT_CONFIG_PATH,
                        help=f'configuration file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='more detailed output')
    parser.add_argument('--version', action='version', version=f'{PROGRAM_NAME} {get_version()}')
    return parser.parse_args(argv)


def _install_signal_handlers(server: MetricsServer) -> None:
    def _handler(sig, _frame):
        logger.info("Received signal %s, shutting down", sig)
        # shutdown() blocks until serve_forever returns; run it off the serving thread.
        threading.Thread(target=server.stop, name="shutdown", daemon=True).start()
    signal.signal(signal.SIGTERM, _handler)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_arguments(argv)
    setup_logging('DEBUG' if args.verbose else 'INFO')
    logger.info("%s v%s", PROGRAM_NAME, get_version())

    try:
        config = load_config(args.config)
        host, port = config.bind_address()
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    metrics = build_registry()
    rpc = BitcoinRpcClient(config.host, config.user, config.password,
                           timeout=config.timeout,
                           in_flight=metrics.handle("bitcoin_rpc_active").collector)
    handler = ScrapeHandler(rpc, metrics, collectors=CollectorSet())

    try:
        server = MetricsServer(handler, host, port)
    except OSError as e:
        logger.error("Can't bind %s: %s", config.bind, e)
        return 1

    logger.info("rpc endpoint %s", config.host)
    logger.info("listening on %s", server.url)
    _install_signal_handlers(server)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        server.stop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
