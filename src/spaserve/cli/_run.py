"""``spaserve serve``: build a handler from CLI flags and start the server."""

import argparse
import logging
import sys

from spaserve.config import HandlerConfig, ServerConfig
from spaserve.errors import ConfigurationError
from spaserve.fs.directory import DirFileSystem
from spaserve.handler import StaticHandler


def configure_logging(level: str) -> None:
    """Send spaserve logs to stderr at *level*."""
    numeric = logging.DEBUG if level == "trace" else getattr(logging, level.upper())
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def build_handler(args: argparse.Namespace) -> StaticHandler:
    """Translate CLI flags into a ``StaticHandler``."""
    config = HandlerConfig()
    if args.fallback is not None:
        config = config.with_fallback(args.fallback)
    if args.no_fallback:
        config = config.without_fallback()
    if args.no_index_redirect:
        config = config.without_index_redirect()
    return StaticHandler(DirFileSystem(args.directory), config)


def run_server(args: argparse.Namespace) -> None:
    """Start serving ``args.directory``.

    Configuration problems (missing directory, bad log level, port out of
    range) print ``Error: ...`` and exit with status 1.
    """
    try:
        defaults = ServerConfig()
        server_config = ServerConfig(
            host=args.host or defaults.host,
            port=args.port if args.port is not None else defaults.port,
            log_level=args.log_level,
        )
        handler = build_handler(args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(server_config.log_level)
    logging.getLogger("spaserve.server").info(
        "Serving %s (fallback=%r, index_redirect=%s)",
        args.directory,
        handler.config.fallback,
        handler.config.index_redirect,
    )

    from spaserve.server.dev import run_dev_server

    run_dev_server(handler, server_config)
