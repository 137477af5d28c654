"""spaserve CLI: serve a directory as a single-page application.

Entry point registered as ``spaserve`` in ``pyproject.toml``::

    [project.scripts]
    spaserve = "spaserve.cli:main"
"""

import argparse
import os
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``spaserve`` command."""
    parser = argparse.ArgumentParser(
        prog="spaserve",
        description="spaserve: static files with a single-page-application fallback.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- spaserve serve ---------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve a directory over HTTP")
    serve_parser.add_argument("directory", help="Directory holding the built assets")
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    serve_parser.add_argument(
        "--fallback",
        default=None,
        help="Document served for unknown paths (default: /index.html)",
    )
    serve_parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Answer unknown paths with 500 instead of a fallback document",
    )
    serve_parser.add_argument(
        "--no-index-redirect",
        action="store_true",
        help="Serve .../index.html directly instead of redirecting to ./",
    )
    serve_parser.add_argument(
        "--log-level",
        default=os.environ.get("SPASERVE_LOG_LEVEL", "info"),
        help="Log level (default: $SPASERVE_LOG_LEVEL or info)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from spaserve.cli._run import run_server

        run_server(args)
