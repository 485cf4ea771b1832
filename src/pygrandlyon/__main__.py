"""Run the pygrandlyon HTTP service.

Configuration comes from ``GRANDLYON_*`` environment variables, see
:meth:`pygrandlyon.config.GrandLyonConfig.from_env`.
"""

from __future__ import annotations

import argparse
import logging
import sys

from aiohttp import web

from pygrandlyon.config import GrandLyonConfig
from pygrandlyon.exceptions import GrandLyonConfigError
from pygrandlyon.server import create_app


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pygrandlyon", description=__doc__.splitlines()[0])
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=8080, help="Bind port (default: %(default)s)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: %(default)s)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = GrandLyonConfig.from_env()
    except GrandLyonConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    web.run_app(create_app(config), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
