from __future__ import annotations

import argparse
import logging

from rich.console import Console

from rawbib.cli.commands import check_cmd, entries_cmd, macros_cmd
from rawbib.cli.context import CLIContext
from rawbib.core.config import load_settings
from rawbib.core.errors import RawbibError
from rawbib.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rawbib",
        description="Parse and inspect BibTeX databases",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    check_cmd.register(subparsers)
    entries_cmd.register(subparsers)
    macros_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        ctx = CLIContext(settings=load_settings(), console=console)
        return handler(args, ctx)
    except RawbibError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
