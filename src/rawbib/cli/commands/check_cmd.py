from __future__ import annotations

import argparse

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rawbib.application.services.bibliography_service import BibliographyService
from rawbib.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("check", help="Parse BibTeX files and report the first syntax error")
    parser.add_argument("bib_paths", nargs="+", help="Paths to .bib files, parsed in order")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    result = BibliographyService(ctx.settings).load_files(args.bib_paths)

    ctx.console.print(
        Panel.fit(
            f"Files: {len(result.file_stats)}\n"
            f"Macros: {result.macros_total}\n"
            f"Entries: {result.entries_total}",
            title="BibTeX Check",
        )
    )

    table = Table(title="Sources")
    table.add_column("File", overflow="fold")
    table.add_column("Macros")
    table.add_column("Entries")
    for stats in result.file_stats:
        table.add_row(escape(stats.name), str(stats.macros_added), str(stats.entries_added))
    ctx.console.print(table)
    return 0
