from __future__ import annotations

import argparse

from rich.markup import escape
from rich.table import Table

from rawbib.application.services.bibliography_service import BibliographyService
from rawbib.cli.context import CLIContext
from rawbib.domain.models.bibliography import value_kind, value_source


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("macros", help="List @string macro definitions")
    parser.add_argument("bib_paths", nargs="+", help="Paths to .bib files, parsed in order")
    parser.add_argument("--limit", type=int, default=50)
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    bib = BibliographyService(ctx.settings).load_files(args.bib_paths).bibliography

    macros = list(bib.macros.values())[: args.limit]
    table = Table(title=f"Macros ({len(macros)} of {len(bib.macros)})")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Value", overflow="fold")
    table.add_column("Defined At", overflow="fold")
    for macro in macros:
        table.add_row(
            escape(macro.name.text),
            value_kind(macro.value),
            escape(value_source(macro.value)),
            escape(str(macro.name.trace())),
        )
    ctx.console.print(table)
    return 0
