from __future__ import annotations

import argparse

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rawbib.application.services.bibliography_service import BibliographyService
from rawbib.cli.context import CLIContext
from rawbib.core.errors import RawbibError
from rawbib.domain.models.bibliography import value_kind, value_source


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("entries", help="List entries, or show the fields of one entry")
    parser.add_argument("bib_paths", nargs="+", help="Paths to .bib files, parsed in order")
    parser.add_argument("--key", help="Show the fields of the entry with this citation key")
    parser.add_argument("--expand", action="store_true", help="Expand macros and concatenations")
    parser.add_argument("--limit", type=int, default=50)
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    service = BibliographyService(ctx.settings)
    bib = service.load_files(args.bib_paths).bibliography

    if args.key is not None:
        entry = bib.entries.get(args.key)
        if entry is None:
            raise RawbibError(f"Entry not found for key: {args.key}")

        expanded = service.expanded_fields(bib, entry) if args.expand else {}
        ctx.console.print(
            Panel.fit(
                f"Key: {escape(entry.key.text)}\n"
                f"Type: {escape(entry.entrytype.text)}\n"
                f"Defined at: {escape(str(entry.key.trace()))}",
                title="Entry",
            )
        )
        table = Table(title=f"Fields ({len(entry.fields)})")
        table.add_column("Field")
        table.add_column("Kind")
        table.add_column("Value", overflow="fold")
        for name, field_def in entry.fields.items():
            text = expanded[name] if args.expand else value_source(field_def.value)
            table.add_row(escape(name), value_kind(field_def.value), escape(text))
        ctx.console.print(table)
        return 0

    entries = list(bib.entries.values())[: args.limit]
    table = Table(title=f"Entries ({len(entries)} of {len(bib.entries)})")
    table.add_column("Key")
    table.add_column("Type")
    table.add_column("Fields")
    table.add_column("Location", overflow="fold")
    for entry in entries:
        table.add_row(
            escape(entry.key.text),
            escape(entry.entrytype.text),
            str(len(entry.fields)),
            escape(str(entry.key.trace())),
        )
    ctx.console.print(table)
    return 0
