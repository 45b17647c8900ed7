from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from rawbib.domain.models.source import Input, InputSlice


@dataclass(frozen=True, slots=True)
class Literal:
    """Numeric, braced or quoted content, without its delimiters."""

    text: InputSlice


@dataclass(frozen=True, slots=True)
class MacroRef:
    """Bare identifier naming a macro, left unresolved."""

    name: InputSlice


@dataclass(frozen=True, slots=True)
class Compound:
    """Two or more values joined with ``#``."""

    members: tuple[Value, ...]

    def __post_init__(self) -> None:
        if len(self.members) < 2:
            raise ValueError("Compound values need at least two members")


Value: TypeAlias = "Literal | MacroRef | Compound"


def value_kind(value: Value) -> str:
    if isinstance(value, Literal):
        return "literal"
    if isinstance(value, MacroRef):
        return "macro"
    return "compound"


def value_source(value: Value) -> str:
    """Render a value the way it was written in the source."""
    if isinstance(value, Literal):
        span = value.text
        opening = span.input.content[span.start - 1] if span.start > 0 else ""
        if opening == "{":
            return "{" + span.text + "}"
        if opening == '"':
            return '"' + span.text + '"'
        return span.text
    if isinstance(value, MacroRef):
        return value.name.text
    return " # ".join(value_source(member) for member in value.members)


@dataclass(slots=True)
class FieldDef:
    name: InputSlice
    value: Value


@dataclass(slots=True)
class RawEntry:
    entrytype: InputSlice
    key: InputSlice
    fields: dict[str, FieldDef] = field(default_factory=dict)


@dataclass(slots=True)
class RawBibliography:
    """Accumulates macros and entries parsed from one or more inputs.

    Duplicate detection spans every input added so far. There is no removal;
    discard the whole object when done with it.
    """

    macros: dict[str, FieldDef] = field(default_factory=dict)
    entries: dict[str, RawEntry] = field(default_factory=dict)

    def add(self, source: Input) -> None:
        """Parse ``source`` into this bibliography.

        Raises a ``BibtexSyntaxError`` subclass on the first problem. Macros and
        entries completed before the failing construct stay in place.
        """
        from rawbib.infrastructure.parsers.bibtex_parser import BibtexParser

        BibtexParser(source).parse(self)

    def expand(self, value: Value, *, undefined: str = "error") -> str:
        """Return the plain text of ``value`` using this bibliography's macros."""
        from rawbib.domain.macros import expand_value

        return expand_value(value, self.macros, undefined=undefined)
