from __future__ import annotations

import re
from typing import NoReturn

from rawbib.core.errors import (
    DoubleFieldError,
    DoubleKeyError,
    DoubleMacroError,
    InvalidEOFError,
    InvalidTokenError,
    RecursiveMacroError,
    TokenContext,
)
from rawbib.domain.models.bibliography import (
    Compound,
    FieldDef,
    Literal,
    MacroRef,
    RawBibliography,
    RawEntry,
    Value,
)
from rawbib.domain.models.source import Input, InputSlice
from rawbib.infrastructure.parsers.scanner import Scanner

_IDENTIFIER_END_RE = re.compile(r"[{},#%()=\t\n\x0b\x0c\r ]")
_NOT_DIGIT_RE = re.compile(r"[^0-9]")
_BRACE_RE = re.compile(r"[{}]")
_QUOTE_RE = re.compile(r'["\\]')
_PAREN_RE = re.compile(r"[{)]")

_DISCARDED_BLOCKS = frozenset({"comment", "preface"})


class BibtexParser:
    """Single-pass parser feeding one ``Input`` into a ``RawBibliography``."""

    def __init__(self, source: Input) -> None:
        self.scanner = Scanner(source)

    # Token readers. Each returns the span and the next significant
    # character after it, already consumed.

    def _read_identifier(self) -> tuple[InputSlice, str | None]:
        scanner = self.scanner
        scanner.mark()
        match = _IDENTIFIER_END_RE.search(scanner.content, scanner.index)
        end = scanner.length if match is None else match.start()
        scanner.index = end
        return InputSlice(scanner.input, scanner.saved_index, end), scanner.next_significant()

    def _read_number(self) -> tuple[InputSlice, str | None]:
        scanner = self.scanner
        scanner.mark()
        match = _NOT_DIGIT_RE.search(scanner.content, scanner.index)
        end = scanner.length if match is None else match.start()
        scanner.index = end
        return InputSlice(scanner.input, scanner.saved_index, end), scanner.next_significant()

    def _read_braced(self, context: TokenContext) -> tuple[InputSlice, str | None]:
        scanner = self.scanner
        scanner.discard()
        scanner.mark()
        depth = 1
        while True:
            ch = scanner.advance_to(_BRACE_RE)
            if ch is None:
                raise InvalidEOFError(context, scanner.trace_last())
            if ch == "{":
                depth += 1
                continue
            depth -= 1
            if depth == 0:
                return scanner.since_mark(), scanner.next_significant()

    def _read_quoted(self, context: TokenContext) -> tuple[InputSlice, str | None]:
        scanner = self.scanner
        scanner.discard()
        scanner.mark()
        while True:
            ch = scanner.advance_to(_QUOTE_RE)
            if ch is None:
                raise InvalidEOFError(context, scanner.trace_last())
            if ch == '"':
                return scanner.since_mark(), scanner.next_significant()
            scanner.discard()

    def _read_atom(self, context: TokenContext) -> tuple[Value, str | None]:
        ch = self.scanner.peek_significant()
        if ch is None:
            raise InvalidEOFError(context, self.scanner.trace_last())
        if "0" <= ch <= "9":
            text, nxt = self._read_number()
            return Literal(text), nxt
        if ch == "{":
            text, nxt = self._read_braced(context)
            return Literal(text), nxt
        if ch == '"':
            text, nxt = self._read_quoted(context)
            return Literal(text), nxt
        name, nxt = self._read_identifier()
        if not name:
            self._fail(context, nxt)
        return MacroRef(name), nxt

    def _parse_value(self, context: TokenContext) -> tuple[Value, str | None]:
        members: list[Value] = []
        while True:
            value, nxt = self._read_atom(context)
            members.append(value)
            if nxt != "#":
                break
        if len(members) == 1:
            return members[0], nxt
        return Compound(tuple(members)), nxt

    def _read_name(self, context: TokenContext) -> InputSlice:
        name, nxt = self._read_identifier()
        if nxt != "=" or not name:
            self._fail(context, nxt)
        return name

    def _fail(self, context: TokenContext, found: str | None) -> NoReturn:
        trace = self.scanner.trace_last()
        if found is None:
            raise InvalidEOFError(context, trace)
        raise InvalidTokenError(context, found, trace)

    # Blocks

    def _close_brace(self) -> bool:
        depth = 1
        while True:
            ch = self.scanner.advance_to(_BRACE_RE)
            if ch is None:
                return False
            if ch == "{":
                depth += 1
            else:
                depth -= 1
                if depth == 0:
                    return True

    def _close_parenthesis(self) -> bool:
        while True:
            ch = self.scanner.advance_to(_PAREN_RE)
            if ch is None:
                return False
            if ch == ")":
                return True
            if not self._close_brace():
                return False

    def _skip_comment(self, entrytype: InputSlice, closing: str) -> None:
        closed = self._close_brace() if closing == "}" else self._close_parenthesis()
        if not closed:
            raise InvalidEOFError(TokenContext.comment(entrytype), self.scanner.trace_last())

    def _parse_macros(self, bib: RawBibliography, entrytype: InputSlice, closing: str) -> None:
        scanner = self.scanner
        context = TokenContext.macro_def(entrytype)
        while True:
            # a trailing comma leaves the closing delimiter next
            if scanner.peek_significant() == closing:
                scanner.discard()
                return

            name = self._read_name(context)
            existing = bib.macros.get(name.text)
            if existing is not None:
                raise DoubleMacroError(name.text, existing.name.trace(), name.trace())

            value, nxt = self._parse_value(context)
            if isinstance(value, Compound):
                raise RecursiveMacroError(name.text, name.trace())
            bib.macros[name.text] = FieldDef(name, value)

            if nxt == ",":
                continue
            if nxt == closing:
                return
            self._fail(context, nxt)

    def _parse_entry(self, bib: RawBibliography, entrytype: InputSlice, closing: str) -> None:
        scanner = self.scanner
        scanner.skip_insignificant()
        key, nxt = self._read_identifier()
        context = TokenContext.entry(key)
        if not key:
            self._fail(context, nxt)

        fields: dict[str, FieldDef] = {}
        while nxt == ",":
            if scanner.peek_significant() == closing:
                nxt = scanner.next()
                break

            name = self._read_name(context)
            existing = fields.get(name.text)
            if existing is not None:
                raise DoubleFieldError(name.text, existing.name.trace(), name.trace())

            value, nxt = self._parse_value(context)
            fields[name.text] = FieldDef(name, value)

        if nxt != closing:
            self._fail(context, nxt)

        existing_entry = bib.entries.get(key.text)
        if existing_entry is not None:
            raise DoubleKeyError(key.text, existing_entry.key.trace(), key.trace())
        bib.entries[key.text] = RawEntry(entrytype=entrytype, key=key, fields=fields)

    def parse(self, bib: RawBibliography) -> RawBibliography:
        scanner = self.scanner
        while True:
            ch = scanner.next_significant()
            if ch is None:
                return bib
            if ch != "@":
                raise InvalidTokenError(TokenContext.global_(), ch, scanner.trace_last())

            entrytype, nxt = self._read_identifier()
            if nxt == "{":
                closing = "}"
            elif nxt == "(":
                closing = ")"
            else:
                self._fail(TokenContext.global_(), nxt)
            if not entrytype:
                self._fail(TokenContext.global_(), nxt)

            kind = entrytype.text.lower()
            if kind in _DISCARDED_BLOCKS:
                self._skip_comment(entrytype, closing)
            elif kind == "string":
                self._parse_macros(bib, entrytype, closing)
            else:
                self._parse_entry(bib, entrytype, closing)


def parse_bibtex(text: str, name: str = "<string>") -> RawBibliography:
    """Parse BibTeX source text into a fresh ``RawBibliography``."""
    return BibtexParser(Input.from_string(text, name)).parse(RawBibliography())
