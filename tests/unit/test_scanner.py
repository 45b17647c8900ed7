import re

from rawbib.domain.models.source import Input
from rawbib.infrastructure.parsers.scanner import Scanner


def test_peek_and_next() -> None:
    scanner = Scanner(Input.from_string("ab"))

    assert scanner.peek() == "a"
    assert scanner.next() == "a"
    assert scanner.next() == "b"
    assert scanner.next() is None
    assert scanner.peek() is None


def test_significant_skips_whitespace_and_comments() -> None:
    scanner = Scanner(Input.from_string(" \t\x0b\x0c\r\n% comment {\n  % another\n@"))

    assert scanner.peek_significant() == "@"
    assert scanner.next_significant() == "@"
    assert scanner.next_significant() is None


def test_comment_without_newline_reaches_end() -> None:
    scanner = Scanner(Input.from_string("  % trailing"))

    assert scanner.peek_significant() is None


def test_non_breaking_space_is_significant() -> None:
    scanner = Scanner(Input.from_string("\xa0x"))

    assert scanner.peek_significant() == "\xa0"


def test_mark_and_slice_exclude_closing_delimiter() -> None:
    scanner = Scanner(Input.from_string("{value}rest"))
    scanner.discard()
    scanner.mark()

    assert scanner.advance_to(re.compile(r"}")) == "}"
    span = scanner.since_mark()
    assert span.text == "value"
    assert span.offset == 1
    assert scanner.peek() == "r"


def test_advance_to_without_match_moves_to_end() -> None:
    scanner = Scanner(Input.from_string("abc"))

    assert scanner.advance_to(re.compile(r"}")) is None
    assert scanner.index == 3
    assert (scanner.trace_last().line, scanner.trace_last().col) == (1, 3)
