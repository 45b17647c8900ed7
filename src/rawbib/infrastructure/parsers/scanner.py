from __future__ import annotations

import re

from rawbib.domain.models.source import Input, InputSlice, InputTrace

_INSIGNIFICANT_RE = re.compile(r"(?:[\t\n\x0b\x0c\r ]|%[^\n]*\n?)*")


class Scanner:
    """Character cursor over an ``Input``.

    ``index`` always points one past the last consumed character. A
    ``None`` return value means end of input.
    """

    __slots__ = ("input", "content", "length", "index", "saved_index")

    def __init__(self, source: Input) -> None:
        self.input = source
        self.content = source.content
        self.length = len(source.content)
        self.index = 0
        self.saved_index = 0

    def peek(self) -> str | None:
        if self.index < self.length:
            return self.content[self.index]
        return None

    def next(self) -> str | None:
        if self.index < self.length:
            ch = self.content[self.index]
            self.index += 1
            return ch
        return None

    def discard(self) -> None:
        self.index += 1

    def skip_insignificant(self) -> None:
        # Whitespace runs and %-comments through their newline.
        self.index = _INSIGNIFICANT_RE.match(self.content, self.index).end()

    def peek_significant(self) -> str | None:
        self.skip_insignificant()
        return self.peek()

    def next_significant(self) -> str | None:
        self.skip_insignificant()
        return self.next()

    def advance_to(self, pattern: re.Pattern[str]) -> str | None:
        """Consume up to and including the next match of ``pattern``.

        Returns the matched character, or ``None`` after moving to the end of
        input when there is no match.
        """
        match = pattern.search(self.content, self.index)
        if match is None:
            self.index = self.length
            return None
        self.index = match.end()
        return match.group()

    def mark(self) -> None:
        self.saved_index = self.index

    def since_mark(self) -> InputSlice:
        """Slice from the mark up to, but excluding, the last consumed character."""
        return InputSlice(self.input, self.saved_index, self.index - 1)

    def trace_last(self) -> InputTrace:
        return self.input.trace(self.index - 1)
