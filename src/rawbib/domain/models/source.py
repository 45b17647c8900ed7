from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rawbib.core.errors import SourceReadError


@dataclass(frozen=True, slots=True)
class InputTrace:
    name: str
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.name}:{self.line}:{self.col}"


@dataclass(frozen=True, slots=True)
class Input:
    """Named, immutable source text.

    Every slice produced by the parser indexes into ``content``; the buffer
    must outlive the bibliography built from it.
    """

    name: str
    content: str

    @classmethod
    def from_string(cls, content: str, name: str = "<string>") -> Input:
        return cls(name=name, content=content)

    @classmethod
    def from_file(cls, path: Path | str, encoding: str = "utf-8") -> Input:
        source = Path(path).expanduser()
        try:
            content = source.read_text(encoding=encoding)
        except FileNotFoundError as exc:
            raise SourceReadError(f"BibTeX file not found: {source}") from exc
        except UnicodeDecodeError as exc:
            raise SourceReadError(
                f"Cannot decode {source} as {encoding}: {exc.reason} at byte {exc.start}"
            ) from exc
        except OSError as exc:
            raise SourceReadError(f"Cannot read {source}: {exc}") from exc
        return cls(name=str(source), content=content)

    def trace(self, offset: int) -> InputTrace:
        """Resolve a character offset into a 1-based line and column.

        A newline at ``offset`` counts towards the line number, so the trace of
        a newline character is column 0 of the following line.
        """
        if not self.content:
            return InputTrace(self.name, 1, 0)
        offset = max(0, min(offset, len(self.content) - 1))
        line = 1 + self.content.count("\n", 0, offset + 1)
        start = self.content.rfind("\n", 0, offset + 1) + 1
        return InputTrace(self.name, line, offset + 1 - start)


class InputSlice:
    """Read-only view of ``input.content[start:end]``.

    Equality and hashing consider the text only, so slices from different
    sources compare equal while still remembering where they came from.
    """

    __slots__ = ("input", "start", "end")

    def __init__(self, input: Input, start: int, end: int) -> None:
        self.input = input
        self.start = start
        self.end = end

    @property
    def text(self) -> str:
        return self.input.content[self.start : self.end]

    @property
    def offset(self) -> int:
        return self.start

    def trace(self) -> InputTrace:
        return self.input.trace(self.start)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"InputSlice({self.text!r}, {self.input.name!r}@{self.start})"

    def __len__(self) -> int:
        return self.end - self.start

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InputSlice):
            return self.text == other.text
        if isinstance(other, str):
            return self.text == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)
