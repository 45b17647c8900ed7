from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rawbib.domain.models.source import InputSlice, InputTrace


class RawbibError(Exception):
    """Base error for all user-facing rawbib exceptions."""


class ConfigurationError(RawbibError):
    """Raised when configuration is invalid or incomplete."""


class SourceReadError(RawbibError):
    """Raised when a bibliography source cannot be read or decoded."""


class ContextKind(str, Enum):
    GLOBAL = "global"
    COMMENT = "comment"
    MACRO_DEF = "macro definition"
    ENTRY = "entry"


@dataclass(frozen=True, slots=True)
class TokenContext:
    """Syntactic position the parser was in when an error occurred.

    ``opener`` is the slice that opened the block (the entry type, or the key
    for entries); it is ``None`` only for the global context. Its trace is
    resolved on access, so building a context costs nothing on success.
    """

    kind: ContextKind
    opener: InputSlice | None = None

    @classmethod
    def global_(cls) -> TokenContext:
        return cls(ContextKind.GLOBAL)

    @classmethod
    def comment(cls, entrytype: InputSlice) -> TokenContext:
        return cls(ContextKind.COMMENT, entrytype)

    @classmethod
    def macro_def(cls, entrytype: InputSlice) -> TokenContext:
        return cls(ContextKind.MACRO_DEF, entrytype)

    @classmethod
    def entry(cls, key: InputSlice) -> TokenContext:
        return cls(ContextKind.ENTRY, key)

    @property
    def trace(self) -> InputTrace | None:
        return None if self.opener is None else self.opener.trace()

    @property
    def key(self) -> str | None:
        if self.kind is ContextKind.ENTRY and self.opener is not None:
            return self.opener.text
        return None

    def describe(self) -> str:
        if self.kind is ContextKind.GLOBAL:
            return "between entries"
        if self.kind is ContextKind.COMMENT:
            return f"in comment block opened at {self.trace}"
        if self.kind is ContextKind.MACRO_DEF:
            return f"in @string block opened at {self.trace}"
        return f"while parsing entry '{self.key}'"


class BibtexSyntaxError(RawbibError):
    """Base error for fatal BibTeX syntax problems.

    ``trace`` is the location the error is reported at; ``str(exc)`` renders
    as ``<file>:<line>:<col>: <message>``.
    """

    def __init__(self, message: str, trace: InputTrace) -> None:
        super().__init__(f"{trace}: {message}")
        self.message = message
        self.trace = trace


class InvalidEOFError(BibtexSyntaxError):
    """Raised when the input ends while a block or value is still open."""

    def __init__(self, context: TokenContext, trace: InputTrace) -> None:
        super().__init__(f"unexpected end of input {context.describe()}", trace)
        self.context = context


class InvalidTokenError(BibtexSyntaxError):
    """Raised when an unexpected character appears where a delimiter was required."""

    def __init__(self, context: TokenContext, found: str, trace: InputTrace) -> None:
        super().__init__(f"unexpected {found!r} {context.describe()}", trace)
        self.context = context
        self.found = found


class DuplicateDefinitionError(BibtexSyntaxError):
    """Raised when a name is defined a second time."""

    kind = "name"

    def __init__(self, name: str, first: InputTrace, second: InputTrace) -> None:
        super().__init__(
            f"duplicate {self.kind} '{name}' (first defined at {first})",
            second,
        )
        self.name = name
        self.first = first
        self.second = second


class DoubleKeyError(DuplicateDefinitionError):
    """Raised when an entry key is already present in the bibliography."""

    kind = "entry key"


class DoubleFieldError(DuplicateDefinitionError):
    """Raised when a field name repeats within one entry."""

    kind = "field"


class DoubleMacroError(DuplicateDefinitionError):
    """Raised when a macro name is defined twice."""

    kind = "macro"


class RecursiveMacroError(BibtexSyntaxError):
    """Raised when a macro body is compound or its expansion loops back on itself."""

    def __init__(self, name: str, trace: InputTrace) -> None:
        super().__init__(f"macro '{name}' must expand to a single atomic value", trace)
        self.name = name


class UndefinedMacroError(RawbibError):
    """Raised when expanding a reference to a macro that was never defined."""

    def __init__(self, name: str, trace: InputTrace) -> None:
        super().__init__(f"{trace}: undefined macro '{name}'")
        self.name = name
        self.trace = trace
