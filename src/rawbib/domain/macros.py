from __future__ import annotations

from collections.abc import Mapping

from rawbib.core.config import UNDEFINED_MACRO_POLICIES
from rawbib.core.errors import ConfigurationError, RecursiveMacroError, UndefinedMacroError
from rawbib.domain.models.bibliography import Compound, FieldDef, Literal, MacroRef, Value


def expand_value(
    value: Value,
    macros: Mapping[str, FieldDef],
    *,
    undefined: str = "error",
) -> str:
    """Reduce a parsed value to plain text.

    Literals contribute their text verbatim, macro references are replaced by
    the expansion of the macro they name and compound members are joined.
    With ``undefined="keep"`` an unknown macro expands to its own name.
    """
    if undefined not in UNDEFINED_MACRO_POLICIES:
        raise ConfigurationError(
            f"Unknown undefined-macro policy {undefined!r}; expected one of {UNDEFINED_MACRO_POLICIES}"
        )
    parts: list[str] = []
    _expand_into(parts, value, macros, undefined, ())
    return "".join(parts)


def _expand_into(
    parts: list[str],
    value: Value,
    macros: Mapping[str, FieldDef],
    undefined: str,
    active: tuple[str, ...],
) -> None:
    if isinstance(value, Literal):
        parts.append(value.text.text)
        return
    if isinstance(value, Compound):
        for member in value.members:
            _expand_into(parts, member, macros, undefined, active)
        return

    if not isinstance(value, MacroRef):
        raise TypeError(f"Cannot expand {type(value).__name__}")
    name = value.name.text
    if name in active:
        raise RecursiveMacroError(name, value.name.trace())
    definition = macros.get(name)
    if definition is None:
        if undefined == "keep":
            parts.append(name)
            return
        raise UndefinedMacroError(name, value.name.trace())
    _expand_into(parts, definition.value, macros, undefined, active + (name,))
