from __future__ import annotations

import codecs
import os
from collections.abc import Mapping
from dataclasses import dataclass

from rawbib.core.errors import ConfigurationError


@dataclass(frozen=True)
class AppSettings:
    encoding: str
    undefined_macros: str


DEFAULT_ENCODING = "utf-8"
DEFAULT_UNDEFINED_MACROS = "error"
UNDEFINED_MACRO_POLICIES = ("error", "keep")


def load_settings(environ: Mapping[str, str] | None = None) -> AppSettings:
    env = os.environ if environ is None else environ

    encoding = env.get("RAWBIB_ENCODING") or DEFAULT_ENCODING
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise ConfigurationError(f"RAWBIB_ENCODING names an unknown codec: {encoding}") from exc

    undefined_macros = (env.get("RAWBIB_UNDEFINED_MACROS") or DEFAULT_UNDEFINED_MACROS).strip().lower()
    if undefined_macros not in UNDEFINED_MACRO_POLICIES:
        raise ConfigurationError(
            "RAWBIB_UNDEFINED_MACROS must be one of "
            f"{', '.join(UNDEFINED_MACRO_POLICIES)} (got {undefined_macros!r})"
        )

    return AppSettings(encoding=encoding, undefined_macros=undefined_macros)
