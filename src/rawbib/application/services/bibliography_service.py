from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from rawbib.core.config import AppSettings
from rawbib.core.errors import DoubleKeyError, DoubleMacroError
from rawbib.domain.macros import expand_value
from rawbib.domain.models.bibliography import RawBibliography, RawEntry
from rawbib.domain.models.source import Input

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SourceStats:
    name: str
    macros_added: int
    entries_added: int


@dataclass(slots=True)
class BibliographyLoadResult:
    bibliography: RawBibliography
    inputs: list[Input] = field(default_factory=list)
    file_stats: list[SourceStats] = field(default_factory=list)

    @property
    def macros_total(self) -> int:
        return len(self.bibliography.macros)

    @property
    def entries_total(self) -> int:
        return len(self.bibliography.entries)


class BibliographyService:
    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings

    def load_files(
        self,
        paths: Iterable[Path | str],
        bibliography: RawBibliography | None = None,
    ) -> BibliographyLoadResult:
        if bibliography is None:
            bibliography = RawBibliography()
        result = BibliographyLoadResult(bibliography=bibliography)
        for path in paths:
            source = Input.from_file(path, encoding=self.settings.encoding)
            self._add(result, source)
        return result

    def load_text(
        self,
        content: str,
        name: str = "<string>",
        bibliography: RawBibliography | None = None,
    ) -> BibliographyLoadResult:
        if bibliography is None:
            bibliography = RawBibliography()
        result = BibliographyLoadResult(bibliography=bibliography)
        self._add(result, Input.from_string(content, name))
        return result

    def expanded_fields(self, bibliography: RawBibliography, entry: RawEntry) -> dict[str, str]:
        return {
            name: expand_value(
                field_def.value,
                bibliography.macros,
                undefined=self.settings.undefined_macros,
            )
            for name, field_def in entry.fields.items()
        }

    def _add(self, result: BibliographyLoadResult, source: Input) -> None:
        bib = result.bibliography
        macros_before = len(bib.macros)
        entries_before = len(bib.entries)

        logger.debug("Parsing %s (%d characters)", source.name, len(source.content))
        bib.add(source)

        stats = SourceStats(
            name=source.name,
            macros_added=len(bib.macros) - macros_before,
            entries_added=len(bib.entries) - entries_before,
        )
        result.inputs.append(source)
        result.file_stats.append(stats)
        logger.info(
            "Loaded %s: %d macros, %d entries",
            stats.name,
            stats.macros_added,
            stats.entries_added,
        )
        if stats.entries_added == 0 and stats.macros_added == 0:
            logger.warning("No macros or entries found in %s", source.name)


def merge_bibliographies(target: RawBibliography, other: RawBibliography) -> None:
    """Fold a separately parsed bibliography into ``target``.

    All collisions are checked before anything is inserted, so a failing
    merge leaves ``target`` unchanged.
    """
    for name, macro in other.macros.items():
        existing = target.macros.get(name)
        if existing is not None:
            raise DoubleMacroError(name, existing.name.trace(), macro.name.trace())
    for key, entry in other.entries.items():
        existing_entry = target.entries.get(key)
        if existing_entry is not None:
            raise DoubleKeyError(key, existing_entry.key.trace(), entry.key.trace())

    target.macros.update(other.macros)
    target.entries.update(other.entries)
