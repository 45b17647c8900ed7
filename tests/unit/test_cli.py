import logging
from pathlib import Path

import pytest

from rawbib.cli.main import main


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "refs.bib"
    path.write_text(content, encoding="utf-8")
    return path


def test_check_reports_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bib_path = _write(tmp_path, "@string{m = {x}}\n@misc{a, note = m}\n@misc{b}\n")

    assert main(["check", str(bib_path)]) == 0

    out = capsys.readouterr().out
    assert "Macros: 1" in out
    assert "Entries: 2" in out


def test_check_returns_error_with_location(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    bib_path = _write(tmp_path, "@misc{a,\n  title = {unterminated\n")

    with caplog.at_level(logging.ERROR):
        assert main(["check", str(bib_path)]) == 1

    assert f"{bib_path}:" in caplog.text
    assert "unexpected end of input while parsing entry 'a'" in caplog.text


def test_entries_lists_and_expands(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bib_path = _write(
        tmp_path,
        '@string{first = "Ada"}\n@misc{k, author = first # { Lovelace}}\n',
    )

    assert main(["entries", str(bib_path)]) == 0
    assert "k" in capsys.readouterr().out

    assert main(["entries", str(bib_path), "--key", "k", "--expand"]) == 0
    assert "Ada Lovelace" in capsys.readouterr().out


def test_entries_unknown_key(tmp_path: Path) -> None:
    bib_path = _write(tmp_path, "@misc{k}\n")

    assert main(["entries", str(bib_path), "--key", "missing"]) == 1


def test_macros_lists_definitions(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bib_path = _write(tmp_path, "@string{jacm = {J. ACM}}\n")

    assert main(["macros", str(bib_path)]) == 0
    out = capsys.readouterr().out
    assert "jacm" in out
    assert "J. ACM" in out


def test_values_that_look_like_markup_are_printed_verbatim(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    bib_path = _write(
        tmp_path,
        "@string{tag = {[bold]x}}\n@misc{k, note = {see [/url] here}}\n",
    )

    assert main(["entries", str(bib_path), "--key", "k"]) == 0
    assert "see [/url] here" in capsys.readouterr().out

    assert main(["macros", str(bib_path)]) == 0
    assert "[bold]x" in capsys.readouterr().out
