import pytest

from rawbib.core.config import load_settings
from rawbib.core.errors import ConfigurationError


def test_load_settings_defaults() -> None:
    settings = load_settings({})

    assert settings.encoding == "utf-8"
    assert settings.undefined_macros == "error"


def test_load_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAWBIB_ENCODING", "latin-1")
    monkeypatch.setenv("RAWBIB_UNDEFINED_MACROS", " Keep ")

    settings = load_settings()

    assert settings.encoding == "latin-1"
    assert settings.undefined_macros == "keep"


def test_load_settings_rejects_unknown_codec() -> None:
    with pytest.raises(ConfigurationError, match="unknown codec"):
        load_settings({"RAWBIB_ENCODING": "no-such-codec"})


def test_load_settings_rejects_unknown_policy() -> None:
    with pytest.raises(ConfigurationError, match="RAWBIB_UNDEFINED_MACROS"):
        load_settings({"RAWBIB_UNDEFINED_MACROS": "ignore"})
