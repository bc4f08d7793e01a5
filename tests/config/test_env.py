from __future__ import annotations

import pytest

from propsynth.config import (
    ConfigurationError,
    env_flag,
    present_env_vars,
)


def test_present_env_vars_skips_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SET_VAR", " 1 ")
    monkeypatch.setenv("BLANK_VAR", "")
    monkeypatch.delenv("UNSET_VAR", raising=False)

    assert present_env_vars(["SET_VAR", "BLANK_VAR", "UNSET_VAR"]) == {"SET_VAR": "1"}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("yes", True), ("TRUE", True), ("0", False), ("off", False), ("No", False)],
)
def test_env_flag_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("FLAG_VAR", raw)

    assert env_flag("FLAG_VAR", default=not expected) is expected


def test_env_flag_defaults_and_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FLAG_VAR", raising=False)
    assert env_flag("FLAG_VAR", default=True) is True

    monkeypatch.setenv("FLAG_VAR", "maybe")
    with pytest.raises(ConfigurationError, match="FLAG_VAR"):
        env_flag("FLAG_VAR", default=True)
