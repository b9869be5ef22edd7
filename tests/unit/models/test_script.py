"""Tests for script models."""

import pytest
from pydantic import ValidationError

from selenese_runner.models.script import DEFAULT_TITLE, Script, ScriptLine


def test_script_defaults() -> None:
    """An empty script has the default title and no base URL."""
    script = Script()

    assert script.title == DEFAULT_TITLE
    assert script.base_url == ""
    assert script.lines == []


def test_line_cells_default_to_empty() -> None:
    """Missing target and value cells are empty strings."""
    line = ScriptLine(command="refresh")

    assert (line.target, line.value) == ("", "")
    assert str(line) == "refresh |  | "


def test_with_base_url_overrides() -> None:
    """An override produces a copy with the new base URL."""
    script = Script(base_url="http://recorded.test/", lines=[ScriptLine(command="a")])

    overridden = script.with_base_url("https://staging.test/")

    assert overridden.base_url == "https://staging.test/"
    assert overridden.lines == script.lines
    assert script.base_url == "http://recorded.test/"


@pytest.mark.parametrize("base_url", [None, ""])
def test_with_base_url_without_override(base_url: str | None) -> None:
    """Without an override the script is returned unchanged."""
    script = Script(base_url="http://recorded.test/")

    assert script.with_base_url(base_url) is script


def test_models_are_frozen() -> None:
    """Parsed scripts cannot be modified."""
    line = ScriptLine(command="open", target="/")

    with pytest.raises(ValidationError):
        line.command = "click"  # type: ignore[misc]


def test_unknown_fields_are_rejected() -> None:
    """Typos in field names are errors."""
    with pytest.raises(ValidationError):
        ScriptLine(command="open", targte="/")  # type: ignore[call-arg]
