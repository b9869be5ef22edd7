"""Tests for the variable store."""

import pytest

from selenese_runner.variables import VariableStore


@pytest.fixture
def variables() -> VariableStore:
    """Create a store with a few known values."""
    return VariableStore(
        {"a": "letter a", "movingvan": "Moving Van", "whoa-a-dash": "Dashes!"}
    )


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("b", "b"),
        ("${a}", "letter a"),
        ("${a} and b", "letter a and b"),
        ("${whoa-a-dash} and b", "Dashes! and b"),
        ("${a}${movingvan}", "letter aMoving Van"),
        ("${missing}!", "!"),
        ("", ""),
        ("${unterminated", "${unterminated"),
    ],
)
def test_expand(variables: VariableStore, raw: str, expected: str) -> None:
    """Every ${name} is replaced by its value, unknown names by nothing."""
    assert variables.expand(raw) == expected


def test_names_are_case_insensitive(variables: VariableStore) -> None:
    """Lookups ignore the case of the name."""
    assert variables.expand("${MovingVan}") == "Moving Van"
    assert variables.get("A") == "letter a"
    assert "WHOA-A-DASH" in variables


def test_set_replaces_case_variant() -> None:
    """Storing a case variant replaces the earlier entry."""
    variables = VariableStore()
    variables.set("Total", "1")
    variables.set("TOTAL", "2")

    assert len(variables) == 1
    assert variables.get("total") == "2"
    assert list(variables) == ["TOTAL"]


def test_expanded_values_are_not_expanded_again() -> None:
    """Substituted values containing ${...} stay literal."""
    variables = VariableStore({"outer": "${inner}", "inner": "deep"})

    assert variables.expand("${outer}") == "${inner}"


def test_unset_value_expands_to_empty() -> None:
    """A name stored without a value expands like an unknown name."""
    variables = VariableStore()
    variables.set("result", None)

    assert "result" in variables
    assert variables.get("result") is None
    assert variables.expand("[${result}]") == "[]"


def test_resolve_decodes_entities_after_expansion() -> None:
    """Entities are decoded once variables have been substituted."""
    variables = VariableStore({"company": "Johnny &quot;B&quot; Movers"})

    assert variables.resolve("${company} &amp; Co") == 'Johnny "B" Movers & Co'
