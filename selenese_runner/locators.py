"""Translation of Selenese target strings into element locators."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

type Strategy = Literal["css", "id", "name", "link", "xpath"]

PREFIXES: Mapping[str, Strategy] = {
    "css=": "css",
    "id=": "id",
    "identifier=": "id",
    "name=": "name",
    "link=": "link",
    "xpath=": "xpath",
}


@dataclass(frozen=True, kw_only=True)
class Locator:
    """Strategy and selector used to find one element in the document."""

    strategy: Strategy
    selector: str

    def __str__(self) -> str:
        return f"{self.strategy}={self.selector}"


def resolve_locator(raw_target: str) -> Locator:
    """Resolve a raw target into a locator.

    Prefix matching is case-sensitive. A target without a known prefix is
    treated as an XPath expression as a whole.
    """
    for prefix, strategy in PREFIXES.items():
        if raw_target.startswith(prefix):
            return Locator(strategy=strategy, selector=raw_target[len(prefix) :])
    return Locator(strategy="xpath", selector=raw_target)


def xpath_literal(text: str) -> str:
    """Quote text as an XPath 1.0 string literal."""
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = text.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


def text_locator(text: str) -> Locator:
    """Locator for any element whose own text contains the given text."""
    return Locator(
        strategy="xpath", selector=f"//*[contains(text(),{xpath_literal(text)})]"
    )
