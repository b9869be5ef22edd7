"""Script variables and ${name} substitution."""

import html
import re
from collections.abc import Iterator

VARIABLE_PATTERN = re.compile(r"\$\{([^}]+?)\}")


class VariableStore:
    """Case-insensitive mapping of script variable names to string values.

    A name stored with a value of None is known but unset, and expands to an
    empty string like a name that was never stored.
    """

    def __init__(self, initial: dict[str, str | None] | None = None) -> None:
        self._values: dict[str, tuple[str, str | None]] = {}
        for name, value in (initial or {}).items():
            self.set(name, value)

    def set(self, name: str, value: str | None) -> None:
        """Store value under name, replacing any case variant of it."""
        self._values[name.casefold()] = (name, value)

    def get(self, name: str) -> str | None:
        """Return the stored value, or None when name is unset."""
        entry = self._values.get(name.casefold())
        return entry[1] if entry else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._values

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._values.values())

    def __len__(self) -> int:
        return len(self._values)

    def expand(self, raw: str) -> str:
        """Replace every ${name} occurrence with its stored value.

        All occurrences are identified on the original string before any
        replacement happens, so substituted values are never re-expanded.
        """
        return VARIABLE_PATTERN.sub(lambda match: self.get(match[1]) or "", raw)

    def resolve(self, raw: str) -> str:
        """Expand variables, then decode HTML entities in the result."""
        return html.unescape(self.expand(raw))
