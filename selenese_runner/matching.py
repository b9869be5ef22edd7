"""Selenese string-match patterns (exact:, glob:, regex:)."""

import re

from selenese_runner.errors import TextMismatchError

EXACT_PREFIX = "exact:"
GLOB_PREFIX = "glob:"
REGEX_PREFIX = "regex:"


def glob_to_regex(glob: str) -> re.Pattern[str]:
    """Compile a glob into an anchored, case-insensitive regular expression."""
    pattern = re.escape(glob).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(f"^{pattern}$", re.IGNORECASE | re.DOTALL)


def matches(actual: str, expected: str | None) -> bool:
    """Check actual against an expected value carrying an optional mode prefix."""
    if not expected:
        return actual == ""
    if expected.startswith(EXACT_PREFIX):
        return actual == expected.removeprefix(EXACT_PREFIX)
    if expected.startswith(GLOB_PREFIX):
        pattern = glob_to_regex(expected.removeprefix(GLOB_PREFIX))
        return pattern.search(actual) is not None
    if expected.startswith(REGEX_PREFIX):
        return re.search(expected.removeprefix(REGEX_PREFIX), actual) is not None
    return actual == expected


def match_text(actual: str, expected: str | None) -> None:
    """Raise TextMismatchError unless actual matches expected."""
    if not matches(actual, expected):
        raise TextMismatchError(actual, expected or "")
