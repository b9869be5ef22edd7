"""Errors raised while interpreting a script."""


class UnsupportedCommandError(Exception):
    """Raised when a script line names a command the runner does not know."""

    def __init__(self, command: str) -> None:
        super().__init__(
            f"Selenese command '{command}' is not supported by this script runner"
        )
        self.command = command


class CheckFailedError(Exception):
    """Raised when a verify/assert style check does not hold."""


class TextMismatchError(CheckFailedError):
    """Raised when an actual string does not match an expected pattern."""

    def __init__(self, actual: str, expected: str) -> None:
        super().__init__(f"Expected {expected!r} but was {actual!r}")
        self.actual = actual
        self.expected = expected


class WaitTimeoutError(CheckFailedError):
    """Raised when a polled condition does not hold within the ceiling."""


class ScriptExecutionNotSupportedError(Exception):
    """Raised when the driver cannot evaluate JavaScript."""
