"""Classified result of executing one script line."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class Passed:
    """The command completed and any check it made held."""


@dataclass(frozen=True, kw_only=True)
class SoftFailure:
    """A verify-style check failed; the run continues."""

    message: str


@dataclass(frozen=True, kw_only=True)
class FatalFailure:
    """An assert-style check failed; the run aborts."""

    message: str
    location: str
    error: BaseException


@dataclass(frozen=True, kw_only=True)
class UnclassifiedError:
    """Anything other than a failed check; always aborts the run."""

    error: BaseException


type Outcome = Passed | SoftFailure | FatalFailure | UnclassifiedError
