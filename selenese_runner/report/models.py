"""Nodes of the NUnit-style result tree."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

type SuiteType = Literal["Namespace", "TestFixture"]
type ResultStatus = Literal["Success", "Failed", "Inconclusive", "Ignored", "Invalid"]

SUCCESS: ResultStatus = "Success"
FAILED: ResultStatus = "Failed"
INCONCLUSIVE: ResultStatus = "Inconclusive"
IGNORED: ResultStatus = "Ignored"
INVALID: ResultStatus = "Invalid"


@dataclass(frozen=True, kw_only=True)
class Failure:
    """Message and detail of a failed or errored test case."""

    message: str
    stack_trace: str = ""


@dataclass(frozen=True, kw_only=True)
class Reason:
    """Why a test case was not run."""

    message: str


@dataclass(frozen=True, kw_only=True)
class Property:
    """A name/value pair attached to a test case."""

    name: str
    value: str


@dataclass(kw_only=True)
class StatusFlags:
    """Tri-state executed/result/success flags; None means not reported yet."""

    executed: bool | None = None
    result: ResultStatus | None = None
    success: bool | None = None
    time: float | None = None

    def apply(
        self,
        executed: bool | None,
        result: ResultStatus | None,
        success: bool | None,
    ) -> None:
        """Overwrite every flag given as non-None."""
        if executed is not None:
            self.executed = executed
        if result is not None:
            self.result = result
        if success is not None:
            self.success = success


@dataclass(kw_only=True)
class CaseNode(StatusFlags):
    """A single test case: one script run against one fixture."""

    name: str
    full_name: str
    asserts: int = 0
    failure: Failure | None = None
    reason: Reason | None = None
    properties: list[Property] = field(default_factory=list)


@dataclass(kw_only=True)
class SuiteNode(StatusFlags):
    """A namespace or fixture scope holding nested scopes or cases."""

    type: SuiteType
    name: str
    children: list["SuiteNode | CaseNode"] = field(default_factory=list)

    def find_suite(self, suite_type: SuiteType, name: str) -> "SuiteNode | None":
        """Return the child scope of that type and name, ignoring case."""
        key = name.casefold()
        for child in self.children:
            if (
                isinstance(child, SuiteNode)
                and child.type == suite_type
                and child.name.casefold() == key
            ):
                return child
        return None

    def find_case(self, name: str) -> CaseNode | None:
        """Return the child test case with that name, ignoring case."""
        key = name.casefold()
        for child in self.children:
            if isinstance(child, CaseNode) and child.name.casefold() == key:
                return child
        return None

    def walk(self) -> Iterator["SuiteNode | CaseNode"]:
        """Yield this scope and every node below it, depth first."""
        yield self
        for child in self.children:
            if isinstance(child, SuiteNode):
                yield from child.walk()
            else:
                yield child


@dataclass(kw_only=True)
class Counters:
    """Totals reported on the root of the result document."""

    total: int = 0
    errors: int = 0
    failures: int = 0
    not_run: int = 0
    inconclusive: int = 0
    ignored: int = 0
    skipped: int = 0
    invalid: int = 0
