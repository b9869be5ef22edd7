"""Accumulation of script outcomes into an NUnit-style result tree."""

import getpass
import locale
import logging
import os
import platform
import threading
import time
import traceback
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from selenese_runner.models.descriptor import RunDescriptor
from selenese_runner.report.models import (
    FAILED,
    IGNORED,
    INCONCLUSIVE,
    INVALID,
    SUCCESS,
    CaseNode,
    Counters,
    Failure,
    Property,
    Reason,
    ResultStatus,
    SuiteNode,
)
from selenese_runner.report.nunit import render_report

log = logging.getLogger(__name__)

DEFAULT_NAME = "Selenese Script Test"


def _runner_version() -> str:
    try:
        return version("selenese-runner")
    except PackageNotFoundError:
        return "0.0.0"


def _user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def _culture() -> str:
    language, _ = locale.getlocale()
    return (language or "en_US").replace("_", "-")


@dataclass(frozen=True, kw_only=True)
class Environment:
    """Description of the machine producing the report."""

    runner_version: str
    runtime_version: str
    os_version: str
    platform: str
    cwd: str
    machine_name: str
    user: str
    user_domain: str
    culture: str

    @classmethod
    def capture(cls) -> "Environment":
        """Describe the current process."""
        return cls(
            runner_version=_runner_version(),
            runtime_version=platform.python_version(),
            os_version=platform.platform(),
            platform=platform.system(),
            cwd=os.getcwd(),
            machine_name=platform.node(),
            user=_user(),
            user_domain=platform.node(),
            culture=_culture(),
        )


def scope_paths(descriptor: RunDescriptor) -> Sequence[str]:
    """Dotted paths of every scope from the root down to the test case."""
    parts = [
        *descriptor.namespace_parts,
        descriptor.fixture_name,
        descriptor.test_name,
    ]
    return [".".join(parts[: i + 1]) for i in range(len(parts))]


@dataclass(kw_only=True)
class ResultAccumulator:
    """Builds the result tree for a whole run.

    Scopes are created on first reference and never removed. Status and
    timing reported for a test case are written to the case and to every
    scope above it; the last write wins. All mutations are serialized by a
    single lock, so concurrent runs may share one accumulator.
    """

    name: str = DEFAULT_NAME
    clock: Callable[[], float] = time.monotonic
    environment: Environment = field(default_factory=Environment.capture)
    started_at: datetime = field(default_factory=datetime.now)
    counters: Counters = field(default_factory=Counters, init=False)
    root: SuiteNode | None = field(default=None, init=False)
    _timers: dict[str, float] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False
    )

    def begin(self, descriptor: RunDescriptor) -> None:
        """Start the timer of a test case, restarting it if already running.

        Enclosing scopes without a timer start theirs at the same instant.
        """
        with self._lock:
            now = self.clock()
            *scopes, case = scope_paths(descriptor)
            for path in scopes:
                self._timers.setdefault(path.casefold(), now)
            self._timers[case.casefold()] = now

    def assertion_passed(self, descriptor: RunDescriptor) -> None:
        """Count a passed assertion and mark the chain successful."""
        with self._lock:
            self.get_test_case(descriptor).asserts += 1
            self._record(descriptor, True, SUCCESS, True)

    def completed(self, descriptor: RunDescriptor) -> None:
        """Mark a run that ended cleanly; unlike a passed assertion, counts none."""
        with self._lock:
            self.get_test_case(descriptor)
            self._record(descriptor, True, SUCCESS, True)

    def assertion_failed(
        self, descriptor: RunDescriptor, message: str, location: str
    ) -> None:
        """Record a failed assertion with where it happened."""
        with self._lock:
            self.counters.failures += 1
            case = self.get_test_case(descriptor)
            case.failure = Failure(message=message, stack_trace=location)
            self._record(descriptor, True, FAILED, False)

    def exception(self, descriptor: RunDescriptor, error: BaseException) -> None:
        """Record an error that is not a failed assertion."""
        with self._lock:
            self.counters.errors += 1
            case = self.get_test_case(descriptor)
            case.failure = Failure(
                message=f"{type(error).__name__}: {error}",
                stack_trace="".join(traceback.format_exception(error)),
            )
            self._record(descriptor, True, FAILED, None)

    def ignore(self, descriptor: RunDescriptor, reason: str) -> None:
        """Mark a test case as ignored for the given reason."""
        with self._lock:
            self.counters.ignored += 1
            self.counters.not_run += 1
            self.get_test_case(descriptor).reason = Reason(message=reason)
            self._record(descriptor, False, IGNORED, None)

    def inconclusive(self, descriptor: RunDescriptor) -> None:
        """Mark a test case as inconclusive."""
        with self._lock:
            self.counters.inconclusive += 1
            self._record(descriptor, False, INCONCLUSIVE, None)

    def skip(self, descriptor: RunDescriptor) -> None:
        """Mark a test case as skipped; reported as inconclusive."""
        with self._lock:
            self.counters.skipped += 1
            self.counters.not_run += 1
            self._record(descriptor, False, INCONCLUSIVE, None)

    def invalid(self, descriptor: RunDescriptor) -> None:
        """Mark a test case as invalid."""
        with self._lock:
            self.counters.invalid += 1
            self.counters.not_run += 1
            self._record(descriptor, False, INVALID, False)

    def add_property(self, descriptor: RunDescriptor, name: str, value: str) -> None:
        """Append a property to a test case; names may repeat."""
        with self._lock:
            case = self.get_test_case(descriptor)
            case.properties.append(Property(name=name, value=value))

    def get_suite(self, namespace_path: str) -> SuiteNode:
        """Return the namespace scope for a dotted path, creating it as needed.

        Raises:
            ValueError: If the path names a different root than the tree has

        """
        root_name, *nested = namespace_path.split(".")
        with self._lock:
            if self.root is None:
                self.root = SuiteNode(type="Namespace", name=root_name)
            elif self.root.name.casefold() != root_name.casefold():
                raise ValueError(
                    f"Result tree root is '{self.root.name}', "
                    f"cannot record results under '{root_name}'"
                )

            suite = self.root
            for piece in nested:
                child = suite.find_suite("Namespace", piece)
                if child is None:
                    child = SuiteNode(type="Namespace", name=piece)
                    suite.children.append(child)
                suite = child
            return suite

    def get_fixture(self, descriptor: RunDescriptor) -> SuiteNode:
        """Return the fixture scope of a descriptor, creating it as needed."""
        with self._lock:
            suite = self.get_suite(descriptor.suite_name)
            fixture = suite.find_suite("TestFixture", descriptor.fixture_name)
            if fixture is None:
                fixture = SuiteNode(type="TestFixture", name=descriptor.fixture_name)
                suite.children.append(fixture)
            return fixture

    def get_test_case(self, descriptor: RunDescriptor) -> CaseNode:
        """Return the test case of a descriptor, creating and counting it."""
        with self._lock:
            fixture = self.get_fixture(descriptor)
            case = fixture.find_case(descriptor.test_name)
            if case is None:
                case = CaseNode(
                    name=descriptor.test_name, full_name=descriptor.full_name
                )
                fixture.children.append(case)
                self.counters.total += 1
            return case

    def chain(self, descriptor: RunDescriptor) -> Sequence[SuiteNode | CaseNode]:
        """Nodes from the root down to the descriptor's test case."""
        with self._lock:
            nodes: list[SuiteNode | CaseNode] = []
            parts = descriptor.namespace_parts
            for depth in range(1, len(parts) + 1):
                nodes.append(self.get_suite(".".join(parts[:depth])))
            nodes.append(self.get_fixture(descriptor))
            nodes.append(self.get_test_case(descriptor))
            return nodes

    def elapsed(self, path: str) -> float:
        """Seconds since the scope's timer started; starts it when missing."""
        with self._lock:
            now = self.clock()
            return now - self._timers.setdefault(path.casefold(), now)

    def to_xml(self) -> str:
        """Serialize the whole tree as an NUnit 2.5 result document."""
        with self._lock:
            return render_report(self)

    def write_report(self, destination: Path) -> None:
        """Write the result document to destination."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(self.to_xml(), encoding="utf-8")
        log.info("Wrote results to %s", destination)

    def _record(
        self,
        descriptor: RunDescriptor,
        executed: bool | None,
        result: ResultStatus | None,
        success: bool | None,
    ) -> None:
        for node, path in zip(
            self.chain(descriptor), scope_paths(descriptor), strict=True
        ):
            node.apply(executed, result, success)
            node.time = self.elapsed(path)
