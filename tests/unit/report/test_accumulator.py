"""Tests for the result accumulator."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from selenese_runner.models.descriptor import RunDescriptor
from selenese_runner.report.accumulator import ResultAccumulator, scope_paths
from selenese_runner.report.models import CaseNode, SuiteNode


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock starting at 100s."""
    return FakeClock()


@pytest.fixture
def accumulator(clock: FakeClock) -> ResultAccumulator:
    """Create an accumulator driven by the fake clock."""
    return ResultAccumulator(name="Nightly", clock=clock)


@pytest.fixture
def descriptor() -> RunDescriptor:
    """Create a descriptor with a nested namespace."""
    return RunDescriptor.parse("Site.Checkout.chrome;latest;linux.Pay")


def test_scope_paths(descriptor: RunDescriptor) -> None:
    """Each scope from the root down to the case gets a dotted path."""
    assert scope_paths(descriptor) == [
        "Site",
        "Site.Checkout",
        "Site.Checkout.chrome;latest;linux",
        "Site.Checkout.chrome;latest;linux.Pay",
    ]


def test_builds_tree_from_dotted_path(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """Namespace segments, fixture and case become nested nodes."""
    accumulator.assertion_passed(descriptor)

    root = accumulator.root
    assert root is not None
    assert (root.type, root.name) == ("Namespace", "Site")
    checkout = root.children[0]
    assert isinstance(checkout, SuiteNode)
    assert (checkout.type, checkout.name) == ("Namespace", "Checkout")
    fixture = checkout.children[0]
    assert isinstance(fixture, SuiteNode)
    assert (fixture.type, fixture.name) == ("TestFixture", "chrome;latest;linux")
    case = fixture.children[0]
    assert isinstance(case, CaseNode)
    assert case.name == "Pay"
    assert case.full_name == "Site.Checkout.chrome;latest;linux.Pay"


def test_counts_each_case_once(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """Repeated reports on a case count it once and add up asserts."""
    accumulator.assertion_passed(descriptor)
    accumulator.assertion_passed(descriptor)
    accumulator.add_property(descriptor, "browser", "chrome")

    assert accumulator.counters.total == 1
    assert accumulator.get_test_case(descriptor).asserts == 2


def test_lookups_ignore_case(accumulator: ResultAccumulator) -> None:
    """Paths differing only in case address the same nodes."""
    accumulator.assertion_passed(RunDescriptor.parse("Site.Fx.Login"))
    accumulator.assertion_passed(RunDescriptor.parse("SITE.fx.LOGIN"))

    assert accumulator.counters.total == 1
    assert accumulator.root is not None
    assert len(list(accumulator.root.walk())) == 3


def test_rejects_second_root(accumulator: ResultAccumulator) -> None:
    """All results must live under a single root namespace."""
    accumulator.assertion_passed(RunDescriptor.parse("Site.Fx.Login"))

    with pytest.raises(ValueError, match="root"):
        accumulator.assertion_passed(RunDescriptor.parse("Other.Fx.Login"))


def test_flags_propagate_up_the_chain(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """A failure marks the case and every enclosing scope."""
    accumulator.assertion_failed(descriptor, "Expected 'a'", "assertText, id=x, a")

    for node in accumulator.chain(descriptor):
        assert node.executed is True
        assert node.result == "Failed"
        assert node.success is False
    case = accumulator.get_test_case(descriptor)
    assert case.failure is not None
    assert case.failure.message == "Expected 'a'"
    assert case.failure.stack_trace == "assertText, id=x, a"
    assert accumulator.counters.failures == 1


def test_last_write_wins(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """Later reports overwrite earlier flags, counters keep growing."""
    accumulator.assertion_failed(descriptor, "boom", "here")
    accumulator.assertion_passed(descriptor)

    case = accumulator.get_test_case(descriptor)
    assert case.result == "Success"
    assert case.success is True
    assert accumulator.counters.failures == 1


def test_exception_keeps_success_flag(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """Errors report no success value, so an earlier one survives."""
    accumulator.assertion_passed(descriptor)
    try:
        raise RuntimeError("socket closed")
    except RuntimeError as e:
        accumulator.exception(descriptor, e)

    case = accumulator.get_test_case(descriptor)
    assert case.result == "Failed"
    assert case.success is True
    assert case.failure is not None
    assert case.failure.message == "RuntimeError: socket closed"
    assert "socket closed" in case.failure.stack_trace
    assert accumulator.counters.errors == 1


def test_completed_counts_no_asserts(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """A clean run without assertions is still a success."""
    accumulator.completed(descriptor)

    case = accumulator.get_test_case(descriptor)
    assert (case.executed, case.result, case.success) == (True, "Success", True)
    assert case.asserts == 0


@pytest.mark.parametrize(
    ("report", "counter", "result", "executed", "success", "not_run"),
    [
        ("inconclusive", "inconclusive", "Inconclusive", False, None, 0),
        ("skip", "skipped", "Inconclusive", False, None, 1),
        ("invalid", "invalid", "Invalid", False, False, 1),
    ],
)
def test_not_run_reports(
    accumulator: ResultAccumulator,
    descriptor: RunDescriptor,
    report: str,
    counter: str,
    result: str,
    executed: bool,
    success: bool | None,
    not_run: int,
) -> None:
    """Runs that did not execute carry their own status and counters."""
    getattr(accumulator, report)(descriptor)

    case = accumulator.get_test_case(descriptor)
    assert (case.executed, case.result, case.success) == (executed, result, success)
    assert getattr(accumulator.counters, counter) == 1
    assert accumulator.counters.not_run == not_run


def test_ignore_records_reason(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """Ignored cases keep the reason."""
    accumulator.ignore(descriptor, "browser not available")

    case = accumulator.get_test_case(descriptor)
    assert case.result == "Ignored"
    assert case.reason is not None
    assert case.reason.message == "browser not available"
    assert accumulator.counters.ignored == 1
    assert accumulator.counters.not_run == 1


def test_timings(
    accumulator: ResultAccumulator, clock: FakeClock, descriptor: RunDescriptor
) -> None:
    """Times are measured from begin; ancestors keep their first start."""
    accumulator.begin(descriptor)
    clock.now += 5.0
    accumulator.begin(descriptor)
    clock.now += 1.5
    accumulator.assertion_passed(descriptor)

    *scopes, case = accumulator.chain(descriptor)
    assert case.time == pytest.approx(1.5)
    for scope in scopes:
        assert scope.time == pytest.approx(6.5)


def test_properties_may_repeat(
    accumulator: ResultAccumulator, descriptor: RunDescriptor
) -> None:
    """Properties are appended in order, duplicates allowed."""
    accumulator.add_property(descriptor, "verificationError", "one")
    accumulator.add_property(descriptor, "verificationError", "two")

    properties = accumulator.get_test_case(descriptor).properties
    assert [(p.name, p.value) for p in properties] == [
        ("verificationError", "one"),
        ("verificationError", "two"),
    ]


def test_concurrent_reports(accumulator: ResultAccumulator) -> None:
    """Reports from many threads are all accounted for."""
    descriptors = [RunDescriptor.parse(f"Site.Fx.Case{n}") for n in range(8)]

    def report(descriptor: RunDescriptor) -> None:
        accumulator.begin(descriptor)
        for _ in range(50):
            accumulator.assertion_passed(descriptor)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(report, descriptors))

    assert accumulator.counters.total == 8
    assert sum(accumulator.get_test_case(d).asserts for d in descriptors) == 400


def test_write_report(
    accumulator: ResultAccumulator, descriptor: RunDescriptor, tmp_path: Path
) -> None:
    """The report is written as an XML file, creating parent directories."""
    accumulator.assertion_passed(descriptor)
    destination = tmp_path / "reports" / "TestResult.xml"

    accumulator.write_report(destination)

    content = destination.read_text(encoding="utf-8")
    assert content.startswith("<?xml")
    assert 'name="Nightly"' in content
