"""Tests for NUnit XML serialization."""

from datetime import datetime

import pytest
from lxml import etree

from selenese_runner.models.descriptor import RunDescriptor
from selenese_runner.report.accumulator import Environment, ResultAccumulator
from selenese_runner.report.models import CaseNode, Failure, Property
from selenese_runner.report.nunit import case_element

ENVIRONMENT = Environment(
    runner_version="1.2.3",
    runtime_version="3.12.1",
    os_version="Linux-6.1",
    platform="Linux",
    cwd="/work",
    machine_name="ci-runner",
    user="builder",
    user_domain="ci-runner",
    culture="en-US",
)


@pytest.fixture
def accumulator() -> ResultAccumulator:
    """Create an accumulator with a fixed environment and start time."""
    return ResultAccumulator(
        name="Nightly",
        clock=lambda: 0.0,
        environment=ENVIRONMENT,
        started_at=datetime(2024, 5, 17, 13, 45, 9),
    )


def parse(accumulator: ResultAccumulator) -> etree._Element:
    """Render the report and parse it back."""
    return etree.fromstring(accumulator.to_xml().encode("utf-8"))


def test_document_header(accumulator: ResultAccumulator) -> None:
    """The root element carries counters, date and time."""
    passed = RunDescriptor.parse("Site.chrome.Login")
    failed = RunDescriptor.parse("Site.chrome.Checkout")
    accumulator.assertion_passed(passed)
    accumulator.assertion_failed(failed, "Expected 'x'", "assertText, id=a, x")
    accumulator.skip(RunDescriptor.parse("Site.firefox.Login"))

    document = parse(accumulator)

    assert document.tag == "test-results"
    assert dict(document.attrib) == {
        "name": "Nightly",
        "total": "3",
        "errors": "0",
        "failures": "1",
        "not-run": "1",
        "inconclusive": "0",
        "ignored": "0",
        "skipped": "1",
        "invalid": "0",
        "date": "2024-05-17",
        "time": "13:45:09",
    }


def test_environment_and_culture(accumulator: ResultAccumulator) -> None:
    """Environment and culture information follow the header."""
    document = parse(accumulator)

    environment = document.find("environment")
    assert environment is not None
    assert environment.get("nunit-version") == "1.2.3"
    assert environment.get("clr-version") == "3.12.1"
    assert environment.get("machine-name") == "ci-runner"
    culture = document.find("culture-info")
    assert culture is not None
    assert culture.get("current-culture") == "en-US"
    assert culture.get("current-uiculture") == "en-US"


def test_empty_report_has_no_suite(accumulator: ResultAccumulator) -> None:
    """Without results there is no test-suite element."""
    assert parse(accumulator).find("test-suite") is None


def test_suite_hierarchy(accumulator: ResultAccumulator) -> None:
    """Scopes nest as test-suite/results elements down to the cases."""
    accumulator.assertion_passed(RunDescriptor.parse("Site.Smoke.chrome.Login"))

    document = parse(accumulator)

    root = document.find("test-suite")
    assert root is not None
    assert (root.get("type"), root.get("name")) == ("Namespace", "Site")
    assert root.get("executed") == "True"
    assert root.get("result") == "Success"
    assert root.get("success") == "True"
    assert root.get("time") == "0.000"
    fixture = root.find("results/test-suite/results/test-suite")
    assert fixture is not None
    assert (fixture.get("type"), fixture.get("name")) == ("TestFixture", "chrome")
    case = fixture.find("results/test-case")
    assert case is not None
    assert case.get("name") == "Site.Smoke.chrome.Login"
    assert case.get("asserts") == "1"


def test_case_with_failure_and_properties() -> None:
    """Failures and properties become child elements of the case."""
    case = CaseNode(
        name="Pay",
        full_name="Site.chrome.Pay",
        executed=True,
        result="Failed",
        success=False,
        time=1.25,
        failure=Failure(message="2 verification error(s)", stack_trace="a\nb"),
        properties=[Property(name="verificationError", value="a")],
    )

    element = case_element(case)

    assert element.get("time") == "1.250"
    assert element.findtext("failure/message") == "2 verification error(s)"
    assert element.findtext("failure/stack-trace") == "a\nb"
    prop = element.find("properties/property")
    assert prop is not None
    assert (prop.get("name"), prop.get("value")) == ("verificationError", "a")
    assert element.find("reason") is None


def test_unreported_flags_are_omitted() -> None:
    """Flags never reported are left out instead of rendered empty."""
    element = case_element(CaseNode(name="Idle", full_name="Site.fx.Idle"))

    assert element.get("executed") is None
    assert element.get("success") is None
    assert element.get("time") is None
    assert element.get("asserts") == "0"


def test_ignored_case_has_reason(accumulator: ResultAccumulator) -> None:
    """Ignored cases carry a reason message instead of a failure."""
    accumulator.ignore(RunDescriptor.parse("Site.chrome.Login"), "not ready")

    case = parse(accumulator).find(".//test-case")

    assert case is not None
    assert case.findtext("reason/message") == "not ready"
    assert case.find("failure") is None


def test_strips_characters_invalid_in_xml(accumulator: ResultAccumulator) -> None:
    """Control characters in messages do not corrupt the document."""
    descriptor = RunDescriptor.parse("Site.chrome.Login")
    accumulator.assertion_failed(descriptor, "bad\x00 \x1bbyte", "here")

    case = parse(accumulator).find(".//test-case")

    assert case is not None
    assert case.findtext("failure/message") == "bad byte"
