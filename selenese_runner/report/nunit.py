"""Serialization of the result tree to the NUnit 2.5 XML format."""

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING

from lxml import etree

from selenese_runner.report.models import CaseNode, SuiteNode

if TYPE_CHECKING:
    from selenese_runner.report.accumulator import ResultAccumulator

INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _text(value: str) -> str:
    return INVALID_XML_CHARS.sub("", value)


def _flag(value: bool | None) -> str | None:
    if value is None:
        return None
    return "True" if value else "False"


def _seconds(value: float | None) -> str | None:
    if value is None:
        return None
    return f"{value:.3f}"


def _element(
    tag: str,
    attributes: Mapping[str, str | None],
    parent: etree._Element | None = None,
) -> etree._Element:
    """Create an element, dropping attributes that have no value."""
    attrib = {
        name: _text(value) for name, value in attributes.items() if value is not None
    }
    if parent is None:
        return etree.Element(tag, attrib)
    return etree.SubElement(parent, tag, attrib)


def _message(parent: etree._Element, tag: str, text: str) -> None:
    _element(tag, {}, parent).text = _text(text)


def case_element(case: CaseNode) -> etree._Element:
    """Render a test case with its properties and failure or reason."""
    element = _element(
        "test-case",
        {
            "name": case.full_name,
            "executed": _flag(case.executed),
            "result": case.result,
            "success": _flag(case.success),
            "time": _seconds(case.time),
            "asserts": str(case.asserts),
        },
    )
    if case.properties:
        properties = _element("properties", {}, element)
        for prop in case.properties:
            _element("property", {"name": prop.name, "value": prop.value}, properties)
    if case.failure is not None:
        failure = _element("failure", {}, element)
        _message(failure, "message", case.failure.message)
        _message(failure, "stack-trace", case.failure.stack_trace)
    elif case.reason is not None:
        reason = _element("reason", {}, element)
        _message(reason, "message", case.reason.message)
    return element


def suite_element(suite: SuiteNode) -> etree._Element:
    """Render a scope and everything nested below it."""
    element = _element(
        "test-suite",
        {
            "type": suite.type,
            "name": suite.name,
            "executed": _flag(suite.executed),
            "result": suite.result,
            "success": _flag(suite.success),
            "time": _seconds(suite.time),
        },
    )
    results = _element("results", {}, element)
    for child in suite.children:
        if isinstance(child, SuiteNode):
            results.append(suite_element(child))
        else:
            results.append(case_element(child))
    return element


def render_report(accumulator: "ResultAccumulator") -> str:
    """Render the accumulator's counters, environment and tree as XML text."""
    counters = accumulator.counters
    environment = accumulator.environment
    document = _element(
        "test-results",
        {
            "name": accumulator.name,
            "total": str(counters.total),
            "errors": str(counters.errors),
            "failures": str(counters.failures),
            "not-run": str(counters.not_run),
            "inconclusive": str(counters.inconclusive),
            "ignored": str(counters.ignored),
            "skipped": str(counters.skipped),
            "invalid": str(counters.invalid),
            "date": accumulator.started_at.strftime("%Y-%m-%d"),
            "time": accumulator.started_at.strftime("%H:%M:%S"),
        },
    )
    _element(
        "environment",
        {
            "nunit-version": environment.runner_version,
            "clr-version": environment.runtime_version,
            "os-version": environment.os_version,
            "platform": environment.platform,
            "cwd": environment.cwd,
            "machine-name": environment.machine_name,
            "user": environment.user,
            "user-domain": environment.user_domain,
        },
        document,
    )
    _element(
        "culture-info",
        {
            "current-culture": environment.culture,
            "current-uiculture": environment.culture,
        },
        document,
    )
    if accumulator.root is not None:
        document.append(suite_element(accumulator.root))

    return etree.tostring(
        document, pretty_print=True, xml_declaration=True, encoding="utf-8"
    ).decode("utf-8")
