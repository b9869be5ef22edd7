"""Suite runner replaying every script of a suite on every fixture."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Literal

from selenese_runner.config import WaitPolicy
from selenese_runner.drivers.base import BrowserDriver
from selenese_runner.interpreter import ScriptInterpreter, check_failure
from selenese_runner.models.descriptor import RunDescriptor
from selenese_runner.models.script import Script, Suite, SuiteEntry
from selenese_runner.parser import load_script
from selenese_runner.report.accumulator import ResultAccumulator

log = logging.getLogger(__name__)

VERIFICATION_ERROR = "verificationError"

type ScriptStatus = Literal["success", "failure", "error"]
type DriverFactory = Callable[[str], AbstractAsyncContextManager[BrowserDriver]]


@dataclass(frozen=True, kw_only=True)
class ScriptResult:
    """Result of one script on one fixture."""

    fixture: str
    script: str
    status: ScriptStatus
    duration: float
    message: str | None = None
    verification_errors: Sequence[str] = ()


@dataclass(frozen=True, kw_only=True)
class SuiteRunner:
    """Runs suites against browser sessions opened per script and fixture.

    driver_factory receives the fixture name and opens a fresh session for a
    single script run. Every outcome lands in the shared accumulator.
    """

    driver_factory: DriverFactory
    accumulator: ResultAccumulator
    fixtures: Sequence[str]
    wait: WaitPolicy = field(default_factory=WaitPolicy)
    base_url: str | None = None
    max_parallel: int = 1
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.max_parallel < 1:
            raise ValueError(
                f"max_parallel must be at least 1, got {self.max_parallel}"
            )

    async def run_suite(self, suite: Suite) -> Sequence[ScriptResult]:
        """Run every script of the suite on every fixture.

        Args:
            suite: The suite whose entries are loaded and replayed

        Returns:
            One result per script and fixture, in suite order

        """
        if not suite.entries:
            log.info("Suite %s lists no scripts", suite.name)
            return []

        semaphore = asyncio.Semaphore(self.max_parallel)
        log.info(
            "Running %d script(s) of suite %s on %d fixture(s)...",
            len(suite.entries),
            suite.name,
            len(self.fixtures),
        )

        tasks = []
        for entry in suite.entries:
            script = await self._load(suite, entry)
            for fixture in self.fixtures:
                descriptor = RunDescriptor(
                    suite_name=suite.name, fixture_name=fixture, test_name=entry.title
                )
                tasks.append(self._run_limited(semaphore, descriptor, script))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        log.info("Suite %s completed", suite.name)

        return self._process_results(results)

    def _process_results(
        self, results: Sequence[ScriptResult | BaseException]
    ) -> Sequence[ScriptResult]:
        final_results: list[ScriptResult] = []
        for result in results:
            if isinstance(result, ScriptResult):
                log.info(
                    "Script completed: fixture=%s script=%s status=%s "
                    "duration=%.1fs",
                    result.fixture,
                    result.script,
                    result.status,
                    result.duration,
                )
                final_results.append(result)
            elif isinstance(result, Exception):
                log.error("Script execution failed: %s", result, exc_info=result)
                final_results.append(
                    ScriptResult(
                        fixture="unknown",
                        script="unknown",
                        status="error",
                        duration=0.0,
                        message=str(result),
                    )
                )
        return final_results

    async def _load(self, suite: Suite, entry: SuiteEntry) -> Script | None:
        try:
            return await load_script(entry.path)
        except (OSError, ValueError) as e:
            log.error("Error loading script %s, skipping it: %s", entry.path, e)
            for fixture in self.fixtures:
                self.accumulator.invalid(
                    RunDescriptor(
                        suite_name=suite.name,
                        fixture_name=fixture,
                        test_name=entry.title,
                    )
                )
            return None

    async def _run_limited(
        self,
        semaphore: asyncio.Semaphore,
        descriptor: RunDescriptor,
        script: Script | None,
    ) -> ScriptResult:
        if script is None:
            return ScriptResult(
                fixture=descriptor.fixture_name,
                script=descriptor.test_name,
                status="error",
                duration=0.0,
                message="Script could not be loaded",
            )
        async with semaphore:
            return await self.run_script(descriptor, script)

    async def run_script(
        self, descriptor: RunDescriptor, script: Script
    ) -> ScriptResult:
        """Run one script in a fresh browser session and record its outcome."""
        self.accumulator.begin(descriptor)
        started = time.monotonic()

        if self.dry_run:
            for line in script.lines:
                log.info("Dry run %s: %s", descriptor, line)
                self.accumulator.assertion_passed(descriptor)
            self.accumulator.completed(descriptor)
            return self._result(descriptor, "success", started)

        interpreter: ScriptInterpreter | None = None
        finished = False
        try:
            async with self.driver_factory(descriptor.fixture_name) as driver:
                interpreter = ScriptInterpreter(
                    driver=driver,
                    descriptor=descriptor,
                    accumulator=self.accumulator,
                    wait=self.wait,
                )
                state = await interpreter.run(script.with_base_url(self.base_url))
                finished = True
        except Exception as e:
            errors = (
                [] if interpreter is None else list(interpreter.verification_errors)
            )
            self._add_verification_errors(descriptor, errors)
            # the interpreter reports its own aborts; session errors are ours
            if interpreter is None or finished:
                log.error("Browser session for %s failed: %s", descriptor, e)
                self.accumulator.exception(descriptor, e)
            status: ScriptStatus = (
                "failure" if check_failure(e) is not None else "error"
            )
            return self._result(
                descriptor,
                status,
                started,
                message=str(e),
                verification_errors=errors,
            )

        errors = list(state.verification_errors)
        if not errors:
            self.accumulator.completed(descriptor)
            return self._result(descriptor, "success", started)

        self._add_verification_errors(descriptor, errors)
        self.accumulator.assertion_failed(
            descriptor,
            f"{len(errors)} verification error(s)",
            "\n".join(errors),
        )
        return self._result(
            descriptor,
            "failure",
            started,
            message=f"{len(errors)} verification error(s)",
            verification_errors=errors,
        )

    def _add_verification_errors(
        self, descriptor: RunDescriptor, errors: Sequence[str]
    ) -> None:
        for message in errors:
            self.accumulator.add_property(descriptor, VERIFICATION_ERROR, message)

    def _result(
        self,
        descriptor: RunDescriptor,
        status: ScriptStatus,
        started: float,
        *,
        message: str | None = None,
        verification_errors: Sequence[str] = (),
    ) -> ScriptResult:
        return ScriptResult(
            fixture=descriptor.fixture_name,
            script=descriptor.test_name,
            status=status,
            duration=time.monotonic() - started,
            message=message,
            verification_errors=tuple(verification_errors),
        )
