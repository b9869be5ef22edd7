"""Line-by-line execution of a Selenese script against a browser session."""

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from selenese_runner.commands import lookup
from selenese_runner.config import WaitPolicy
from selenese_runner.drivers.base import BrowserDriver, ElementNotFoundError
from selenese_runner.errors import CheckFailedError, UnsupportedCommandError
from selenese_runner.models.descriptor import RunDescriptor
from selenese_runner.models.outcome import (
    FatalFailure,
    Outcome,
    Passed,
    SoftFailure,
    UnclassifiedError,
)
from selenese_runner.models.script import Script, ScriptLine
from selenese_runner.report.accumulator import ResultAccumulator
from selenese_runner.state import InterpreterState
from selenese_runner.variables import VariableStore

log = logging.getLogger(__name__)

CHECK_ERRORS = (CheckFailedError, ElementNotFoundError)

type BeforeExecute = Callable[[ScriptLine, RunDescriptor], None]


class InterpreterStatus(enum.Enum):
    """Lifecycle of an interpreter."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


def is_assertion(line: ScriptLine) -> bool:
    """Whether a failing check on this line aborts the run."""
    return line.command.casefold().startswith("assert")


def check_failure(error: BaseException) -> BaseException | None:
    """Return the failed check behind error, looking one cause deep."""
    if isinstance(error, CHECK_ERRORS):
        return error
    if isinstance(error.__cause__, CHECK_ERRORS):
        return error.__cause__
    return None


@dataclass(kw_only=True)
class ScriptInterpreter:
    """Replays one script against one browser session.

    Commands starting with "assert" abort the run when their check fails;
    any other failing check is collected in verification_errors and the run
    moves on. Errors that are not failed checks always abort. Outcomes are
    reported to the accumulator when one is given.
    """

    driver: BrowserDriver
    descriptor: RunDescriptor
    accumulator: ResultAccumulator | None = None
    wait: WaitPolicy = field(default_factory=WaitPolicy)
    before_execute: BeforeExecute | None = None
    status: InterpreterStatus = field(default=InterpreterStatus.IDLE, init=False)
    state: InterpreterState = field(default_factory=InterpreterState, init=False)

    @property
    def verification_errors(self) -> Sequence[str]:
        """Soft failures collected by the current or last run."""
        return self.state.verification_errors

    async def run(self, script: Script) -> InterpreterState:
        """Execute every line of script in order.

        Returns:
            The final state of the run

        Raises:
            UnsupportedCommandError: If a line names an unknown command
            Exception: The first fatal failure, as raised by the command

        """
        self.state = InterpreterState(
            base_url=script.base_url,
            variables=VariableStore(),
            wait=self.wait,
        )
        self.status = InterpreterStatus.RUNNING
        log.info(
            "Running script '%s' (%d lines) as %s",
            script.title,
            len(script.lines),
            self.descriptor,
        )
        try:
            for line in script.lines:
                if self.before_execute is not None:
                    self.before_execute(line, self.descriptor)
                await self.do_command(line)
        finally:
            self.status = InterpreterStatus.COMPLETED

        log.info(
            "Script '%s' completed with %d verification error(s)",
            script.title,
            len(self.state.verification_errors),
        )
        return self.state

    async def do_command(self, line: ScriptLine) -> None:
        """Execute one line and act on its outcome.

        Raises:
            UnsupportedCommandError: If the command is unknown
            Exception: The error behind a fatal outcome

        """
        log.debug("Executing %s", line)
        match await self.execute_line(line):
            case Passed():
                if self.accumulator is not None and is_assertion(line):
                    self.accumulator.assertion_passed(self.descriptor)
            case SoftFailure(message=message):
                log.info("Verification failed: %s (%s)", message, line)
                self.state.verification_errors.append(message)
            case FatalFailure(message=message, location=location, error=error):
                log.info("Assertion failed: %s (%s)", message, location)
                if self.accumulator is not None:
                    self.accumulator.assertion_failed(
                        self.descriptor, message, location
                    )
                raise error
            case UnclassifiedError(error=error):
                if self.accumulator is not None:
                    self.accumulator.exception(self.descriptor, error)
                raise error

    async def execute_line(self, line: ScriptLine) -> Outcome:
        """Invoke the line's command and classify how it ended."""
        try:
            behavior = lookup(line.command)
        except UnsupportedCommandError as e:
            return UnclassifiedError(error=e)

        try:
            await behavior(line, self.driver, self.state)
        except Exception as e:
            self.state.last_error = e
            return self.classify(line, e)
        return Passed()

    def classify(self, line: ScriptLine, error: Exception) -> Outcome:
        """Map an error raised by a command to an outcome."""
        failure = check_failure(error)
        if failure is None:
            return UnclassifiedError(error=error)
        if not is_assertion(line):
            return SoftFailure(message=str(failure))
        return FatalFailure(
            message=str(failure), location=self.location(line), error=error
        )

    def location(self, line: ScriptLine) -> str:
        """Describe a line with its arguments expanded, for failure reports."""
        return ", ".join(
            (
                line.command,
                self.state.resolve(line.target),
                self.state.resolve(line.value),
            )
        )
