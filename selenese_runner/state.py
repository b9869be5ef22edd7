"""Per-run interpreter state."""

from dataclasses import dataclass, field

from selenese_runner.config import WaitPolicy
from selenese_runner.variables import VariableStore


@dataclass(kw_only=True)
class InterpreterState:
    """Mutable state of one script run, never shared between runs."""

    base_url: str = ""
    variables: VariableStore = field(default_factory=VariableStore)
    verification_errors: list[str] = field(default_factory=list)
    last_error: BaseException | None = None
    wait: WaitPolicy = field(default_factory=WaitPolicy)

    def resolve(self, raw: str) -> str:
        """Expand variables in raw and decode HTML entities."""
        return self.variables.resolve(raw)
