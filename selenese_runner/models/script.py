"""Models for recorded Selenese scripts and suites."""

from collections.abc import Sequence
from pathlib import Path

from pydantic import Field

from selenese_runner.models.base import Model

DEFAULT_TITLE = "Untitled Script"


class ScriptLine(Model):
    """One recorded command row: command, target and value cells."""

    command: str = Field(..., description="Selenese command name (e.g. 'open')")
    target: str = Field(default="", description="Locator, URL or text argument")
    value: str = Field(default="", description="Second argument, often a value")

    def __str__(self) -> str:
        return f"{self.command} | {self.target} | {self.value}"


class Script(Model):
    """A recorded browser interaction scenario."""

    title: str = Field(default=DEFAULT_TITLE, description="Script title")
    base_url: str = Field(default="", description="URL prefix for 'open'")
    lines: Sequence[ScriptLine] = Field(
        default_factory=list, description="Command lines in execution order"
    )

    def with_base_url(self, base_url: str | None) -> "Script":
        """Return a copy using base_url, or this script if no override given."""
        if not base_url:
            return self
        return self.model_copy(update={"base_url": base_url})


class SuiteEntry(Model):
    """A script referenced from a suite file."""

    title: str = Field(..., description="Link text in the suite table")
    path: Path = Field(..., description="Script file path")


class Suite(Model):
    """A suite file listing scripts to run."""

    name: str = Field(..., description="Suite name, taken from the file name")
    entries: Sequence[SuiteEntry] = Field(default_factory=list)
