"""Driver manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from selenese_runner.drivers.base import BrowserDriver


class DriverConfig(BaseModel):
    """Settings shared by every driver plugin.

    combination is a "browser;version;platform" string selected on the command
    line; each plugin decides how to apply it to its own settings.
    """

    combination: str | None = None


@dataclass(frozen=True, kw_only=True)
class DriverManifest[ConfigT: DriverConfig]:
    """Manifest describing a driver plugin.

    The manifest references the configuration class and the factory opening a
    browser session, so drivers are only imported once selected by key.
    """

    config_cls: type[ConfigT]
    driver_factory: Callable[[ConfigT], AbstractAsyncContextManager[BrowserDriver]]
