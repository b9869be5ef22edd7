"""Abstract browser automation capability consumed by the interpreter."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from selenese_runner.errors import ScriptExecutionNotSupportedError
from selenese_runner.locators import Locator


class DriverError(RuntimeError):
    """Raised when the automation backend fails to carry out a request."""


class ElementNotFoundError(DriverError):
    """Raised when a locator matches no element in the current document."""

    def __init__(self, locator: Locator | str, message: str | None = None) -> None:
        super().__init__(message or f"Unable to locate element: {locator}")
        self.locator = locator


@dataclass(frozen=True, kw_only=True)
class Cookie:
    """A browser cookie as reported by the backend."""

    name: str
    value: str
    domain: str | None = None
    path: str | None = None


class WebElement(ABC):
    """Handle to one element of the current document."""

    @abstractmethod
    async def text(self) -> str:
        """Return the rendered text of the element."""

    @abstractmethod
    async def attribute(self, name: str) -> str | None:
        """Return an attribute value, or None when the attribute is absent."""

    @abstractmethod
    async def tag_name(self) -> str:
        """Return the lower-case tag name."""

    @abstractmethod
    async def is_displayed(self) -> bool:
        """Return whether the element is visible to the user."""

    @abstractmethod
    async def click(self) -> None:
        """Click the element."""

    @abstractmethod
    async def clear(self) -> None:
        """Clear the editable content of the element."""

    @abstractmethod
    async def send_keys(self, text: str) -> None:
        """Type text into the element."""

    @abstractmethod
    async def find_elements(self, locator: Locator) -> Sequence["WebElement"]:
        """Find descendants of this element matching the locator."""


class BrowserDriver(ABC):
    """Abstract browser session.

    Implementations translate Locator values into their own lookup syntax and
    must raise ElementNotFoundError, and nothing else, when a lookup comes up
    empty, since the *NotPresent commands depend on telling the two apart.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load url in the current window."""

    @abstractmethod
    async def title(self) -> str:
        """Return the title of the current document."""

    @abstractmethod
    async def current_url(self) -> str:
        """Return the URL of the current document."""

    @abstractmethod
    async def find_element(self, locator: Locator) -> WebElement:
        """Return the first element matching the locator.

        Raises:
            ElementNotFoundError: If nothing matches

        """

    @abstractmethod
    async def find_elements(self, locator: Locator) -> Sequence[WebElement]:
        """Return every element matching the locator, possibly none."""

    @abstractmethod
    async def get_cookie(self, name: str) -> Cookie | None:
        """Return the named cookie, or None when it does not exist."""

    @abstractmethod
    async def delete_cookie(self, name: str) -> None:
        """Delete the named cookie."""

    @property
    def supports_script_execution(self) -> bool:
        """Whether execute_script is available on this backend."""
        return False

    async def execute_script(self, script: str, *args: Any) -> Any:
        """Evaluate JavaScript in the page and return its result.

        Raises:
            ScriptExecutionNotSupportedError: If the backend has no script engine

        """
        raise ScriptExecutionNotSupportedError(
            "The current driver does not support remote execution of JavaScript"
        )
