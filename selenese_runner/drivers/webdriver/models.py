"""Pydantic models for W3C WebDriver responses."""

from typing import Any

from pydantic import BaseModel, Field

W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"
LEGACY_ELEMENT_KEY = "ELEMENT"


class ErrorValue(BaseModel):
    """The value of a WebDriver error response."""

    error: str = "unknown error"
    message: str = ""
    stacktrace: str = ""


class NewSession(BaseModel):
    """The value of a new session response."""

    session_id: str = Field(alias="sessionId")
    capabilities: dict[str, Any] = Field(default_factory=dict)


class CookieValue(BaseModel):
    """A cookie as serialized by WebDriver."""

    name: str
    value: str
    domain: str | None = None
    path: str | None = None


def element_id(reference: Any) -> str:
    """Extract the element id from a web element reference object."""
    if isinstance(reference, dict):
        for key in (W3C_ELEMENT_KEY, LEGACY_ELEMENT_KEY):
            if key in reference:
                return str(reference[key])
    raise ValueError(f"Not a web element reference: {reference!r}")
