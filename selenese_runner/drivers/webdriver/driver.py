"""Browser driver speaking the W3C WebDriver protocol over HTTP."""

import json
import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from yarl import URL

from selenese_runner.drivers.base import (
    BrowserDriver,
    Cookie,
    DriverError,
    ElementNotFoundError,
    WebElement,
)
from selenese_runner.drivers.webdriver.config import WebDriverConfig
from selenese_runner.drivers.webdriver.models import (
    CookieValue,
    ErrorValue,
    NewSession,
    element_id,
)
from selenese_runner.locators import Locator

log = logging.getLogger(__name__)

NO_SUCH_ELEMENT = "no such element"
NO_SUCH_COOKIE = "no such cookie"


class WebDriverError(DriverError):
    """Raised when the remote end answers with a WebDriver error."""

    def __init__(self, error: str, message: str, status: int) -> None:
        super().__init__(f"{error} ({status}): {message}")
        self.error = error
        self.message = message
        self.status = status


def _css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def w3c_locator(locator: Locator) -> Mapping[str, str]:
    """Translate a locator into a WebDriver location strategy and value."""
    match locator.strategy:
        case "css":
            using, value = "css selector", locator.selector
        case "id":
            using, value = "css selector", f'[id="{_css_string(locator.selector)}"]'
        case "name":
            using = "css selector"
            value = f'[name="{_css_string(locator.selector)}"]'
        case "link":
            using, value = "link text", locator.selector
        case "xpath":
            using, value = "xpath", locator.selector
        case _:
            raise ValueError(f"Unknown locator strategy: {locator.strategy}")
    return {"using": using, "value": value}


async def send(
    http: aiohttp.ClientSession,
    method: str,
    url: URL,
    payload: Mapping[str, Any] | None = None,
) -> Any:
    """Issue a WebDriver command and return the value of the response.

    Raises:
        WebDriverError: If the remote end reports an error

    """
    async with http.request(method, url, json=payload) as response:
        status = response.status
        text = await response.text()

    try:
        body = json.loads(text) if text else {}
    except json.JSONDecodeError:
        raise WebDriverError(
            "unknown error", f"Invalid response body: {text[:200]}", status
        ) from None

    value = body.get("value") if isinstance(body, dict) else None
    if status >= 400:
        details = ErrorValue.model_validate(value if isinstance(value, dict) else {})
        raise WebDriverError(details.error, details.message, status)
    return value


@dataclass(frozen=True, kw_only=True)
class WebDriverElement(WebElement):
    """Element reference held by a remote session."""

    session: "WebDriverSession" = field(repr=False)
    element_id: str

    async def _call(
        self, method: str, *segments: str, payload: Mapping[str, Any] | None = None
    ) -> Any:
        return await self.session.call(
            method, "element", self.element_id, *segments, payload=payload
        )

    async def text(self) -> str:
        return str(await self._call("GET", "text") or "")

    async def attribute(self, name: str) -> str | None:
        value = await self._call("GET", "attribute", name)
        return None if value is None else str(value)

    async def tag_name(self) -> str:
        return str(await self._call("GET", "name")).lower()

    async def is_displayed(self) -> bool:
        return bool(await self._call("GET", "displayed"))

    async def click(self) -> None:
        await self._call("POST", "click", payload={})

    async def clear(self) -> None:
        await self._call("POST", "clear", payload={})

    async def send_keys(self, text: str) -> None:
        await self._call("POST", "value", payload={"text": text})

    async def find_elements(self, locator: Locator) -> Sequence[WebElement]:
        references = await self._call("POST", "elements", payload=w3c_locator(locator))
        return [self.session.wrap(reference) for reference in references]


@dataclass(frozen=True, kw_only=True)
class WebDriverSession(BrowserDriver):
    """Remote browser session on a Selenium grid or cloud provider."""

    config: WebDriverConfig
    http: aiohttp.ClientSession = field(repr=False)
    session_id: str

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: WebDriverConfig
    ) -> AsyncGenerator["WebDriverSession", None]:
        """Open a browser session and delete it when the context exits."""
        auth = None
        if config.username and config.access_key is not None:
            auth = aiohttp.BasicAuth(
                config.username, config.access_key.get_secret_value()
            )
        timeout = aiohttp.ClientTimeout(total=config.request_timeout)

        async with aiohttp.ClientSession(auth=auth, timeout=timeout) as http:
            capabilities = config.session_capabilities()
            log.info(
                "Creating WebDriver session: remote_url=%s, browserName=%s",
                config.remote_url,
                capabilities.get("browserName"),
            )
            value = await send(
                http,
                "POST",
                URL(config.remote_url) / "session",
                {"capabilities": {"alwaysMatch": capabilities}},
            )
            session_id = NewSession.model_validate(value).session_id
            log.info("Started WebDriver session %s", session_id)
            try:
                yield cls(config=config, http=http, session_id=session_id)
            finally:
                await cls._end(http, config, session_id)

    @staticmethod
    async def _end(
        http: aiohttp.ClientSession, config: WebDriverConfig, session_id: str
    ) -> None:
        url = URL(config.remote_url) / "session" / session_id
        try:
            await send(http, "DELETE", url)
        except (WebDriverError, aiohttp.ClientError, TimeoutError) as e:
            log.warning("Failed to delete WebDriver session %s: %s", session_id, e)
        else:
            log.info("Deleted WebDriver session %s", session_id)

    @property
    def url(self) -> URL:
        """Base URL of every command in this session."""
        return URL(self.config.remote_url) / "session" / self.session_id

    async def call(
        self,
        method: str,
        *segments: str,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send a command to the session endpoint below the given segments."""
        url = self.url
        for segment in segments:
            url = url / segment
        return await send(self.http, method, url, payload)

    def wrap(self, reference: Any) -> WebDriverElement:
        """Wrap a web element reference returned by the remote end."""
        return WebDriverElement(session=self, element_id=element_id(reference))

    async def navigate(self, url: str) -> None:
        log.debug("Navigating to %s", url)
        await self.call("POST", "url", payload={"url": url})

    async def title(self) -> str:
        return str(await self.call("GET", "title") or "")

    async def current_url(self) -> str:
        return str(await self.call("GET", "url") or "")

    async def find_element(self, locator: Locator) -> WebElement:
        try:
            reference = await self.call(
                "POST", "element", payload=w3c_locator(locator)
            )
        except WebDriverError as e:
            if e.error == NO_SUCH_ELEMENT:
                raise ElementNotFoundError(locator) from e
            raise
        return self.wrap(reference)

    async def find_elements(self, locator: Locator) -> Sequence[WebElement]:
        references = await self.call("POST", "elements", payload=w3c_locator(locator))
        return [self.wrap(reference) for reference in references]

    async def get_cookie(self, name: str) -> Cookie | None:
        try:
            value = await self.call("GET", "cookie", name)
        except WebDriverError as e:
            if e.error == NO_SUCH_COOKIE:
                return None
            raise
        cookie = CookieValue.model_validate(value)
        return Cookie(
            name=cookie.name,
            value=cookie.value,
            domain=cookie.domain,
            path=cookie.path,
        )

    async def delete_cookie(self, name: str) -> None:
        await self.call("DELETE", "cookie", name)

    @property
    def supports_script_execution(self) -> bool:
        return True

    async def execute_script(self, script: str, *args: Any) -> Any:
        return await self.call(
            "POST",
            "execute",
            "sync",
            payload={"script": script, "args": list(args)},
        )
