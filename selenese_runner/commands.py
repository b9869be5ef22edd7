"""Selenese command table and the behaviors behind each command.

Every behavior takes the script line, the browser session and the run state.
A behavior returns normally when the command succeeded and raises otherwise:
CheckFailedError or ElementNotFoundError for checks that did not hold, any
other exception for everything else. The interpreter turns that into an
outcome and decides whether the run may continue.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from functools import partial
from types import MappingProxyType
from typing import Any

from selenese_runner.config import WaitPolicy
from selenese_runner.drivers.base import (
    BrowserDriver,
    DriverError,
    ElementNotFoundError,
    WebElement,
)
from selenese_runner.errors import (
    CheckFailedError,
    ScriptExecutionNotSupportedError,
    TextMismatchError,
    UnsupportedCommandError,
    WaitTimeoutError,
)
from selenese_runner.locators import (
    Locator,
    resolve_locator,
    text_locator,
    xpath_literal,
)
from selenese_runner.matching import match_text
from selenese_runner.models.script import ScriptLine
from selenese_runner.state import InterpreterState

log = logging.getLogger(__name__)

type Behavior = Callable[
    [ScriptLine, BrowserDriver, InterpreterState], Awaitable[None]
]

INPUT_TAGS = frozenset({"input", "textarea", "select"})


def target_locator(line: ScriptLine, state: InterpreterState) -> Locator:
    """Locator for the line's target after variable expansion."""
    return resolve_locator(state.resolve(line.target))


async def find(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> WebElement:
    """Find the element addressed by the line's target."""
    return await driver.find_element(target_locator(line, state))


async def is_present(driver: BrowserDriver, locator: Locator) -> bool:
    """Whether the locator matches an element."""
    try:
        await driver.find_element(locator)
    except ElementNotFoundError:
        return False
    return True


async def is_visible(driver: BrowserDriver, locator: Locator) -> bool:
    """Whether the locator matches a displayed element."""
    try:
        element = await driver.find_element(locator)
    except ElementNotFoundError:
        return False
    return await element.is_displayed()


async def poll(
    probe: Callable[[], Awaitable[bool]], wait: WaitPolicy, description: str
) -> None:
    """Probe until it returns True, at most wait.max_attempts times.

    Errors raised by the probe only end the current attempt.

    Raises:
        WaitTimeoutError: If no attempt succeeded

    """
    for attempt in range(1, wait.max_attempts + 1):
        try:
            if await probe():
                return
        except Exception as e:
            log.debug("Probe for %s failed (attempt %d): %s", description, attempt, e)

        if attempt < wait.max_attempts:
            await asyncio.sleep(wait.poll_interval)

    raise WaitTimeoutError(
        f"Timed out after {wait.max_attempts} attempts waiting for {description}"
    )


async def wait_for_page(driver: BrowserDriver, state: InterpreterState) -> None:
    """Let navigation settle, then wait for the page container to exist."""
    await asyncio.sleep(state.wait.settle_delay)
    container = resolve_locator(state.wait.page_container)
    await poll(
        partial(is_present, driver, container),
        state.wait,
        f"page container {container}",
    )


def join_url(base_url: str, target: str) -> str:
    """Append target to base_url, keeping absolute targets untouched."""
    if "://" in target:
        return target
    if base_url.endswith("/") and target.startswith("/"):
        return base_url + target[1:]
    return base_url + target


def stringify(result: Any) -> str | None:
    """Render a script result the way JavaScript would print it."""
    if result is None:
        return None
    if isinstance(result, bool):
        return "true" if result else "false"
    return str(result)


async def open_url(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Navigate to the target relative to the base URL."""
    await driver.navigate(join_url(state.base_url, state.resolve(line.target)))


async def check_title(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Compare the document title with the target literally."""
    expected = state.resolve(line.target)
    actual = await driver.title()
    if actual != expected:
        raise TextMismatchError(actual, expected)


async def check_value_or_text(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Match a form control's value, or an element's text, against the value."""
    element = await find(line, driver, state)
    if (await element.tag_name()).lower() in INPUT_TAGS:
        actual = await element.attribute("value") or ""
    else:
        actual = await element.text()
    match_text(actual, state.resolve(line.value))


async def check_text_present(
    line: ScriptLine,
    driver: BrowserDriver,
    state: InterpreterState,
    *,
    store: bool = False,
) -> None:
    """Require some element to contain the target text.

    The store variant records "true" or "false" under the value's name
    instead of failing.
    """
    locator = text_locator(state.resolve(line.target))
    if not store:
        await driver.find_element(locator)
        return

    found = await is_present(driver, locator)
    state.variables.set(line.value, "true" if found else "false")


async def check_text_not_present(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Require that no element contains the target text."""
    text = state.resolve(line.target)
    if await is_present(driver, text_locator(text)):
        raise CheckFailedError(
            f"Text {text!r} was expected not present but was found in the document"
        )


async def check_element_visible(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Require the target element to be displayed."""
    element = await find(line, driver, state)
    if not await element.is_displayed():
        raise CheckFailedError(f"Element {line.target} is not visible")


async def check_element_present(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Require the target element to exist."""
    await find(line, driver, state)


async def check_element_not_present(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Require the target element to be absent."""
    if await is_present(driver, target_locator(line, state)):
        raise CheckFailedError(
            f"Element {line.target} was expected not present but was found "
            "in the document"
        )


async def click(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Click the element and wait for any resulting navigation."""
    element = await find(line, driver, state)
    await element.click()
    await wait_for_page(driver, state)


async def clear(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Clear the element's editable content."""
    element = await find(line, driver, state)
    await element.clear()


async def type_text(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Send the value as keystrokes to the element."""
    element = await find(line, driver, state)
    await element.send_keys(state.resolve(line.value))


async def wait_for_element(
    line: ScriptLine,
    driver: BrowserDriver,
    state: InterpreterState,
    *,
    present: bool,
) -> None:
    """Poll until the element's presence matches the expectation."""
    locator = target_locator(line, state)

    async def probe() -> bool:
        return await is_present(driver, locator) == present

    await poll(probe, state.wait, f"{line.command} {locator}")


async def wait_for_text(
    line: ScriptLine,
    driver: BrowserDriver,
    state: InterpreterState,
    *,
    present: bool,
) -> None:
    """Poll until the element shows text, or until it is gone."""
    locator = target_locator(line, state)

    async def probe() -> bool:
        try:
            element = await driver.find_element(locator)
        except ElementNotFoundError:
            return not present
        return present and bool(await element.text())

    await poll(probe, state.wait, f"{line.command} {locator}")


async def wait_for_visibility(
    line: ScriptLine,
    driver: BrowserDriver,
    state: InterpreterState,
    *,
    visible: bool,
) -> None:
    """Poll until the element's visibility matches the expectation."""
    locator = target_locator(line, state)

    async def probe() -> bool:
        return await is_visible(driver, locator) == visible

    await poll(probe, state.wait, f"{line.command} {locator}")


async def select_option(element: WebElement, option: str) -> None:
    """Click the option of a select element described by option.

    option is "label=...", "value=...", "index=..." or a bare visible text.
    """
    if option.startswith("value="):
        literal = xpath_literal(option.removeprefix("value="))
        options = await element.find_elements(
            Locator(strategy="xpath", selector=f".//option[@value={literal}]")
        )
    elif option.startswith("index="):
        index = int(option.removeprefix("index="))
        every_option = await element.find_elements(
            Locator(strategy="xpath", selector=".//option")
        )
        options = [every_option[index]] if 0 <= index < len(every_option) else []
    else:
        literal = xpath_literal(option.removeprefix("label="))
        options = await element.find_elements(
            Locator(
                strategy="xpath", selector=f".//option[normalize-space(.)={literal}]"
            )
        )

    if not options:
        raise ElementNotFoundError(option, f"Cannot locate option with {option!r}")
    await options[0].click()


async def select(
    line: ScriptLine,
    driver: BrowserDriver,
    state: InterpreterState,
    *,
    wait: bool = False,
) -> None:
    """Select an option of a drop-down, optionally waiting for navigation."""
    element = await find(line, driver, state)
    await select_option(element, state.resolve(line.value))
    if wait:
        await wait_for_page(driver, state)


async def store_text(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Store the element's text under the variable named by the value."""
    element = await find(line, driver, state)
    state.variables.set(line.value, await element.text())


async def store_eval(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Evaluate the target as JavaScript and store the result."""
    if not driver.supports_script_execution:
        raise ScriptExecutionNotSupportedError(
            "The current driver does not support remote execution of JavaScript"
        )
    result = await driver.execute_script(state.resolve(line.target))
    state.variables.set(line.value, stringify(result))


async def delete_cookie(
    line: ScriptLine, driver: BrowserDriver, state: InterpreterState
) -> None:
    """Delete the named cookie if the browser has it."""
    name = state.resolve(line.target)
    try:
        if await driver.get_cookie(name) is None:
            log.debug("Cookie %s not set, nothing to delete", name)
            return
        await driver.delete_cookie(name)
    except DriverError as e:
        log.warning("Could not delete cookie %s: %s", name, e)


def build_table(
    entries: Mapping[tuple[str, ...], Behavior],
) -> Mapping[str, Behavior]:
    """Flatten alias groups into a read-only, case-insensitive table."""
    table: dict[str, Behavior] = {}
    for names, behavior in entries.items():
        for name in names:
            key = name.casefold()
            if key in table:
                raise ValueError(f"Command '{name}' registered twice")
            table[key] = behavior
    return MappingProxyType(table)


COMMANDS: Mapping[str, Behavior] = build_table(
    {
        ("open",): open_url,
        ("verifyTitle", "assertTitle"): check_title,
        (
            "verifyValue",
            "assertValue",
            "verifyText",
            "assertText",
        ): check_value_or_text,
        ("verifyTextPresent", "assertTextPresent"): check_text_present,
        ("storeTextPresent",): partial(check_text_present, store=True),
        ("verifyTextNotPresent", "assertTextNotPresent"): check_text_not_present,
        ("verifyElementVisible", "assertElementVisible"): check_element_visible,
        ("verifyElementPresent", "assertElementPresent"): check_element_present,
        (
            "verifyElementNotPresent",
            "assertElementNotPresent",
        ): check_element_not_present,
        ("click", "clickAndWait"): click,
        ("clear",): clear,
        ("type",): type_text,
        ("waitForElementPresent",): partial(wait_for_element, present=True),
        ("waitForElementNotPresent",): partial(wait_for_element, present=False),
        ("waitForText", "waitForTextPresent"): partial(wait_for_text, present=True),
        ("waitForTextNotPresent",): partial(wait_for_text, present=False),
        ("waitForElementVisible",): partial(wait_for_visibility, visible=True),
        ("waitForElementNotVisible",): partial(wait_for_visibility, visible=False),
        ("select",): select,
        ("selectAndWait",): partial(select, wait=True),
        ("storeText",): store_text,
        ("storeEval",): store_eval,
        ("deleteCookie",): delete_cookie,
    }
)


def lookup(command: str) -> Behavior:
    """Return the behavior registered for command, ignoring case.

    Raises:
        UnsupportedCommandError: If the command is unknown

    """
    try:
        return COMMANDS[command.casefold()]
    except KeyError:
        raise UnsupportedCommandError(command) from None
