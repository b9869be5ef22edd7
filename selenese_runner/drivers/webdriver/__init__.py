"""Remote W3C WebDriver driver module."""

from selenese_runner.drivers.webdriver.config import WebDriverConfig
from selenese_runner.drivers.webdriver.driver import WebDriverError, WebDriverSession
from selenese_runner.drivers.webdriver.manifest import webdriver_manifest

__all__ = [
    "WebDriverConfig",
    "WebDriverError",
    "WebDriverSession",
    "webdriver_manifest",
]
