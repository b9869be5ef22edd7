"""WebDriver driver manifest."""

from selenese_runner.drivers.manifest import DriverManifest
from selenese_runner.drivers.webdriver.config import WebDriverConfig
from selenese_runner.drivers.webdriver.driver import WebDriverSession

webdriver_manifest = DriverManifest(
    config_cls=WebDriverConfig,
    driver_factory=WebDriverSession.from_config,
)
