"""Configuration for the remote WebDriver driver."""

from typing import Any

from pydantic import Field, SecretStr, field_validator

from selenese_runner.drivers.manifest import DriverConfig


class WebDriverConfig(DriverConfig):
    """Configuration for a W3C WebDriver endpoint (Selenium grid or cloud)."""

    remote_url: str = "http://localhost:4444"
    browser_name: str = "chrome"
    browser_version: str | None = None
    platform_name: str | None = None
    username: str | None = None
    access_key: SecretStr | None = None
    test_name: str | None = None
    build: str | None = None
    # Capability key carrying name/build for cloud grids; None disables it
    vendor_options_key: str | None = "sauce:options"
    capabilities: dict[str, Any] = Field(default_factory=dict)
    request_timeout: float = 120.0

    @field_validator("combination")
    @classmethod
    def _check_combination(cls, value: str | None) -> str | None:
        if value is not None and len(value.split(";")) != 3:
            raise ValueError(
                f"combination must look like 'browser;version;platform', got {value!r}"
            )
        return value

    def session_capabilities(self) -> dict[str, Any]:
        """Capabilities requested when the session is created."""
        browser_name = self.browser_name
        browser_version = self.browser_version
        platform_name = self.platform_name
        if self.combination is not None:
            browser_name, browser_version, platform_name = self.combination.split(";")

        capabilities: dict[str, Any] = {"browserName": browser_name}
        if browser_version:
            capabilities["browserVersion"] = browser_version
        if platform_name:
            capabilities["platformName"] = platform_name.lower()

        vendor_options = {
            key: value
            for key, value in (("name", self.test_name), ("build", self.build))
            if value
        }
        if self.vendor_options_key and vendor_options:
            capabilities[self.vendor_options_key] = vendor_options

        capabilities.update(self.capabilities)
        return capabilities
