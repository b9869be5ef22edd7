"""Tests for driver loading module."""

import pytest

from selenese_runner.drivers.loading import (
    DriverNotFoundError,
    available_drivers,
    load_driver_manifest,
)
from selenese_runner.drivers.webdriver import webdriver_manifest


def test_load_driver_manifest_returns_manifest() -> None:
    """Loads driver manifest by key."""
    manifest = load_driver_manifest("webdriver")

    assert manifest is webdriver_manifest


def test_load_driver_manifest_raises_for_unknown_driver() -> None:
    """Raises DriverNotFoundError for unknown driver key."""
    with pytest.raises(DriverNotFoundError) as exc_info:
        load_driver_manifest("unknown-driver")

    assert "unknown-driver" in str(exc_info.value)
    assert "Available drivers" in str(exc_info.value)


def test_available_drivers_lists_webdriver() -> None:
    """Registered drivers are listed by key."""
    assert "webdriver" in available_drivers()
