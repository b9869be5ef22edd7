"""Discovery of browser driver plugins through entry points."""

import logging
from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from selenese_runner.drivers.manifest import DriverManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "selenese_runner.drivers"


class DriverNotFoundError(Exception):
    """Raised when no usable driver is registered under a key."""


def available_drivers() -> Sequence[str]:
    """Keys of every registered driver plugin, sorted."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_driver_manifest(key: str) -> DriverManifest[Any]:
    """Load a driver manifest by key.

    Args:
        key: The driver key as registered in pyproject.toml (e.g., "webdriver")

    Returns:
        The driver manifest instance

    Raises:
        DriverNotFoundError: If no driver manifest is registered under key

    """
    candidates = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not candidates:
        raise DriverNotFoundError(
            f"Driver '{key}' not found. Available drivers: {available_drivers()}"
        )

    entry = next(iter(candidates))
    manifest = entry.load()
    if not isinstance(manifest, DriverManifest):
        raise DriverNotFoundError(
            f"Entry point '{entry.value}' for driver '{key}' is not a DriverManifest"
        )

    log.debug("Loaded driver '%s' from %s", key, entry.value)
    return manifest
