"""CLI entry point for running Selenese suites."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any

from selenese_runner.config import WaitPolicy
from selenese_runner.drivers.base import BrowserDriver
from selenese_runner.drivers.loading import available_drivers, load_driver_manifest
from selenese_runner.drivers.manifest import DriverConfig
from selenese_runner.parser import load_suite
from selenese_runner.report.accumulator import DEFAULT_NAME, ResultAccumulator
from selenese_runner.runner import ScriptResult, SuiteRunner

STATUS_SYMBOLS = {
    "success": "✅",
    "failure": "❌",
    "error": "❗",
}

DEFAULT_FIXTURE = "default"


def positive_int(value: str) -> int:
    """Argparse type accepting integers of at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def log_results_summary(log: logging.Logger, results: Sequence[ScriptResult]) -> None:
    """Log a formatted summary of script results."""
    log.info("=" * 80)
    log.info("Script Results Summary:")
    log.info("=" * 80)

    for result in results:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info(
            "%s %s [%s]: %s (%.2fs)",
            symbol,
            result.script,
            result.fixture,
            result.status,
            result.duration,
        )
        if result.message:
            log.info("  Message: %s", result.message)
        for error in result.verification_errors:
            log.info("  Verification error: %s", error)


def format_output(results: Sequence[ScriptResult]) -> dict[str, Any]:
    """Format script results for JSON output."""
    all_results = [
        {
            "script": result.script,
            "fixture": result.fixture,
            "status": result.status,
            "duration": result.duration,
            "message": result.message,
            "verification_errors": list(result.verification_errors),
        }
        for result in results
    ]

    return {
        "total": len(all_results),
        "passed": sum(1 for r in all_results if r["status"] == "success"),
        "failed": sum(1 for r in all_results if r["status"] == "failure"),
        "errors": sum(1 for r in all_results if r["status"] == "error"),
        "results": all_results,
    }


def build_fixture_configs(
    config_cls: type[DriverConfig],
    config_dict: Mapping[str, Any],
    combinations: Sequence[str],
) -> Mapping[str, DriverConfig]:
    """Validate one driver configuration per fixture.

    Each combination becomes a fixture named after it. Without combinations a
    single fixture uses the configuration as given.
    """
    if not combinations:
        config = config_cls.model_validate(config_dict)
        return {config.combination or DEFAULT_FIXTURE: config}
    return {
        combination: config_cls.model_validate(
            {**config_dict, "combination": combination}
        )
        for combination in combinations
    }


async def run(
    suite_path: Path,
    driver_key: str,
    driver_config_json: str,
    combinations: Sequence[str] = (),
    base_url: str | None = None,
    name: str = DEFAULT_NAME,
    output: Path | None = None,
    max_parallel: int = 1,
    wait: WaitPolicy | None = None,
    dry_run: bool = False,
) -> int:
    """Run a suite and return the exit code."""
    log = logging.getLogger("selenese_runner")

    log.info("Loading driver: %s", driver_key)
    manifest = load_driver_manifest(driver_key)

    config_dict = json.loads(driver_config_json)
    configs = build_fixture_configs(manifest.config_cls, config_dict, combinations)

    def open_driver(fixture: str) -> AbstractAsyncContextManager[BrowserDriver]:
        return manifest.driver_factory(configs[fixture])

    log.info("Loading suite: %s", suite_path)
    suite = await load_suite(suite_path)

    accumulator = ResultAccumulator(name=name)
    runner = SuiteRunner(
        driver_factory=open_driver,
        accumulator=accumulator,
        fixtures=list(configs),
        wait=wait or WaitPolicy(),
        base_url=base_url,
        max_parallel=max_parallel,
        dry_run=dry_run,
    )
    results = await runner.run_suite(suite)

    log_results_summary(log, results)

    if output is None:
        print(accumulator.to_xml())
    else:
        accumulator.write_report(output)
        print(json.dumps(format_output(results), indent=2))

    has_failures = any(result.status in {"failure", "error"} for result in results)
    return 1 if has_failures else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Replay Selenium IDE suites and report results as NUnit XML"
    )
    parser.add_argument(
        "--suite",
        type=Path,
        required=True,
        help="Path to the HTML suite file to run",
    )
    parser.add_argument(
        "--driver",
        default="webdriver",
        help=f"Driver key (installed: {', '.join(available_drivers()) or 'none'})",
    )
    parser.add_argument(
        "--driver-config",
        default="{}",
        help="JSON configuration for the driver",
    )
    parser.add_argument(
        "--combo",
        action="append",
        default=[],
        help="browser;version;platform combination to test, may be repeated",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Base URL overriding the one recorded in each script",
    )
    parser.add_argument(
        "--name",
        default=DEFAULT_NAME,
        help="Name of the whole test run in the report",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="NUnit XML report path; without it the report goes to stdout",
    )
    parser.add_argument(
        "--max-parallel",
        type=positive_int,
        default=1,
        help="How many scripts may run at the same time",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=WaitPolicy().poll_interval,
        help="Seconds between waitFor* probes",
    )
    parser.add_argument(
        "--wait-attempts",
        type=int,
        default=WaitPolicy().max_attempts,
        help="Probes made by waitFor* commands before timing out",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Record every command as passed without opening a browser",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every executed command",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            suite_path=args.suite,
            driver_key=args.driver,
            driver_config_json=args.driver_config,
            combinations=args.combo,
            base_url=args.base_url,
            name=args.name,
            output=args.output,
            max_parallel=args.max_parallel,
            wait=WaitPolicy(
                poll_interval=args.poll_interval, max_attempts=args.wait_attempts
            ),
            dry_run=args.dry_run,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
