"""Parsing of Selenium IDE HTML scripts and suites."""

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path

from bs4 import BeautifulSoup

from selenese_runner.models.script import (
    DEFAULT_TITLE,
    Script,
    ScriptLine,
    Suite,
    SuiteEntry,
)

log = logging.getLogger(__name__)


def parse_script(content: str) -> Script:
    """Parse an HTML-table script.

    Only table rows with exactly three cells are command lines; header rows
    spanning the whole table are skipped.
    """
    soup = BeautifulSoup(content, "lxml")

    title_tag = soup.select_one("head > title")
    title = title_tag.get_text().strip() if title_tag else ""

    base_link = soup.select_one('link[rel="selenium.base"]')
    base_url = str(base_link.get("href", "")) if base_link else ""

    lines: list[ScriptLine] = []
    for row in soup.select("table tr"):
        cells = row.find_all("td", recursive=False)
        if len(cells) != 3:
            continue
        command, target, value = (cell.get_text() for cell in cells)
        lines.append(ScriptLine(command=command.strip(), target=target, value=value))

    return Script(title=title or DEFAULT_TITLE, base_url=base_url, lines=lines)


def parse_suite(content: str) -> Mapping[str, str]:
    """Parse an HTML suite into script titles mapped to their hrefs.

    Raises:
        ValueError: If the document has no suite table or repeats a title

    """
    soup = BeautifulSoup(content, "lxml")
    table = soup.select_one("table.selenium, table#suiteTable")
    if table is None:
        raise ValueError("Invalid suite file: no suite table found")

    scripts: dict[str, str] = {}
    for link in table.select("a[href]"):
        title = link.get_text().strip()
        if title in scripts:
            raise ValueError(f"Invalid suite file: duplicate script title {title!r}")
        scripts[title] = str(link["href"])
    return scripts


async def _read(path: Path, kind: str) -> str:
    if not path.is_file():
        raise FileNotFoundError(f"{kind} file not found: {path}")
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def load_script(path: Path) -> Script:
    """Load and parse a script file.

    Raises:
        FileNotFoundError: If the script file does not exist
        ValueError: If the file holds no command lines

    """
    script = parse_script(await _read(path, "Script"))
    if not script.lines:
        raise ValueError(f"Invalid script file, no command lines found: {path}")
    log.debug("Loaded script '%s' from %s", script.title, path)
    return script


async def load_suite(path: Path) -> Suite:
    """Load a suite file; script paths are resolved against its directory.

    Raises:
        FileNotFoundError: If the suite file does not exist
        ValueError: If the file is not a suite

    """
    scripts = parse_suite(await _read(path, "Suite"))
    entries = [
        SuiteEntry(title=title, path=path.parent / href)
        for title, href in scripts.items()
    ]
    log.info("Loaded suite %s with %d script(s)", path.name, len(entries))
    return Suite(name=path.stem, entries=entries)
