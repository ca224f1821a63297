"""local-file-search tool: find files by name, extension or content.

The directory walk is blocking filesystem work, so it runs in a worker thread
and the event loop keeps serving other sessions meanwhile. The result cap is
global for the whole walk, not per directory.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mcplex.errors import ToolExecutionError
from mcplex.models.tools import TextContent, text
from mcplex.tools.registry import ToolHandler, ToolRegistry
from mcplex.tools.schema import Param

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = frozenset({"node_modules", ".git"})
TEXT_EXTENSIONS = frozenset(
    {".txt", ".js", ".json", ".html", ".css", ".md", ".csv", ".xml", ".log", ".py"}
)
SEARCH_TYPES = ("all", "name", "extension", "content")


@dataclass
class FileMatch:
    name: str
    path: str
    size: int
    modified: datetime


@dataclass
class SearchOutcome:
    matches: list[FileMatch]
    scanned_files: int
    limit_reached: bool


def format_file_size(size: int) -> str:
    """Format a byte count as a human readable size (e.g. '1.5 KB')."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def _matches(path: Path, term: str, search_type: str) -> bool:
    name = path.name.lower()
    extension = path.suffix.lower()

    if search_type in ("all", "name") and term in name:
        return True

    if search_type in ("all", "extension") and extension:
        if term in (extension, extension[1:]):
            return True

    if search_type in ("all", "content") and extension in TEXT_EXTENSIONS:
        try:
            content = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.debug(f"Could not read {path}: {e}")
            return False
        return term in content.lower()

    return False


def search_files(
    directory: str | Path,
    search_term: str,
    search_type: str = "all",
    max_results: int = 20,
) -> SearchOutcome:
    """Walk a directory tree and collect matching files.

    Args:
        directory: Root directory to search
        search_term: Case-insensitive term to look for
        search_type: One of all, name, extension, content
        max_results: Stop the walk once this many files matched

    Returns:
        SearchOutcome with matches sorted newest first
    """
    term = search_term.lower()
    matches: list[FileMatch] = []
    scanned = 0
    limit_reached = False

    for current, dirnames, filenames in os.walk(directory):
        dirnames[:] = [name for name in dirnames if name not in SKIPPED_DIRECTORIES]
        for filename in filenames:
            path = Path(current) / filename
            scanned += 1
            if not _matches(path, term, search_type):
                continue
            if len(matches) >= max_results:
                limit_reached = True
                break

            try:
                stat = path.stat()
                size, modified = stat.st_size, stat.st_mtime
            except OSError:
                size, modified = 0, 0.0

            matches.append(
                FileMatch(
                    name=filename,
                    path=str(path),
                    size=size,
                    modified=datetime.fromtimestamp(modified, tz=timezone.utc),
                )
            )
            if len(matches) >= max_results:
                limit_reached = True
                break
        if limit_reached:
            break

    matches.sort(key=lambda match: match.modified, reverse=True)
    return SearchOutcome(matches=matches, scanned_files=scanned, limit_reached=limit_reached)


def _format_outcome(
    outcome: SearchOutcome, search_term: str, directory: str, search_type: str
) -> str:
    lines = ["File Search Results", ""]
    if not outcome.matches:
        lines += [
            f'No files found matching "{search_term}" in {directory}',
            f"Search type: {search_type}",
            f"Files scanned: {outcome.scanned_files}",
        ]
        return "\n".join(lines)

    found = f"Matches found: {len(outcome.matches)}"
    if outcome.limit_reached:
        found += " (result limit reached)"
    lines += [
        f'Search term: "{search_term}"',
        f"Directory: {directory}",
        f"Search type: {search_type}",
        f"Files scanned: {outcome.scanned_files}",
        found,
        "",
        f"{'Filename':<29}{'Size':<14}Last Modified",
        "-" * 80,
    ]
    for index, match in enumerate(outcome.matches, start=1):
        name = match.name if len(match.name) <= 25 else match.name[:20] + "..."
        modified = match.modified.strftime("%Y-%m-%d %H:%M:%S")
        lines.append(
            f"{index:>2}) {name:<25}{format_file_size(match.size):<14}{modified}"
        )
    return "\n".join(lines)


def make_local_file_search(max_results: int = 20) -> ToolHandler:
    async def local_file_search(args: dict[str, Any]) -> list[TextContent]:
        search_term = args["searchTerm"]
        directory = args["directory"]
        search_type = args["fileType"]

        logger.info(f'Searching for "{search_term}" in {directory} ({search_type})')

        if not os.path.exists(directory):
            raise ToolExecutionError(f'Directory "{directory}" not found or inaccessible.')
        if not os.path.isdir(directory):
            raise ToolExecutionError(f'"{directory}" is not a valid directory.')

        outcome = await asyncio.to_thread(
            search_files, directory, search_term, search_type, max_results
        )
        return [text(_format_outcome(outcome, search_term, directory, search_type))]

    return local_file_search


def register_file_tools(registry: ToolRegistry, max_results: int = 20) -> None:
    """Register local-file-search on a registry."""
    registry.tool(
        "local-file-search",
        "Find files on the local system based on name/extension/content",
        Param("searchTerm", "string", "Term to search for in filenames or content"),
        Param(
            "directory",
            "string",
            "Directory to search in (defaults to current directory)",
            default="./",
        ),
        Param("fileType", "string", "Type of search", default="all", enum=SEARCH_TYPES),
    )(make_local_file_search(max_results))
