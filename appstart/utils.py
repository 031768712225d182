"""Shared utility functions for appstart.

Provides async command execution, identifier helpers (slugs, URLs, project
ids), Rich-based message helpers and the ``TaskChain`` progress sink used by
every stage of the start pipeline.
"""

from __future__ import annotations

import asyncio
import os
import re
import unicodedata
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import urlparse

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TransferSpeedColumn,
)
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: Sequence[str],
    cwd: str | Path | None = None,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously without a shell.

    Args:
        cmd: Executable followed by its arguments.
        cwd: Working directory for the child process.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Complete environment for the child. ``None`` inherits
            ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.

    Raises:
        FileNotFoundError: If the executable cannot be found.
    """
    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
        env=env,
    )
    stdout_bytes, stderr_bytes = await process.communicate()

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------

_PROJECT_ID_RE = re.compile(r"[A-Za-z0-9_-]+")

# Used when a display name has no ASCII letters or digits at all.
FALLBACK_PROJECT_ID = "app"


def slugify(name: str) -> str:
    """Convert an arbitrary display name to a project identifier.

    * Folds accented characters to ASCII.
    * Lowercases the input.
    * Replaces anything other than letters, digits, hyphens and underscores
      with hyphens, collapses runs and strips leading/trailing hyphens.

    The result always satisfies :func:`is_valid_project_id`.

    Examples::

        slugify("My App") -> "my-app"
        slugify("  Café (beta)  ") -> "cafe-beta"
    """
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    result = re.sub(r"[^a-z0-9_-]", "-", folded.strip().lower())
    result = re.sub(r"-+", "-", result).strip("-")
    return result or FALLBACK_PROJECT_ID


def is_valid_project_id(project_id: str) -> bool:
    """Return ``True`` if *project_id* is safe as a directory and package name."""
    return bool(_PROJECT_ID_RE.fullmatch(project_id))


def is_valid_url(value: str | None) -> bool:
    """Return ``True`` for absolute URLs such as ``https://github.com/org/repo``."""
    if not value:
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def pretty_path(path: str | Path) -> str:
    """Shorten *path* for display: relative to the cwd when inside it, else ``~``-based."""
    resolved = Path(path).resolve()
    cwd = Path.cwd()
    try:
        relative = resolved.relative_to(cwd)
    except ValueError:
        pass
    else:
        return f".{os.sep}{relative}" if str(relative) != "." else "."

    home = Path.home()
    try:
        return f"~{os.sep}{resolved.relative_to(home)}"
    except ValueError:
        return str(resolved)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def input_text(text: str) -> str:
    """Markup for something the user types (commands, option names)."""
    return f"[green]{text}[/green]"


def strong(text: str) -> str:
    return f"[bold]{text}[/bold]"


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow][WARN][/bold yellow] {message}")


def print_info(message: str) -> None:
    console.print(f"[bold cyan][INFO][/bold cyan] {message}")


def print_msg(message: str = "") -> None:
    console.print(message)


def print_table(rows: list[tuple[str, ...]], headers: tuple[str, ...], title: str = "") -> None:
    """Print rows as a Rich table with the given column headers."""
    table = Table(title=title or None, show_header=True, header_style="bold cyan")
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*row)
    console.print(table)


# ---------------------------------------------------------------------------
# Task chain
# ---------------------------------------------------------------------------


class Task:
    """A single named step of a :class:`TaskChain`."""

    def __init__(self, description: str) -> None:
        self.description = description
        self._progress: Progress | None = None
        self._task_id = None

    def progress(self, loaded: int, total: int | None) -> None:
        """Report byte-level progress. ``total`` may be ``None`` when unknown."""
        if self._progress is None:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                console=console,
                transient=True,
            )
            self._progress.start()
            self._task_id = self._progress.add_task(self.description, total=total)
        self._progress.update(self._task_id, completed=loaded, total=total)

    def end(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        console.print(f"[green]>[/green] {self.description} [dim]done[/dim]")

    def fail(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        console.print(f"[red]>[/red] {self.description} [dim]failed[/dim]")


class TaskChain:
    """Sequential named steps. Starting a new step ends the previous one."""

    def __init__(self) -> None:
        self.current: Task | None = None

    def next(self, description: str) -> Task:
        if self.current is not None:
            self.current.end()
        self.current = Task(description)
        return self.current

    def end(self) -> None:
        if self.current is not None:
            self.current.end()
            self.current = None

    def fail(self) -> None:
        if self.current is not None:
            self.current.fail()
            self.current = None
