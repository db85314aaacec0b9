"""Shared utility functions for crud-generator.

Provides async command execution, file-system helpers, Rich-based console
reporting, the per-resource run lock and a small HTTP probe for the browse
URL reported at the end of a run.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import httpx
from rich.console import Console
from rich.table import Table

console = Console()


class ResourceLockedError(Exception):
    """Raised when another run already holds the lock for a resource."""


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A timeout yields a
        return code of ``-1``; a missing executable yields ``127``.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        if isinstance(cmd, list):
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
        else:
            process = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
    except FileNotFoundError as exc:
        return (127, "", f"Command not found: {exc.filename or cmd}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {cmd if isinstance(cmd, str) else ' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def append_file(path: Path, content: str) -> None:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(content)


async def read_text(path: Path) -> str:
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def write_text(path: Path, content: str) -> Path:
    """Write *content* to *path* off the event loop; returns *path*."""
    await asyncio.to_thread(write_file, path, content)
    return path


def newest_file(directory: Path, pattern: str) -> Path | None:
    """Return the lexicographically last match of *pattern* in *directory*.

    Migration file names start with a ``Y_m_d_His`` timestamp, so the last
    name in sort order is the newest one.
    """
    if not directory.is_dir():
        return None
    matches = sorted(directory.glob(pattern))
    return matches[-1] if matches else None


# ---------------------------------------------------------------------------
# Run lock
# ---------------------------------------------------------------------------


@contextmanager
def resource_lock(lock_dir: Path, key: str) -> Iterator[Path]:
    """Hold an exclusive lock file for *key* while the block runs.

    The lock file holds the owner's PID.  A lock left behind by a process
    that is no longer running is reclaimed; a live one raises
    ``ResourceLockedError``.
    """
    lock_dir.mkdir(parents=True, exist_ok=True)
    lock_file = lock_dir / f"{key}.lock"

    fd = _acquire(lock_file)
    if fd is None and _is_stale(lock_file):
        lock_file.unlink(missing_ok=True)
        fd = _acquire(lock_file)
    if fd is None:
        raise ResourceLockedError(
            f"Another crud-generator run is already generating '{key}' "
            f"(lock file: {lock_file})."
        )

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(str(os.getpid()))
        yield lock_file
    finally:
        lock_file.unlink(missing_ok=True)


def _acquire(lock_file: Path) -> int | None:
    try:
        return os.open(lock_file, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        return None


def _is_stale(lock_file: Path) -> bool:
    try:
        pid = int(lock_file.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        return True
    if pid == os.getpid():
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return True
    except PermissionError:
        return False
    return False


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str, out: Console | None = None) -> None:
    """Print a green success message."""
    (out or console).print(f"[bold green]{message}[/bold green]")


def print_info(message: str, out: Console | None = None) -> None:
    """Print an informational message."""
    (out or console).print(f"[cyan]{message}[/cyan]")


def print_error(message: str, out: Console | None = None) -> None:
    """Print a red error message."""
    (out or console).print(f"[bold red]{message}[/bold red]")


def print_warning(message: str, out: Console | None = None) -> None:
    """Print a yellow warning message."""
    (out or console).print(f"[bold yellow]{message}[/bold yellow]")


def print_summary_table(
    rows: list[tuple[str, ...]],
    columns: tuple[str, ...],
    title: str = "Summary",
    out: Console | None = None,
) -> None:
    """Print a simple table with the given column headers."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for index, column in enumerate(columns):
        table.add_column(column, style="dim" if index == 0 else None, no_wrap=index == 0)

    for row in rows:
        table.add_row(*(str(cell) for cell in row))

    (out or console).print(table)
    (out or console).print()


# ---------------------------------------------------------------------------
# URL probe
# ---------------------------------------------------------------------------


async def probe_url(url: str, timeout: float = 5.0) -> int | None:
    """Issue a GET to *url* and return the HTTP status code.

    Returns ``None`` when the server cannot be reached.
    """
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=3.0), follow_redirects=True
    ) as client:
        try:
            response = await client.get(url)
        except (httpx.ConnectError, httpx.TimeoutException):
            return None
    return response.status_code
