"""Setup shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from rich.markup import escape

from changesets_digger.config import load_config
from changesets_digger.exceptions import DiggerError
from changesets_digger.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from changesets_digger.config.models import DiggerConfig


def resolve_project_path(path: str | None) -> Path:
    return Path(path) if path else Path.cwd()


def fail(err_console: Console, message: str, error: BaseException | None = None) -> NoReturn:
    """Print an error and exit with status 1."""
    if error is not None:
        err_console.print(f"[red]{message}:[/] {escape(str(error))}")
        raise SystemExit(1) from error
    err_console.print(f"[red]Error:[/] {message}")
    raise SystemExit(1)


def load_project(
    project_path: Path,
    err_console: Console,
    config_file: str | None = None,
) -> tuple[DiggerConfig, GitRepository]:
    """Load configuration and open the repository, exiting on failure."""
    try:
        config = load_config(project_path, Path(config_file) if config_file else None)
    except DiggerError as e:
        fail(err_console, "Error loading config", e)

    try:
        repo = GitRepository(project_path, tag_prefix=config.tag_prefix)
    except DiggerError as e:
        fail(err_console, "Error", e)

    return config, repo
