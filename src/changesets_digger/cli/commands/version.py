"""Implementation of the 'version' command.

Prints machine-readable version information for scripts and CI.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import TYPE_CHECKING

import click

from changesets_digger.cli.commands.common import fail, load_project, resolve_project_path
from changesets_digger.core.history import get_version_status
from changesets_digger.exceptions import DiggerError

if TYPE_CHECKING:
    from rich.console import Console

    from changesets_digger.core.history import VersionStatus


class OutputFormat(StrEnum):
    CURRENT = "current"
    UPCOMING = "upcoming"
    HAS_CHANGES = "hasChanges"
    CHANGE_COUNT = "changeCount"
    STATUS = "status"
    JSON = "json"


def _scalar(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def status_as_dict(status: VersionStatus) -> dict[str, object]:
    return {
        "current": status.current,
        "upcoming": status.upcoming,
        "hasChanges": status.has_changes,
        "changeCount": status.change_count,
    }


def format_status(status: VersionStatus, output: OutputFormat) -> str:
    """Render a version status in the requested format."""
    data = status_as_dict(status)
    if output == OutputFormat.JSON:
        return json.dumps(data, indent=2)
    if output == OutputFormat.STATUS:
        return " ".join(f"{key}={_scalar(value)}" for key, value in data.items())
    return _scalar(data[output.value])


def run_version(
    path: str | None,
    output: OutputFormat,
    err_console: Console,
) -> None:
    """Run the version command.

    Args:
        path: Optional path to project directory
        output: Output format
        err_console: Console for error output
    """
    project_path = resolve_project_path(path)
    config, repo = load_project(project_path, err_console)

    try:
        status = get_version_status(
            repo,
            changeset_dir=config.changeset_dir.as_posix(),
            ignore_errors=config.ignore_errors,
        )
    except DiggerError as e:
        fail(err_console, "Error getting version information", e)

    click.echo(format_status(status, output))
