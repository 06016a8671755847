"""Implementation of the 'add' command.

Creates a new changeset file, prompting for the type and description unless
both are given on the command line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.prompt import Prompt

from changesets_digger.cli.commands.common import fail, resolve_project_path
from changesets_digger.config import load_config
from changesets_digger.config.loader import get_project_name
from changesets_digger.core.changeset import create_changeset, ensure_changeset_dir
from changesets_digger.core.version import RELEASE_TYPES, BumpType
from changesets_digger.exceptions import ConfigError, DiggerError

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

_TYPE_CHOICES = {
    "1": BumpType.PATCH,
    "2": BumpType.MINOR,
    "3": BumpType.MAJOR,
}


def _package_name(project_path: Path) -> str:
    try:
        return get_project_name(project_path)
    except ConfigError:
        return project_path.resolve().name


def _prompt_bump_type(console: Console, err_console: Console) -> BumpType:
    console.print(
        "📈 What type of change is this?\n"
        "   1) patch - Bug fixes, minor improvements\n"
        "   2) minor - New features, non-breaking changes\n"
        "   3) major - Breaking changes"
    )
    choice = Prompt.ask("Choose (1-3)", console=console).strip()
    if choice not in _TYPE_CHOICES:
        fail(err_console, "Invalid selection. Please choose 1, 2, or 3.")
    return _TYPE_CHOICES[choice]


def run_add(
    path: str | None,
    bump_type: str | None,
    message: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the add command.

    Args:
        path: Optional path to project directory
        bump_type: Change type (major, minor, patch); prompted if missing
        message: Change description; prompted if missing
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = resolve_project_path(path)

    try:
        config = load_config(project_path)
    except DiggerError as e:
        fail(err_console, "Error loading config", e)

    console.print("📝 Creating a new changeset...\n")

    changeset_dir = project_path / config.changeset_dir
    if ensure_changeset_dir(changeset_dir):
        console.print(f"📁 Created [cyan]{config.changeset_dir}[/] directory with a README\n")

    console.print(f"📦 Package: [cyan]{escape(_package_name(project_path))}[/]\n")

    if bump_type and message:
        valid = [str(t) for t in RELEASE_TYPES]
        if bump_type.lower() not in valid:
            fail(err_console, "Invalid type. Must be one of: major, minor, patch")
        selected = BumpType(bump_type.lower())
        description = message
    else:
        selected = _prompt_bump_type(console, err_console)
        description = Prompt.ask(
            "\n💬 Please describe this change (will be used in changelog)", console=console
        )
        if not description.strip():
            fail(err_console, "Description is required.")

    try:
        changeset_path = create_changeset(changeset_dir, selected, description)
    except (OSError, ValueError) as e:
        fail(err_console, "Error creating changeset", e)

    console.print("\n[green]✅ Changeset created successfully![/]")
    console.print(f"📁 File: [cyan]{changeset_path.relative_to(project_path)}[/]")
    console.print(f"🏷️  Type: {selected}")
    console.print(f"📝 Description: {escape(description.strip())}")
    console.print(
        "\n💡 Next steps:\n"
        "   - Commit this changeset with your changes\n"
        "   - Create a release: [cyan]changesets-digger tag[/]"
    )
