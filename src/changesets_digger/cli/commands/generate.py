"""Implementation of the 'generate' command.

Reconstructs the version history and writes changelog files.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from changesets_digger.cli.commands.common import fail, load_project, resolve_project_path
from changesets_digger.core.changelog import INDEX_FILENAME, generate_summary, write_changelogs
from changesets_digger.core.history import build_version_history
from changesets_digger.exceptions import DiggerError

if TYPE_CHECKING:
    from rich.console import Console


def run_generate(
    path: str | None,
    output: str | None,
    max_versions: int | None,
    config_file: str | None,
    dry_run: bool,
    ignore_errors: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the generate command.

    Args:
        path: Optional path to project directory
        output: Output directory override
        max_versions: Maximum number of versions override
        config_file: Optional explicit config file
        dry_run: Only show what would be written
        ignore_errors: Keep going past invalid changesets
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = resolve_project_path(path)
    config, repo = load_project(project_path, err_console, config_file)

    output_dir = project_path / (output or config.changelog.output_dir)
    limit = max_versions or config.changelog.max_versions
    lenient = ignore_errors or config.ignore_errors

    console.print("🔍 Generating changelogs from git history...\n")
    if lenient:
        console.print("[yellow]Ignoring invalid changesets (--ignore-errors)[/]\n")

    try:
        history = build_version_history(
            repo,
            changeset_dir=config.changeset_dir.as_posix(),
            max_versions=limit,
            ignore_errors=lenient,
        )
    except DiggerError as e:
        fail(err_console, "Error generating changelogs", e)

    upcoming = history.upcoming
    if upcoming is not None:
        console.print(
            f"✅ Found upcoming version: [green]{upcoming.version}[/] "
            f"({len(upcoming.changes)} changes)"
        )
    else:
        console.print("ℹ️  No pending changesets found")

    historical = len(history) - (1 if upcoming else 0)
    if historical:
        console.print(f"📖 Processed {historical} historical versions")
    else:
        console.print("[yellow]⚠️  No version tags found in git history[/]")

    if not history.entries:
        console.print("\n[yellow]⚠️  No versions found to generate changelogs for[/]")
        return

    if dry_run:
        lines = [
            f"  • {escape(str(output_dir / f'{entry.version}.md'))} - "
            f"{escape(generate_summary(entry))}"
            for entry in history.entries
        ]
        lines.append(f"  • {escape(str(output_dir / INDEX_FILENAME))} - Version index")
        console.print(
            Panel(
                "[bold]Would generate the following files:[/]\n\n" + "\n".join(lines),
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        return

    try:
        write_changelogs(history.entries, output_dir, config.effective_category_titles)
    except DiggerError as e:
        fail(err_console, "Error writing changelogs", e)

    console.print(
        Panel(
            f"[green]Generated changelogs for {len(history)} versions![/]\n\n"
            f"📁 Files written to: [cyan]{escape(str(output_dir))}[/]\n"
            f"🏷️  Latest version: [cyan]{history.latest_version}[/]",
            title="[green]Generation Complete[/]",
            border_style="green",
        )
    )
