"""Implementation of the 'tag' command.

Creates the next release tag from the pending changesets and pushes it.
Pushing is best effort: if it fails the tag stays local.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from changesets_digger.cli.commands.common import fail, load_project, resolve_project_path
from changesets_digger.core.categorize import CATEGORY_EMOJIS
from changesets_digger.core.changeset import has_changesets
from changesets_digger.core.history import get_upcoming_version
from changesets_digger.exceptions import DiggerError, GitError

if TYPE_CHECKING:
    from rich.console import Console


def run_tag(
    path: str | None,
    dry_run: bool,
    force: bool,
    push: bool | None,
    remote: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the tag command.

    Args:
        path: Optional path to project directory
        dry_run: Only show the tag that would be created
        force: Allow uncommitted changes
        push: Push the tag (None uses the configured default)
        remote: Remote to push to (None uses the configured default)
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = resolve_project_path(path)
    config, repo = load_project(project_path, err_console)

    should_push = config.tag.push if push is None else push
    remote_name = remote or config.tag.remote

    console.print("🏷️  Preparing to create release tag...\n")

    try:
        dirty = repo.is_dirty()
    except GitError as e:
        fail(err_console, "Error checking working tree", e)

    if dirty and not (force or config.allow_dirty):
        err_console.print(
            "[red]Error:[/] Working directory has uncommitted changes.\n"
            "Commit your changes first, or use [cyan]--force[/] to override."
        )
        raise SystemExit(1)

    console.print("📋 Calculating next version from changesets...")
    upcoming = None
    if has_changesets(project_path / config.changeset_dir):
        try:
            upcoming = get_upcoming_version(
                repo,
                changeset_dir=config.changeset_dir.as_posix(),
                ignore_errors=config.ignore_errors,
            )
        except DiggerError as e:
            fail(err_console, "Error calculating next version", e)

    if upcoming is None:
        console.print("ℹ️  No changesets found - nothing to release")
        return

    version = upcoming.version
    tag_name = f"{config.tag_prefix}{version}"
    console.print(f"[green]✅ Next version: {version}[/]")
    console.print(f"📝 Changes summary: {len(upcoming.changes)} changes")

    console.print("\n📋 Changes in this release:")
    for change in upcoming.changes:
        emoji = CATEGORY_EMOJIS.get(change.category, "📝")
        console.print(f"   {emoji} {escape(change.summary)}")

    if dry_run:
        console.print(
            Panel(
                f"[bold]Would create tag:[/] [cyan]{tag_name}[/]\n\n"
                "Run without [cyan]--dry-run[/] to actually create the tag.",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        return

    try:
        repo.create_tag(version)
    except DiggerError as e:
        fail(err_console, "Error creating tag", e)
    console.print(f"  [green]✓[/] Created tag {tag_name}")

    pushed = False
    if should_push and repo.has_remote(remote_name):
        try:
            repo.push_tag(version, remote_name)
            pushed = True
            console.print(f"  [green]✓[/] Pushed tag {tag_name} to {remote_name}")
        except GitError as e:
            err_console.print(
                f"[yellow]⚠️  Could not push tag {tag_name} to {remote_name}:[/] {escape(str(e))}"
            )
            console.print("ℹ️  Tag created locally only")
    elif should_push:
        console.print(f"ℹ️  Tag {tag_name} created locally (no remote '{remote_name}' found)")
    else:
        console.print(f"ℹ️  Tag {tag_name} created locally (push disabled)")

    next_steps = (
        "  - The tag will trigger your deployment workflow\n"
        if pushed
        else f"  - Push manually: [cyan]git push {remote_name} {tag_name}[/]\n"
    )
    console.print(
        Panel(
            f"[green]Release tag {tag_name} created successfully![/]\n\n"
            "Next steps:\n"
            f"{next_steps}"
            "  - Generate changelogs with: [cyan]changesets-digger generate[/]",
            title="[green]Tag Complete[/]",
            border_style="green",
        )
    )
