"""Changelog file generation.

Writes one Markdown file per version plus an ``index.json`` listing all
versions in history order, for consumption by a documentation site or an
in-app "What's new" view::

    {
      "versions": [
        {"version": "1.1.0", "date": "...", "fileUrl": "1.1.0.md",
         "summary": "Release 1.1.0 (Preview)"}
      ],
      "latestVersion": "1.1.0"
    }
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from changesets_digger.core.categorize import DEFAULT_CATEGORY_TITLES
from changesets_digger.core.version import DEFAULT_VERSION
from changesets_digger.exceptions import ChangelogError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from changesets_digger.core.categorize import ChangeCategory
    from changesets_digger.core.history import ChangelogEntry

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"


class VersionInfo(BaseModel):
    """One row of the changelog index."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str
    date: str
    file_url: str
    summary: str


class ChangelogIndex(BaseModel):
    """The ``index.json`` document."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    versions: list[VersionInfo]
    latest_version: str


def version_filename(entry: ChangelogEntry) -> str:
    return f"{entry.version}.md"


def build_index(entries: Sequence[ChangelogEntry]) -> ChangelogIndex:
    """Index of all entries, in the given order."""
    return ChangelogIndex(
        versions=[
            VersionInfo(
                version=entry.version,
                date=entry.date,
                file_url=version_filename(entry),
                summary=(
                    f"Release {entry.version} (Preview)"
                    if entry.is_upcoming
                    else f"Release {entry.version}"
                ),
            )
            for entry in entries
        ],
        latest_version=entries[0].version if entries else DEFAULT_VERSION,
    )


def format_release_date(date: str) -> str:
    """``2024-03-05T10:00:00+00:00`` -> ``March 5, 2024``; unparseable dates pass through."""
    try:
        parsed = datetime.fromisoformat(date)
    except ValueError:
        return date
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def render_version_markdown(
    entry: ChangelogEntry,
    category_titles: Mapping[ChangeCategory, str] | None = None,
) -> str:
    """Markdown page for one version.

    Changes are grouped by category, categories in order of first
    appearance, one bullet per summary.
    """
    titles = {**DEFAULT_CATEGORY_TITLES, **(category_titles or {})}

    lines = [f"# What's New in {entry.version}", ""]
    if entry.is_upcoming:
        lines += ["*Preview of upcoming release*", ""]
    else:
        lines += [f"*Released on {format_release_date(entry.date)}*", ""]

    if not entry.changes:
        lines += ["*No detailed changes recorded for this version.*", ""]
        return "\n".join(lines) + "\n"

    grouped: dict[ChangeCategory, list[str]] = {}
    for change in entry.changes:
        grouped.setdefault(change.category, []).append(change.summary)

    for category, summaries in grouped.items():
        title = titles.get(category) or f"### {category.value.capitalize()}"
        lines += [title, ""]
        lines += [f"- {summary}" for summary in summaries]
        lines.append("")

    return "\n".join(lines) + "\n"


def generate_summary(entry: ChangelogEntry) -> str:
    """One-line description such as ``Release 1.2.0 - 3 changes (added, fixed)``."""
    count = len(entry.changes)
    if count == 0:
        return f"Release {entry.version} - No changes recorded"

    categories = list(dict.fromkeys(change.category.value for change in entry.changes))
    plural = "s" if count > 1 else ""
    return f"Release {entry.version} - {count} change{plural} ({', '.join(categories)})"


def write_changelogs(
    entries: Sequence[ChangelogEntry],
    output_dir: Path,
    category_titles: Mapping[ChangeCategory, str] | None = None,
) -> list[Path]:
    """Write all changelog files, replacing the output directory.

    Args:
        entries: Changelog entries, newest first
        output_dir: Target directory (removed and recreated)
        category_titles: Heading overrides per category

    Returns:
        Paths of the written files, index last

    Raises:
        ChangelogError: If the files cannot be written
    """
    written: list[Path] = []
    try:
        if output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True)

        for entry in entries:
            path = output_dir / version_filename(entry)
            path.write_text(render_version_markdown(entry, category_titles), encoding="utf-8")
            written.append(path)

        index_path = output_dir / INDEX_FILENAME
        index_path.write_text(
            build_index(entries).model_dump_json(by_alias=True, indent=2) + "\n",
            encoding="utf-8",
        )
        written.append(index_path)
    except OSError as e:
        raise ChangelogError(f"Could not write changelogs to {output_dir}: {e}") from e

    logger.debug("Wrote %d changelog files to %s", len(written), output_dir)
    return written
