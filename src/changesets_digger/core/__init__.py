"""Core business logic for changesets-digger.

This module contains the fundamental building blocks:
- Changeset record parsing
- Snapshot differencing across version tags
- Severity resolution and semantic version derivation
- Change categorization
- Version history assembly and changelog file generation
"""

from __future__ import annotations

from changesets_digger.core.categorize import ChangeCategory, categorize_change
from changesets_digger.core.changelog import (
    build_index,
    generate_summary,
    render_version_markdown,
    write_changelogs,
)
from changesets_digger.core.changeset import (
    Changeset,
    create_changeset,
    parse_changeset_content,
    read_changesets,
)
from changesets_digger.core.history import (
    ChangeEntry,
    ChangelogEntry,
    VersionHistory,
    VersionStatus,
    build_version_history,
    get_historical_version,
    get_upcoming_version,
    get_version_status,
)
from changesets_digger.core.snapshot import changesets_at_tag, diff_changesets
from changesets_digger.core.version import (
    BumpType,
    Version,
    derive_next_version,
    parse_version,
    resolve_bump,
    resolve_current_version,
)

__all__ = [
    # Version
    "BumpType",
    # Categorization
    "ChangeCategory",
    # History
    "ChangeEntry",
    "ChangelogEntry",
    # Changesets
    "Changeset",
    "Version",
    "VersionHistory",
    "VersionStatus",
    # Changelog
    "build_index",
    "build_version_history",
    "categorize_change",
    "changesets_at_tag",
    "create_changeset",
    "derive_next_version",
    "diff_changesets",
    "generate_summary",
    "get_historical_version",
    "get_upcoming_version",
    "get_version_status",
    "parse_changeset_content",
    "parse_version",
    "read_changesets",
    "render_version_markdown",
    "resolve_bump",
    "resolve_current_version",
    "write_changelogs",
]
