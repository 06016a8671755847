"""Version history reconstruction.

Builds changelog entries from changeset snapshots:

- the *upcoming* entry: changesets in the working tree that the latest tag
  did not have yet, versioned by their dominant severity;
- one *historical* entry per version tag: changesets present at the tag
  but not at the next-older tag.

Tags are processed in the order git reports them (newest first); the
upcoming entry, if any, always comes first.

Error policy: in strict mode (the default) an invalid changeset anywhere
aborts the read. With ``ignore_errors`` invalid records are kept without a
release type, a tag whose snapshot cannot be read contributes no changes
(neither its own nor its successor's), and a missing tag date falls back to
the current time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from changesets_digger.core.categorize import ChangeCategory, categorize_change
from changesets_digger.core.changeset import (
    CHANGESET_DIR,
    Changeset,
    has_changesets,
    read_changesets,
)
from changesets_digger.core.snapshot import changesets_at_tag, diff_changesets
from changesets_digger.core.version import (
    DEFAULT_VERSION,
    BumpType,
    CurrentVersionProvider,
    derive_next_version,
    is_valid_version,
    resolve_bump,
    resolve_current_version,
)
from changesets_digger.exceptions import ConfigError, GitError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from changesets_digger.vcs.git import GitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChangeEntry:
    """One bullet in a changelog entry."""

    category: ChangeCategory
    summary: str


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    """One version's worth of changes."""

    version: str
    date: str
    changes: tuple[ChangeEntry, ...] = ()
    is_upcoming: bool = False


@dataclass(frozen=True, slots=True)
class VersionHistory:
    """Changelog entries, newest first."""

    entries: tuple[ChangelogEntry, ...] = ()

    @property
    def latest_version(self) -> str:
        return self.entries[0].version if self.entries else DEFAULT_VERSION

    @property
    def upcoming(self) -> ChangelogEntry | None:
        if self.entries and self.entries[0].is_upcoming:
            return self.entries[0]
        return None

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class VersionStatus:
    """Summary of where the project stands."""

    current: str
    upcoming: str | None
    has_changes: bool
    change_count: int


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


def build_changes(changesets: Sequence[Changeset]) -> tuple[ChangeEntry, ...]:
    """Categorized changes, in discovery order.

    Unclassified changesets (kept in lenient mode) are left out.
    """
    return tuple(
        ChangeEntry(category=categorize_change(cs.summary), summary=cs.summary)
        for cs in changesets
        if cs.is_classified
    )


# =============================================================================
# Current version
# =============================================================================


def current_version_providers(repo: GitRepository) -> list[CurrentVersionProvider]:
    """Fallback chain for the current version: latest tag, then pyproject.toml."""

    def manifest_version() -> str | None:
        from changesets_digger.config.loader import get_project_version

        try:
            version = get_project_version(repo.path)
        except ConfigError as e:
            logger.debug("No manifest version: %s", e)
            return None
        if not is_valid_version(version):
            logger.warning("Ignoring non-semver manifest version %s", version)
            return None
        return version

    return [repo.latest_tag, manifest_version]


def get_current_version(repo: GitRepository) -> str:
    return resolve_current_version(current_version_providers(repo))


# =============================================================================
# Upcoming entry
# =============================================================================


def get_new_changesets(
    repo: GitRepository,
    *,
    changeset_dir: str = CHANGESET_DIR,
    ignore_errors: bool = False,
) -> list[Changeset]:
    """Working-tree changesets not yet released by the latest tag.

    Raises:
        MissingChangesetDirectoryError: If the changeset directory is missing
        MalformedChangesetError: In strict mode, for any invalid record
        GitError: In strict mode, if the latest tag cannot be read
    """
    current = read_changesets(repo.path / changeset_dir, ignore_errors=ignore_errors)
    if not current:
        return []

    latest = repo.latest_tag()
    if latest is None or latest == DEFAULT_VERSION:
        return current

    released = changesets_at_tag(
        repo, latest, changeset_dir=changeset_dir, ignore_errors=ignore_errors
    )
    if released is None:
        logger.warning(
            "Cannot tell which changesets %s released, reporting none as pending",
            repo.tag_name(latest),
        )
        return []
    return diff_changesets(current, released)


def get_upcoming_version(
    repo: GitRepository,
    *,
    changeset_dir: str = CHANGESET_DIR,
    ignore_errors: bool = False,
    current_version: str | None = None,
) -> ChangelogEntry | None:
    """The not-yet-tagged entry, or None if there is nothing to release.

    Args:
        repo: Repository to read
        changeset_dir: Changeset directory relative to the project
        ignore_errors: Lenient mode
        current_version: Base version; resolved from tags/manifest if omitted

    Raises:
        VersionComputationError: If the base version cannot be bumped
    """
    new = get_new_changesets(repo, changeset_dir=changeset_dir, ignore_errors=ignore_errors)
    if not new:
        return None

    bump = resolve_bump(new)
    if bump == BumpType.NONE:
        logger.warning("%d new changeset(s) carry no release type, nothing to release", len(new))
        return None

    base = current_version if current_version is not None else get_current_version(repo)
    version = derive_next_version(base, bump)
    logger.debug("Upcoming version %s (%s bump from %s)", version, bump, base)

    return ChangelogEntry(
        version=version,
        date=now_iso(),
        changes=build_changes(new),
        is_upcoming=True,
    )


# =============================================================================
# Historical entries
# =============================================================================


def get_previous_tag(version: str, tags: Sequence[str]) -> str | None:
    """The next-older tag in a newest-first tag list."""
    try:
        index = tags.index(version)
    except ValueError:
        return None
    if index + 1 >= len(tags):
        return None
    return tags[index + 1]


def _tag_date(repo: GitRepository, version: str) -> str:
    try:
        return repo.tag_date(version)
    except GitError as e:
        logger.warning("Could not read date of tag %s, using now: %s", repo.tag_name(version), e)
        return now_iso()


def get_historical_version(
    repo: GitRepository,
    version: str,
    tags: Sequence[str],
    *,
    changeset_dir: str = CHANGESET_DIR,
    ignore_errors: bool = False,
) -> ChangelogEntry:
    """Entry for a tagged version: changesets new since the previous tag.

    If either snapshot is unavailable (lenient mode only) the entry is
    emitted without changes rather than guessing.

    Args:
        repo: Repository to read
        version: Tagged version
        tags: All version tags, newest first
        changeset_dir: Changeset directory relative to the project
        ignore_errors: Lenient mode
    """
    date = _tag_date(repo, version)
    at_tag = changesets_at_tag(
        repo, version, changeset_dir=changeset_dir, ignore_errors=ignore_errors
    )
    previous_tag = get_previous_tag(version, tags)
    at_previous: list[Changeset] | None = []
    if at_tag is not None and previous_tag:
        at_previous = changesets_at_tag(
            repo, previous_tag, changeset_dir=changeset_dir, ignore_errors=ignore_errors
        )

    if at_tag is None or at_previous is None:
        logger.warning(
            "Changes of %s are unknown because a snapshot could not be read",
            repo.tag_name(version),
        )
        return ChangelogEntry(version=version, date=date)

    return ChangelogEntry(
        version=version,
        date=date,
        changes=build_changes(diff_changesets(at_tag, at_previous)),
    )


def _list_tags(repo: GitRepository, *, ignore_errors: bool) -> list[str]:
    try:
        return repo.list_version_tags()
    except GitError as e:
        if not ignore_errors:
            raise
        logger.warning("Could not list version tags: %s", e)
        return []


# =============================================================================
# Assembly
# =============================================================================


def build_version_history(
    repo: GitRepository,
    *,
    changeset_dir: str = CHANGESET_DIR,
    max_versions: int = 10,
    ignore_errors: bool = False,
    current_version: str | None = None,
) -> VersionHistory:
    """Upcoming entry (if any) followed by the newest historical entries.

    At most ``max_versions`` entries are returned; the upcoming entry takes
    one of those slots.

    Raises:
        ValueError: If ``max_versions`` is not positive
    """
    if max_versions < 1:
        raise ValueError(f"max_versions must be positive, got {max_versions}")

    entries: list[ChangelogEntry] = []

    upcoming = get_upcoming_version(
        repo,
        changeset_dir=changeset_dir,
        ignore_errors=ignore_errors,
        current_version=current_version,
    )
    if upcoming is not None:
        entries.append(upcoming)

    tags = _list_tags(repo, ignore_errors=ignore_errors)
    for version in tags[: max_versions - len(entries)]:
        logger.info("Processing %s", repo.tag_name(version))
        entries.append(
            get_historical_version(
                repo,
                version,
                tags,
                changeset_dir=changeset_dir,
                ignore_errors=ignore_errors,
            )
        )

    return VersionHistory(entries=tuple(entries))


def get_version_status(
    repo: GitRepository,
    *,
    changeset_dir: str = CHANGESET_DIR,
    ignore_errors: bool = False,
) -> VersionStatus:
    """Current version, upcoming version and pending change count.

    A project without a changeset directory simply has no pending changes.
    ``change_count`` includes unclassified changesets kept in lenient mode.
    """
    current = get_current_version(repo)

    new: list[Changeset] = []
    if has_changesets(repo.path / changeset_dir):
        new = get_new_changesets(repo, changeset_dir=changeset_dir, ignore_errors=ignore_errors)

    bump = resolve_bump(new)
    upcoming = derive_next_version(current, bump) if bump != BumpType.NONE else None

    return VersionStatus(
        current=current,
        upcoming=upcoming,
        has_changes=upcoming is not None,
        change_count=len(new),
    )
