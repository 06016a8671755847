"""Exception hierarchy for changesets-digger.

Every error raised by the library derives from :class:`DiggerError`, so the
CLI can report any of them uniformly and exit with a non-zero status.
"""

from __future__ import annotations


class DiggerError(Exception):
    """Base class for all changesets-digger errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(DiggerError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """A configuration file (or pyproject.toml) does not exist."""


class ConfigValidationError(ConfigError):
    """Configuration exists but is invalid."""


# =============================================================================
# Changesets
# =============================================================================


class ChangesetError(DiggerError):
    """Base class for changeset record errors."""


class MissingChangesetDirectoryError(ChangesetError):
    """The changeset directory does not exist for the snapshot being read."""


class MalformedChangesetError(ChangesetError):
    """A changeset record is unreadable or carries no recognizable type."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


# =============================================================================
# Version control
# =============================================================================


class GitError(DiggerError):
    """A git query failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr.strip()}"
        return base


class NotARepositoryError(GitError):
    """The path is not inside a git work tree."""


class TagError(GitError):
    """A release tag could not be created."""


# =============================================================================
# Versions
# =============================================================================


class VersionError(DiggerError):
    """Base class for version errors."""


class InvalidVersionError(VersionError):
    """A version string is not a valid semantic version."""


class VersionComputationError(VersionError):
    """The next version cannot be computed from the base version."""


# =============================================================================
# Changelog output
# =============================================================================


class ChangelogError(DiggerError):
    """Changelog files could not be written."""
