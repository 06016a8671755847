"""Semantic version parsing, bump resolution and next-version derivation.

Versions follow semver: ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``. An
optional ``v`` prefix is accepted when parsing and never emitted.

The current version comes from an explicit chain of providers (latest tag,
then the project manifest); the first one that knows a real version wins.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from changesets_digger.exceptions import InvalidVersionError, VersionComputationError

if TYPE_CHECKING:
    from changesets_digger.core.changeset import Changeset

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "0.0.0"

SEMVER_PATTERN = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

CurrentVersionProvider = Callable[[], str | None]


class BumpType(StrEnum):
    """Kind of version increment, in increasing order of severity."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        return _BUMP_RANK[self]


_BUMP_RANK = {
    BumpType.NONE: 0,
    BumpType.PATCH: 1,
    BumpType.MINOR: 2,
    BumpType.MAJOR: 3,
}

# Severities a changeset record may declare.
RELEASE_TYPES = (BumpType.MAJOR, BumpType.MINOR, BumpType.PATCH)


@dataclass(frozen=True, slots=True)
class Version:
    """A semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string.

        Args:
            value: Version string such as ``1.2.3``, ``v1.0.0-beta.1``

        Returns:
            Parsed Version

        Raises:
            InvalidVersionError: If the string is not a semantic version
        """
        match = SEMVER_PATTERN.match(value.strip())
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {value!r}")

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def release(self) -> Version:
        """This version without pre-release or build metadata."""
        return Version(self.major, self.minor, self.patch)

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for the given bump.

        A pre-release is treated as in-progress work on its version, so it is
        stripped before the increment: ``1.0.0-beta.1`` bumped by ``patch``
        gives ``1.0.1``.

        Raises:
            VersionComputationError: If ``bump_type`` is NONE
        """
        base = self.release
        if bump_type == BumpType.MAJOR:
            return Version(base.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(base.major, base.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(base.major, base.minor, base.patch + 1)
        raise VersionComputationError(f"Cannot bump {self} without a release type")

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version


def parse_version(value: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(value)


def is_valid_version(value: str) -> bool:
    return SEMVER_PATTERN.match(value.strip()) is not None


def resolve_bump(changesets: Iterable[Changeset]) -> BumpType:
    """Reduce changesets to their dominant severity.

    Precedence is ``major > minor > patch > none``. Records without any
    severity are skipped. The result depends only on the severities present,
    not on their order.
    """
    highest = BumpType.NONE
    for changeset in changesets:
        for release in changeset.releases:
            if release == BumpType.MAJOR:
                return BumpType.MAJOR
            if release.rank > highest.rank:
                highest = release
    return highest


def derive_next_version(base_version: str, bump_type: BumpType) -> str:
    """Compute the next version string.

    Args:
        base_version: Most recent version (may carry a pre-release suffix)
        bump_type: Dominant severity of the new changesets

    Returns:
        The next version string

    Raises:
        VersionComputationError: If the base version cannot be parsed or
            there is nothing to bump
    """
    try:
        current = Version.parse(base_version)
    except InvalidVersionError as e:
        raise VersionComputationError(
            f"Could not calculate next version from {base_version} with bump {bump_type}"
        ) from e

    return str(current.bump(bump_type))


def resolve_current_version(providers: Sequence[CurrentVersionProvider]) -> str:
    """Return the first real version offered by ``providers``.

    Providers are tried in order. A provider answers ``None`` when it has no
    opinion; ``0.0.0`` is treated the same way. Falls back to ``0.0.0``.
    """
    for provider in providers:
        version = provider()
        if version and version != DEFAULT_VERSION:
            logger.debug("Current version %s from %s", version, _provider_name(provider))
            return version
    return DEFAULT_VERSION


def _provider_name(provider: CurrentVersionProvider) -> str:
    return getattr(provider, "__name__", repr(provider))
