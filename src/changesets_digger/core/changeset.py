"""Changeset record parsing and the working-tree changeset store.

A changeset is a small Markdown file under ``.changeset/``::

    ---
    type: minor
    ---

    Add new feature for users

The file name (minus ``.md``) is the changeset id. The parser is tolerant:
it never fails on bad structure, it just returns a record with no release
types. Whether that is an error is decided by the reader (strict vs. lenient).
"""

from __future__ import annotations

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from changesets_digger.core.version import BumpType, resolve_bump
from changesets_digger.exceptions import (
    MalformedChangesetError,
    MissingChangesetDirectoryError,
)

logger = logging.getLogger(__name__)

CHANGESET_DIR = ".changeset"
CHANGESET_SUFFIX = ".md"
FRONTMATTER_DELIMITER = "---"

# type: patch / type: "minor" / type: 'major'  (case-sensitive)
TYPE_HEADER_PATTERN = re.compile(r"""^type\s*:\s*["']?(major|minor|patch)["']?""")

README_CONTENT = """\
# Changesets

This directory contains changeset files that describe changes in this repository.

## Creating a changeset

To create a new changeset, run:

```bash
changesets-digger add
```

## Releasing

To create a release tag: `changesets-digger tag`
To generate changelog files: `changesets-digger generate`
"""

# Milliseconds since the epoch, zero-padded so ids sort in creation order.
_ID_STAMP_WIDTH = 11
_last_id_stamp = 0


@dataclass(frozen=True, slots=True)
class Changeset:
    """A single changeset record.

    Attributes:
        id: Stable identifier derived from the file name
        summary: Free-text body, never empty
        releases: Release types declared in the header; empty if the record
            could not be classified
    """

    id: str
    summary: str
    releases: tuple[BumpType, ...] = ()

    @property
    def severity(self) -> BumpType | None:
        """Highest declared release type, or None if unclassified."""
        if not self.releases:
            return None
        return resolve_bump([self])

    @property
    def is_classified(self) -> bool:
        return bool(self.releases)


def fallback_summary(changeset_id: str) -> str:
    return f"Changes from {changeset_id}"


def parse_changeset_content(content: str, changeset_id: str) -> Changeset:
    """Parse raw changeset text.

    Args:
        content: Raw file content
        changeset_id: Identifier to assign to the record

    Returns:
        Parsed Changeset. A missing frontmatter block yields a record whose
        summary is the whole trimmed text and which has no release types.
    """
    lines = content.split("\n")

    start = next(
        (i for i, line in enumerate(lines) if line.strip() == FRONTMATTER_DELIMITER),
        None,
    )
    end = None
    if start is not None:
        end = next(
            (
                i
                for i, line in enumerate(lines)
                if i > start and line.strip() == FRONTMATTER_DELIMITER
            ),
            None,
        )

    if start is None or end is None:
        logger.warning("Invalid changeset format in %s: missing frontmatter", changeset_id)
        return Changeset(
            id=changeset_id,
            summary=content.strip() or fallback_summary(changeset_id),
        )

    releases: list[BumpType] = []
    for line in lines[start + 1 : end]:
        match = TYPE_HEADER_PATTERN.match(line)
        if match:
            releases.append(BumpType(match.group(1)))

    summary = "\n".join(lines[end + 1 :]).strip()

    return Changeset(
        id=changeset_id,
        summary=summary or fallback_summary(changeset_id),
        releases=tuple(releases),
    )


def changeset_id_from_path(path: str | Path) -> str:
    """Changeset id for a file path: its name without the ``.md`` suffix."""
    name = PurePosixPath(str(path).replace("\\", "/")).name
    if name.endswith(CHANGESET_SUFFIX):
        name = name[: -len(CHANGESET_SUFFIX)]
    return name


def is_changeset_file(path: str | Path) -> bool:
    """True for ``*.md`` files that are not the directory README."""
    name = PurePosixPath(str(path).replace("\\", "/")).name
    return name.endswith(CHANGESET_SUFFIX) and "README" not in name


def check_changeset(changeset: Changeset, location: str, *, ignore_errors: bool) -> Changeset:
    """Apply the strict/lenient policy to a freshly parsed record.

    Raises:
        MalformedChangesetError: In strict mode, if the record has no release type
    """
    if changeset.is_classified:
        return changeset

    message = f"Invalid changeset file {location}: no valid release information found"
    if not ignore_errors:
        raise MalformedChangesetError(message, path=location)

    logger.warning("Keeping unclassified changeset %s: %s", changeset.id, message)
    return changeset


def read_changesets(changeset_dir: Path, *, ignore_errors: bool = False) -> list[Changeset]:
    """Read every changeset in the working tree.

    Args:
        changeset_dir: The ``.changeset`` directory
        ignore_errors: Keep unreadable or unclassified records (with no
            release types) instead of failing

    Returns:
        Changesets sorted by file name

    Raises:
        MissingChangesetDirectoryError: If the directory does not exist
        MalformedChangesetError: In strict mode, for any invalid record
    """
    if not changeset_dir.is_dir():
        raise MissingChangesetDirectoryError(
            f"There is no {changeset_dir.name} directory in this project ({changeset_dir})"
        )

    files = sorted(p for p in changeset_dir.iterdir() if p.is_file() and is_changeset_file(p))

    changesets: list[Changeset] = []
    for file in files:
        changeset_id = changeset_id_from_path(file)
        try:
            content = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            if not ignore_errors:
                raise MalformedChangesetError(
                    f"Could not read changeset file {file}: {e}", path=str(file)
                ) from e
            logger.warning("Could not read changeset file %s: %s", file, e)
            changesets.append(Changeset(id=changeset_id, summary=fallback_summary(changeset_id)))
            continue

        changeset = parse_changeset_content(content, changeset_id)
        changesets.append(check_changeset(changeset, str(file), ignore_errors=ignore_errors))

    return changesets


def has_changesets(changeset_dir: Path) -> bool:
    """Check whether the changeset directory exists."""
    return changeset_dir.is_dir()


# =============================================================================
# Authoring
# =============================================================================


def ensure_changeset_dir(changeset_dir: Path) -> bool:
    """Create the changeset directory with a README if it is missing.

    Returns:
        True if the directory was created
    """
    if changeset_dir.is_dir():
        return False

    changeset_dir.mkdir(parents=True)
    (changeset_dir / "README.md").write_text(README_CONTENT, encoding="utf-8")
    logger.debug("Created %s", changeset_dir)
    return True


def generate_changeset_id() -> str:
    """Unique id such as ``0190f3a2b4c-3fa2e1``.

    The hex timestamp prefix is strictly increasing within a process, so
    changesets listed by file name come out in the order they were written.
    """
    global _last_id_stamp
    stamp = max(time.time_ns() // 1_000_000, _last_id_stamp + 1)
    _last_id_stamp = stamp
    return f"{stamp:0{_ID_STAMP_WIDTH}x}-{secrets.token_hex(3)}"


def format_changeset(bump_type: BumpType, description: str) -> str:
    header = f"{FRONTMATTER_DELIMITER}\ntype: {bump_type}\n{FRONTMATTER_DELIMITER}"
    return f"{header}\n\n{description.strip()}\n"


def create_changeset(changeset_dir: Path, bump_type: BumpType, description: str) -> Path:
    """Write a new changeset file.

    Args:
        changeset_dir: The ``.changeset`` directory (created if missing)
        bump_type: One of major, minor, patch
        description: Change description for the changelog

    Returns:
        Path to the new file

    Raises:
        ValueError: If the bump type is NONE or the description is blank
    """
    if bump_type == BumpType.NONE:
        raise ValueError("Changeset type must be one of: major, minor, patch")
    if not description.strip():
        raise ValueError("Description is required")

    ensure_changeset_dir(changeset_dir)

    path = changeset_dir / f"{generate_changeset_id()}{CHANGESET_SUFFIX}"
    while path.exists():
        path = changeset_dir / f"{generate_changeset_id()}{CHANGESET_SUFFIX}"

    path.write_text(format_changeset(bump_type, description), encoding="utf-8")
    return path
