"""Snapshot fetching and differencing.

A snapshot is the set of changesets visible at one point in history: a
version tag, or the working tree. Changesets are never deleted, so the ones
a release introduced are those present at its tag but absent at the tag
before it. Fetching and differencing are kept apart so the diff is a plain
function over two lists.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from changesets_digger.core.changeset import (
    CHANGESET_DIR,
    Changeset,
    changeset_id_from_path,
    check_changeset,
    fallback_summary,
    parse_changeset_content,
)
from changesets_digger.exceptions import GitError, MalformedChangesetError

if TYPE_CHECKING:
    from changesets_digger.vcs.git import GitRepository

logger = logging.getLogger(__name__)


def diff_changesets(
    current: Sequence[Changeset],
    previous: Sequence[Changeset],
) -> list[Changeset]:
    """Changesets in ``current`` whose id does not occur in ``previous``.

    Only ids are compared; a record with the same id but different content is
    not new. Order of ``current`` is preserved.
    """
    if not previous:
        return list(current)

    seen = {changeset.id for changeset in previous}
    return [changeset for changeset in current if changeset.id not in seen]


def changesets_at_tag(
    repo: GitRepository,
    version: str,
    *,
    changeset_dir: str = CHANGESET_DIR,
    ignore_errors: bool = False,
) -> list[Changeset] | None:
    """Changesets that existed at a version tag.

    In strict mode any unreadable or unclassified record aborts the whole
    snapshot. In lenient mode such records are kept without release types,
    and a snapshot that cannot be listed is returned as None (unavailable,
    as opposed to empty).

    Raises:
        GitError: In strict mode, if the snapshot cannot be listed
        MalformedChangesetError: In strict mode, for any invalid record
    """
    tag = repo.tag_name(version)
    try:
        files = repo.list_changeset_files(version, changeset_dir)
    except GitError as e:
        if not ignore_errors:
            raise
        logger.warning("Could not list changesets at tag %s, skipping it: %s", tag, e)
        return None

    changesets: list[Changeset] = []
    for file in files:
        changeset_id = changeset_id_from_path(file)
        location = f"{file} at tag {tag}"

        content = repo.read_file_at(version, file)
        if content is None:
            if not ignore_errors:
                raise MalformedChangesetError(
                    f"Could not read changeset file {location}", path=file
                )
            logger.warning("Could not read changeset %s, keeping it without a type", location)
            changesets.append(Changeset(id=changeset_id, summary=fallback_summary(changeset_id)))
            continue

        changeset = parse_changeset_content(content, changeset_id)
        changesets.append(check_changeset(changeset, location, ignore_errors=ignore_errors))

    return changesets
