"""Test helpers: changeset files, an in-memory repository and a git driver."""

from __future__ import annotations

import subprocess
from pathlib import Path

from changesets_digger.exceptions import GitError


def changeset_text(bump_type: str, summary: str) -> str:
    """Content of a well-formed changeset file."""
    return f"---\ntype: {bump_type}\n---\n\n{summary}\n"


def write_changeset(project: Path, changeset_id: str, bump_type: str, summary: str) -> Path:
    """Write a changeset into ``project/.changeset``."""
    changeset_dir = project / ".changeset"
    changeset_dir.mkdir(parents=True, exist_ok=True)
    path = changeset_dir / f"{changeset_id}.md"
    path.write_text(changeset_text(bump_type, summary))
    return path


# =============================================================================
# In-memory repository
# =============================================================================


class FakeRepository:
    """Stand-in for GitRepository backed by dictionaries.

    Args:
        path: Project directory (its ``.changeset`` is the working snapshot)
        tags: Versions, newest first
        snapshots: Changeset files per version, ``{version: {file_name: content}}``
        latest: Version returned by latest_tag(); defaults to the newest tag
    """

    def __init__(
        self,
        path: Path,
        tags: list[str] | None = None,
        snapshots: dict[str, dict[str, str]] | None = None,
        latest: str | None = None,
    ) -> None:
        self.path = path
        self.tag_prefix = "v"
        self.tags = list(tags or [])
        self.snapshots = snapshots or {}
        self.latest = latest
        self.dates: dict[str, str] = {}
        self.unlistable: set[str] = set()
        self.unreadable: set[tuple[str, str]] = set()
        self.tag_listing_fails = False
        self.listed: list[str] = []

    def tag_name(self, version: str) -> str:
        return f"{self.tag_prefix}{version}"

    def list_version_tags(self) -> list[str]:
        if self.tag_listing_fails:
            raise GitError("git tag failed")
        return list(self.tags)

    def latest_tag(self) -> str | None:
        if self.latest is not None:
            return self.latest
        return self.tags[0] if self.tags else None

    def list_changeset_files(self, version: str, changeset_dir: str = ".changeset") -> list[str]:
        self.listed.append(version)
        if version in self.unlistable:
            raise GitError(f"ls-tree failed for v{version}")
        return [f"{changeset_dir}/{name}" for name in self.snapshots.get(version, {})]

    def read_file_at(self, version: str, path: str) -> str | None:
        name = path.rsplit("/", 1)[-1]
        if (version, name) in self.unreadable:
            return None
        return self.snapshots.get(version, {}).get(name)

    def tag_date(self, version: str) -> str:
        if version not in self.dates:
            raise GitError(f"no date for v{version}")
        return self.dates[version]


# =============================================================================
# Real git repositories
# =============================================================================


class GitRepoHelper:
    """Drive a throwaway git repository."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def create_changeset(self, changeset_id: str, bump_type: str, summary: str) -> Path:
        return write_changeset(self.path, changeset_id, bump_type, summary)

    def write_file(self, relative: str, content: str) -> Path:
        path = self.path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def commit(self, message: str = "Update") -> None:
        self.git("add", "-A")
        self.git("commit", "--allow-empty", "-m", message)

    def tag(self, name: str) -> None:
        self.git("tag", name)

    def tags(self) -> list[str]:
        return self.git("tag", "-l").splitlines()

