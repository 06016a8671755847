"""Git operations via subprocess.

This module is the only place that talks to git. Everything else consumes
the narrow query surface of :class:`GitRepository`: version tags, files at a
tag, tag dates and working-tree status. Tag creation is used by the ``tag``
command only.

Version tags are returned without their prefix (``v1.2.0`` -> ``1.2.0``);
the repository remembers the real tag name for later lookups.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from changesets_digger.core.changeset import CHANGESET_DIR, is_changeset_file
from changesets_digger.exceptions import GitError, NotARepositoryError, TagError

logger = logging.getLogger(__name__)

_VERSION_BODY = r"\d+\.\d+\.\d+(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"


class GitRepository:
    """Read-mostly view of a git repository.

    Args:
        path: Project directory inside a git work tree
        tag_prefix: Prefix of version tags, stripped from returned versions
    """

    def __init__(self, path: Path | None = None, tag_prefix: str = "v") -> None:
        self.path = (path or Path.cwd()).resolve()
        self.tag_prefix = tag_prefix
        self._tag_pattern = re.compile(rf"^(?:{re.escape(tag_prefix)})?({_VERSION_BODY})$")
        self._tag_names: dict[str, str] = {}

        if not self.path.is_dir():
            raise NotARepositoryError(f"Directory does not exist: {self.path}")
        try:
            inside = self._run("rev-parse", "--is-inside-work-tree")
        except GitError as e:
            raise NotARepositoryError(f"Not a git repository: {self.path}") from e
        if inside != "true":
            raise NotARepositoryError(f"Not a git work tree: {self.path}")

    def _run(self, *args: str, strip: bool = True) -> str:
        """Run a git command and return its stdout (stripped unless told otherwise).

        Raises:
            GitError: If git is missing, the command fails or its output is not UTF-8
        """
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git not found. Install git and make sure it is on PATH") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        except UnicodeDecodeError as e:
            raise GitError(f"git {' '.join(args)} produced output that is not valid UTF-8") from e
        return result.stdout.strip() if strip else result.stdout

    def tag_name(self, version: str) -> str:
        """Real tag name for a version returned by this repository."""
        return self._tag_names.get(version, f"{self.tag_prefix}{version}")

    def _strip_prefix(self, tag: str) -> str | None:
        match = self._tag_pattern.match(tag)
        if not match:
            return None
        version = match.group(1)
        self._tag_names.setdefault(version, tag)
        return version

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_version_tags(self) -> list[str]:
        """Version tags, newest first, in git's own version sort order.

        Raises:
            GitError: If tags cannot be listed
        """
        output = self._run("tag", "-l", "--sort=-version:refname")
        versions: list[str] = []
        for tag in output.splitlines():
            version = self._strip_prefix(tag.strip())
            if version is not None and version not in versions:
                versions.append(version)
        return versions

    def latest_tag(self) -> str | None:
        """Most recent version tag reachable from HEAD, or None."""
        try:
            tag = self._run(
                "describe",
                "--tags",
                "--abbrev=0",
                "--match",
                f"{self.tag_prefix}[0-9]*",
                "--match",
                "[0-9]*",
            )
        except GitError as e:
            logger.debug("No version tag found: %s", e)
            return None

        return self._strip_prefix(tag)

    def list_changeset_files(self, version: str, changeset_dir: str = CHANGESET_DIR) -> list[str]:
        """Changeset files present at a version tag.

        Raises:
            GitError: If the tree cannot be listed
        """
        output = self._run(
            "ls-tree", "-r", "--name-only", self.tag_name(version), "--", f"{changeset_dir}/"
        )
        return [line for line in output.splitlines() if line and is_changeset_file(line)]

    def read_file_at(self, version: str, path: str) -> str | None:
        """Content of ``path`` (relative to the project) at a version tag."""
        try:
            return self._run("show", f"{self.tag_name(version)}:./{path}", strip=False)
        except GitError as e:
            logger.warning("Could not read file %s at tag %s: %s", path, self.tag_name(version), e)
            return None

    def tag_date(self, version: str) -> str:
        """ISO 8601 date of the commit a version tag points at.

        Raises:
            GitError: If the date cannot be read
        """
        date = self._run("log", "-1", "--format=%aI", self.tag_name(version), "--")
        if not date:
            raise GitError(f"No date recorded for tag {self.tag_name(version)}")
        return date

    def tag_exists(self, version: str) -> bool:
        try:
            self._run("rev-parse", "--verify", "--quiet", f"refs/tags/{self.tag_name(version)}")
        except GitError:
            return False
        return True

    def is_dirty(self) -> bool:
        """Check for uncommitted changes (including untracked files)."""
        return bool(self._run("status", "--porcelain"))

    def has_remote(self, name: str = "origin") -> bool:
        try:
            self._run("remote", "get-url", name)
        except GitError:
            return False
        return True

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_tag(self, version: str) -> str:
        """Create a lightweight version tag at HEAD.

        Returns:
            The created tag name

        Raises:
            TagError: If the tag exists or cannot be created
        """
        tag = f"{self.tag_prefix}{version}"
        if self.tag_exists(version):
            raise TagError(f"Tag {tag} already exists")
        try:
            self._run("tag", tag)
        except GitError as e:
            raise TagError(f"Failed to create tag {tag}", stderr=e.stderr) from e
        self._tag_names[version] = tag
        return tag

    def push_tag(self, version: str, remote: str = "origin") -> None:
        """Push a version tag.

        Raises:
            GitError: If the push fails
        """
        self._run("push", remote, self.tag_name(version))
