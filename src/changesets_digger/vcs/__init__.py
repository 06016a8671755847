"""Version control access."""

from __future__ import annotations

from changesets_digger.vcs.git import GitRepository

__all__ = ["GitRepository"]
