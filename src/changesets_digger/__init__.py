"""changesets-digger: git-native changelog generation from changeset history.

Changeset records committed under ``.changeset/`` plus the project's version
tags are enough to reconstruct every release and the upcoming one.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
