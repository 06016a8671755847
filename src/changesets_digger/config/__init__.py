"""Configuration management for changesets-digger."""

from __future__ import annotations

from changesets_digger.config.loader import load_config
from changesets_digger.config.models import (
    ChangelogConfig,
    DiggerConfig,
    TagConfig,
)

__all__ = [
    "ChangelogConfig",
    "DiggerConfig",
    "TagConfig",
    "load_config",
]
