"""Configuration models.

Configuration lives in ``[tool.changesets-digger]`` of ``pyproject.toml`` or
in a standalone JSON/TOML file passed with ``--config``. Keys may be written
in snake_case or camelCase.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel

from changesets_digger.core.categorize import DEFAULT_CATEGORY_TITLES, ChangeCategory


class _Model(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ChangelogConfig(_Model):
    """Changelog output settings."""

    output_dir: Path = Field(
        default=Path("src/assets/changelogs"),
        description="Directory the changelog files are written to",
    )
    max_versions: PositiveInt = Field(
        default=10,
        description="Maximum number of versions (including the upcoming one)",
    )
    category_titles: dict[ChangeCategory, str] = Field(
        default_factory=dict,
        description="Override the Markdown heading of a change category",
    )


class TagConfig(_Model):
    """Release tag settings."""

    push: bool = Field(default=True, description="Push the tag after creating it")
    remote: str = Field(default="origin", description="Remote to push tags to")


class DiggerConfig(_Model):
    """Root configuration."""

    changeset_dir: Path = Field(
        default=Path(".changeset"),
        description="Directory holding changeset files, relative to the project",
    )
    ignore_errors: bool = Field(
        default=False,
        description="Keep invalid changesets (without a version bump) instead of failing",
    )
    allow_dirty: bool = Field(
        default=False,
        description="Allow tagging with uncommitted changes",
    )
    tag_prefix: str = Field(default="v", description="Prefix of version tags")

    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    tag: TagConfig = Field(default_factory=TagConfig)

    @property
    def effective_category_titles(self) -> dict[ChangeCategory, str]:
        """Default category headings with configured overrides applied."""
        return {**DEFAULT_CATEGORY_TITLES, **self.changelog.category_titles}
