"""Shared test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers import FakeRepository, GitRepoHelper

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def fake_repo(tmp_path: Path) -> FakeRepository:
    """Empty in-memory repository rooted at a temporary project directory."""
    return FakeRepository(tmp_path)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoHelper:
    """An initialized git repository with one commit."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    helper = GitRepoHelper(repo_path)
    helper.git("init", "-q")
    helper.git("config", "user.name", "Test")
    helper.git("config", "user.email", "test@test.com")
    helper.git("config", "commit.gpgsign", "false")
    helper.git("config", "tag.gpgsign", "false")
    helper.write_file("README.md", "# Test project\n")
    helper.commit("Initial commit")
    return helper


@pytest.fixture
def temp_git_repo_with_pyproject(git_repo: GitRepoHelper) -> Path:
    """A git repository with a pyproject.toml that configures the tool."""
    git_repo.write_file(
        "pyproject.toml",
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.changesets-digger]
ignore_errors = false

[tool.changesets-digger.changelog]
max_versions = 5
""",
    )
    git_repo.commit("Add pyproject.toml")
    return git_repo.path
