"""Tests for the command line interface."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from changesets_digger import __version__
from changesets_digger.cli.app import cli
from changesets_digger.cli.commands.version import OutputFormat, format_status
from changesets_digger.core.history import VersionStatus

if TYPE_CHECKING:
    from pathlib import Path

    from tests.helpers import GitRepoHelper

runner = CliRunner()


@pytest.fixture
def project(git_repo: GitRepoHelper) -> GitRepoHelper:
    """Repository with a pyproject.toml and one committed minor changeset."""
    git_repo.write_file("pyproject.toml", '[project]\nname = "demo"\nversion = "1.0.0"\n')
    git_repo.create_changeset("brave-owls", "minor", "Add search")
    git_repo.commit("Add search")
    return git_repo


class TestMain:
    """Tests for global options."""

    def test_version_flag(self):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("add", "generate", "tag", "version"):
            assert command in result.output


class TestVersionCommand:
    """Tests for the version command."""

    def test_json(self, project: GitRepoHelper):
        result = runner.invoke(cli, ["version", "--path", str(project.path)])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "current": "1.0.0",
            "upcoming": "1.1.0",
            "hasChanges": True,
            "changeCount": 1,
        }

    @pytest.mark.parametrize(
        ("output", "expected"),
        [
            ("current", "1.0.0"),
            ("upcoming", "1.1.0"),
            ("hasChanges", "true"),
            ("changeCount", "1"),
            ("status", "current=1.0.0 upcoming=1.1.0 hasChanges=true changeCount=1"),
        ],
    )
    def test_formats(self, project: GitRepoHelper, output: str, expected: str):
        result = runner.invoke(cli, ["version", "-o", output, "--path", str(project.path)])

        assert result.exit_code == 0
        assert result.stdout.strip() == expected

    def test_invalid_format(self, project: GitRepoHelper):
        result = runner.invoke(cli, ["version", "-o", "yaml", "--path", str(project.path)])

        assert result.exit_code == 2

    def test_without_changesets(self, git_repo: GitRepoHelper):
        git_repo.tag("v2.0.0")

        result = runner.invoke(cli, ["version", "-o", "status", "--path", str(git_repo.path)])

        assert result.exit_code == 0
        assert result.stdout.strip() == (
            "current=2.0.0 upcoming=null hasChanges=false changeCount=0"
        )

    def test_not_a_repository(self, tmp_path: Path):
        result = runner.invoke(cli, ["version", "--path", str(tmp_path)])

        assert result.exit_code == 1

    def test_format_status(self):
        status = VersionStatus(current="0.0.0", upcoming=None, has_changes=False, change_count=0)

        assert format_status(status, OutputFormat.UPCOMING) == "null"
        assert json.loads(format_status(status, OutputFormat.JSON))["upcoming"] is None


class TestAddCommand:
    """Tests for the add command."""

    def test_non_interactive(self, git_repo: GitRepoHelper):
        result = runner.invoke(
            cli,
            ["add", "-t", "patch", "-m", "Fix crash", "--path", str(git_repo.path)],
        )

        assert result.exit_code == 0
        assert "Changeset created successfully" in result.output
        files = [p for p in (git_repo.path / ".changeset").glob("*.md") if p.name != "README.md"]
        assert len(files) == 1
        assert files[0].read_text() == "---\ntype: patch\n---\n\nFix crash\n"

    def test_type_is_case_insensitive(self, git_repo: GitRepoHelper):
        result = runner.invoke(
            cli, ["add", "-t", "MAJOR", "-m", "Drop support", "--path", str(git_repo.path)]
        )

        assert result.exit_code == 0
        assert "Type: major" in result.output

    def test_invalid_type(self, git_repo: GitRepoHelper):
        result = runner.invoke(
            cli, ["add", "-t", "huge", "-m", "Something", "--path", str(git_repo.path)]
        )

        assert result.exit_code == 1
        assert "Invalid type" in result.output

    def test_interactive(self, git_repo: GitRepoHelper):
        result = runner.invoke(
            cli, ["add", "--path", str(git_repo.path)], input="2\nAdd export\n"
        )

        assert result.exit_code == 0
        files = [p for p in (git_repo.path / ".changeset").glob("*.md") if p.name != "README.md"]
        assert files[0].read_text() == "---\ntype: minor\n---\n\nAdd export\n"

    def test_interactive_invalid_choice(self, git_repo: GitRepoHelper):
        result = runner.invoke(cli, ["add", "--path", str(git_repo.path)], input="7\n")

        assert result.exit_code == 1
        assert "Invalid selection" in result.output


class TestGenerateCommand:
    """Tests for the generate command."""

    @pytest.fixture
    def released(self, git_repo: GitRepoHelper) -> GitRepoHelper:
        git_repo.create_changeset("first", "minor", "Add login")
        git_repo.commit("Add login")
        git_repo.tag("v0.1.0")
        git_repo.create_changeset("second", "patch", "Fix logout")
        return git_repo

    def test_generate(self, released: GitRepoHelper):
        result = runner.invoke(cli, ["generate", "--path", str(released.path)])

        assert result.exit_code == 0
        output_dir = released.path / "src" / "assets" / "changelogs"
        index = json.loads((output_dir / "index.json").read_text())
        assert index["latestVersion"] == "0.1.1"
        assert [v["version"] for v in index["versions"]] == ["0.1.1", "0.1.0"]
        assert "- Fix logout" in (output_dir / "0.1.1.md").read_text()
        assert "- Add login" in (output_dir / "0.1.0.md").read_text()

    def test_output_and_max_versions(self, released: GitRepoHelper):
        result = runner.invoke(
            cli, ["generate", "-o", "out", "-m", "1", "--path", str(released.path)]
        )

        assert result.exit_code == 0
        assert sorted(p.name for p in (released.path / "out").iterdir()) == [
            "0.1.1.md",
            "index.json",
        ]

    def test_dry_run(self, released: GitRepoHelper):
        result = runner.invoke(cli, ["generate", "--dry-run", "--path", str(released.path)])

        assert result.exit_code == 0
        assert "Dry Run Preview" in result.output
        assert not (released.path / "src").exists()

    def test_alias(self, released: GitRepoHelper):
        result = runner.invoke(cli, ["gen", "--dry-run", "--path", str(released.path)])

        assert result.exit_code == 0

    def test_invalid_changeset_fails(self, released: GitRepoHelper):
        released.write_file(".changeset/broken.md", "This is not a valid changeset")

        result = runner.invoke(cli, ["generate", "--path", str(released.path)])

        assert result.exit_code == 1
        assert "Error generating changelogs" in result.output

    def test_invalid_changeset_ignored(self, released: GitRepoHelper):
        released.write_file(".changeset/broken.md", "This is not a valid changeset")

        result = runner.invoke(
            cli, ["generate", "--ignore-errors", "--path", str(released.path)]
        )

        assert result.exit_code == 0
        assert (released.path / "src" / "assets" / "changelogs" / "0.1.1.md").is_file()

    def test_missing_changeset_directory(self, git_repo: GitRepoHelper):
        result = runner.invoke(cli, ["generate", "--path", str(git_repo.path)])

        assert result.exit_code == 1

    def test_invalid_max_versions(self, released: GitRepoHelper):
        result = runner.invoke(cli, ["generate", "-m", "0", "--path", str(released.path)])

        assert result.exit_code == 2


class TestTagCommand:
    """Tests for the tag command."""

    def test_dry_run(self, project: GitRepoHelper):
        result = runner.invoke(cli, ["tag", "--dry-run", "--path", str(project.path)])

        assert result.exit_code == 0
        assert "Would create tag" in result.output
        assert project.tags() == []

    def test_create(self, project: GitRepoHelper):
        result = runner.invoke(cli, ["tag", "--path", str(project.path)])

        assert result.exit_code == 0
        assert project.tags() == ["v1.1.0"]
        assert "created locally" in result.output

    def test_dirty_working_tree(self, project: GitRepoHelper):
        project.write_file("scratch.txt", "wip")

        result = runner.invoke(cli, ["tag", "--path", str(project.path)])

        assert result.exit_code == 1
        assert "uncommitted changes" in result.output
        assert project.tags() == []

    def test_force_dirty(self, project: GitRepoHelper):
        project.write_file("scratch.txt", "wip")

        result = runner.invoke(cli, ["tag", "--force", "--no-push", "--path", str(project.path)])

        assert result.exit_code == 0
        assert project.tags() == ["v1.1.0"]

    def test_nothing_to_release(self, git_repo: GitRepoHelper):
        result = runner.invoke(cli, ["tag", "--path", str(git_repo.path)])

        assert result.exit_code == 0
        assert "nothing to release" in result.output
        assert git_repo.tags() == []

    def test_existing_tag(self, project: GitRepoHelper):
        """A tag on an unrelated branch still blocks the release."""
        project.git("checkout", "-q", "-b", "other")
        project.commit("Side work")
        project.tag("v1.1.0")
        project.git("checkout", "-q", "-")

        result = runner.invoke(cli, ["tag", "--path", str(project.path)])

        assert result.exit_code == 1
        assert "already exists" in result.output
