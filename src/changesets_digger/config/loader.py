"""Configuration loading.

Sources, lowest precedence first:

1. Built-in defaults
2. ``[tool.changesets-digger]`` in the nearest ``pyproject.toml``
3. An explicit config file (``.json`` or ``.toml``)

Command line options are applied on top by the CLI.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from changesets_digger.config.models import DiggerConfig
from changesets_digger.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

TOOL_NAME = "changesets-digger"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or one of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate

    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_digger_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.changesets-digger]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_NAME, {})


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a standalone configuration file.

    TOML files may either hold the settings at the top level or inside a
    ``[tool.changesets-digger]`` table.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file cannot be parsed
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    if path.suffix == ".toml":
        data = load_pyproject_toml(path)
        return extract_digger_config(data) or data

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config file {path} must contain an object")
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None, config_file: Path | None = None) -> DiggerConfig:
    """Load configuration for the project at ``path``.

    A missing pyproject.toml is not an error: defaults are used.

    Args:
        path: Project directory (defaults to the current directory)
        config_file: Optional explicit config file

    Returns:
        Validated configuration

    Raises:
        ConfigNotFoundError: If ``config_file`` does not exist
        ConfigValidationError: If any source is invalid
    """
    raw: dict[str, Any] = {}

    try:
        pyproject_path = find_pyproject_toml(path)
    except ConfigNotFoundError:
        logger.debug("No pyproject.toml found, using default configuration")
    else:
        raw = extract_digger_config(load_pyproject_toml(pyproject_path))
        if raw:
            logger.debug("Loaded configuration from %s", pyproject_path)

    if config_file is not None:
        raw = _merge(raw, load_config_file(config_file))
        logger.debug("Loaded configuration from %s", config_file)

    try:
        return DiggerConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration:\n{e}") from e


def get_project_name(path: Path | None = None) -> str:
    """Get ``[project].name`` (or ``[tool.poetry].name``) from pyproject.toml.

    Raises:
        ConfigNotFoundError: If pyproject.toml cannot be found
        ConfigValidationError: If no name is declared
    """
    data = load_pyproject_toml(find_pyproject_toml(path))
    name = data.get("project", {}).get("name") or (
        data.get("tool", {}).get("poetry", {}).get("name")
    )
    if not name:
        raise ConfigValidationError("No project name in pyproject.toml")
    return str(name)


def get_project_version(path: Path | None = None) -> str:
    """Get ``[project].version`` (or ``[tool.poetry].version``) from pyproject.toml.

    Raises:
        ConfigNotFoundError: If pyproject.toml cannot be found
        ConfigValidationError: If no version is declared
    """
    data = load_pyproject_toml(find_pyproject_toml(path))
    version = data.get("project", {}).get("version") or (
        data.get("tool", {}).get("poetry", {}).get("version")
    )
    if not version:
        raise ConfigValidationError("No project version in pyproject.toml")
    return str(version)
