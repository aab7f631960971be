"""Typed release configuration.

The optional ``.relkit.toml`` at the repository root overrides the defaults:

    release_branch = "main"
    remote = "upstream"
    changelog = "CHANGELOG.md"
    test_command = ["make", "test"]
    newest_first = false
    monitor_url = "https://github.com/acme/app/actions"

    [categories]
    feat = "Added"
    fix = "Fixed"

A ``[categories]`` table replaces the default mapping entirely; its key order
is the order categories are rendered in.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_CATEGORIES",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "load_repo_config",
]

CONFIG_FILE_NAME = ".relkit.toml"

# Keep a Changelog categories, in rendering order.
DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("feat", "Added"),
    ("perf", "Changed"),
    ("refactor", "Changed"),
    ("deprecate", "Deprecated"),
    ("remove", "Removed"),
    ("revert", "Removed"),
    ("fix", "Fixed"),
    ("security", "Security"),
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the config file cannot be read or has a bad shape."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Settings for one release run."""

    release_branch: str = "main"
    remote: str = "upstream"
    changelog: str = "CHANGELOG.md"
    test_command: tuple[str, ...] = ("make", "test")
    categories: tuple[tuple[str, str], ...] = DEFAULT_CATEGORIES
    newest_first: bool = False
    monitor_url: str | None = None

    @property
    def upstream_ref(self) -> str:
        return f"{self.remote}/{self.release_branch}"

    def category_map(self) -> dict[str, str]:
        return dict(self.categories)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Build a config from a parsed TOML table.

        Raises:
            ValueError: a key is present with an unusable value.
        """
        defaults = cls()

        test_command = defaults.test_command
        raw_cmd = data.get("test_command")
        if isinstance(raw_cmd, str):
            test_command = tuple(shlex.split(raw_cmd))
        elif raw_cmd is not None:
            items = get_str_list(data, "test_command")
            if items is None:
                raise ValueError("test_command must be a string or a list of strings")
            test_command = tuple(items)
        if not test_command:
            raise ValueError("test_command must not be empty")

        categories = defaults.categories
        if "categories" in data:
            table = get_table(data, "categories")
            if table is None:
                raise ValueError("[categories] must be a table of type = \"Title\"")
            pairs: list[tuple[str, str]] = []
            for commit_type in table:
                title = get_str(table, commit_type)
                if title is None:
                    raise ValueError(f"categories.{commit_type} must be a non-empty string")
                pairs.append((commit_type.strip().lower(), title))
            categories = tuple(pairs)

        newest_first = get_bool(data, "newest_first")

        return cls(
            release_branch=get_str(data, "release_branch") or defaults.release_branch,
            remote=get_str(data, "remote") or defaults.remote,
            changelog=get_str(data, "changelog") or defaults.changelog,
            test_command=test_command,
            categories=categories,
            newest_first=defaults.newest_first if newest_first is None else newest_first,
            monitor_url=get_str(data, "monitor_url"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and validate a config file.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    try:
        return Ok(ReleaseConfig.from_dict(parsed.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path, hint=f"edit {path}"))


def load_repo_config(
    repo_root: Path, path: Path | None = None
) -> Result[ReleaseConfig, ConfigError]:
    """Load the config for a repository.

    An explicit ``path`` must exist. Without one, ``<repo_root>/.relkit.toml``
    is used when present and the defaults otherwise.
    """
    if path is not None:
        return load_config(path)

    default_path = repo_root / CONFIG_FILE_NAME
    if not default_path.is_file():
        return Ok(ReleaseConfig())
    return load_config(default_path)
