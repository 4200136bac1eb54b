"""Typed loading of shipcrate.toml.

Every key is optional; missing tables fall back to defaults that match a
single-crate workspace released from `master`. Secrets are never read from
this file, they come from the environment (see `ReleaseSecrets`).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_AUTH_SOCK",
    "DEFAULT_CARGO_RELEASE_VERSION",
    "Config",
    "ConfigError",
    "GitConfig",
    "ReleaseConfig",
    "ReleaseSecrets",
    "SetupConfig",
    "SshConfig",
    "ToolsConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "shipcrate.toml"

DEFAULT_AUTH_SOCK = "/tmp/ssh_agent.sock"
DEFAULT_CARGO_RELEASE_VERSION = "0.24.8"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


def _default_branches() -> tuple[str, ...]:
    return ("master", "release/**")


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """What gets released and when.

    Attributes:
        crate: Crate whose version names the release (None: cargo's default).
        branch: Branch checked out before publishing.
        label: Pull request label that triggers a release.
        branches: Base-branch filters for pull request events.
        tag_prefix: Prefix of the workspace tag ("" tags as bare version).
        sign_tags: Sign tags created by cargo-release.
        optional_packages: Packages tagged and pushed on their own; their
            failures are tolerated because they may not have changed.
    """

    crate: str | None = None
    branch: str = "master"
    label: str = "release"
    branches: tuple[str, ...] = field(default_factory=_default_branches)
    tag_prefix: str = ""
    sign_tags: bool = True
    optional_packages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class GitConfig:
    """Identity used for release commits and tags."""

    user_name: str | None = None
    user_email: str | None = None
    signing_format: str = "ssh"
    signing_key: str | None = None


@dataclass(frozen=True, slots=True)
class SshConfig:
    auth_sock: str = DEFAULT_AUTH_SOCK


@dataclass(frozen=True, slots=True)
class ToolsConfig:
    cargo_release_version: str = DEFAULT_CARGO_RELEASE_VERSION


@dataclass(frozen=True, slots=True)
class SetupConfig:
    system_packages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    git: GitConfig = field(default_factory=GitConfig)
    ssh: SshConfig = field(default_factory=SshConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    setup: SetupConfig = field(default_factory=SetupConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            TypeError: If a present key has the wrong type.
        """
        release = _table(data, "release")
        git = _table(data, "git")
        ssh = _table(data, "ssh")
        tools = _table(data, "tools")
        setup = _table(data, "setup")

        return cls(
            release=ReleaseConfig(
                crate=_opt_str(release, "crate"),
                branch=_opt_str(release, "branch") or "master",
                label=_opt_str(release, "label") or "release",
                branches=_str_tuple(release, "branches", _default_branches()),
                tag_prefix=_raw_str(release, "tag_prefix", ""),
                sign_tags=_opt_bool(release, "sign_tags", True),
                optional_packages=_str_tuple(release, "optional_packages", ()),
            ),
            git=GitConfig(
                user_name=_opt_str(git, "user_name"),
                user_email=_opt_str(git, "user_email"),
                signing_format=_opt_str(git, "signing_format") or "ssh",
                signing_key=_opt_str(git, "signing_key"),
            ),
            ssh=SshConfig(auth_sock=_opt_str(ssh, "auth_sock") or DEFAULT_AUTH_SOCK),
            tools=ToolsConfig(
                cargo_release_version=_opt_str(tools, "cargo_release_version")
                or DEFAULT_CARGO_RELEASE_VERSION,
            ),
            setup=SetupConfig(system_packages=_str_tuple(setup, "system_packages", ())),
        )


@dataclass(frozen=True, slots=True)
class ReleaseSecrets:
    """Credentials taken from the environment.

    `repr` hides the values so they never end up in logs.
    """

    registry_token: str | None = field(default=None, repr=False)
    signing_key: str | None = field(default=None, repr=False)
    auth_sock: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> ReleaseSecrets:
        def pick(name: str) -> str | None:
            value = env.get(name, "")
            return value if value.strip() else None

        return cls(
            registry_token=pick("CARGO_REGISTRY_TOKEN"),
            signing_key=pick("SSH_SIGNING_KEY"),
            auth_sock=pick("SSH_AUTH_SOCK"),
        )


def _table(data: Mapping[str, object], key: str) -> StrDict:
    if key not in data:
        return {}
    table = get_table(data, key)
    if table is None:
        raise TypeError(f"[{key}] must be a table")
    return table


def _opt_str(table: Mapping[str, object], key: str) -> str | None:
    if key in table and not isinstance(table[key], str):
        raise TypeError(f"{key} must be a string")
    return get_str(table, key)


def _raw_str(table: Mapping[str, object], key: str, default: str) -> str:
    # Unlike _opt_str, an empty string is a meaningful value here.
    if key not in table:
        return default
    value = table[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value.strip()


def _opt_bool(table: Mapping[str, object], key: str, default: bool) -> bool:
    if key not in table:
        return default
    value = get_bool(table, key)
    if value is None:
        raise TypeError(f"{key} must be a boolean")
    return value


def _str_tuple(
    table: Mapping[str, object], key: str, default: tuple[str, ...]
) -> tuple[str, ...]:
    if key not in table:
        return default
    values = get_str_list(table, key)
    if values is None:
        raise TypeError(f"{key} must be a list of strings")
    return tuple(values)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file.

    Args:
        path: Path to shipcrate.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config, falling back to defaults when the file does not exist.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
