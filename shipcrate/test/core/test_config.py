"""Tests for shipcrate.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipcrate.core.config import (
    DEFAULT_AUTH_SOCK,
    DEFAULT_CARGO_RELEASE_VERSION,
    Config,
    ReleaseConfig,
    ReleaseSecrets,
    load_config,
    load_config_or_default,
)
from shipcrate.core.result import Err, Ok


class TestDefaults:
    def test_release_defaults(self) -> None:
        rel = ReleaseConfig()
        assert rel.crate is None
        assert rel.branch == "master"
        assert rel.label == "release"
        assert rel.branches == ("master", "release/**")
        assert rel.tag_prefix == ""
        assert rel.sign_tags is True
        assert rel.optional_packages == ()

    def test_config_defaults(self) -> None:
        config = Config()
        assert config.ssh.auth_sock == DEFAULT_AUTH_SOCK
        assert config.tools.cargo_release_version == DEFAULT_CARGO_RELEASE_VERSION
        assert config.git.signing_format == "ssh"
        assert config.setup.system_packages == ()

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.release = ReleaseConfig()  # type: ignore[misc]


class TestFromDict:
    def test_full(self) -> None:
        config = Config.from_dict(
            {
                "release": {
                    "crate": "probe-rs",
                    "branch": "main",
                    "label": "ship-it",
                    "branches": ["main", "release/**"],
                    "tag_prefix": "v",
                    "sign_tags": False,
                    "optional_packages": ["probe-rs-mi"],
                },
                "git": {
                    "user_name": "probe-rs",
                    "user_email": "bot@probe.rs",
                    "signing_key": "ssh-ed25519 AAAA bot@probe.rs",
                },
                "ssh": {"auth_sock": "/run/agent.sock"},
                "tools": {"cargo_release_version": "0.25.0"},
                "setup": {"system_packages": ["libudev-dev"]},
            }
        )
        assert config.release.crate == "probe-rs"
        assert config.release.branch == "main"
        assert config.release.label == "ship-it"
        assert config.release.branches == ("main", "release/**")
        assert config.release.tag_prefix == "v"
        assert config.release.sign_tags is False
        assert config.release.optional_packages == ("probe-rs-mi",)
        assert config.git.user_email == "bot@probe.rs"
        assert config.git.signing_key == "ssh-ed25519 AAAA bot@probe.rs"
        assert config.ssh.auth_sock == "/run/agent.sock"
        assert config.tools.cargo_release_version == "0.25.0"
        assert config.setup.system_packages == ("libudev-dev",)

    def test_empty_tag_prefix_is_kept(self) -> None:
        config = Config.from_dict({"release": {"tag_prefix": ""}})
        assert config.release.tag_prefix == ""

    def test_empty_branches_list_is_kept(self) -> None:
        config = Config.from_dict({"release": {"branches": []}})
        assert config.release.branches == ()

    def test_wrong_types_raise(self) -> None:
        with pytest.raises(TypeError, match="branches"):
            Config.from_dict({"release": {"branches": "master"}})
        with pytest.raises(TypeError, match="sign_tags"):
            Config.from_dict({"release": {"sign_tags": "yes"}})
        with pytest.raises(TypeError, match="release"):
            Config.from_dict({"release": "probe-rs"})


class TestLoadConfig:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "shipcrate.toml"
        path.write_text(
            '[release]\ncrate = "probe-rs"\noptional_packages = ["probe-rs-mi"]\n',
            encoding="utf-8",
        )
        result = load_config(path)
        assert isinstance(result, Ok)
        assert result.value.release.crate == "probe-rs"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "shipcrate.toml"
        path.write_text("[release\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "shipcrate.toml"
        path.write_text('[release]\nbranches = "master"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message
        assert result.error.path == path

    def test_or_default_missing_file(self, tmp_path: Path) -> None:
        result = load_config_or_default(tmp_path / "shipcrate.toml")
        assert result == Ok(Config())

    def test_or_default_invalid_file_is_error(self, tmp_path: Path) -> None:
        path = tmp_path / "shipcrate.toml"
        path.write_text("not toml at all = = =", encoding="utf-8")
        assert isinstance(load_config_or_default(path), Err)


class TestReleaseSecrets:
    def test_from_env(self) -> None:
        secrets = ReleaseSecrets.from_env(
            {
                "CARGO_REGISTRY_TOKEN": "tok",
                "SSH_SIGNING_KEY": "key",
                "SSH_AUTH_SOCK": "/tmp/a.sock",
            }
        )
        assert secrets.registry_token == "tok"
        assert secrets.signing_key == "key"
        assert secrets.auth_sock == "/tmp/a.sock"

    def test_blank_values_are_none(self) -> None:
        secrets = ReleaseSecrets.from_env({"CARGO_REGISTRY_TOKEN": "  "})
        assert secrets.registry_token is None
        assert secrets.signing_key is None

    def test_repr_hides_values(self) -> None:
        secrets = ReleaseSecrets(registry_token="super-secret", signing_key="also-secret")
        text = repr(secrets)
        assert "super-secret" not in text
        assert "also-secret" not in text
