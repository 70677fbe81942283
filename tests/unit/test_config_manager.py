"""Tests for config manager."""

from pathlib import Path

import pytest

from tag_propagator.client.errors import ConfigurationError, ValidationError
from tag_propagator.config.constants import DEFAULT_SERVICES
from tag_propagator.config.manager import ConfigManager
from tag_propagator.config.models import ReleaseProfile


class TestConfigManager:
    def test_load_empty(self, config_manager: ConfigManager):
        assert config_manager.config.profiles == {}
        assert config_manager.config.default_profile is None

    def test_add_profile(self, config_manager: ConfigManager, sample_profile: ReleaseProfile):
        config_manager.add_profile(sample_profile)
        assert "ci" in config_manager.config.profiles
        assert config_manager.config.default_profile == "ci"

    def test_add_sets_first_as_default(self, config_manager: ConfigManager):
        config_manager.add_profile(ReleaseProfile(name="first", config_repo="a.git", registry="r"))
        config_manager.add_profile(ReleaseProfile(name="second", config_repo="b.git", registry="r"))
        assert config_manager.config.default_profile == "first"

    def test_remove_profile(self, config_manager: ConfigManager, sample_profile: ReleaseProfile):
        config_manager.add_profile(sample_profile)
        assert config_manager.remove_profile("ci") is True
        assert "ci" not in config_manager.config.profiles

    def test_remove_nonexistent(self, config_manager: ConfigManager):
        assert config_manager.remove_profile("nope") is False

    def test_remove_default_reassigns(self, config_manager: ConfigManager):
        config_manager.add_profile(ReleaseProfile(name="a", config_repo="a.git", registry="r"))
        config_manager.add_profile(ReleaseProfile(name="b", config_repo="b.git", registry="r"))
        config_manager.set_default("a")
        config_manager.remove_profile("a")
        assert config_manager.config.default_profile == "b"

    def test_set_default_nonexistent(self, config_manager: ConfigManager):
        assert config_manager.set_default("nope") is False

    def test_save_and_reload(self, config_manager: ConfigManager):
        config_manager.add_profile(ReleaseProfile(
            name="ci",
            config_repo="git@github.com:acme/gitops.git",
            registry="docker.io/acme",
            services=["api-gateway", "services/auth-service"],
            ssh_key="~/.ssh/deploy",
        ))
        mgr2 = ConfigManager(config_path=config_manager.config_path)
        p = mgr2.get_profile("ci")
        assert p is not None
        assert p.config_repo == "git@github.com:acme/gitops.git"
        assert p.services == ["api-gateway", "services/auth-service"]
        assert p.ssh_key == "~/.ssh/deploy"

    def test_defaults_not_written(self, config_manager: ConfigManager, sample_profile: ReleaseProfile):
        config_manager.add_profile(sample_profile)
        text = config_manager.config_path.read_text()
        assert "services" not in text
        assert "clone_dir" not in text
        assert "default_tag" not in text
        assert ConfigManager(config_path=config_manager.config_path).get_profile("ci").services == list(
            DEFAULT_SERVICES
        )

    def test_file_permissions(self, config_manager: ConfigManager, sample_profile: ReleaseProfile):
        config_manager.add_profile(sample_profile)
        assert config_manager.config_path.stat().st_mode & 0o777 == 0o600

    def test_corrupt_file(self, tmp_config: Path):
        tmp_config.write_text("profiles = [unclosed")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            ConfigManager(config_path=tmp_config).config


class TestResolveRelease:
    def test_from_profile(self, config_manager: ConfigManager, sample_profile: ReleaseProfile):
        config_manager.add_profile(sample_profile)
        s = config_manager.resolve_release()
        assert s.profile == "ci"
        assert s.config_repo == "git@github.com:acme/gitops.git"
        assert s.registry == "docker.io/acme"
        assert s.services == list(DEFAULT_SERVICES)
        assert s.tag == "latest"
        assert s.clone_dir == Path("gitops-repo")

    def test_cli_overrides(self, config_manager: ConfigManager, sample_profile: ReleaseProfile):
        config_manager.add_profile(sample_profile)
        s = config_manager.resolve_release(
            config_repo="https://git.example.com/gitops.git",
            registry="ghcr.io/acme/",
            services=["api-gateway"],
            tag="1.2.3",
            clone_dir="/tmp/gitops",
        )
        assert s.config_repo == "https://git.example.com/gitops.git"
        assert s.registry == "ghcr.io/acme"
        assert s.services == ["api-gateway"]
        assert s.tag == "1.2.3"
        assert s.clone_dir == Path("/tmp/gitops")

    def test_env_vars(self, config_manager: ConfigManager, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TAGPROP_CONFIG_REPO", "env.git")
        monkeypatch.setenv("TAGPROP_REGISTRY", "env.io/acme")
        monkeypatch.setenv("TAGPROP_SERVICES", "api-gateway, services/auth-service")
        monkeypatch.setenv("TAGPROP_TAG", "sha-abc")
        s = config_manager.resolve_release()
        assert s.profile == "cli"
        assert s.config_repo == "env.git"
        assert s.registry == "env.io/acme"
        assert s.services == ["api-gateway", "services/auth-service"]
        assert s.tag == "sha-abc"

    def test_cli_beats_env(self, config_manager: ConfigManager, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TAGPROP_REGISTRY", "env.io/acme")
        s = config_manager.resolve_release(config_repo="r.git", registry="cli.io/acme")
        assert s.registry == "cli.io/acme"

    def test_env_profile(self, config_manager: ConfigManager, monkeypatch: pytest.MonkeyPatch):
        config_manager.add_profile(ReleaseProfile(name="a", config_repo="a.git", registry="r"))
        config_manager.add_profile(ReleaseProfile(name="b", config_repo="b.git", registry="r"))
        monkeypatch.setenv("TAGPROP_PROFILE", "b")
        assert config_manager.resolve_release().config_repo == "b.git"

    def test_unknown_profile(self, config_manager: ConfigManager):
        with pytest.raises(ConfigurationError, match="Profile 'ghost' not found"):
            config_manager.resolve_release(profile_name="ghost")

    def test_no_repo_raises(self, config_manager: ConfigManager):
        with pytest.raises(ConfigurationError, match="No config repository configured"):
            config_manager.resolve_release(registry="docker.io/acme")

    def test_no_registry_raises(self, config_manager: ConfigManager):
        with pytest.raises(ConfigurationError, match="No registry configured"):
            config_manager.resolve_release(config_repo="r.git")

    def test_repo_optional(self, config_manager: ConfigManager):
        s = config_manager.resolve_release(registry="docker.io/acme", require_repo=False)
        assert s.config_repo is None

    def test_duplicate_services(self, config_manager: ConfigManager):
        with pytest.raises(ValidationError):
            config_manager.resolve_release(
                config_repo="r.git", registry="r", services=["a/x", "b/x"],
            )
