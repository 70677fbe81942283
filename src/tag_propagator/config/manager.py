"""Configuration manager — read/write TOML config, resolve release settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import tomli_w

from tag_propagator.client.errors import ConfigurationError
from tag_propagator.config.constants import (
    CONFIG_FILE,
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_CLONE_DIR,
    DEFAULT_MANIFEST_FILE,
    DEFAULT_SERVICES,
    DEFAULT_TAG,
    DEFAULT_TIMEOUT,
    ENV_CONFIG_REPO,
    ENV_PROFILE,
    ENV_REGISTRY,
    ENV_SERVICES,
    ENV_TAG,
)
from tag_propagator.config.models import CLIConfig, ReleaseProfile, ReleaseSettings
from tag_propagator.models.service import check_unique_services

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

# Profile fields left out of the file when they hold their default
_PROFILE_DEFAULTS: dict[str, Any] = {
    "services": list(DEFAULT_SERVICES),
    "clone_dir": DEFAULT_CLONE_DIR,
    "manifest_file": DEFAULT_MANIFEST_FILE,
    "default_tag": DEFAULT_TAG,
    "author_name": DEFAULT_AUTHOR_NAME,
    "author_email": DEFAULT_AUTHOR_EMAIL,
    "timeout": DEFAULT_TIMEOUT,
}


class ConfigManager:
    """Manages CLI configuration on disk and resolves release profiles."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path or CONFIG_FILE
        self._config: CLIConfig | None = None

    @property
    def config(self) -> CLIConfig:
        if self._config is None:
            self._config = self._load()
        return self._config

    def _load(self) -> CLIConfig:
        if not self.config_path.exists():
            return CLIConfig()
        raw = self.config_path.read_bytes()
        try:
            data = tomllib.loads(raw.decode())
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Cannot parse {self.config_path}: {exc}") from exc
        profiles: dict[str, ReleaseProfile] = {}
        for name, prof_data in data.get("profiles", {}).items():
            profiles[name] = ReleaseProfile(name=name, **prof_data)
        return CLIConfig(
            default_profile=data.get("default_profile"),
            default_format=data.get("default_format", "table"),
            profiles=profiles,
        )

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        # Secure directory permissions (owner-only)
        os.chmod(self.config_path.parent, 0o700)
        data: dict[str, Any] = {}
        if self.config.default_profile:
            data["default_profile"] = self.config.default_profile
        if self.config.default_format != "table":
            data["default_format"] = self.config.default_format
        if self.config.profiles:
            data["profiles"] = {}
            for name, profile in self.config.profiles.items():
                prof_dict = profile.model_dump(exclude={"name"}, exclude_none=True)
                # Remove defaults to keep config clean
                for key, default in _PROFILE_DEFAULTS.items():
                    if prof_dict.get(key) == default:
                        del prof_dict[key]
                data["profiles"][name] = prof_dict
        # Atomic write: write to temp file, then rename
        temp = self.config_path.with_suffix(".tmp")
        fd = os.open(str(temp), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, tomli_w.dumps(data).encode())
        finally:
            os.close(fd)
        temp.rename(self.config_path)

    def add_profile(self, profile: ReleaseProfile) -> None:
        self.config.profiles[profile.name] = profile
        if not self.config.default_profile:
            self.config.default_profile = profile.name
        self.save()

    def remove_profile(self, name: str) -> bool:
        if name not in self.config.profiles:
            return False
        del self.config.profiles[name]
        if self.config.default_profile == name:
            self.config.default_profile = next(iter(self.config.profiles), None)
        self.save()
        return True

    def set_default(self, name: str) -> bool:
        if name not in self.config.profiles:
            return False
        self.config.default_profile = name
        self.save()
        return True

    def get_profile(self, name: str | None = None) -> ReleaseProfile | None:
        if name:
            return self.config.profiles.get(name)
        default = self.config.default_profile
        if default:
            return self.config.profiles.get(default)
        return None

    def resolve_release(
        self,
        profile_name: str | None = None,
        config_repo: str | None = None,
        registry: str | None = None,
        services: list[str] | None = None,
        tag: str | None = None,
        clone_dir: str | None = None,
        *,
        require_repo: bool = True,
    ) -> ReleaseSettings:
        """Resolve the settings for one run.

        Precedence: CLI flags > env vars > config profile > built-in defaults.
        """
        env_profile = os.environ.get(ENV_PROFILE)
        wanted = profile_name or env_profile
        profile = self.get_profile(wanted)
        if wanted and profile is None:
            raise ConfigurationError(f"Profile '{wanted}' not found.")

        env_services = os.environ.get(ENV_SERVICES)
        resolved_repo = (
            config_repo
            or os.environ.get(ENV_CONFIG_REPO)
            or (profile.config_repo if profile else None)
        )
        resolved_registry = (
            registry
            or os.environ.get(ENV_REGISTRY)
            or (profile.registry if profile else None)
        )
        if services:
            resolved_services = services
        elif env_services:
            resolved_services = env_services.split(",")
        elif profile:
            resolved_services = profile.services
        else:
            resolved_services = list(DEFAULT_SERVICES)
        resolved_tag = (
            tag
            or os.environ.get(ENV_TAG)
            or (profile.default_tag if profile else DEFAULT_TAG)
        )

        if require_repo and not resolved_repo:
            raise ConfigurationError(
                "No config repository configured. Use 'tag-propagator config add' or set "
                f"{ENV_CONFIG_REPO} or pass --config-repo."
            )
        if not resolved_registry:
            raise ConfigurationError(
                "No registry configured. Use 'tag-propagator config add' or set "
                f"{ENV_REGISTRY} or pass --registry."
            )

        return ReleaseSettings(
            profile=profile.name if profile else "cli",
            config_repo=resolved_repo or None,
            registry=resolved_registry.rstrip("/"),
            services=check_unique_services(resolved_services),
            tag=resolved_tag,
            clone_dir=Path(clone_dir or (profile.clone_dir if profile else DEFAULT_CLONE_DIR)),
            manifest_file=profile.manifest_file if profile else DEFAULT_MANIFEST_FILE,
            ssh_key=profile.ssh_key if profile else None,
            author_name=profile.author_name if profile else DEFAULT_AUTHOR_NAME,
            author_email=profile.author_email if profile else DEFAULT_AUTHOR_EMAIL,
            notify_url=profile.notify_url if profile else None,
            timeout=profile.timeout if profile else DEFAULT_TIMEOUT,
        )
