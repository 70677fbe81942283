"""Pydantic models for CLI configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from tag_propagator.config.constants import (
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_CLONE_DIR,
    DEFAULT_MANIFEST_FILE,
    DEFAULT_SERVICES,
    DEFAULT_TAG,
    DEFAULT_TIMEOUT,
)
from tag_propagator.models.service import check_unique_services


class ReleaseProfile(BaseModel):
    """A named release target: one GitOps repo, one registry, one service list."""

    name: str
    config_repo: str = Field(description="Git URL of the GitOps configuration repository")
    registry: str = Field(description="Image prefix, e.g. docker.io/acme")
    services: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SERVICES),
        description="Service identifiers, in propagation order",
    )
    clone_dir: str = Field(default=DEFAULT_CLONE_DIR, description="Local clone directory")
    manifest_file: str = Field(
        default=DEFAULT_MANIFEST_FILE, description="Manifest file name inside each overlay",
    )
    default_tag: str = Field(default=DEFAULT_TAG, min_length=1)
    ssh_key: str | None = Field(default=None, description="Private key used for git over SSH")
    author_name: str = DEFAULT_AUTHOR_NAME
    author_email: str = DEFAULT_AUTHOR_EMAIL
    notify_url: str | None = Field(
        default=None, description="Webhook that receives the propagation report",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, le=600, description="Notification timeout in seconds",
    )

    @field_validator("registry")
    @classmethod
    def validate_registry(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("Registry prefix must not be empty")
        return v

    @field_validator("config_repo")
    @classmethod
    def validate_config_repo(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Config repository URL must not be empty")
        return v.strip()

    @field_validator("notify_url")
    @classmethod
    def validate_notify_url(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("Notify URL must start with http:// or https://")
        return v

    @field_validator("services")
    @classmethod
    def validate_services(cls, v: list[str]) -> list[str]:
        return check_unique_services(v)


class ReleaseSettings(BaseModel):
    """Fully resolved settings for one run (flags, env, and profile merged)."""

    profile: str
    config_repo: str | None = None
    registry: str
    services: list[str]
    tag: str = Field(min_length=1)
    clone_dir: Path
    manifest_file: str = DEFAULT_MANIFEST_FILE
    ssh_key: str | None = None
    author_name: str = DEFAULT_AUTHOR_NAME
    author_email: str = DEFAULT_AUTHOR_EMAIL
    notify_url: str | None = None
    timeout: float = DEFAULT_TIMEOUT


class CLIConfig(BaseModel):
    """Root configuration model."""

    default_profile: str | None = None
    default_format: str = "table"
    profiles: dict[str, ReleaseProfile] = Field(default_factory=dict)
