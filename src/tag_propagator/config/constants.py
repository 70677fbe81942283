"""Default paths, environment variable names, and constants."""

from __future__ import annotations

import platformdirs

APP_NAME = "tag-propagator"
APP_AUTHOR = "tag-propagator"

CONFIG_DIR = platformdirs.user_config_path(APP_NAME, APP_AUTHOR)
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Environment variable names
ENV_PROFILE = "TAGPROP_PROFILE"
ENV_CONFIG_REPO = "TAGPROP_CONFIG_REPO"
ENV_REGISTRY = "TAGPROP_REGISTRY"
ENV_SERVICES = "TAGPROP_SERVICES"
ENV_TAG = "TAGPROP_TAG"
# Set by Jenkins multibranch pipelines
ENV_BRANCH_NAME = "BRANCH_NAME"

# Release defaults
DEFAULT_SERVICES = (
    "api-gateway",
    "services/auth-service",
    "services/user-service",
    "services/notes-service",
    "services/tags-service",
)
DEFAULT_CLONE_DIR = "gitops-repo"
DEFAULT_MANIFEST_FILE = "kustomization.yaml"
DEFAULT_TAG = "latest"
DEFAULT_AUTHOR_NAME = "tag-propagator"
DEFAULT_AUTHOR_EMAIL = "tag-propagator@localhost"
DEFAULT_REMOTE = "origin"
DEFAULT_TIMEOUT = 30.0
