"""Shared helpers for CLI commands — settings factory, options, consoles."""

from __future__ import annotations

import os
from typing import Annotated

import typer
from rich.console import Console

from tag_propagator.client.git import detect_branch
from tag_propagator.config.constants import ENV_BRANCH_NAME
from tag_propagator.config.manager import ConfigManager
from tag_propagator.config.models import ReleaseSettings
from tag_propagator.models.tier import Tier, parse_tier, tiers_for_branch

# Progress and warnings go to stderr so --format json stays parseable
log_console = Console(stderr=True)

# Shared Typer option type aliases
ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Release profile"),
]
ConfigRepoOpt = Annotated[
    str | None,
    typer.Option("--config-repo", help="GitOps repository URL override"),
]
RegistryOpt = Annotated[
    str | None,
    typer.Option("--registry", help="Image registry prefix override"),
]
ServicesOpt = Annotated[
    str | None,
    typer.Option("--services", "-s", help="Comma-separated service identifiers"),
]
TagOpt = Annotated[
    str | None,
    typer.Option("--tag", "-t", help="Image tag to propagate"),
]
BranchOpt = Annotated[
    str | None,
    typer.Option("--branch", "-b", help=f"Source branch (default: ${ENV_BRANCH_NAME} or current)"),
]
TierOpt = Annotated[
    list[str] | None,
    typer.Option("--tier", help="Explicit tier(s), overriding branch selection"),
]
CloneDirOpt = Annotated[
    str | None,
    typer.Option("--clone-dir", help="Local clone directory"),
]
FormatOpt = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format"),
]


def _get_manager() -> ConfigManager:
    return ConfigManager()


def split_services(value: str | None) -> list[str] | None:
    """Parse a comma-separated --services value."""
    if not value:
        return None
    return [s.strip() for s in value.split(",") if s.strip()]


def make_settings(
    profile: str | None,
    config_repo: str | None = None,
    registry: str | None = None,
    services: str | None = None,
    tag: str | None = None,
    clone_dir: str | None = None,
    *,
    require_repo: bool = True,
) -> ReleaseSettings:
    """Resolve run settings from CLI options, env vars, or config profile."""
    return _get_manager().resolve_release(
        profile_name=profile,
        config_repo=config_repo,
        registry=registry,
        services=split_services(services),
        tag=tag,
        clone_dir=clone_dir,
        require_repo=require_repo,
    )


def resolve_branch(branch: str | None) -> str | None:
    """--branch, then $BRANCH_NAME, then the branch checked out in the cwd."""
    return branch or os.environ.get(ENV_BRANCH_NAME) or detect_branch()


def resolve_tiers(tiers: list[str] | None, branch: str | None) -> list[Tier]:
    if tiers:
        return list(dict.fromkeys(parse_tier(t) for t in tiers))
    return tiers_for_branch(branch)
