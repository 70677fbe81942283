"""Shared test fixtures."""

from __future__ import annotations

import os
import shutil
import subprocess
from io import StringIO
from pathlib import Path

import pytest
import yaml
from rich.console import Console

from tag_propagator.config.manager import ConfigManager
from tag_propagator.config.models import ReleaseProfile, ReleaseSettings

REGISTRY = "docker.io/acme"

# (short name, tier) pairs that exist in the sample GitOps repo
SEEDED_MANIFESTS = [
    ("api-gateway", "dev"),
    ("auth-service", "dev"),
    ("auth-service", "staging"),
    ("auth-service", "prod"),
    ("user-service", "dev"),
    ("user-service", "prod"),
]


def git(*args: str, cwd: Path) -> str:
    proc = subprocess.run(
        [
            "git",
            "-c", "user.name=Test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return proc.stdout.strip()


def kustomization(short_name: str, tag: str = "v1") -> dict:
    return {
        "apiVersion": "kustomize.config.k8s.io/v1beta1",
        "kind": "Kustomization",
        "namespace": "notes",
        "resources": ["../../base"],
        "images": [
            {
                "name": f"{REGISTRY}/{short_name}",
                "newName": f"{REGISTRY}/{short_name}",
                "newTag": tag,
            },
        ],
    }


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's config file and CI variables out of every test."""
    for name in list(os.environ):
        if name.startswith("TAGPROP_"):
            monkeypatch.delenv(name)
    monkeypatch.delenv("BRANCH_NAME", raising=False)
    monkeypatch.setattr(
        "tag_propagator.config.manager.CONFIG_FILE", tmp_path / "user-config" / "config.toml",
    )


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Return a temporary config file path."""
    return tmp_path / "config.toml"


@pytest.fixture
def config_manager(tmp_config: Path) -> ConfigManager:
    """Return a ConfigManager pointed at a temp config file."""
    return ConfigManager(config_path=tmp_config)


@pytest.fixture
def sample_profile() -> ReleaseProfile:
    """Return a sample release profile for testing."""
    return ReleaseProfile(
        name="ci",
        config_repo="git@github.com:acme/gitops.git",
        registry=REGISTRY,
    )


@pytest.fixture
def console_buffer() -> StringIO:
    return StringIO()


@pytest.fixture
def capture_console(console_buffer: StringIO) -> Console:
    return Console(file=console_buffer, force_terminal=False, width=200)


@pytest.fixture
def gitops_remote(tmp_path: Path) -> Path:
    """A bare GitOps repository seeded with overlays for SEEDED_MANIFESTS."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    seed = tmp_path / "seed"
    seed.mkdir()
    git("init", "--quiet", "-b", "main", cwd=seed)
    for short, tier in SEEDED_MANIFESTS:
        overlay = seed / "services" / short / "overlays" / tier
        overlay.mkdir(parents=True)
        (overlay / "kustomization.yaml").write_text(
            yaml.safe_dump(kustomization(short), default_flow_style=False, sort_keys=False),
        )
    git("add", ".", cwd=seed)
    git("commit", "--quiet", "-m", "Initial overlays", cwd=seed)
    remote = tmp_path / "gitops.git"
    git("clone", "--quiet", "--bare", str(seed), str(remote), cwd=tmp_path)
    return remote


@pytest.fixture
def reject_pushes(gitops_remote: Path) -> Path:
    """Install a pre-receive hook so every push to the remote fails."""
    hook = gitops_remote / "hooks" / "pre-receive"
    hook.parent.mkdir(exist_ok=True)
    hook.write_text("#!/bin/sh\necho 'pushes are frozen' >&2\nexit 1\n")
    hook.chmod(0o755)
    return gitops_remote


@pytest.fixture
def release_settings(gitops_remote: Path, tmp_path: Path) -> ReleaseSettings:
    return ReleaseSettings(
        profile="test",
        config_repo=str(gitops_remote),
        registry=REGISTRY,
        services=[
            "api-gateway",
            "services/auth-service",
            "services/user-service",
            "services/notes-service",
        ],
        tag="v2",
        clone_dir=tmp_path / "work" / "gitops-repo",
    )


@pytest.fixture
def remote_file(gitops_remote: Path):
    """Read a file from the remote's main branch."""

    def _read(path: str, ref: str = "main") -> str:
        return git("--git-dir", str(gitops_remote), "show", f"{ref}:{path}", cwd=gitops_remote)

    return _read


@pytest.fixture
def remote_log(gitops_remote: Path):
    """Commit subjects on the remote's main branch, newest first."""

    def _log(ref: str = "main") -> list[str]:
        out = git("--git-dir", str(gitops_remote), "log", "--format=%s", ref, cwd=gitops_remote)
        return out.splitlines()

    return _log


@pytest.fixture(name="git")
def git_fixture():
    """The ``git`` helper, for tests that prepare repositories by hand."""
    return git
