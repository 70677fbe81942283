"""Git subprocess client for the configuration repository."""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from pathlib import Path

from tag_propagator.client.errors import (
    CloneError,
    ConfigurationError,
    GitCommandError,
    TagPropagatorError,
)
from tag_propagator.config.constants import DEFAULT_REMOTE


def ssh_environment(ssh_key: str | None) -> dict[str, str]:
    """Extra environment that makes git use *ssh_key* for SSH remotes."""
    if not ssh_key:
        return {}
    key = str(Path(ssh_key).expanduser())
    return {
        "GIT_SSH_COMMAND": (
            f"ssh -i {shlex.quote(key)} -o IdentitiesOnly=yes"
            " -o StrictHostKeyChecking=accept-new"
        ),
    }


def _check_disposable(dest: Path) -> None:
    """Refuse to wipe the cwd, the home directory or anything containing them."""
    target = dest.resolve()
    protected = [Path.cwd().resolve(), Path.home().resolve()]
    for path in protected:
        if target == path or target in path.parents:
            raise ConfigurationError(
                f"Refusing to use {dest} as clone directory: it would delete {path}"
            )


class GitRepository:
    """A local git working copy driven through the ``git`` binary."""

    def __init__(self, path: Path, env: dict[str, str] | None = None) -> None:
        self.path = Path(path)
        self.env = env or {}

    def _run(self, *args: str, cwd: Path | None = None) -> str:
        cmd = ["git", *args]
        try:
            proc = subprocess.run(
                cmd,
                cwd=cwd or self.path,
                env={**os.environ, "GIT_TERMINAL_PROMPT": "0", **self.env},
                text=True,
                capture_output=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise TagPropagatorError("git executable not found on PATH") from exc
        if proc.returncode != 0:
            raise GitCommandError(cmd, proc.returncode, proc.stderr)
        return proc.stdout.strip()

    @classmethod
    def clone_fresh(
        cls,
        url: str,
        dest: Path,
        *,
        branch: str | None = None,
        ssh_key: str | None = None,
    ) -> GitRepository:
        """Delete *dest* if present and clone *url* into it."""
        dest = Path(dest).absolute()
        _check_disposable(dest)
        if dest.exists():
            shutil.rmtree(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        repo = cls(dest, env=ssh_environment(ssh_key))
        args = ["clone", "--quiet"]
        if branch:
            args += ["--branch", branch]
        try:
            repo._run(*args, url, str(dest), cwd=dest.parent)
        except GitCommandError as exc:
            raise CloneError(f"Cannot clone {url}: {exc.stderr or exc}") from exc
        return repo

    @classmethod
    def ls_remote(cls, url: str, *, ssh_key: str | None = None) -> list[str]:
        """Branch names advertised by *url*; raises GitCommandError if unreachable."""
        out = cls(Path.cwd(), env=ssh_environment(ssh_key))._run("ls-remote", "--heads", url)
        return [
            line.split("refs/heads/", 1)[1]
            for line in out.splitlines()
            if "refs/heads/" in line
        ]

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD")

    def add(self, path: Path) -> None:
        self._run("add", "--", str(Path(path).relative_to(self.path)))

    def has_staged_changes(self) -> bool:
        cmd = ["git", "diff", "--cached", "--quiet"]
        proc = subprocess.run(
            cmd,
            cwd=self.path,
            env={**os.environ, **self.env},
            capture_output=True,
            check=False,
        )
        # --quiet exits 1 when there are differences
        if proc.returncode not in (0, 1):
            raise GitCommandError(cmd, proc.returncode, proc.stderr.decode(errors="replace"))
        return proc.returncode == 1

    def commit(self, message: str, author_name: str, author_email: str) -> str:
        """Commit the index and return the new commit sha."""
        self._run(
            "-c", f"user.name={author_name}",
            "-c", f"user.email={author_email}",
            "-c", "commit.gpgsign=false",
            "commit", "--quiet", "-m", message,
        )
        return self._run("rev-parse", "HEAD")

    def push(self, remote: str = DEFAULT_REMOTE, ref: str = "HEAD") -> None:
        self._run("push", "--quiet", remote, ref)


def detect_branch(path: Path | None = None) -> str | None:
    """Branch checked out in *path* (the cwd by default), or None outside git."""
    try:
        branch = GitRepository(path or Path.cwd()).current_branch()
    except TagPropagatorError:
        return None
    # Detached HEAD
    return None if branch == "HEAD" else branch
