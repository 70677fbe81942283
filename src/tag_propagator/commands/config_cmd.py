"""Config commands — manage release profiles."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt

from tag_propagator.client.errors import error_handler
from tag_propagator.client.git import GitRepository
from tag_propagator.commands._common import FormatOpt, _get_manager, split_services
from tag_propagator.config.constants import DEFAULT_SERVICES
from tag_propagator.config.models import ReleaseProfile
from tag_propagator.output.formatter import output

app = typer.Typer(name="config", help="Manage release profiles and CLI configuration.")
console = Console()


def _mask(value: str) -> str:
    return value[:12] + "..." if len(value) > 12 else "***"


@app.command()
@error_handler
def init() -> None:
    """Interactive setup wizard — create your first release profile."""
    mgr = _get_manager()
    console.print("[bold]tag-propagator setup wizard[/]\n")

    name = Prompt.ask("Profile name", default="default")
    config_repo = Prompt.ask("GitOps repository URL (e.g. git@github.com:acme/gitops.git)")
    registry = Prompt.ask("Image registry prefix (e.g. docker.io/acme)")
    services = Prompt.ask("Services (comma-separated)", default=",".join(DEFAULT_SERVICES))
    ssh_key = Prompt.ask("SSH private key for the GitOps repo", default=None)

    profile = ReleaseProfile(
        name=name,
        config_repo=config_repo,
        registry=registry,
        services=split_services(services) or list(DEFAULT_SERVICES),
        ssh_key=ssh_key if ssh_key else None,
    )
    mgr.add_profile(profile)
    console.print(f"\n[green]Profile '{name}' saved and set as default.[/]")
    console.print(f"Config file: {mgr.config_path}")


@app.command()
@error_handler
def add(
    name: Annotated[str, typer.Argument(help="Profile name")],
    config_repo: Annotated[str, typer.Option("--config-repo", "-r", help="GitOps repository URL")],
    registry: Annotated[str, typer.Option("--registry", help="Image registry prefix")],
    services: Annotated[Optional[str], typer.Option("--services", "-s", help="Comma-separated services")] = None,
    clone_dir: Annotated[Optional[str], typer.Option("--clone-dir", help="Local clone directory")] = None,
    manifest_file: Annotated[Optional[str], typer.Option("--manifest-file", help="Overlay manifest file name")] = None,
    default_tag: Annotated[Optional[str], typer.Option("--default-tag", help="Tag used when --tag is omitted")] = None,
    ssh_key: Annotated[Optional[str], typer.Option("--ssh-key", help="SSH private key for git")] = None,
    notify_url: Annotated[Optional[str], typer.Option("--notify-url", help="Webhook for run reports")] = None,
    set_default: Annotated[bool, typer.Option("--default", help="Set as default profile")] = False,
) -> None:
    """Add a release profile."""
    mgr = _get_manager()
    fields = {
        "services": split_services(services),
        "clone_dir": clone_dir,
        "manifest_file": manifest_file,
        "default_tag": default_tag,
        "ssh_key": ssh_key,
        "notify_url": notify_url,
    }
    profile = ReleaseProfile(
        name=name,
        config_repo=config_repo,
        registry=registry,
        **{k: v for k, v in fields.items() if v is not None},
    )
    mgr.add_profile(profile)
    if set_default:
        mgr.set_default(name)
    console.print(f"[green]Profile '{name}' added.[/]")


@app.command("list")
@error_handler
def list_profiles(fmt: FormatOpt = "table") -> None:
    """List all configured profiles."""
    mgr = _get_manager()
    profiles = mgr.config.profiles
    if not profiles:
        console.print("[yellow]No profiles configured. Run 'tag-propagator config init' to get started.[/]")
        return

    default = mgr.config.default_profile
    columns = ["Name", "Config Repo", "Registry", "Services", "Default"]
    rows = []
    for name, p in profiles.items():
        is_default = "*" if name == default else ""
        rows.append([name, p.config_repo, p.registry, len(p.services), is_default])

    output(
        {"profiles": [p.model_dump(exclude_none=True) for p in profiles.values()]},
        fmt,
        columns=columns,
        rows=rows,
        title="Release Profiles",
    )


@app.command()
@error_handler
def show(
    name: Annotated[str, typer.Argument(help="Profile name")],
    fmt: FormatOpt = "table",
) -> None:
    """Show profile details."""
    mgr = _get_manager()
    profile = mgr.get_profile(name)
    if not profile:
        console.print(f"[red]Profile '{name}' not found.[/]")
        raise typer.Exit(1)

    data = profile.model_dump(exclude_none=True)
    # Webhook URLs often embed a token
    if "notify_url" in data:
        data["notify_url"] = _mask(data["notify_url"])
    if "ssh_key" in data:
        data["ssh_key"] = "***"

    output(data, fmt, kv=True, title=f"Profile: {name}")


@app.command("set-default")
@error_handler
def set_default(
    name: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default release profile."""
    mgr = _get_manager()
    if mgr.set_default(name):
        console.print(f"[green]Default profile set to '{name}'.[/]")
    else:
        console.print(f"[red]Profile '{name}' not found.[/]")
        raise typer.Exit(1)


@app.command()
@error_handler
def test(
    name: Annotated[Optional[str], typer.Argument(help="Profile name (uses default if omitted)")] = None,
) -> None:
    """Check that the profile's GitOps repository is reachable."""
    mgr = _get_manager()
    settings = mgr.resolve_release(profile_name=name)
    console.print(f"Testing access to [bold]{settings.config_repo}[/]...")
    branches = GitRepository.ls_remote(settings.config_repo, ssh_key=settings.ssh_key)
    console.print(f"[green]Reachable![/] {len(branches)} branch(es): {', '.join(branches)}")


@app.command()
@error_handler
def remove(
    name: Annotated[str, typer.Argument(help="Profile name to remove")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation")] = False,
) -> None:
    """Remove a release profile."""
    mgr = _get_manager()
    if not mgr.get_profile(name):
        console.print(f"[red]Profile '{name}' not found.[/]")
        raise typer.Exit(1)

    if not force:
        if not Confirm.ask(f"Remove profile '{name}'?"):
            console.print("Cancelled.")
            return

    mgr.remove_profile(name)
    console.print(f"[green]Profile '{name}' removed.[/]")
