"""Release commands — show tier selection, plan, and propagate image tags."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from tag_propagator.client.errors import PUBLISH_FAILED_EXIT, NotificationError, error_handler
from tag_propagator.client.notify import Notifier
from tag_propagator.commands._common import (
    BranchOpt,
    CloneDirOpt,
    ConfigRepoOpt,
    FormatOpt,
    ProfileOpt,
    RegistryOpt,
    ServicesOpt,
    TagOpt,
    TierOpt,
    log_console,
    make_settings,
    resolve_branch,
    resolve_tiers,
)
from tag_propagator.config.models import ReleaseSettings
from tag_propagator.models.result import PropagationReport
from tag_propagator.models.service import image_repository
from tag_propagator.output.formatter import output
from tag_propagator.output.tables import status_cell
from tag_propagator.propagation.manifest import render_update
from tag_propagator.propagation.propagator import Propagator
from tag_propagator.utils.diff import show_diff

app = typer.Typer(name="release", help="Plan and propagate release image tags.")
console = Console()


def _notify(settings: ReleaseSettings, report: PropagationReport) -> None:
    if not settings.notify_url:
        return
    try:
        with Notifier(settings.notify_url, timeout=settings.timeout) as notifier:
            notifier.send(report)
    except NotificationError as exc:
        log_console.print(f"[yellow]Warning: could not send report: {escape(str(exc))}[/]")


@app.command()
@error_handler
def tiers(
    branch: BranchOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Show which tiers a branch propagates to."""
    resolved = resolve_branch(branch)
    selected = resolve_tiers(None, resolved)
    data = {"branch": resolved, "tiers": [t.value for t in selected]}
    output(data, fmt, kv=True, title="Tier selection")


@app.command()
@error_handler
def plan(
    branch: BranchOpt = None,
    tier: TierOpt = None,
    tag: TagOpt = None,
    services: ServicesOpt = None,
    show_diffs: Annotated[bool, typer.Option("--diff", help="Show manifest diffs")] = False,
    profile: ProfileOpt = None,
    config_repo: ConfigRepoOpt = None,
    registry: RegistryOpt = None,
    clone_dir: CloneDirOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Dry run: list the manifests a propagation would change."""
    settings = make_settings(profile, config_repo, registry, services, tag, clone_dir)
    selected = resolve_tiers(tier, resolve_branch(branch))
    propagator = Propagator(settings, console=log_console)
    updates = propagator.plan(None, settings.tag, selected)

    columns = ["Tier", "Service", "Current", "New", "Status", "Path"]
    rows = [
        [
            u.tier.value,
            u.short_name,
            u.previous_tag or "",
            u.new_tag or "",
            status_cell(u.status),
            u.path,
        ]
        for u in updates
    ]
    output(updates, fmt, columns=columns, rows=rows, title=f"Plan: {settings.tag}")

    if show_diffs:
        for u in updates:
            if u.new_tag is None or u.previous_tag == u.new_tag:
                continue
            image = image_repository(settings.registry, u.service)
            before, after = render_update(settings.clone_dir / u.path, image, settings.tag)
            show_diff(u.path, before, after, console)


@app.command()
@error_handler
def propagate(
    branch: BranchOpt = None,
    tier: TierOpt = None,
    tag: TagOpt = None,
    services: ServicesOpt = None,
    allow_publish_failure: Annotated[
        bool,
        typer.Option(
            "--allow-publish-failure",
            help="Exit 0 even if a push fails (the failure is still reported)",
        ),
    ] = False,
    profile: ProfileOpt = None,
    config_repo: ConfigRepoOpt = None,
    registry: RegistryOpt = None,
    clone_dir: CloneDirOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Write the tag into each service's overlay, commit, and push."""
    settings = make_settings(profile, config_repo, registry, services, tag, clone_dir)
    resolved = resolve_branch(branch)
    propagator = Propagator(settings, console=log_console)
    report = propagator.propagate_branch(
        None, settings.tag, resolved, tiers=resolve_tiers(tier, resolved),
    )

    columns = ["Tier", "Status", "Updated", "Skipped", "Commit"]
    rows = [
        [
            r.tier.value,
            status_cell(r.status),
            ", ".join(u.short_name for u in r.updated) or "-",
            ", ".join(u.short_name for u in r.skipped) or "-",
            (r.commit or "")[:12],
        ]
        for r in report.results
    ]
    output(report.summary(), fmt, columns=columns, rows=rows, title=f"Propagated {settings.tag}")
    _notify(settings, report)

    if report.failed:
        if allow_publish_failure:
            log_console.print("[yellow]Push failed; continuing because of --allow-publish-failure.[/]")
            return
        raise typer.Exit(PUBLISH_FAILED_EXIT)
