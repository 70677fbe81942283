"""Release tag propagation into the GitOps configuration repository."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape

from tag_propagator.client.errors import ConfigurationError, GitCommandError, ValidationError
from tag_propagator.client.git import GitRepository
from tag_propagator.config.constants import DEFAULT_TAG
from tag_propagator.config.models import ReleaseSettings
from tag_propagator.models.result import (
    ManifestStatus,
    ManifestUpdate,
    PropagationReport,
    PropagationResult,
    PublishStatus,
)
from tag_propagator.models.service import ServiceRef, image_repository, parse_services
from tag_propagator.models.tier import Tier, tiers_for_branch
from tag_propagator.propagation.manifest import manifest_path, read_image_tag, set_image_tag


def commit_message(tier: Tier, tag: str, updates: Sequence[ManifestUpdate]) -> str:
    lines = [f"Update {tier.value} image tags to {tag}", ""]
    lines += [f"- {u.short_name}: {u.previous_tag or '(unset)'} -> {u.new_tag}" for u in updates]
    return "\n".join(lines)


class Propagator:
    """Writes an image tag into each service's overlay and publishes the commit."""

    def __init__(self, settings: ReleaseSettings, console: Console | None = None) -> None:
        self.settings = settings
        self.console = console or Console()

    def _clone(self) -> GitRepository:
        if not self.settings.config_repo:
            raise ConfigurationError("No config repository configured.")
        self.console.print(
            f"[dim]Cloning {self.settings.config_repo} into {self.settings.clone_dir}[/]"
        )
        return GitRepository.clone_fresh(
            self.settings.config_repo,
            self.settings.clone_dir,
            ssh_key=self.settings.ssh_key,
        )

    def _services(self, services: Sequence[str] | None) -> list[ServiceRef]:
        return parse_services(services if services is not None else self.settings.services)

    def _check_tag(self, tag: str) -> None:
        if not tag:
            raise ValidationError("Image tag must not be empty")
        if tag == DEFAULT_TAG:
            self.console.print(
                f"[yellow]Warning: propagating the mutable tag '{tag}'; "
                "rollbacks cannot pin a previous image.[/]"
            )

    def _update_manifest(
        self,
        repo: GitRepository,
        service: ServiceRef,
        tag: str,
        tier: Tier,
        *,
        write: bool,
    ) -> ManifestUpdate:
        path = manifest_path(repo.path, service.short_name, tier, self.settings.manifest_file)
        rel = str(path.relative_to(repo.path))
        base = {
            "service": service.identifier,
            "short_name": service.short_name,
            "tier": tier,
            "path": rel,
        }
        if not path.is_file():
            self.console.print(
                f"[yellow]Skipping {service.short_name}: {rel} not found[/]"
            )
            return ManifestUpdate(
                **base, status=ManifestStatus.SKIPPED, message="manifest not found",
            )

        image = image_repository(self.settings.registry, service.identifier)
        if write:
            previous, changed = set_image_tag(path, image, tag)
        else:
            previous = read_image_tag(path, image)
            changed = previous != tag
        if not changed:
            return ManifestUpdate(
                **base,
                status=ManifestStatus.UNCHANGED,
                previous_tag=previous,
                new_tag=tag,
                message="tag already set",
            )
        if write:
            repo.add(path)
            self.console.print(f"Updated {rel}: {previous or '(unset)'} -> {tag}")
        return ManifestUpdate(
            **base, status=ManifestStatus.UPDATED, previous_tag=previous, new_tag=tag,
        )

    def propagate(
        self,
        services: Sequence[str] | None,
        tag: str,
        tier: Tier,
    ) -> PropagationResult:
        """Set *tag* for every service in *tier*, then commit and push once.

        Missing manifests are skipped. An empty commit is a no-op. A failed
        push is reported as ``publish-failed`` rather than raised.
        """
        refs = self._services(services)
        self._check_tag(tag)
        self.console.print(f"[bold]Propagating {tag} to {tier.value}[/]")
        repo = self._clone()
        result = PropagationResult(tier=tier, tag=tag)
        for service in refs:
            result.updates.append(self._update_manifest(repo, service, tag, tier, write=True))

        if not repo.has_staged_changes():
            self.console.print(f"[dim]{tier.value}: no changes to commit[/]")
            return result

        result.commit = repo.commit(
            commit_message(tier, tag, result.updated),
            self.settings.author_name,
            self.settings.author_email,
        )
        self.console.print(f"[green]Committed {result.commit[:12]} ({tier.value})[/]")
        try:
            repo.push()
        except GitCommandError as exc:
            result.status = PublishStatus.PUBLISH_FAILED
            result.error = str(exc)
            self.console.print(f"[red]Push failed for {tier.value}: {escape(str(exc))}[/]")
            return result
        result.status = PublishStatus.PUBLISHED
        self.console.print(f"[green]Pushed {tier.value} update[/]")
        return result

    def propagate_branch(
        self,
        services: Sequence[str] | None,
        tag: str,
        branch: str | None,
        tiers: Sequence[Tier] | None = None,
    ) -> PropagationReport:
        """Propagate into every tier selected by *branch*, one commit per tier.

        An explicit *tiers* list replaces the branch-based selection.
        """
        report = PropagationReport(branch=branch, tag=tag)
        for tier in tiers if tiers is not None else tiers_for_branch(branch):
            report.results.append(self.propagate(services, tag, tier))
        return report

    def plan(
        self,
        services: Sequence[str] | None,
        tag: str,
        tiers: Sequence[Tier],
    ) -> list[ManifestUpdate]:
        """Report what ``propagate`` would change, without committing."""
        refs = self._services(services)
        if not tag:
            raise ValidationError("Image tag must not be empty")
        repo = self._clone()
        return [
            self._update_manifest(repo, service, tag, tier, write=False)
            for tier in tiers
            for service in refs
        ]
