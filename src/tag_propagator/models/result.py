"""Outcome models for a propagation run."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from tag_propagator.models.tier import Tier


class ManifestStatus(str, Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


class PublishStatus(str, Enum):
    """How a tier's changes reached (or failed to reach) the remote."""

    NO_OP = "no-op"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish-failed"


class ManifestUpdate(BaseModel):
    """What happened to one (service, tier) manifest."""

    service: str
    short_name: str
    tier: Tier
    path: str
    status: ManifestStatus
    previous_tag: str | None = None
    new_tag: str | None = None
    message: str = ""


class PropagationResult(BaseModel):
    """Result of propagating one tag into one tier."""

    tier: Tier
    tag: str
    updates: list[ManifestUpdate] = Field(default_factory=list)
    status: PublishStatus = PublishStatus.NO_OP
    commit: str | None = None
    error: str | None = None

    @property
    def updated(self) -> list[ManifestUpdate]:
        return [u for u in self.updates if u.status is ManifestStatus.UPDATED]

    @property
    def skipped(self) -> list[ManifestUpdate]:
        return [u for u in self.updates if u.status is ManifestStatus.SKIPPED]

    @property
    def succeeded(self) -> bool:
        return self.status is not PublishStatus.PUBLISH_FAILED


class PropagationReport(BaseModel):
    """All tier results of one run, in the order they were executed."""

    branch: str | None = None
    tag: str
    results: list[PropagationResult] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(not r.succeeded for r in self.results)

    def summary(self) -> dict[str, Any]:
        """Machine-readable form used for JSON/YAML output and notifications."""
        return {
            "branch": self.branch,
            "tag": self.tag,
            "failed": self.failed,
            "tiers": [
                {
                    "tier": r.tier.value,
                    "status": r.status.value,
                    "commit": r.commit,
                    "error": r.error,
                    "updated": [u.short_name for u in r.updated],
                    "skipped": [u.short_name for u in r.skipped],
                }
                for r in self.results
            ],
        }
