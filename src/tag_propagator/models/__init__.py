"""Pydantic data models for services, tiers, and propagation results."""

from tag_propagator.models.result import (
    ManifestStatus,
    ManifestUpdate,
    PropagationReport,
    PropagationResult,
    PublishStatus,
)
from tag_propagator.models.service import ServiceRef, compose_image_ref, parse_services, short_name
from tag_propagator.models.tier import Tier, parse_tier, tiers_for_branch

__all__ = [
    "ManifestStatus",
    "ManifestUpdate",
    "PropagationReport",
    "PropagationResult",
    "PublishStatus",
    "ServiceRef",
    "Tier",
    "compose_image_ref",
    "parse_services",
    "parse_tier",
    "short_name",
    "tiers_for_branch",
]
