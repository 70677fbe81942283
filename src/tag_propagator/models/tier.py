"""Environment tiers and branch-based tier selection."""

from __future__ import annotations

from enum import Enum

from tag_propagator.client.errors import ValidationError


class Tier(str, Enum):
    """Deployment environment targeted by an overlay."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


# Branches that promote beyond dev, matched exactly
BRANCH_TIERS: dict[str, Tier] = {
    "staging": Tier.STAGING,
    "main": Tier.PROD,
}


def tiers_for_branch(branch: str | None) -> list[Tier]:
    """Return the tiers a run on *branch* updates, in order.

    Every branch updates ``dev``; ``staging`` adds ``staging`` and ``main``
    adds ``prod``.
    """
    tiers = [Tier.DEV]
    extra = BRANCH_TIERS.get(branch or "")
    if extra is not None:
        tiers.append(extra)
    return tiers


def parse_tier(value: str) -> Tier:
    try:
        return Tier(value.strip().lower())
    except ValueError:
        choices = ", ".join(t.value for t in Tier)
        raise ValidationError(f"Unknown tier '{value}'. Choose from: {choices}") from None
