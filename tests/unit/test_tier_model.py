"""Tests for tier selection."""

import pytest

from tag_propagator.client.errors import ValidationError
from tag_propagator.models.tier import Tier, parse_tier, tiers_for_branch


class TestTiersForBranch:
    def test_feature_branch_dev_only(self):
        assert tiers_for_branch("feature/x") == [Tier.DEV]

    def test_staging_branch(self):
        assert tiers_for_branch("staging") == [Tier.DEV, Tier.STAGING]

    def test_main_branch(self):
        assert tiers_for_branch("main") == [Tier.DEV, Tier.PROD]

    @pytest.mark.parametrize("branch", ["master", "Main", "release/staging", "origin/main", "prod", ""])
    def test_only_exact_names_promote(self, branch):
        assert tiers_for_branch(branch) == [Tier.DEV]

    def test_unknown_branch(self):
        assert tiers_for_branch(None) == [Tier.DEV]

    def test_dev_always_first(self):
        for branch in ("main", "staging", "develop"):
            assert tiers_for_branch(branch)[0] is Tier.DEV


class TestParseTier:
    def test_values(self):
        assert parse_tier("dev") is Tier.DEV
        assert parse_tier(" PROD ") is Tier.PROD

    def test_unknown(self):
        with pytest.raises(ValidationError, match="Unknown tier 'qa'"):
            parse_tier("qa")

    def test_tier_is_str(self):
        assert Tier.STAGING == "staging"
