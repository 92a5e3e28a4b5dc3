"""Tier rules"""

import pytest

from bean.services.tier import (
    Tier,
    calculate_tier,
    get_tier_discount,
    get_tier_progress,
    tier_table,
)

class TestCalculateTier:

    @pytest.mark.parametrize("points, expected", [
        (0, Tier.BRONZE),
        (499, Tier.BRONZE),
        (500, Tier.SILVER),
        (1499, Tier.SILVER),
        (1500, Tier.GOLD),
        (2999, Tier.GOLD),
        (3000, Tier.PLATINUM),
        (250000, Tier.PLATINUM),
    ])
    def test_thresholds(self, points, expected):
        assert calculate_tier(points) == expected

    def test_negative_total_is_bronze(self):
        assert calculate_tier(-10) == Tier.BRONZE

    def test_never_goes_down_as_points_grow(self):
        ranks = [list(Tier).index(calculate_tier(points)) for points in range(0, 4000, 50)]
        assert ranks == sorted(ranks)

class TestDiscounts:

    def test_discount_per_tier(self):
        assert get_tier_discount("Bronze") == 0
        assert get_tier_discount("Silver") == 5
        assert get_tier_discount("Gold") == 10
        assert get_tier_discount(Tier.PLATINUM) == 15

    def test_unknown_tier_has_no_discount(self):
        assert get_tier_discount("Diamond") == 0
        assert get_tier_discount(None) == 0

class TestTierProgress:

    def test_progress_towards_next_tier(self):
        progress = get_tier_progress(1200)
        assert progress["tier"] == "Silver"
        assert progress["next_tier"] == "Gold"
        assert progress["next_tier_threshold"] == 1500
        assert progress["points_to_next_tier"] == 300

    def test_top_tier_has_no_next(self):
        progress = get_tier_progress(5000)
        assert progress["tier"] == "Platinum"
        assert progress["discount_percent"] == 15
        assert progress["next_tier"] is None
        assert progress["points_to_next_tier"] is None

    def test_table_lists_tiers_lowest_first(self):
        table = tier_table()
        assert [row["tier"] for row in table] == ["Bronze", "Silver", "Gold", "Platinum"]
        assert [row["min_points"] for row in table] == [0, 500, 1500, 3000]
