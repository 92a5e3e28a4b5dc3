"""Loyalty tier rules"""

from typing import Any, Dict, Optional
import enum

class Tier(str, enum.Enum):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"

# Lowest lifetime points for each tier, highest first
TIER_THRESHOLDS = (
    (Tier.PLATINUM, 3000),
    (Tier.GOLD, 1500),
    (Tier.SILVER, 500),
    (Tier.BRONZE, 0),
)

TIER_DISCOUNTS = {
    Tier.BRONZE: 0,
    Tier.SILVER: 5,
    Tier.GOLD: 10,
    Tier.PLATINUM: 15,
}

TIER_ORDER = [Tier.BRONZE, Tier.SILVER, Tier.GOLD, Tier.PLATINUM]

def calculate_tier(total_points_earned: int) -> Tier:
    """Map lifetime points to a tier; anything below 500, negatives included, is Bronze"""
    for tier, threshold in TIER_THRESHOLDS:
        if total_points_earned >= threshold:
            return tier
    return Tier.BRONZE

def get_tier_discount(tier: Any) -> int:
    """Shop discount percentage for a tier; unknown tiers get 0"""
    try:
        return TIER_DISCOUNTS[Tier(tier)]
    except ValueError:
        return 0

def tier_rank(tier: Any) -> int:
    try:
        return TIER_ORDER.index(Tier(tier))
    except ValueError:
        return 0

def next_tier(tier: Tier) -> Optional[Tier]:
    index = TIER_ORDER.index(tier)
    return TIER_ORDER[index + 1] if index + 1 < len(TIER_ORDER) else None

def tier_threshold(tier: Tier) -> int:
    return dict(TIER_THRESHOLDS)[tier]

def get_tier_progress(total_points_earned: int) -> Dict[str, Any]:
    """Current tier, its discount, and how far the next tier is"""
    tier = calculate_tier(total_points_earned)
    upcoming = next_tier(tier)

    return {
        "tier": tier.value,
        "discount_percent": get_tier_discount(tier),
        "total_points_earned": total_points_earned,
        "next_tier": upcoming.value if upcoming else None,
        "next_tier_threshold": tier_threshold(upcoming) if upcoming else None,
        "points_to_next_tier": (
            tier_threshold(upcoming) - max(total_points_earned, 0) if upcoming else None
        ),
    }

def tier_table() -> list:
    return [
        {
            "tier": tier.value,
            "min_points": tier_threshold(tier),
            "discount_percent": TIER_DISCOUNTS[tier],
        }
        for tier in TIER_ORDER
    ]
