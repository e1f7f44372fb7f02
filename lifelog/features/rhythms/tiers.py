"""
Tier Table

Tiers are flexible weekly frequency targets that bend, not break:
- Daily: 7 days per week
- Most Days: 5-6 days per week
- Few Times: 3-4 days per week
- Weekly: 1-2 days per week

Zero completed days is "no tier yet", never a failure tier.
The table is validated once, at import time.
"""

from __future__ import annotations

from typing import Optional, Sequence

from lifelog.core.errors import ConfigurationError
from lifelog.models.rhythm import Tier, TierName

DAYS_PER_WEEK = 7


def validate_tier_table(tiers: Sequence[Tier]) -> None:
    """
    Ensure tiers partition 1..7 exactly, ordered from most to least demanding.

    0 days is reserved for "no tier". Raises ConfigurationError otherwise.
    """
    if not tiers:
        raise ConfigurationError("tier table is empty")

    names = [t.name for t in tiers]
    if len(set(names)) != len(names):
        raise ConfigurationError(f"duplicate tier names: {names}")

    expected_max = DAYS_PER_WEEK
    for tier in tiers:
        if tier.min_days_per_week > tier.max_days_per_week:
            raise ConfigurationError(f"tier {tier.name.value} has min > max")
        if tier.max_days_per_week != expected_max:
            kind = "overlap" if tier.max_days_per_week > expected_max else "gap"
            raise ConfigurationError(
                f"tier table {kind} at {tier.name.value}: max {tier.max_days_per_week}, expected {expected_max}"
            )
        expected_max = tier.min_days_per_week - 1

    if expected_max != 0:
        raise ConfigurationError(f"tier table leaves days 1..{expected_max} uncovered")


TIERS: tuple[Tier, ...] = (
    Tier(TierName.DAILY, 7, 7, "Daily", "7×", "7 days per week"),
    Tier(TierName.MOST_DAYS, 5, 6, "Most Days", "5-6×", "5-6 days per week"),
    Tier(TierName.FEW_TIMES, 3, 4, "Few Times", "3-4×", "3-4 days per week"),
    Tier(TierName.WEEKLY, 1, 2, "Weekly", "1-2×", "1-2 days per week"),
)

validate_tier_table(TIERS)

_BY_NAME = {t.name: t for t in TIERS}


def get_tier(name: TierName | str) -> Tier:
    return _BY_NAME[TierName(name)]


def tier_for_days(days_completed: int, tiers: Sequence[Tier] = TIERS) -> Optional[Tier]:
    """Highest tier whose minimum is met, or None for zero days."""
    if days_completed < 0:
        raise ValueError(f"days_completed must be >= 0, got {days_completed}")
    for tier in tiers:
        if days_completed >= tier.min_days_per_week:
            return tier
    return None


def best_possible_tier(days_completed: int, days_remaining: int, tiers: Sequence[Tier] = TIERS) -> Optional[Tier]:
    """Best tier still reachable if every remaining day were completed."""
    return tier_for_days(min(DAYS_PER_WEEK, days_completed + days_remaining), tiers)
