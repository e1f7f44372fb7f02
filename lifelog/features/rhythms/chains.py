"""
Chain Calculator

A chain is a run of consecutive weeks at or above a tier. Every tier keeps its
own chain: a week that misses "daily" can still extend "most_days".

Rules:
- Chains begin at the rhythm's first matching activity; earlier empty weeks
  are not failures.
- Missing weeks inside the history count as zero-day weeks.
- The in-progress week extends a chain once it satisfies the tier; until then
  it is pending and neither extends nor breaks it.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Sequence

from lifelog.features.rhythms.tiers import TIERS
from lifelog.models.rhythm import ChainStat, Tier, WeekSummary

WEEK = timedelta(days=7)


def _has_activity(week: WeekSummary) -> bool:
    return week.record_count > 0 or week.days_completed > 0


def active_history(weeks: Sequence[WeekSummary]) -> list[WeekSummary]:
    """
    History from the first active week onward, gaps filled with zero weeks.

    Input must be oldest first.
    """
    ordered = list(weeks)
    for week in ordered:
        week.validate()
    for earlier, later in zip(ordered, ordered[1:]):
        if later.week_start <= earlier.week_start:
            raise ValueError("week history must be strictly increasing by week_start")

    first = next((i for i, w in enumerate(ordered) if _has_activity(w)), None)
    if first is None:
        return []

    filled: list[WeekSummary] = []
    for week in ordered[first:]:
        if filled:
            expected = filled[-1].week_start + WEEK
            while expected < week.week_start:
                filled.append(WeekSummary(week_start=expected, days_completed=0))
                expected += WEEK
        filled.append(week)
    return filled


def chain_runs(weeks: Sequence[WeekSummary], tier: Tier) -> list[int]:
    """Running chain length for ``tier`` after each week of an active history."""
    runs = []
    counter = 0
    for week in weeks:
        if tier.is_satisfied_by(week.days_completed):
            counter += 1
        elif not week.in_progress:
            counter = 0
        runs.append(counter)
    return runs


def calculate_chains(weeks: Sequence[WeekSummary], tiers: Sequence[Tier] = TIERS) -> list[ChainStat]:
    """
    One ChainStat per tier, in Tier Table order. O(weeks x tiers).

    ``current`` is the run still live at the newest week, ``longest`` the best
    run anywhere in the window.
    """
    history = active_history(weeks)
    stats = []
    for tier in tiers:
        runs = chain_runs(history, tier)
        stats.append(
            ChainStat(
                tier=tier,
                current=runs[-1] if runs else 0,
                longest=max(runs, default=0),
            )
        )
    return stats
