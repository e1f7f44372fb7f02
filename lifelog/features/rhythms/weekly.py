"""
Weekly Tier Calculator

Applies the Tier Table to one local week (Monday start) and projects the best
tier still reachable. Also folds a run of DayStatus into WeekSummary history.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import date, timedelta
from typing import Optional, Sequence

from lifelog.core.errors import ValidationError
from lifelog.features.rhythms.tiers import DAYS_PER_WEEK, TIERS, best_possible_tier, tier_for_days
from lifelog.models.rhythm import DayStatus, Tier, WeekProgress, WeekSummary


def week_start_for(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_end_for(day: date) -> date:
    return week_start_for(day) + timedelta(days=DAYS_PER_WEEK - 1)


def _check_week(days: Sequence[DayStatus]) -> date:
    if len(days) != DAYS_PER_WEEK:
        raise ValidationError(f"a week needs {DAYS_PER_WEEK} days, got {len(days)}")
    start = days[0].date
    if start.weekday() != 0:
        raise ValidationError(f"week must start on a Monday, got {start.isoformat()}")
    for offset, day in enumerate(days):
        if day.date != start + timedelta(days=offset):
            raise ValidationError(f"week days must be consecutive, got {day.date.isoformat()} at position {offset}")
    return start


def days_remaining_in_week(days: Sequence[DayStatus], as_of: date) -> int:
    """
    Days still actionable: every later day, plus today if not yet complete.

    A week entirely in the past has none left.
    """
    return sum(1 for d in days if d.date > as_of or (d.date == as_of and not d.is_complete))


def nudge_message(
    days_completed: int,
    achieved: Optional[Tier],
    best_possible: Optional[Tier],
    days_remaining: int,
) -> Optional[str]:
    """
    Forward-looking nudge, or None.

    None when there is nothing better to reach or no day left to act; absence
    is the message, never a negative one.
    """
    if days_remaining <= 0 or best_possible is None or best_possible == achieved:
        return None
    needed = best_possible.min_days_per_week - days_completed
    if needed <= 0:
        return None
    return f"{needed} more {'time' if needed == 1 else 'times'} to reach {best_possible.label}"


def calculate_week(
    days: Sequence[DayStatus],
    as_of: date,
    tiers: Sequence[Tier] = TIERS,
) -> WeekProgress:
    """Tier detail for one week given its 7 DayStatus values (Monday first)."""
    start = _check_week(days)
    completed = sum(1 for d in days if d.is_complete)
    remaining = days_remaining_in_week(days, as_of)
    achieved = tier_for_days(completed, tiers)
    best = best_possible_tier(completed, remaining, tiers)

    return WeekProgress(
        start_date=start,
        end_date=start + timedelta(days=DAYS_PER_WEEK - 1),
        days_completed=completed,
        achieved_tier=achieved,
        best_possible_tier=best,
        days_remaining=remaining,
        nudge_message=nudge_message(completed, achieved, best, remaining),
    )


def summarize_weeks(
    days: Sequence[DayStatus],
    as_of: date,
    tiers: Sequence[Tier] = TIERS,
) -> list[WeekSummary]:
    """
    Fold day statuses into WeekSummary values, oldest first.

    Partial weeks at either edge are summarized from the days present. The
    week containing ``as_of`` is flagged in_progress.
    """
    grouped: "OrderedDict[date, list[DayStatus]]" = OrderedDict()
    for day in sorted(days, key=lambda d: d.date):
        grouped.setdefault(week_start_for(day.date), []).append(day)

    current_week = week_start_for(as_of)
    summaries = []
    for start, week_days in grouped.items():
        completed = sum(1 for d in week_days if d.is_complete)
        summaries.append(
            WeekSummary(
                week_start=start,
                days_completed=completed,
                achieved_tier=tier_for_days(completed, tiers),
                record_count=sum(d.record_count for d in week_days),
                in_progress=start == current_week,
            )
        )
    return summaries
