"""
Progress Composer

Pure, repeatable calculation of a rhythm's progress as of an instant.
Records are fetched once, up front, by a caller-supplied function; nothing is
persisted or cached here.

Order matters:
1. days (Day Aggregator) -> weeks
2. current week (Weekly Tier Calculator) and chains (Chain Calculator)
3. journey stage, which depends on the full week history
4. encouragement, keyed by stage and the *current* week's situation
"""

from __future__ import annotations

import math
import random
import time
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

from lifelog.core.config import settings
from lifelog.core.errors import ValidationError
from lifelog.core.logging import latency_bucket_ms, log_event
from lifelog.features.rhythms.chains import calculate_chains
from lifelog.features.rhythms.day_aggregator import aggregate_days, local_date, parse_instant, validate_record
from lifelog.features.rhythms.encouragement import (
    STAGE_FALLBACKS,
    EncouragementRepository,
    render_message,
    select_encouragement,
)
from lifelog.features.rhythms.journey import classify_journey
from lifelog.features.rhythms.tiers import DAYS_PER_WEEK, TIERS
from lifelog.features.rhythms.weekly import calculate_week, summarize_weeks, week_end_for, week_start_for
from lifelog.models.rhythm import (
    ActivityRecord,
    ChainStat,
    DateRange,
    DayStatus,
    EncouragementContext,
    RhythmDefinition,
    RhythmProgress,
    RhythmTotals,
    Tier,
    TierName,
    WeekProgress,
)

FetchRecords = Callable[[RhythmDefinition, DateRange], Iterable[ActivityRecord]]

# Chain lengths (weeks) that earn a streak_milestone message
MILESTONE_WEEKS = (2, 4, 8, 12, 26, 52)


def _check_lookback(lookback_weeks: Optional[int]) -> int:
    if lookback_weeks is None:
        return settings.RHYTHM_LOOKBACK_WEEKS
    if isinstance(lookback_weeks, bool) or not isinstance(lookback_weeks, int):
        raise ValidationError(f"lookback_weeks must be an integer, got {lookback_weeks!r}")
    max_weeks = settings.RHYTHM_MAX_LOOKBACK_WEEKS
    if not 1 <= lookback_weeks <= max_weeks:
        raise ValidationError(f"lookback_weeks must be between 1 and {max_weeks}, got {lookback_weeks}")
    return lookback_weeks


def _check_year(year: Optional[int], today: date) -> int:
    if year is None:
        return today.year
    if isinstance(year, bool) or not isinstance(year, int) or year < 1:
        raise ValidationError(f"year must be a positive integer, got {year!r}")
    if year > today.year:
        raise ValidationError(f"year {year} is after as_of ({today.isoformat()})")
    # days[] for an older year would be a scan of its own, outside any lookback window
    earliest = today.year - math.ceil(settings.RHYTHM_MAX_LOOKBACK_WEEKS / 52)
    if year < earliest:
        raise ValidationError(f"year must be {earliest} or later for as_of {today.isoformat()}, got {year}")
    return year


def calculate_totals(records: Sequence[ActivityRecord], days: Sequence[DayStatus], tz) -> RhythmTotals:
    """Session count, seconds and active weeks/months over the lookback window."""
    complete = [d.date for d in days if d.is_complete]
    return RhythmTotals(
        total_sessions=len(records),
        total_seconds=sum(r.duration_seconds or 0 for r in records),
        first_entry_date=min((local_date(r.occurred_at, tz) for r in records), default=None),
        weeks_active=len({week_start_for(d) for d in complete}),
        months_active=len({(d.year, d.month) for d in complete}),
    )


def choose_context(current_week: WeekProgress, chains: Sequence[ChainStat]) -> Tuple[EncouragementContext, Optional[TierName]]:
    """Situation for the encouragement, judged on the current week only."""
    achieved = current_week.achieved_tier
    if achieved is not None:
        chain = next((c for c in chains if c.tier.name == achieved.name), None)
        if chain is not None and chain.current in MILESTONE_WEEKS:
            return "streak_milestone", None
        return "tier_achieved", achieved.name
    if current_week.nudge_message:
        return "mid_week_nudge", None
    return "general", None


def _nudge_values(current_week: WeekProgress) -> dict:
    best = current_week.best_possible_tier
    if best is None:
        return {}
    return {
        "remaining": max(0, best.min_days_per_week - current_week.days_completed),
        "tier": best.label,
    }


def compute_progress(
    rhythm: RhythmDefinition,
    fetch_records: FetchRecords,
    as_of: Union[datetime, str],
    lookback_weeks: Optional[int] = None,
    *,
    encouragements: EncouragementRepository,
    year: Optional[int] = None,
    last_message_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
    regression_weeks: Optional[int] = None,
    becoming_chain_weeks: Optional[int] = None,
    tiers: Sequence[Tier] = TIERS,
) -> RhythmProgress:
    """
    Compute the full progress view for ``rhythm`` as of ``as_of``.

    Args:
        rhythm: Rhythm definition (threshold and timezone are read from it)
        fetch_records: Called once with the local date range to load
        as_of: tz-aware instant (or ISO-8601 string with offset)
        lookback_weeks: Chain window in weeks, including the current week
        encouragements: Message repository for the selector
        year: Calendar year for ``days``; defaults to the as_of year
        last_message_id: Message shown last time, to avoid an immediate repeat
        rng: Random source for message choice
        regression_weeks: Inactive weeks before the journey stage steps down
        becoming_chain_weeks: few_times chain needed for "becoming"

    Raises:
        ValidationError: malformed timestamps, out-of-range arguments, or
            records dated after as_of.
    """
    started = time.perf_counter()
    try:
        as_of = parse_instant(as_of, "as_of")
        lookback = _check_lookback(lookback_weeks)
        tz = rhythm.tz
        try:
            today = local_date(as_of, tz)
            window_start = week_start_for(today) - timedelta(weeks=lookback - 1)
            window_end = week_end_for(today)
        except OverflowError as exc:
            raise ValidationError(
                f"as_of {as_of.isoformat()} is outside the supported date range for a {lookback}-week window"
            ) from exc
        year = _check_year(year, today)
        year_range = DateRange(date(year, 1, 1), min(date(year, 12, 31), today))
        fetch_range = DateRange(min(window_start, year_range.start), today)

        records = []
        for record in fetch_records(rhythm, fetch_range):
            record = validate_record(record)
            day = local_date(record.occurred_at, tz)
            if day > today:
                raise ValidationError(
                    f"record at {record.occurred_at.isoformat()} is after as_of {as_of.isoformat()}"
                )
            if day >= fetch_range.start:
                records.append(record)
    except ValidationError as exc:
        log_event(
            "warning",
            "rhythm.progress.rejected",
            rhythm_id=rhythm.rhythm_id,
            event_type="rhythm.progress",
            error_code=exc.code,
            extra={"reason": exc.message},
        )
        raise

    days = aggregate_days(
        records,
        DateRange(fetch_range.start, window_end),
        tz,
        rhythm.daily_threshold_seconds,
    )
    window_days = [d for d in days if d.date >= window_start]
    weeks = summarize_weeks(window_days, today, tiers)

    current_week = calculate_week(window_days[-DAYS_PER_WEEK:], today, tiers)
    chains = calculate_chains(weeks, tiers)
    if regression_weeks is None:
        regression_weeks = settings.RHYTHM_REGRESSION_INACTIVE_WEEKS
    if becoming_chain_weeks is None:
        becoming_chain_weeks = settings.RHYTHM_BECOMING_CHAIN_WEEKS
    stage = classify_journey(
        weeks,
        regression_weeks=regression_weeks,
        becoming_chain_weeks=becoming_chain_weeks,
        tiers=tiers,
    )

    context, tier_name = choose_context(current_week, chains)
    selection = select_encouragement(
        encouragements,
        stage,
        context,
        tier_name=tier_name,
        activity_type=rhythm.activity_type,
        last_message_id=last_message_id,
        rng=rng,
    )
    if selection.available:
        message = render_message(selection.message, **_nudge_values(current_week))
    else:
        message = STAGE_FALLBACKS[stage]

    progress = RhythmProgress(
        rhythm_id=rhythm.rhythm_id,
        as_of=as_of,
        current_week=current_week,
        chains=chains,
        days=[d for d in days if d.date in year_range],
        totals=calculate_totals(
            [r for r in records if local_date(r.occurred_at, tz) >= window_start],
            [d for d in window_days if d.date <= today],
            tz,
        ),
        journey_stage=stage,
        encouragement=message,
        encouragement_id=selection.message_id,
        encouragement_context=selection.context,
        weeks=weeks,
    )

    log_event(
        "info",
        "rhythm.progress.computed",
        rhythm_id=rhythm.rhythm_id,
        event_type="rhythm.progress",
        extra={
            "window_start": window_start.isoformat(),
            "record_count": len(records),
            "journey_stage": stage,
            "latency_bucket": latency_bucket_ms((time.perf_counter() - started) * 1000),
        },
    )
    return progress
