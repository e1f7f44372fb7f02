"""
Day Aggregator

Groups matching records by local calendar date, sums durations and decides
per-day completeness. Every date in range is present, including empty ones.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, tzinfo
from typing import Iterable, Union

from lifelog.core.errors import ValidationError
from lifelog.models.rhythm import ActivityRecord, DateRange, DayStatus


def parse_instant(value: Union[datetime, str], field_name: str = "occurred_at") -> datetime:
    """
    Return a tz-aware datetime or raise ValidationError.

    Strings must be ISO-8601 with an explicit offset; naive values are rejected
    rather than guessed.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"{field_name} is not an ISO-8601 timestamp: {value!r}") from exc
    if not isinstance(value, datetime):
        raise ValidationError(f"{field_name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{field_name} must be timezone-aware: {value.isoformat()}")
    return value


def validate_record(record: ActivityRecord) -> ActivityRecord:
    occurred_at = parse_instant(record.occurred_at)
    duration = record.duration_seconds
    if duration is not None:
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise ValidationError(f"duration_seconds must be an integer, got {duration!r}")
        if duration < 0:
            raise ValidationError(f"duration_seconds must be >= 0, got {duration}")
    if occurred_at is record.occurred_at:
        return record
    return ActivityRecord(
        occurred_at=occurred_at,
        duration_seconds=duration,
        record_id=record.record_id,
        category=record.category,
        subcategory=record.subcategory,
        name=record.name,
        type=record.type,
    )


def local_date(instant: datetime, tz: tzinfo) -> date:
    return instant.astimezone(tz).date()


def aggregate_days(
    records: Iterable[ActivityRecord],
    date_range: DateRange,
    tz: tzinfo,
    daily_threshold_seconds: int,
) -> list[DayStatus]:
    """
    One DayStatus per date in ``date_range`` (inclusive), oldest first.

    Missing durations count toward record_count but add nothing, so a
    presence-only match never completes a duration-thresholded day.
    A date with no records is never complete, even at a zero threshold.
    Records outside the range are ignored.
    """
    totals: dict[date, int] = defaultdict(int)
    counts: dict[date, int] = defaultdict(int)

    for record in records:
        record = validate_record(record)
        day = local_date(record.occurred_at, tz)
        if day not in date_range:
            continue
        totals[day] += record.duration_seconds or 0
        counts[day] += 1

    return [
        DayStatus(
            date=day,
            total_seconds=totals.get(day, 0),
            is_complete=counts.get(day, 0) > 0 and totals.get(day, 0) >= daily_threshold_seconds,
            record_count=counts.get(day, 0),
        )
        for day in date_range.days()
    ]
