# lifelog/conftest.py
import random
import sys
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

import pytest

# Add repo root to PYTHONPATH
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from lifelog.models.rhythm import ActivityRecord, DayStatus, RhythmDefinition, WeekSummary  # noqa: E402

# Monday
WEEK_ONE = date(2025, 1, 6)


@pytest.fixture
def rhythm():
    return RhythmDefinition(
        rhythm_id="rhythm-sit",
        name="Sit quietly",
        match_category="mindfulness",
        daily_threshold_seconds=360,
        timezone="UTC",
    )


@pytest.fixture
def rng():
    return random.Random(7)


@pytest.fixture
def record_on():
    """Build a record at local noon (UTC) on a given date."""

    def _make(day: date, seconds=600, hour: int = 12, **fields):
        fields.setdefault("category", "mindfulness")
        return ActivityRecord(
            occurred_at=datetime.combine(day, time(hour, 0), tzinfo=timezone.utc),
            duration_seconds=seconds,
            **fields,
        )

    return _make


@pytest.fixture
def week_of():
    """Seven DayStatus values starting Monday ``start``; flags mark complete days."""

    def _make(start: date, complete_flags):
        return [
            DayStatus(
                date=start + timedelta(days=i),
                total_seconds=600 if flag else 0,
                is_complete=bool(flag),
                record_count=1 if flag else 0,
            )
            for i, flag in enumerate(complete_flags)
        ]

    return _make


@pytest.fixture
def weeks_from():
    """WeekSummary history, oldest first, from days-completed counts."""

    def _make(counts, start: date = WEEK_ONE, in_progress_last: bool = False):
        weeks = []
        for i, count in enumerate(counts):
            weeks.append(
                WeekSummary(
                    week_start=start + timedelta(weeks=i),
                    days_completed=count,
                    record_count=count,
                    in_progress=in_progress_last and i == len(counts) - 1,
                )
            )
        return weeks

    return _make
