"""Weekly Tier Calculator: achieved tier, best reachable tier and the nudge."""

from datetime import date, timedelta

import pytest

from lifelog.core.errors import ValidationError
from lifelog.features.rhythms.weekly import calculate_week, summarize_weeks, week_start_for
from lifelog.models.rhythm import DayStatus, TierName

MONDAY = date(2025, 1, 6)
THURSDAY = MONDAY + timedelta(days=3)
SUNDAY = MONDAY + timedelta(days=6)


def test_full_week_is_daily_without_nudge(week_of):
    progress = calculate_week(week_of(MONDAY, [1] * 7), SUNDAY)

    assert progress.days_completed == 7
    assert progress.achieved_tier.name == TierName.DAILY
    assert progress.days_remaining == 0
    assert progress.nudge_message is None


def test_four_by_thursday_can_still_reach_daily(week_of):
    progress = calculate_week(week_of(MONDAY, [1, 1, 1, 1, 0, 0, 0]), THURSDAY)

    assert progress.days_completed == 4
    assert progress.achieved_tier.name == TierName.FEW_TIMES
    assert progress.days_remaining == 3
    assert progress.best_possible_tier.name == TierName.DAILY
    assert progress.nudge_message == "3 more times to reach Daily"


def test_incomplete_today_still_counts_as_remaining(week_of):
    progress = calculate_week(week_of(MONDAY, [1, 1, 1, 0, 0, 0, 0]), THURSDAY)

    assert progress.days_remaining == 4
    assert progress.best_possible_tier.name == TierName.DAILY
    assert progress.nudge_message == "4 more times to reach Daily"


def test_missed_days_lower_best_possible_without_blame(week_of):
    # Wednesday, two misses already: Daily is out of reach, Most Days is not
    progress = calculate_week(week_of(MONDAY, [0, 1, 0, 0, 0, 0, 0]), MONDAY + timedelta(days=2))

    assert progress.days_remaining == 5
    assert progress.best_possible_tier.name == TierName.MOST_DAYS
    assert progress.nudge_message == "4 more times to reach Most Days"


def test_singular_wording_for_one_more_time(week_of):
    progress = calculate_week(week_of(MONDAY, [0] * 7), SUNDAY)

    assert progress.achieved_tier is None
    assert progress.best_possible_tier.name == TierName.WEEKLY
    assert progress.nudge_message == "1 more time to reach Weekly"


def test_past_week_has_no_remaining_days_and_no_nudge(week_of):
    progress = calculate_week(week_of(MONDAY, [1, 1, 0, 0, 0, 0, 0]), SUNDAY + timedelta(days=3))

    assert progress.days_remaining == 0
    assert progress.achieved_tier.name == TierName.WEEKLY
    assert progress.best_possible_tier == progress.achieved_tier
    assert progress.nudge_message is None


def test_empty_past_week_is_silent(week_of):
    progress = calculate_week(week_of(MONDAY, [0] * 7), SUNDAY + timedelta(days=1))

    assert progress.achieved_tier is None
    assert progress.best_possible_tier is None
    assert progress.nudge_message is None


def test_to_dict_uses_tier_names(week_of):
    payload = calculate_week(week_of(MONDAY, [1, 1, 1, 1, 0, 0, 0]), THURSDAY).to_dict()

    assert payload["startDate"] == "2025-01-06"
    assert payload["endDate"] == "2025-01-12"
    assert payload["achievedTier"] == "few_times"
    assert payload["bestPossibleTier"] == "daily"


class TestMalformedWeek:
    def test_week_must_have_seven_days(self, week_of):
        with pytest.raises(ValidationError):
            calculate_week(week_of(MONDAY, [1] * 6), SUNDAY)

    def test_week_must_start_monday(self, week_of):
        with pytest.raises(ValidationError):
            calculate_week(week_of(MONDAY + timedelta(days=1), [1] * 7), SUNDAY)

    def test_week_days_must_be_consecutive(self, week_of):
        days = week_of(MONDAY, [1] * 7)
        days[3] = DayStatus(date=MONDAY + timedelta(days=10))
        with pytest.raises(ValidationError):
            calculate_week(days, SUNDAY)


def test_week_start_is_monday():
    assert week_start_for(date(2025, 1, 12)) == MONDAY  # Sunday
    assert week_start_for(MONDAY) == MONDAY


def test_summarize_weeks_groups_and_flags_current_week(week_of):
    days = week_of(MONDAY, [1, 1, 0, 0, 0, 0, 0]) + week_of(MONDAY + timedelta(weeks=1), [1, 0, 0, 0, 0, 0, 0])
    weeks = summarize_weeks(days, MONDAY + timedelta(weeks=1, days=2))

    assert [w.week_start for w in weeks] == [MONDAY, MONDAY + timedelta(weeks=1)]
    assert [w.days_completed for w in weeks] == [2, 1]
    assert [w.in_progress for w in weeks] == [False, True]
    assert weeks[0].achieved_tier.name == TierName.WEEKLY
    assert weeks[0].record_count == 2
