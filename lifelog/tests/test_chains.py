"""
Chain Calculator guardrails

Verify:
1. Independence: each tier keeps its own chain
2. Liveness: current is only the run reaching the newest week
3. Chains begin at first activity, not before
4. The in-progress week extends a chain once satisfied and never breaks it
"""

from datetime import timedelta

from lifelog.features.rhythms.chains import active_history, calculate_chains, chain_runs
from lifelog.features.rhythms.tiers import get_tier
from lifelog.models.rhythm import TierName, WeekSummary


def _by_tier(stats):
    return {s.tier.name: (s.current, s.longest) for s in stats}


class TestChainIndependence:
    def test_four_day_week_resets_most_days_only(self, weeks_from):
        weeks = weeks_from([5, 5, 4, 5, 5, 5])

        most_days = chain_runs(weeks, get_tier(TierName.MOST_DAYS))
        few_times = chain_runs(weeks, get_tier(TierName.FEW_TIMES))

        assert most_days == [1, 2, 0, 1, 2, 3]
        assert few_times == [1, 2, 3, 4, 5, 6]

        stats = _by_tier(calculate_chains(weeks))
        assert stats[TierName.MOST_DAYS] == (3, 3)
        assert stats[TierName.FEW_TIMES] == (6, 6)
        assert stats[TierName.WEEKLY] == (6, 6)
        assert stats[TierName.DAILY] == (0, 0)

    def test_one_good_week_extends_every_tier(self, weeks_from):
        stats = _by_tier(calculate_chains(weeks_from([7])))
        assert set(stats.values()) == {(1, 1)}

    def test_stats_follow_tier_table_order(self, weeks_from):
        names = [s.tier.name for s in calculate_chains(weeks_from([3]))]
        assert names == [TierName.DAILY, TierName.MOST_DAYS, TierName.FEW_TIMES, TierName.WEEKLY]


class TestChainLiveness:
    def test_current_is_zero_when_newest_week_fails(self, weeks_from):
        stats = _by_tier(calculate_chains(weeks_from([3, 3, 1])))
        assert stats[TierName.FEW_TIMES] == (0, 2)
        assert stats[TierName.WEEKLY] == (3, 3)

    def test_longest_survives_later_breaks(self, weeks_from):
        stats = _by_tier(calculate_chains(weeks_from([5, 5, 5, 5, 0, 5])))
        assert stats[TierName.MOST_DAYS] == (1, 4)


class TestChainStart:
    def test_weeks_before_first_activity_are_not_failures(self, weeks_from):
        weeks = weeks_from([0, 0, 3, 3])
        assert len(active_history(weeks)) == 2
        assert _by_tier(calculate_chains(weeks))[TierName.FEW_TIMES] == (2, 2)

    def test_week_with_records_but_no_complete_day_counts(self, weeks_from):
        weeks = weeks_from([0, 3])
        weeks[0].record_count = 2
        assert chain_runs(active_history(weeks), get_tier(TierName.FEW_TIMES)) == [0, 1]

    def test_no_activity_at_all_gives_zero_chains(self, weeks_from):
        stats = calculate_chains(weeks_from([0, 0, 0]))
        assert all((s.current, s.longest) == (0, 0) for s in stats)
        assert all((s.current, s.longest) == (0, 0) for s in calculate_chains([]))

    def test_missing_weeks_count_as_zero_weeks(self, weeks_from):
        first, second = weeks_from([3, 3])
        later = WeekSummary(week_start=second.week_start + timedelta(weeks=3), days_completed=3, record_count=3)
        history = active_history([first, second, later])

        assert [w.days_completed for w in history] == [3, 3, 0, 0, 3]
        assert _by_tier(calculate_chains([first, second, later]))[TierName.FEW_TIMES] == (1, 2)


class TestInProgressWeek:
    def test_unsatisfied_current_week_is_pending(self, weeks_from):
        stats = _by_tier(calculate_chains(weeks_from([3, 3, 1], in_progress_last=True)))
        assert stats[TierName.FEW_TIMES] == (2, 2)
        assert stats[TierName.WEEKLY] == (3, 3)

    def test_empty_current_week_keeps_chains(self, weeks_from):
        stats = _by_tier(calculate_chains(weeks_from([5, 5, 0], in_progress_last=True)))
        assert stats[TierName.MOST_DAYS] == (2, 2)

    def test_satisfied_current_week_extends_chain(self, weeks_from):
        stats = _by_tier(calculate_chains(weeks_from([3, 3, 3], in_progress_last=True)))
        assert stats[TierName.FEW_TIMES] == (3, 3)
