"""
Journey Stage Classifier

Identity over streaks: the stage only moves forward on activity, and only
steps back after a full run of inactive weeks. One weak week never regresses.

- starting: first week on the journey
- building: weeks 2+ until the few_times chain is long enough
- becoming: few_times chain reached ``becoming_chain_weeks``
"""

from __future__ import annotations

from typing import Optional, Sequence

from lifelog.features.rhythms.chains import active_history
from lifelog.features.rhythms.tiers import TIERS
from lifelog.models.rhythm import JOURNEY_STAGES, JourneyStage, Tier, TierName, WeekSummary

DEFAULT_REGRESSION_WEEKS = 4
DEFAULT_BECOMING_CHAIN_WEEKS = 4

_RANK = {stage: rank for rank, stage in enumerate(JOURNEY_STAGES)}


def _anchor_tier(tiers: Sequence[Tier]) -> Tier:
    for tier in tiers:
        if tier.name == TierName.FEW_TIMES:
            return tier
    raise ValueError("tier table has no few_times tier")


def _step_down(stage: JourneyStage) -> JourneyStage:
    return JOURNEY_STAGES[max(0, _RANK[stage] - 1)]


def classify_journey(
    weeks: Sequence[WeekSummary],
    *,
    regression_weeks: int = DEFAULT_REGRESSION_WEEKS,
    becoming_chain_weeks: int = DEFAULT_BECOMING_CHAIN_WEEKS,
    tiers: Sequence[Tier] = TIERS,
) -> JourneyStage:
    """
    Replay the week history (oldest first) through the stage state machine.

    Each completed run of ``regression_weeks`` zero-day weeks steps the stage
    down one level. Dropping back to starting restarts the week count at the
    next active week. An in-progress week with nothing completed yet is
    skipped.
    """
    if regression_weeks < 1:
        raise ValueError("regression_weeks must be >= 1")
    if becoming_chain_weeks < 1:
        raise ValueError("becoming_chain_weeks must be >= 1")
    anchor = _anchor_tier(tiers)

    stage: JourneyStage = "starting"
    weeks_on_journey: Optional[int] = None
    chain = 0
    idle = 0

    for week in active_history(weeks):
        if week.days_completed == 0:
            if week.in_progress:
                continue
            idle += 1
            chain = 0
            if weeks_on_journey is not None:
                weeks_on_journey += 1
            if idle % regression_weeks == 0:
                stage = _step_down(stage)
                if stage == "starting":
                    weeks_on_journey = None
            continue

        idle = 0
        weeks_on_journey = 1 if weeks_on_journey is None else weeks_on_journey + 1
        if anchor.is_satisfied_by(week.days_completed):
            chain += 1
        elif not week.in_progress:
            chain = 0

        if chain >= becoming_chain_weeks:
            candidate: JourneyStage = "becoming"
        elif weeks_on_journey >= 2:
            candidate = "building"
        else:
            candidate = "starting"
        if _RANK[candidate] > _RANK[stage]:
            stage = candidate

    return stage
