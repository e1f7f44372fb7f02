"""
Encouragement Selector

Picks one identity-based message for a journey stage and situation. Selection
is supplementary: an empty pool returns the NO_ENCOURAGEMENT sentinel, never an
exception. The previous message id is passed in by the caller, so repetition
avoidance needs no hidden state.
"""

from __future__ import annotations

import random
from typing import Iterable, Optional, Protocol, Sequence

from lifelog.models.rhythm import (
    ENCOURAGEMENT_CONTEXTS,
    JOURNEY_STAGES,
    EncouragementContext,
    EncouragementEntry,
    EncouragementSelection,
    JourneyStage,
    TierName,
)

NO_ENCOURAGEMENT = EncouragementSelection(message_id=None, message=None, context="general")

STAGE_FALLBACKS: dict[JourneyStage, str] = {
    "starting": "Every journey begins with a single step",
    "building": "A practice is forming",
    "becoming": "This is who you are now",
}


class EncouragementRepository(Protocol):
    def list_messages(
        self,
        stage: JourneyStage,
        context: EncouragementContext,
        tier_name: Optional[TierName] = None,
    ) -> Sequence[EncouragementEntry]:
        """Entries for stage/context; with tier_name, only entries for that tier."""
        ...


class _KeepMissing(dict):
    def __missing__(self, key):
        return "{" + key + "}"


def render_message(template: str, **values) -> str:
    """Fill ``{remaining}``/``{tier}`` style placeholders, leaving unknown ones intact."""
    try:
        return template.format_map(_KeepMissing(values))
    except (ValueError, IndexError):
        return template


def _usable(entries: Iterable[EncouragementEntry], activity_type: str) -> list[EncouragementEntry]:
    active = [e for e in entries if e.is_active]
    preferred = [e for e in active if e.activity_type in (activity_type, "general")]
    return preferred or active


def _candidates(
    repository: EncouragementRepository,
    stage: JourneyStage,
    context: EncouragementContext,
    tier_name: Optional[TierName],
    activity_type: str,
) -> list[EncouragementEntry]:
    if tier_name is not None:
        tiered = _usable(repository.list_messages(stage, context, tier_name), activity_type)
        if tiered:
            return tiered
    untiered = [e for e in repository.list_messages(stage, context) if e.tier_name is None]
    return _usable(untiered, activity_type)


def select_encouragement(
    repository: EncouragementRepository,
    stage: JourneyStage,
    context: EncouragementContext = "general",
    *,
    tier_name: Optional[TierName] = None,
    activity_type: str = "general",
    last_message_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> EncouragementSelection:
    """
    Uniformly random message for (stage, context[, tier]).

    Falls back to the stage's general messages when the context has none.
    With more than one candidate, the message shown last time is skipped.
    """
    if stage not in JOURNEY_STAGES:
        raise ValueError(f"unknown journey stage: {stage!r}")
    if context not in ENCOURAGEMENT_CONTEXTS:
        raise ValueError(f"unknown encouragement context: {context!r}")

    chosen_context: EncouragementContext = context
    pool = _candidates(repository, stage, context, tier_name, activity_type)
    if not pool and context != "general":
        chosen_context = "general"
        pool = _candidates(repository, stage, "general", None, activity_type)
    if not pool:
        return NO_ENCOURAGEMENT

    if last_message_id is not None and len(pool) > 1:
        pool = [e for e in pool if e.message_id != last_message_id] or pool

    entry = (rng or random).choice(pool)
    return EncouragementSelection(message_id=entry.message_id, message=entry.message, context=chosen_context)
