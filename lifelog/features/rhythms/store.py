"""
In-memory collaborators for the rhythm engine: rhythm registry, activity record
store and the seeded encouragement library. Day-level, no DB concerns.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from lifelog.core.config import settings
from lifelog.core.errors import NotFoundError
from lifelog.features.rhythms.day_aggregator import local_date, validate_record
from lifelog.models.rhythm import (
    ActivityRecord,
    DateRange,
    EncouragementContext,
    EncouragementEntry,
    JourneyStage,
    RhythmDefinition,
    TierName,
)

_MATCH_FIELDS = (
    ("match_category", "category"),
    ("match_subcategory", "subcategory"),
    ("match_name", "name"),
    ("match_type", "type"),
)


def record_matches(rhythm: RhythmDefinition, record: ActivityRecord) -> bool:
    """Every criterion the rhythm sets must equal the record's field."""
    for rhythm_field, record_field in _MATCH_FIELDS:
        wanted = getattr(rhythm, rhythm_field)
        if wanted is not None and getattr(record, record_field) != wanted:
            return False
    return True


class RhythmRegistry:
    def __init__(self) -> None:
        self._rhythms: Dict[str, RhythmDefinition] = {}

    def add(self, rhythm: RhythmDefinition) -> RhythmDefinition:
        self._rhythms[rhythm.rhythm_id] = rhythm
        return rhythm

    def define(
        self,
        rhythm_id: str,
        name: str = "",
        *,
        daily_threshold_seconds: Optional[int] = None,
        timezone: Optional[str] = None,
        **criteria: Optional[str],
    ) -> RhythmDefinition:
        """Register a rhythm, taking threshold and timezone from settings when omitted."""
        if daily_threshold_seconds is None:
            daily_threshold_seconds = settings.RHYTHM_DEFAULT_THRESHOLD_SECONDS
        return self.add(
            RhythmDefinition(
                rhythm_id=rhythm_id,
                name=name,
                daily_threshold_seconds=daily_threshold_seconds,
                timezone=timezone or settings.RHYTHM_DEFAULT_TIMEZONE,
                **criteria,
            )
        )

    def get(self, rhythm_id: str) -> RhythmDefinition:
        try:
            return self._rhythms[rhythm_id]
        except KeyError:
            raise NotFoundError(f"Rhythm not found: {rhythm_id}") from None


class InMemoryRecordStore:
    """Read side of the record store. Records are validated on the way in."""

    def __init__(self, records: Iterable[ActivityRecord] = ()) -> None:
        self._records: List[ActivityRecord] = []
        self.add_many(records)

    def add(self, record: ActivityRecord) -> ActivityRecord:
        record = validate_record(record)
        self._records.append(record)
        return record

    def add_many(self, records: Iterable[ActivityRecord]) -> None:
        for record in records:
            self.add(record)

    def fetch(self, rhythm: RhythmDefinition, date_range: DateRange) -> List[ActivityRecord]:
        tz = rhythm.tz
        matching = [
            r for r in self._records
            if record_matches(rhythm, r) and local_date(r.occurred_at, tz) in date_range
        ]
        return sorted(matching, key=lambda r: r.occurred_at)


class InMemoryEncouragementRepository:
    def __init__(self, entries: Iterable[EncouragementEntry] = ()) -> None:
        self._entries: List[EncouragementEntry] = list(entries)

    def list_messages(
        self,
        stage: JourneyStage,
        context: EncouragementContext,
        tier_name: Optional[TierName] = None,
    ) -> Sequence[EncouragementEntry]:
        return [
            e for e in self._entries
            if e.stage == stage
            and e.context == context
            and (tier_name is None or e.tier_name == tier_name)
        ]


def _entry(message_id, stage, context, message, tier_name=None, activity_type="general"):
    return EncouragementEntry(
        message_id=message_id,
        stage=stage,
        context=context,
        message=message,
        tier_name=TierName(tier_name) if tier_name else None,
        activity_type=activity_type,
    )


DEFAULT_ENCOURAGEMENTS: tuple[EncouragementEntry, ...] = (
    # Starting stage (week 1)
    _entry("start-general-1", "starting", "general", "Every journey begins with a single breath"),
    _entry("start-general-2", "starting", "general", "You've taken the first step. That's often the hardest one."),
    _entry("start-general-mind", "starting", "general", "A moment of stillness is a gift to yourself", activity_type="mindfulness"),
    _entry("start-tier-weekly", "starting", "tier_achieved", "You showed up this week. That matters.", "weekly"),
    _entry("start-tier-few", "starting", "tier_achieved", "Three days! You're building something real.", "few_times"),
    _entry("start-nudge", "starting", "mid_week_nudge", "Just {remaining} more to make this week count"),
    # Building stage (weeks 2-3)
    _entry("build-general-1", "building", "general", "A practice is forming. You can feel it."),
    _entry("build-general-mind", "building", "general", "The cushion remembers you now", activity_type="mindfulness"),
    _entry("build-tier-most", "building", "tier_achieved", "Most days is more than most people.", "most_days"),
    _entry("build-tier-daily", "building", "tier_achieved", "A perfect week. Let that sink in.", "daily"),
    _entry("build-milestone-1", "building", "streak_milestone", "Two weeks. The habit is taking root."),
    _entry("build-milestone-mind", "building", "streak_milestone", "14 days of presence. Your mind is changing.", activity_type="mindfulness"),
    _entry("build-nudge", "building", "mid_week_nudge", "{remaining} more times this week to hit {tier}"),
    # Becoming stage (4+ weeks consistent)
    _entry("become-general-mind", "becoming", "general", "You're becoming a meditator", activity_type="mindfulness"),
    _entry("become-general-1", "becoming", "general", "This is who you are now"),
    _entry("become-general-2", "becoming", "general", "The practice practices you now"),
    _entry("become-tier-daily", "becoming", "tier_achieved", "Daily practice. You're living the life.", "daily"),
    _entry("become-tier-most", "becoming", "tier_achieved", "Consistency without rigidity. That's wisdom.", "most_days"),
    _entry("become-milestone-1", "becoming", "streak_milestone", "Look how far you've come"),
    _entry("become-milestone-mind", "becoming", "streak_milestone", "A month of mindfulness. You are different now.", activity_type="mindfulness"),
    _entry("become-nudge", "becoming", "mid_week_nudge", "Keep the momentum going. {remaining} to go"),
)
