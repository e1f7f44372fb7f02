"""
Rhythm domain model.

A rhythm answers: "Is this becoming part of who I am?"
Everything here is derived per call from raw activity records; nothing is
persisted or cached by the engine. Day-level, local-calendar, never a red zero.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lifelog.core.errors import ConfigurationError

JourneyStage = Literal["starting", "building", "becoming"]
EncouragementContext = Literal["general", "tier_achieved", "streak_milestone", "mid_week_nudge"]

JOURNEY_STAGES: tuple[JourneyStage, ...] = ("starting", "building", "becoming")
ENCOURAGEMENT_CONTEXTS: tuple[EncouragementContext, ...] = (
    "general",
    "tier_achieved",
    "streak_milestone",
    "mid_week_nudge",
)

DEFAULT_THRESHOLD_SECONDS = 360

_OFFSET_RE = re.compile(r"^(?:UTC)?([+-])(\d{2}):?(\d{2})$")


def resolve_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name or a fixed offset like ``+05:30`` / ``UTC-08:00``."""
    if not name:
        raise ConfigurationError("timezone is required")
    if name in ("UTC", "Z"):
        return timezone.utc
    match = _OFFSET_RE.match(name)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        if delta >= timedelta(hours=24):
            raise ConfigurationError(f"timezone offset out of range: {name!r}")
        return timezone(-delta if sign == "-" else delta)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"unknown timezone: {name!r}") from exc


class TierName(str, Enum):
    DAILY = "daily"
    MOST_DAYS = "most_days"
    FEW_TIMES = "few_times"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class Tier:
    """A weekly frequency bracket: days completed per week in [min, max]."""

    name: TierName
    min_days_per_week: int
    max_days_per_week: int
    label: str
    short_label: str
    description: str

    def is_satisfied_by(self, days_completed: int) -> bool:
        return days_completed >= self.min_days_per_week


@dataclass(frozen=True)
class RhythmDefinition:
    """
    Read-only rhythm configuration owned by the host product.

    Matching criteria are applied by the record store, never by the engine.
    """

    rhythm_id: str
    name: str = ""
    match_category: Optional[str] = None
    match_subcategory: Optional[str] = None
    match_name: Optional[str] = None
    match_type: Optional[str] = None
    daily_threshold_seconds: int = DEFAULT_THRESHOLD_SECONDS
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not self.rhythm_id:
            raise ConfigurationError("rhythm_id required")
        if self.daily_threshold_seconds < 0:
            raise ConfigurationError(
                f"daily_threshold_seconds must be >= 0, got {self.daily_threshold_seconds}"
            )
        resolve_timezone(self.timezone)

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.timezone)

    @property
    def activity_type(self) -> str:
        return self.match_category or "general"


@dataclass(frozen=True)
class ActivityRecord:
    """Projection of a stored entry: when it happened and how long it lasted."""

    occurred_at: datetime
    duration_seconds: Optional[int] = None
    record_id: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of local calendar dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"DateRange end {self.end} before start {self.start}")

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range((self.end - self.start).days + 1)]


@dataclass
class DayStatus:
    date: date
    total_seconds: int = 0
    is_complete: bool = False
    record_count: int = 0

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "totalSeconds": self.total_seconds,
            "isComplete": self.is_complete,
            "recordCount": self.record_count,
        }


@dataclass
class WeekSummary:
    """
    One local week (Monday start).

    Attributes:
        week_start: Monday of the week
        days_completed: Days meeting the threshold, 0..7
        achieved_tier: Highest tier reached, None for zero days
        record_count: Matching records in the week (activity, complete or not)
        in_progress: True for the week containing the as-of date
    """

    week_start: date
    days_completed: int
    achieved_tier: Optional[Tier] = None
    record_count: int = 0
    in_progress: bool = False

    def validate(self) -> None:
        if not 0 <= self.days_completed <= 7:
            raise ValueError(f"days_completed out of range: {self.days_completed}")
        if self.week_start.weekday() != 0:
            raise ValueError(f"week_start must be a Monday: {self.week_start}")


@dataclass
class WeekProgress:
    start_date: date
    end_date: date
    days_completed: int
    achieved_tier: Optional[Tier]
    best_possible_tier: Optional[Tier]
    days_remaining: int
    nudge_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "daysCompleted": self.days_completed,
            "achievedTier": self.achieved_tier.name.value if self.achieved_tier else None,
            "bestPossibleTier": self.best_possible_tier.name.value if self.best_possible_tier else None,
            "daysRemaining": self.days_remaining,
            "nudgeMessage": self.nudge_message,
        }


@dataclass
class ChainStat:
    tier: Tier
    current: int = 0
    longest: int = 0

    def to_dict(self) -> dict:
        return {
            "tier": self.tier.name.value,
            "label": self.tier.label,
            "current": self.current,
            "longest": self.longest,
        }


@dataclass
class RhythmTotals:
    total_sessions: int = 0
    total_seconds: int = 0
    first_entry_date: Optional[date] = None
    weeks_active: int = 0
    months_active: int = 0

    @property
    def total_hours(self) -> float:
        return round(self.total_seconds / 3600, 2)

    def to_dict(self) -> dict:
        return {
            "totalSessions": self.total_sessions,
            "totalSeconds": self.total_seconds,
            "totalHours": self.total_hours,
            "firstEntryDate": self.first_entry_date.isoformat() if self.first_entry_date else None,
            "weeksActive": self.weeks_active,
            "monthsActive": self.months_active,
        }


@dataclass(frozen=True)
class EncouragementEntry:
    message_id: str
    stage: JourneyStage
    context: EncouragementContext
    message: str
    tier_name: Optional[TierName] = None
    activity_type: str = "general"
    is_active: bool = True


@dataclass(frozen=True)
class EncouragementSelection:
    """Outcome of a selection. ``message`` is None for the "no message available" sentinel."""

    message_id: Optional[str]
    message: Optional[str]
    context: EncouragementContext

    @property
    def available(self) -> bool:
        return self.message is not None


@dataclass
class RhythmProgress:
    """
    Full progress view of one rhythm as of an instant.

    Attributes:
        rhythm_id: Rhythm identifier
        as_of: Instant the view was computed for (tz-aware)
        current_week: The in-progress week's tier detail and nudge
        chains: One ChainStat per tier, Tier Table order
        days: Per-day data for the requested year (visualization)
        totals: Aggregate totals over the fetched window
        journey_stage: starting / building / becoming
        encouragement: Message shown to the user (always neutral-to-positive)
        encouragement_id: Chosen message id, None for a stage fallback
        encouragement_context: Context the message was chosen for
    """

    rhythm_id: str
    as_of: datetime
    current_week: WeekProgress
    chains: list[ChainStat]
    days: list[DayStatus]
    totals: RhythmTotals
    journey_stage: JourneyStage
    encouragement: str
    encouragement_id: Optional[str] = None
    encouragement_context: EncouragementContext = "general"
    weeks: list[WeekSummary] = field(default_factory=list, repr=False)

    def chain_for(self, tier_name: TierName) -> ChainStat:
        for chain in self.chains:
            if chain.tier.name == tier_name:
                return chain
        raise KeyError(tier_name)

    def to_dict(self) -> dict:
        """Serialize to dict for JSON response."""
        return {
            "rhythmId": self.rhythm_id,
            "asOf": self.as_of.isoformat(),
            "currentWeek": self.current_week.to_dict(),
            "chains": [c.to_dict() for c in self.chains],
            "days": [d.to_dict() for d in self.days],
            "totals": self.totals.to_dict(),
            "journeyStage": self.journey_stage,
            "encouragement": self.encouragement,
            "encouragementId": self.encouragement_id,
            "encouragementContext": self.encouragement_context,
        }
