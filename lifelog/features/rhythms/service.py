"""
Rhythm Service

Binds the host-side stores to the pure progress composer. Holds no derived
state: every call recomputes from the record window.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Optional, Union

from lifelog.features.rhythms.composer import compute_progress
from lifelog.features.rhythms.encouragement import EncouragementRepository
from lifelog.features.rhythms.store import (
    DEFAULT_ENCOURAGEMENTS,
    InMemoryEncouragementRepository,
    InMemoryRecordStore,
    RhythmRegistry,
)
from lifelog.models.rhythm import RhythmProgress


class RhythmService:
    """Progress lookups for registered rhythms."""

    def __init__(
        self,
        registry: Optional[RhythmRegistry] = None,
        records: Optional[InMemoryRecordStore] = None,
        encouragements: Optional[EncouragementRepository] = None,
        rng: Optional[random.Random] = None,
    ):
        self.registry = registry or RhythmRegistry()
        self.records = records or InMemoryRecordStore()
        self.encouragements = encouragements or InMemoryEncouragementRepository(DEFAULT_ENCOURAGEMENTS)
        self._rng = rng

    def get_progress(
        self,
        rhythm_id: str,
        *,
        as_of: Union[datetime, str, None] = None,
        year: Optional[int] = None,
        lookback_weeks: Optional[int] = None,
        last_message_id: Optional[str] = None,
    ) -> RhythmProgress:
        rhythm = self.registry.get(rhythm_id)
        return compute_progress(
            rhythm,
            self.records.fetch,
            as_of if as_of is not None else datetime.now(timezone.utc),
            lookback_weeks,
            encouragements=self.encouragements,
            year=year,
            last_message_id=last_message_id,
            rng=self._rng,
        )


# Singleton service used by routes
rhythm_service = RhythmService()
