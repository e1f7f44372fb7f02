"""
Rhythm API Endpoints

GET /v1/rhythms/{rhythm_id}/progress: tiers, chains, days, totals, stage, encouragement
"""

from typing import Optional

from fastapi import APIRouter, Query

from lifelog.features.rhythms.service import rhythm_service

router = APIRouter(prefix="/v1/rhythms", tags=["rhythms"])


@router.get("/{rhythm_id}/progress")
def get_rhythm_progress(
    rhythm_id: str,
    as_of: Optional[str] = Query(None, description="ISO-8601 instant with offset; defaults to now"),
    year: Optional[int] = Query(None, description="Calendar year for the days[] heatmap"),
    lookback_weeks: Optional[int] = Query(None, description="Chain window in weeks"),
    last_message_id: Optional[str] = Query(None, description="Encouragement shown last time"),
) -> dict:
    """
    Get calculated progress for a rhythm.

    Returns:
        {
            "data": {
                "rhythmId": "...",
                "currentWeek": {"daysCompleted": 4, "achievedTier": "few_times", ...},
                "chains": [{"tier": "daily", "current": 0, "longest": 2}, ...],
                "days": [{"date": "2025-01-01", "totalSeconds": 600, ...}, ...],
                "totals": {"totalSessions": 42, ...},
                "journeyStage": "building",
                "encouragement": "A practice is forming. You can feel it.",
                "encouragementId": "build-general-1"
            }
        }

    Validation problems surface as 400 validation_error; unknown rhythms as 404.
    """
    progress = rhythm_service.get_progress(
        rhythm_id,
        as_of=as_of,
        year=year,
        lookback_weeks=lookback_weeks,
        last_message_id=last_message_id,
    )
    return {"data": progress.to_dict()}
