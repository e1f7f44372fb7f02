"""
Health API for the lifelog backend.

Liveness plus a readiness check of the rhythm engine configuration.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from lifelog.core.config import settings, validate_config
from lifelog.features.rhythms.tiers import TIERS

root_router = APIRouter(tags=["health"])


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok", "env": settings.ENV}


@root_router.get("/readyz")
def readyz():
    """Readiness: settings valid and tier table loaded."""
    if not validate_config(strict=False):
        return JSONResponse(status_code=503, content={"status": "error", "detail": "invalid rhythm configuration"})
    return {"status": "ok", "tiers": [t.name.value for t in TIERS]}
