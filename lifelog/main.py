import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from lifelog.api import health, rhythms
from lifelog.core.config import settings, validate_config
from lifelog.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from lifelog.core.logging import configure_logging
from lifelog.core.middleware.request_id import RequestIdMiddleware

configure_logging(settings.ENV)
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("lifelog")
    logger.info("Starting lifelog backend...")
    try:
        yield
    finally:
        logging.getLogger("lifelog").info("Stopping lifelog backend...")


app = FastAPI(title="Lifelog - Backend", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(rhythms.router, tags=["rhythms"])
app.include_router(health.root_router, tags=["health"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("lifelog.main:app", host="0.0.0.0", port=8000)
