import logging
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import ConfigDict

from lifelog.core.errors import ConfigurationError
from lifelog.models.rhythm import resolve_timezone


class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Rhythm chains (v0.3.0+)
    RHYTHM_DEFAULT_THRESHOLD_SECONDS: int = 360  # 6 minutes per day
    RHYTHM_DEFAULT_TIMEZONE: str = "UTC"  # IANA zone name or fixed offset
    RHYTHM_LOOKBACK_WEEKS: int = 104  # ~2 years of chain history
    RHYTHM_MAX_LOOKBACK_WEEKS: int = 520
    RHYTHM_REGRESSION_INACTIVE_WEEKS: int = 4
    RHYTHM_BECOMING_CHAIN_WEEKS: int = 4

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def _rhythm_problems(cfg) -> list[str]:
    problems = []
    if getattr(cfg, "RHYTHM_DEFAULT_THRESHOLD_SECONDS", 0) < 0:
        problems.append("RHYTHM_DEFAULT_THRESHOLD_SECONDS must be >= 0")

    zone = getattr(cfg, "RHYTHM_DEFAULT_TIMEZONE", None)
    try:
        resolve_timezone(zone or "")
    except ConfigurationError:
        problems.append(f"RHYTHM_DEFAULT_TIMEZONE is not an IANA zone or UTC offset: {zone!r}")

    lookback = getattr(cfg, "RHYTHM_LOOKBACK_WEEKS", 0)
    max_lookback = getattr(cfg, "RHYTHM_MAX_LOOKBACK_WEEKS", 0)
    if not 1 <= lookback <= max_lookback:
        problems.append(f"RHYTHM_LOOKBACK_WEEKS must be between 1 and {max_lookback}")

    if getattr(cfg, "RHYTHM_REGRESSION_INACTIVE_WEEKS", 0) < 1:
        problems.append("RHYTHM_REGRESSION_INACTIVE_WEEKS must be >= 1")
    if getattr(cfg, "RHYTHM_BECOMING_CHAIN_WEEKS", 0) < 1:
        problems.append("RHYTHM_BECOMING_CHAIN_WEEKS must be >= 1")
    return problems


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate rhythm engine configuration.

    In strict mode raise ConfigurationError; otherwise emit warnings only.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("lifelog")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    problems = _rhythm_problems(cfg)
    if problems:
        message = f"Invalid configuration: {'; '.join(problems)}"
        if strict_mode:
            raise ConfigurationError(message)
        log.warning(message)
        return False

    return True
