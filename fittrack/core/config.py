import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: Optional[str] = None
    SQLITE_FALLBACK_PATH: str = "fittrack.db"  # used when DATABASE_URL is unset outside production

    # Auth (tokens are issued elsewhere; we only verify them)
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHMS: str = "HS256"  # comma-separated

    # Calendar days are computed in this zone; unset = server local time
    APP_TIMEZONE: Optional[str] = None

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"  # comma-separated

    # Water tracking
    WATER_STREAK_MIN_GLASSES: int = 4
    WATER_MAX_GLASSES: int = 20

    # Listing limits
    RECENT_WORKOUTS_LIMIT: int = 50
    RECENT_MEALS_LIMIT: int = 50
    RECENT_WATER_LIMIT: int = 30

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def jwt_algorithms(self) -> List[str]:
        return [a.strip() for a in self.JWT_ALGORITHMS.split(",") if a.strip()]


settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("fittrack")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "DATABASE_URL",
        "JWT_SECRET",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
