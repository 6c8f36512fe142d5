"""Service configuration and logging setup."""
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "VALIDATION_"


class ValidationServiceOptions(BaseModel):
    """Options for a ValidationService instance."""
    enable_caching: bool = Field(default=True, description="Memoize results by content key")
    cache_ttl_seconds: float = Field(default=300.0, ge=0, description="Cache entry time-to-live")
    enable_real_time_validation: bool = Field(
        default=True, description="Route real-time requests through the scheduler"
    )
    validation_throttle_seconds: float = Field(
        default=1.0, ge=0, description="Quiescence window for real-time requests"
    )
    log_level: str = Field(default="INFO", description="Root log level")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "ValidationServiceOptions":
        """
        Build options from the environment (and a .env file if present).

        Reads VALIDATION_ENABLE_CACHING, VALIDATION_CACHE_TTL_SECONDS,
        VALIDATION_ENABLE_REAL_TIME, VALIDATION_THROTTLE_SECONDS and
        VALIDATION_LOG_LEVEL. Unset variables keep their defaults.
        """
        load_dotenv(env_file)

        env_map = {
            "enable_caching": "ENABLE_CACHING",
            "cache_ttl_seconds": "CACHE_TTL_SECONDS",
            "enable_real_time_validation": "ENABLE_REAL_TIME",
            "validation_throttle_seconds": "THROTTLE_SECONDS",
            "log_level": "LOG_LEVEL",
        }
        values = {}
        for option, suffix in env_map.items():
            raw = os.getenv(ENV_PREFIX + suffix)
            if raw is not None and raw.strip():
                values[option] = raw.strip()

        # pydantic coerces "true"/"0"/"2.5" into the declared field types
        return cls(**values)


def setup_logging(level: str = "INFO"):
    """Configure root logging for the service process."""
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Keep server access logs at warning unless debugging
    logging.getLogger('uvicorn.access').setLevel(
        logging.DEBUG if log_level == logging.DEBUG else logging.WARNING
    )
