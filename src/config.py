import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from errors import ConfigError

LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"
DECIMAL_PLACES_ENV = "PAYMENTS_DECIMAL_PLACES"


@dataclass(frozen=True)
class EngineConfig:
    log_level: int = logging.WARNING
    decimal_places: int = 4

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build config from PAYMENTS_* environment variables, falling back to defaults."""
        if environ is None:
            environ = os.environ

        log_level = cls.log_level
        level_name = environ.get(LOG_LEVEL_ENV, "").strip()
        if level_name:
            resolved = logging.getLevelName(level_name.upper())
            if not isinstance(resolved, int):
                raise ConfigError(f"{LOG_LEVEL_ENV}: unknown log level {level_name!r}")
            log_level = resolved

        decimal_places = cls.decimal_places
        places = environ.get(DECIMAL_PLACES_ENV, "").strip()
        if places:
            try:
                decimal_places = int(places)
            except ValueError:
                raise ConfigError(f"{DECIMAL_PLACES_ENV}: expected an integer, got {places!r}") from None
            if decimal_places < 0:
                raise ConfigError(f"{DECIMAL_PLACES_ENV}: must not be negative")

        return cls(log_level=log_level, decimal_places=decimal_places)
