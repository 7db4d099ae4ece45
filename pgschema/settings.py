from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """
    Descriptor configuration.

    Values are loaded from environment variables (and a local .env file)
    via Settings.from_env().
    """

    # --- Rendering ---
    default_sql_type: str = "text"

    # --- Validation ---
    strict_validation: bool = False

    # --- Observability ---
    metrics_enabled: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        def getenv_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None or raw.strip() == "":
                return default
            val = raw.strip().lower()
            if val in _TRUE:
                return True
            if val in _FALSE:
                return False
            return default

        raw_type = os.getenv("PGSCHEMA_DEFAULT_SQL_TYPE", "").strip()

        return cls(
            default_sql_type=raw_type or cls.default_sql_type,
            strict_validation=getenv_bool("PGSCHEMA_STRICT", cls.strict_validation),
            metrics_enabled=getenv_bool("PGSCHEMA_METRICS", cls.metrics_enabled),
            log_level=os.getenv("PGSCHEMA_LOG_LEVEL", cls.log_level).strip().upper()
            or cls.log_level,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(settings: Settings | None = None) -> None:
    """Opt-in root logging setup; the library itself never adds handlers."""
    s = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, s.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
