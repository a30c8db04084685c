"""Centralized configuration — all environment variables in one place.

Import `settings` from this module instead of calling os.getenv() directly.
Loaded once on first import; reads from environment at that time.

Usage:
    from config import settings
    print(settings.database_url)
    print(settings.quiz_time_limit_seconds)
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    """All environment variables used by the Memory Guide service."""

    # ---- Server ----
    port: int = 8000
    admin_url: str = ""
    railway_public_domain: str = ""
    log_level: str = ""
    sentry_dsn: str = ""

    # ---- Database ----
    database_url: str = ""  # Required in production

    # ---- Tavus (conversational video) ----
    tavus_api_key: str = ""
    tavus_replica_id: str = ""
    tavus_persona_id: str = ""
    tavus_base_url: str = "https://tavusapi.com/v2"
    tavus_timeout_seconds: float = 15.0

    # ---- Quiz ----
    quiz_time_limit_seconds: int = 30
    quiz_max_questions: int = 10
    quiz_max_questions_per_memory: int = 4
    quiz_scoring_policy: str = "accuracy_speed"

    @property
    def is_production(self) -> bool:
        return bool(self.railway_public_domain)

    @property
    def tavus_configured(self) -> bool:
        return bool(self.tavus_api_key and self.tavus_replica_id)


@lru_cache(maxsize=1)
def _load_settings() -> Settings:
    """Load settings from environment. Cached after first call."""

    def _env(key: str, default: str = "") -> str:
        return os.environ.get(key, default)

    return Settings(
        # Server
        port=int(_env("PORT", "8000")),
        admin_url=_env("ADMIN_URL"),
        railway_public_domain=_env("RAILWAY_PUBLIC_DOMAIN"),
        log_level=_env("LOG_LEVEL"),
        sentry_dsn=_env("SENTRY_DSN"),
        # Database
        database_url=_env("DATABASE_URL"),
        # Tavus
        tavus_api_key=_env("TAVUS_API_KEY"),
        tavus_replica_id=_env("TAVUS_REPLICA_ID"),
        tavus_persona_id=_env("TAVUS_PERSONA_ID"),
        tavus_base_url=_env("TAVUS_BASE_URL", "https://tavusapi.com/v2"),
        tavus_timeout_seconds=float(_env("TAVUS_TIMEOUT_SECONDS", "15")),
        # Quiz
        quiz_time_limit_seconds=int(_env("QUIZ_TIME_LIMIT_SECONDS", "30")),
        quiz_max_questions=int(_env("QUIZ_MAX_QUESTIONS", "10")),
        quiz_max_questions_per_memory=int(_env("QUIZ_MAX_QUESTIONS_PER_MEMORY", "4")),
        quiz_scoring_policy=_env("QUIZ_SCORING_POLICY", "accuracy_speed"),
    )


# Module-level accessor, import this
settings = _load_settings()
