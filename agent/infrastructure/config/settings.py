"""Engine configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.models.engine_state import TerminationPolicy


class Settings(BaseSettings):
    """Settings loaded from ``BUTLER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BUTLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Engine
    # ==========================================================================
    max_iterations: int = Field(
        default=10,
        ge=1,
        description="Completion calls an engine may make before it is exhausted",
    )
    exhaustion_policy: TerminationPolicy = Field(
        default=TerminationPolicy.SILENT,
        description="silent: stop without an event; fail: raise IterationsExhaustedError",
    )
    unknown_directive_policy: TerminationPolicy = Field(
        default=TerminationPolicy.SILENT,
        description="silent: log and skip the tag; fail: raise UnknownDirectiveError",
    )

    # ==========================================================================
    # Persistence
    # ==========================================================================
    conversations_dir: str = Field(
        default="./conversations",
        description="Directory used by the file conversation store",
    )

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: str = "INFO"
    log_format: str = Field(default="json", description="json or console")
    service_name: str = "butler-engine"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
