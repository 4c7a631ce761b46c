"""
lifecycle_orchestrator/core/config.py
Configuration management using Pydantic Settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal


class LifecycleConfig(BaseModel):
    """
    Orchestrator tuning knobs.

    Timeouts are wall-clock seconds for a whole start/stop run and are only
    checked between resolver passes.
    """
    model_config = ConfigDict(frozen=True)

    startup_timeout: float = Field(default=60.0, ge=0.0)
    shutdown_timeout: float = Field(default=30.0, ge=0.0)
    enable_graceful_shutdown: bool = True
    enable_automatic_recovery: bool = True
    max_recovery_attempts: int = Field(default=3, ge=0)


class Settings(BaseSettings):
    """
    Orchestrator Service Configuration
    Environment variables can override these defaults
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    APP_NAME: str = "lifecycle-orchestrator"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False

    # ========================================================================
    # API Settings (status surface)
    # ========================================================================
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8001

    # ========================================================================
    # Lifecycle Settings
    # ========================================================================
    STARTUP_TIMEOUT: float = Field(default=60.0, ge=0.0)
    SHUTDOWN_TIMEOUT: float = Field(default=30.0, ge=0.0)
    ENABLE_GRACEFUL_SHUTDOWN: bool = True
    ENABLE_AUTOMATIC_RECOVERY: bool = True
    MAX_RECOVERY_ATTEMPTS: int = Field(default=3, ge=0)

    # ========================================================================
    # Logging Settings
    # ========================================================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    def to_lifecycle_config(self) -> LifecycleConfig:
        """Build the orchestrator config from environment settings"""
        return LifecycleConfig(
            startup_timeout=self.STARTUP_TIMEOUT,
            shutdown_timeout=self.SHUTDOWN_TIMEOUT,
            enable_graceful_shutdown=self.ENABLE_GRACEFUL_SHUTDOWN,
            enable_automatic_recovery=self.ENABLE_AUTOMATIC_RECOVERY,
            max_recovery_attempts=self.MAX_RECOVERY_ATTEMPTS,
        )


# ============================================================================
# Singleton Pattern - Global Settings Instance
# ============================================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create settings instance (Singleton)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# ============================================================================
# Export
# ============================================================================

__all__ = ["LifecycleConfig", "Settings", "get_settings"]
