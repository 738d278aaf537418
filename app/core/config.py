# python
# app/core/config.py
"""Configuration settings for the Project Tracker API.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import AnyHttpUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class StoreBackendEnum(str, Enum):
    sqlalchemy = "sqlalchemy"
    postgrest = "postgrest"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Project Tracker API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Row Store Settings =====
    store_backend: StoreBackendEnum = Field(
        default=StoreBackendEnum.sqlalchemy, description="Remote row-store implementation"
    )
    projects_table: str = Field(default="projects", description="Row-store table name")
    store_timeout: float = Field(default=10.0, description="Row-store call timeout in seconds")

    # ===== Database Settings (sqlalchemy backend) =====
    database_url: str | None = Field(
        default="sqlite+aiosqlite:///./projects.db", description="Database connection URL"
    )
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== Supabase / PostgREST (postgrest backend) =====
    supabase_url: AnyHttpUrl | None = Field(default=None, description="Supabase project URL")
    supabase_key: str | None = Field(default=None, description="Supabase API key")

    # ===== Collection Behaviour =====
    serialize_writes: bool = Field(
        default=False, description="Serialize concurrent writes to the same project id"
    )
    reconcile_on_missing: bool = Field(
        default=False, description="Re-fetch the collection when a write targets a missing id"
    )
    view_cache_size: int = Field(default=64, description="Maximum memoized derived views")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://localhost:8080,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(self.allowed_origins, str):
            return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return self.allowed_origins if isinstance(self.allowed_origins, list) else []

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.simple, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def postgrest_url(self) -> str:
        if not self.supabase_url:
            return ""
        return f"{str(self.supabase_url).rstrip('/')}/rest/v1"

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            return lv
        return v

    @field_validator("view_cache_size")
    @classmethod
    def validate_view_cache_size(cls, v):
        if v < 1:
            raise ValueError("View cache size must be at least 1")
        return v

    @field_validator("store_timeout")
    @classmethod
    def validate_store_timeout(cls, v):
        if v <= 0:
            raise ValueError("Store timeout must be positive")
        return v

    @model_validator(mode="after")
    def set_computed_fields(self):
        if self.is_testing and self.test_database_url:
            self.database_url = self.test_database_url
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings(config: Settings | None = None):
        config = config or settings
        errors = []
        if config.store_backend == StoreBackendEnum.sqlalchemy and not config.database_url:
            errors.append("DATABASE_URL is required for the sqlalchemy store")
        if config.store_backend == StoreBackendEnum.postgrest:
            if not config.supabase_url:
                errors.append("SUPABASE_URL is required for the postgrest store")
            if not config.supabase_key:
                errors.append("SUPABASE_KEY is required for the postgrest store")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "store_backend": settings.store_backend,
            "serialize_writes": settings.serialize_writes,
            "reconcile_on_missing": settings.reconcile_on_missing,
            "environment": settings.environment,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
        "supabase_configured": bool(settings.supabase_url and settings.supabase_key),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "StoreBackendEnum",
]
