"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # MongoDB (multi-document transactions need a replica set)
    mongo_uri: str = "mongodb://localhost:27017/?replicaSet=rs0"
    mongo_db: str = "admissions_workflow_dev"

    # Persistence backend: "mongo" for deployments, "memory" for local runs and tests
    store_backend: Literal["mongo", "memory"] = "mongo"

    # Graph duplication: what to do with transitions whose endpoints don't map
    duplicate_dangling_policy: Literal["skip", "error"] = "skip"

    # Stage transition history
    history_enabled: bool = True

    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"
    log_to_file: bool = True

    # CORS - set to "*" to allow all origins
    cors_origins: str = "*"

    # Environment
    environment: str = "development"
    debug: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"

    @property
    def docs_enabled(self) -> bool:
        """Interactive API docs are served in debug mode outside production"""
        return self.debug and not self.is_production


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
