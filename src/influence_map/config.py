"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Neo4j Configuration
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "influence_password"
    neo4j_database: str = "neo4j"

    # Entity cache
    cache_ttl_seconds: float = Field(
        default=300.0,
        description="Soft cache lifetime for fetched entities and relationship batches"
    )

    # Semantic zoom
    default_filter_level: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Filter level applied when a node gains focus"
    )
    filter_step: float = Field(
        default=0.08,
        description="Filter level change per zoom gesture while focused"
    )
    min_visible: int = Field(
        default=1,
        ge=1,
        description="Downstream neighbors shown at filter level 0"
    )
    max_visible: int = Field(
        default=50,
        description="Downstream neighbors shown just below the unbounded threshold"
    )
    unbounded_threshold: float = Field(
        default=0.95,
        description="Filter level at or above which every neighbor is shown"
    )
    level_debounce_seconds: float = Field(
        default=0.1,
        description="Window that collapses rapid filter level changes into one reclassification"
    )

    # Layout / viewport
    row_spacing: float = 140.0
    column_spacing: float = 100.0
    layout_animation_seconds: float = 0.4
    fit_delay_seconds: float = 0.1
    fit_padding: float = 40.0
    zoom_epsilon: float = 0.001
    zoom_factor: float = 2.0
    min_zoom: float = 0.1
    max_zoom: float = 6.0
    viewport_width: float = 1280.0
    viewport_height: float = 800.0

    # Search
    search_limit: int = Field(default=10, ge=1, le=100)

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    session_idle_seconds: float = Field(
        default=1800.0,
        ge=0.0,
        description="Sessions untouched for this long are closed (0 disables expiry)",
    )


def get_test_settings() -> Settings:
    """Get test environment settings.

    No layout animation so tests do not sleep, and a separate database.
    """
    return Settings(
        layout_animation_seconds=0.0,
        neo4j_database="neo4j_test",
    )


# Global settings instance
settings = Settings()
