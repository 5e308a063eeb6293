"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./ourmeals.db"

    # Planner
    meals: str = "breakfast,lunch,dinner"  # ordered meal names of a day
    display_locale: str = "fr"  # "fr" or "en"

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:5000"

    @property
    def meal_names(self) -> list[str]:
        """Get the configured meal names in display order."""
        return [m.strip() for m in self.meals.split(",") if m.strip()]

    @property
    def origins(self) -> list[str]:
        """Get the allowed CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
