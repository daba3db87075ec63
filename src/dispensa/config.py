"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Ingredients never worth buying or counting. The inspiration list also
# skips pepper and oil, which are assumed to be always at hand when ranking
# recipes but still end up on the shopping list.
SHOPPING_IGNORED_INGREDIENTS: frozenset[str] = frozenset(
    {
        "acqua",
        "acqua tiepida",
        "acqua calda",
        "acqua fredda",
        "acqua (tiepida)",
        "sale",
        "sale fino",
        "sale grosso",
        "sale marino",
    }
)

INSPIRATION_IGNORED_INGREDIENTS: frozenset[str] = SHOPPING_IGNORED_INGREDIENTS | {
    "pepe",
    "olio",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost/dispensa"

    # Recipe import
    scraping_timeout: float = 30.0  # request timeout in seconds
    scraping_max_retries: int = 3
    scraping_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )

    # Pantry reconciliation
    # A pantry row in a different unit (a bottle vs. 2 tablespoons) counts as
    # covering the whole requirement while its quantity is positive.
    assume_covered_on_unit_mismatch: bool = True

    # Listing
    recipes_page_size: int = 12

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
