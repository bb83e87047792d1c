from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TAROTDESK_")

    app_name: str = "TarotDesk"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/tarotdesk"

    # All users share one day boundary, regardless of where they are
    timezone: str = "Asia/Seoul"

    # Draw quota: default limit, optionally overridden per spread type
    # e.g. TAROTDESK_SPREAD_DAILY_LIMITS='{"celtic": 1}'
    daily_draw_limit: int = 3
    spread_daily_limits: dict[str, int] = {}

    # Comma separated user ids that bypass the daily quota
    developer_ids: str = ""

    history_cap: int = 100
    history_default_limit: int = 20

    # Applied separately to the profile load and the final commit of a draw
    persistence_timeout_seconds: float = 5.0

    major_reversal_probability: float = 0.30
    court_reversal_probability: float = 0.25
    minor_reversal_probability: float = 0.20
    minor_reversals_enabled: bool = True

    # Local hours flagged as "special time" on a draw (presentation only)
    lucky_hours: list[int] = [7, 12, 21]

    @property
    def developer_id_set(self) -> frozenset[str]:
        """Developer ids parsed from the comma separated setting."""
        return frozenset(part.strip() for part in self.developer_ids.split(",") if part.strip())


settings = Settings()


# =============================================================================
# INPUT LIMITS
# =============================================================================

# Longest question accepted alongside a draw
MAX_QUESTION_LENGTH = 500

# Upper bound for a single history page
MAX_HISTORY_PAGE = 100
