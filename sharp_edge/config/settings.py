"""
Engine configuration via pydantic-settings.

Scanner thresholds and logging are read from environment variables
(`EV_*`, `ARB_*`, `LOG_LEVEL`) and an optional .env file.
"""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..betting.fair_odds import ConsensusMethod


class EVSettings(BaseSettings):
    """Settings for +EV scanning."""

    model_config = SettingsConfigDict(env_prefix="EV_")

    min_ev: float = Field(
        default=1.0,
        description="Minimum EV percentage (1.0 = 1%) to report an opportunity",
    )
    bankroll: float = Field(
        default=1000.0,
        gt=0,
        description="Bankroll used for Kelly stake suggestions",
    )
    kelly_fraction: float = Field(
        default=0.25,
        description="Fraction of Kelly Criterion to use (0.25 = quarter Kelly)",
    )
    consensus_method: ConsensusMethod = Field(
        default=ConsensusMethod.BEST_PRICE,
        description="How fair probabilities are derived: best_price or average",
    )

    @field_validator("kelly_fraction")
    @classmethod
    def validate_kelly_fraction(cls, v: float) -> float:
        if not 0 < v <= 1:
            raise ValueError("kelly_fraction must be in (0, 1]")
        return v


class ArbitrageSettings(BaseSettings):
    """Settings for arbitrage and middle detection."""

    model_config = SettingsConfigDict(env_prefix="ARB_")

    min_profit: float = Field(
        default=0.1,
        description="Minimum profit percentage (0.1 = 0.1%) to flag an arbitrage",
    )
    total_stake: float = Field(
        default=100.0,
        gt=0,
        description="Total stake split across arbitrage legs",
    )
    excluded_bookmakers: list[str] = Field(
        default_factory=list,
        description="Bookmakers to exclude from arbitrage scanning",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)

    # Sub-settings
    ev: EVSettings = Field(default_factory=EVSettings)
    arbitrage: ArbitrageSettings = Field(default_factory=ArbitrageSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        level = v.upper()
        if level not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process; call ``get_settings.cache_clear()`` to reload."""
    return Settings()
