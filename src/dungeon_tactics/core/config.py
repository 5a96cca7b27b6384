"""Configuration management for the dungeon tactics rules engine.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides.
Rule constants that define the game itself (success-rate clamp, slot
capacities, XP curve) live in :mod:`dungeon_tactics.core.constants` and are
deliberately not configurable; only host-facing tunables live here.

Example:
    >>> from dungeon_tactics.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.combat.arena_width
    20

Environment Variables:
    DUNGEON_TACTICS_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DUNGEON_TACTICS_JSON_LOGS: Emit JSON log lines instead of console output
    DUNGEON_TACTICS_COMBAT_ARENA_WIDTH: Width of the default movement arena
    DUNGEON_TACTICS_COMBAT_RNG_SEED: Seed for reproducible dice rolls
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dungeon_tactics.core.exceptions import ConfigurationError


class CombatSettings(BaseSettings):
    """Configuration for encounter and turn behavior.

    Attributes:
        arena_width: Width of the default position oracle's arena.
        arena_height: Height of the default position oracle's arena.
        default_player_ap: Max AP given to players that do not declare one.
        default_enemy_ap: Max AP given to enemies that do not declare one.
        max_ai_steps: Upper bound on AI sub-steps within one enemy turn.
        slot_swap_cooldown: Turns an entity must wait after changing slots.
        stun_default_duration: Stun length when an ability omits stunDuration.
        defense_bonus_default_duration: Buff length when an ability omits duration.
        rng_seed: Optional seed for reproducible rolls.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_TACTICS_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    arena_width: int = Field(default=20, description="Arena width in tiles")
    arena_height: int = Field(default=20, description="Arena height in tiles")
    default_player_ap: int = Field(default=3, description="Default player max AP")
    default_enemy_ap: int = Field(default=2, description="Default enemy max AP")
    max_ai_steps: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum AI sub-steps per enemy turn",
    )
    slot_swap_cooldown: int = Field(
        default=0,
        ge=0,
        description="Turns before slots can be changed again",
    )
    stun_default_duration: int = Field(default=1, ge=1, description="Default stun turns")
    defense_bonus_default_duration: int = Field(
        default=3,
        ge=1,
        description="Default defense buff turns",
    )
    rng_seed: int | None = Field(default=None, description="Seed for reproducible rolls")

    @model_validator(mode="after")
    def validate_combat_values(self) -> "CombatSettings":
        """Reject arena and AP values the scheduler cannot work with.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If a dimension or AP default is not positive.
        """
        if self.arena_width < 1 or self.arena_height < 1:
            raise ConfigurationError(
                f"Arena must be at least 1x1 (got {self.arena_width}x{self.arena_height})",
                config_key="arena_width",
            )
        if self.default_player_ap < 1:
            raise ConfigurationError(
                "default_player_ap must be at least 1",
                config_key="default_player_ap",
            )
        if self.default_enemy_ap < 1:
            raise ConfigurationError(
                "default_enemy_ap must be at least 1",
                config_key="default_enemy_ap",
            )
        return self


class Settings(BaseSettings):
    """Main engine settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Engine logging level.
        json_logs: Render logs as JSON lines.
        combat: Encounter and turn settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_TACTICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Dungeon Tactics Rules Engine",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON formatted logs",
    )

    combat: CombatSettings = Field(default_factory=CombatSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the engine settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load engine settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "CombatSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
