"""Core module providing configuration, logging, constants and exceptions.

Exports:
    Exceptions:
        DungeonTacticsError: Base exception for all engine errors.
        AbilityRegistrationError: Malformed ability content.
        InvariantViolationError: Broken engine invariant (caller bug).

    Configuration:
        Settings: Main engine settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up engine logging.
        configure_from_settings: Set up logging from Settings.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        log_context: Bind context for a with block.
"""

from __future__ import annotations

from dungeon_tactics.core.config import (
    CombatSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dungeon_tactics.core.exceptions import (
    AbilityRegistrationError,
    CombatError,
    ConfigurationError,
    DiceRollError,
    DungeonTacticsError,
    GameEngineError,
    InvalidGameStateError,
    InvariantViolationError,
    StatusEffectRegistrationError,
    TurnManagementError,
    ValidationError,
)
from dungeon_tactics.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    log_context,
)


__all__ = [
    # Base exception
    "DungeonTacticsError",
    # Configuration & validation exceptions
    "ConfigurationError",
    "ValidationError",
    "AbilityRegistrationError",
    "StatusEffectRegistrationError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "DiceRollError",
    "TurnManagementError",
    "InvariantViolationError",
    # Configuration
    "Settings",
    "CombatSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
