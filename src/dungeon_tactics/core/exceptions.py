"""Custom exception hierarchy for the dungeon tactics rules engine.

This module defines the exception hierarchy used across the engine. All
exceptions inherit from DungeonTacticsError, enabling unified error handling
at the host boundary while preserving domain-specific context.

Only two kinds of problems are raised as exceptions: malformed content at
registration time, and broken invariants or state-machine misuse. Ordinary
rule rejections (not enough AP, out of range, on cooldown, ...) are returned
to the caller as result objects carrying a reason string.

Example:
    >>> from dungeon_tactics.core.exceptions import AbilityRegistrationError
    >>> raise AbilityRegistrationError("Missing field", ability_key="fireball")
"""

from __future__ import annotations

from typing import Any


class DungeonTacticsError(Exception):
    """Base exception for all rules engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(DungeonTacticsError):
    """Raised when engine configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(DungeonTacticsError):
    """Raised when content or input data fails validation."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


class AbilityRegistrationError(ValidationError):
    """Raised when an ability definition cannot be registered.

    Registration errors are fatal: a catalog with a malformed entry must
    abort startup rather than silently drop the ability.
    """

    def __init__(
        self,
        message: str,
        *,
        ability_key: str | None = None,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize registration error with the offending ability key.

        Args:
            message: Human-readable error description.
            ability_key: Key of the ability being registered.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if ability_key:
            combined_details["ability_key"] = ability_key
        super().__init__(
            message,
            field_name=field_name,
            invalid_value=invalid_value,
            details=combined_details,
        )


class StatusEffectRegistrationError(ValidationError):
    """Raised when a status effect definition cannot be registered."""

    def __init__(
        self,
        message: str,
        *,
        effect_key: str | None = None,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if effect_key:
            combined_details["effect_key"] = effect_key
        super().__init__(
            message,
            field_name=field_name,
            invalid_value=invalid_value,
            details=combined_details,
        )


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(DungeonTacticsError):
    """Base exception for all game engine errors."""


class InvalidGameStateError(GameEngineError):
    """Raised when a state transition is requested from the wrong state."""

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: List of valid states that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class CombatError(GameEngineError):
    """Raised when combat resolution encounters an error."""

    def __init__(
        self,
        message: str,
        *,
        entity_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            entity_id: Identifier of the entity involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if entity_id:
            combined_details["entity_id"] = entity_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class DiceRollError(GameEngineError):
    """Raised when a dice expression cannot be rolled."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


class TurnManagementError(GameEngineError):
    """Raised when turn order or initiative management fails."""


class InvariantViolationError(GameEngineError):
    """Raised when engine data breaks an invariant the API guarantees.

    Seeing this exception always means a caller bug (for example an entity
    whose slots were edited by hand into a duplicate assignment). The engine
    never repairs such data silently.
    """

    def __init__(
        self,
        message: str,
        *,
        invariant: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if invariant:
            combined_details["invariant"] = invariant
        super().__init__(message, details=combined_details)


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
]
