"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the dungeon tactics test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dungeon_tactics.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DUNGEON_TACTICS_DEBUG": "true",
        "DUNGEON_TACTICS_LOG_LEVEL": "DEBUG",
        "DUNGEON_TACTICS_COMBAT_ARENA_WIDTH": "12",
        "DUNGEON_TACTICS_COMBAT_RNG_SEED": "99",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Dice Fixtures
# =============================================================================


@pytest.fixture
def dice_roller() -> Any:
    """Create a DiceRoller with a fixed seed for reproducible tests.

    Returns:
        DiceRoller instance with fixed seed.
    """
    from dungeon_tactics.engine.dice import DiceRoller

    return DiceRoller(seed=42)


@pytest.fixture
def scripted_dice_factory() -> Callable[..., Any]:
    """Provide a factory for dice rollers with scripted results.

    Scripted values are consumed in order. Once a script runs out, percentile
    rolls return 0.0 (every roll succeeds), d20 rolls return 10, range rolls
    return the low end and chance rolls fall back to the seeded generator.

    Returns:
        Factory accepting ``percents``, ``d20s``, ``ranges`` and ``chances``.
    """
    from dungeon_tactics.engine.dice import DiceExpression, DiceRoller

    class ScriptedDiceRoller(DiceRoller):
        def __init__(
            self,
            *,
            percents: list[float] | None = None,
            d20s: list[int] | None = None,
            ranges: list[int] | None = None,
            chances: list[bool] | None = None,
        ) -> None:
            super().__init__(seed=7)
            self.percents = list(percents or [])
            self.d20s = list(d20s or [])
            self.ranges = list(ranges or [])
            self.chances = list(chances or [])

        def roll(self, expression: str) -> DiceExpression:
            if expression == "1d20":
                value = self.d20s.pop(0) if self.d20s else 10
                return DiceExpression(expression=expression, total=value, dice=[value], modifier=0)
            return super().roll(expression)

        def roll_percent(self) -> float:
            return self.percents.pop(0) if self.percents else 0.0

        def roll_range(self, low: int, high: int) -> int:
            return self.ranges.pop(0) if self.ranges else low

        def roll_chance(self, probability: float) -> bool:
            if self.chances:
                return self.chances.pop(0)
            return super().roll_chance(probability)

    return ScriptedDiceRoller


@pytest.fixture
def dice(scripted_dice_factory: Callable[..., Any]) -> Any:
    """A scripted roller whose success rolls always pass."""
    return scripted_dice_factory()


# =============================================================================
# Entity Fixtures
# =============================================================================


@pytest.fixture
def make_entity() -> Callable[..., Any]:
    """Provide a factory for entities with sensible defaults.

    Returns:
        Factory taking ``entity_id`` and any Entity field overrides. A
        ``skills`` mapping of skill key to level is expanded into records.
    """
    from dungeon_tactics.engine.progression import xp_threshold
    from dungeon_tactics.models.entities import Entity
    from dungeon_tactics.models.enums import EntityType
    from dungeon_tactics.models.skills import SkillRecord

    def factory(entity_id: str = "hero", **overrides: Any) -> Entity:
        skills = overrides.pop("skills", {})
        data: dict[str, Any] = {
            "id": entity_id,
            "name": entity_id.replace("_", " ").title(),
            "entity_type": EntityType.PLAYER,
            "health": 30,
            "max_health": 30,
            "ap": 3,
            "max_ap": 3,
        }
        data.update(overrides)
        data["skills"] = {
            key: SkillRecord(level=level, xp=xp_threshold(level))
            for key, level in skills.items()
        }
        return Entity(**data)

    return factory


@pytest.fixture
def hero(make_entity: Callable[..., Any]) -> Any:
    """A player with a sword and the common weapon skills tracked."""
    from dungeon_tactics.models.entities import Equipment, Weapon

    return make_entity(
        "hero",
        x=5,
        y=5,
        skills={"one_handed": 0, "armor_use": 0},
        equipment=Equipment(weapon=Weapon(name="Short Sword", damage_min=2, damage_max=6)),
    )


@pytest.fixture
def goblin(make_entity: Callable[..., Any]) -> Any:
    """An adjacent enemy."""
    from dungeon_tactics.models.enums import EntityType

    return make_entity(
        "goblin",
        entity_type=EntityType.ENEMY,
        health=12,
        max_health=12,
        ap=2,
        max_ap=2,
        x=6,
        y=5,
        damage=(2, 4),
    )


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def catalog() -> Any:
    """Create an AbilityCatalog with the base and sample abilities."""
    from dungeon_tactics.content.abilities import load_default_abilities
    from dungeon_tactics.engine.catalog import AbilityCatalog

    catalog = AbilityCatalog()
    load_default_abilities(catalog)
    return catalog


@pytest.fixture
def ledger() -> Any:
    """Create a StatusEffectLedger with the sample status effects."""
    from dungeon_tactics.content.status_effects import load_default_status_effects
    from dungeon_tactics.engine.status_effects import StatusEffectLedger

    ledger = StatusEffectLedger()
    load_default_status_effects(ledger)
    return ledger


@pytest.fixture
def tracker() -> Any:
    from dungeon_tactics.engine.progression import SkillProgressionTracker

    return SkillProgressionTracker()


@pytest.fixture
def slots() -> Any:
    from dungeon_tactics.engine.slots import AbilitySlotManager

    return AbilitySlotManager()


@pytest.fixture
def engine(catalog: Any, slots: Any, tracker: Any, ledger: Any, dice: Any) -> Any:
    """Create an AbilityResolutionEngine over the shared fixtures."""
    from dungeon_tactics.engine.resolution import AbilityResolutionEngine

    return AbilityResolutionEngine(catalog, slots, tracker, ledger, dice)


@pytest.fixture
def scheduler(engine: Any) -> Any:
    """Create a TurnScheduler using default combat settings."""
    from dungeon_tactics.core.config import CombatSettings
    from dungeon_tactics.engine.turn_manager import TurnScheduler

    scheduler = TurnScheduler(engine, CombatSettings())
    engine.position_oracle = scheduler.is_valid_position
    return scheduler
