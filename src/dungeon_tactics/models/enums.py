"""Enumeration types for the dungeon tactics rules engine.

These enums close the vocabularies that content and callers use: ability
types, scaling modes, slot kinds, combat phases and event types. A typo in
content therefore fails validation instead of silently falling through to a
default.
"""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Which side of an encounter an entity fights on."""

    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> "EntityType":
        """Get the opposing side.

        Returns:
            ENEMY for players and PLAYER for enemies.
        """
        return EntityType.ENEMY if self is EntityType.PLAYER else EntityType.PLAYER


class AbilityType(StrEnum):
    """Active abilities are invoked and rolled; passives always resolve."""

    ACTIVE = "active"
    PASSIVE = "passive"


class SlotType(StrEnum):
    """Kinds of ability slot."""

    ACTIVE = "active"
    PASSIVE = "passive"


class ScalingMode(StrEnum):
    """How an effect's base value is scaled before effectiveness bonuses.

    Modes:
        WEAPON: base x average equipped weapon damage.
        SHIELD: base x equipped shield defense.
        SKILL: base + primary skill level x 0.1.
        WEAPON_SKILL: base x average weapon damage x (1 + primary level x 0.05).
        STRENGTH: base + strength level x 0.15.
        NONE: unchanged.
    """

    WEAPON = "weapon"
    SHIELD = "shield"
    SKILL = "skill"
    WEAPON_SKILL = "weapon_skill"
    STRENGTH = "strength"
    NONE = "none"


class StatusScalingMode(StrEnum):
    """Scaling vocabulary for status effect properties."""

    SOURCE_SKILL = "source_skill"
    SOURCE_WEAPON = "source_weapon"
    NONE = "none"


class StatusEffectType(StrEnum):
    """Broad families of status effect."""

    DAMAGE_OVER_TIME = "damage_over_time"
    MOVEMENT_DEBUFF = "movement_debuff"
    POSITIONAL_DEBUFF = "positional_debuff"
    MENTAL_DEBUFF = "mental_debuff"
    INCAPACITATION = "incapacitation"
    ENHANCEMENT_BUFF = "enhancement_buff"
    DEFENSIVE_BUFF = "defensive_buff"
    CONCEALMENT = "concealment"
    MAGICAL_DEBUFF = "magical_debuff"
    AREA_CONTROL = "area_control"
    TRACKING_DEBUFF = "tracking_debuff"
    DAMAGE_RESISTANCE = "damage_resistance"


class TickTiming(StrEnum):
    """When a status effect does its work."""

    START_OF_TURN = "start_of_turn"
    PERSISTENT = "persistent"
    ON_ACTION = "on_action"
    INSTANT = "instant"
    ON_DAMAGE = "on_damage"


class CombatPhase(StrEnum):
    """Top-level game phase; combat is never nested."""

    EXPLORATION = "exploration"
    COMBAT = "combat"


class EnemyRole(StrEnum):
    """Role used to prioritize ability categories when auto-slotting."""

    TANK = "tank"
    DPS = "dps"
    CASTER = "caster"
    SUPPORT = "support"
    BALANCED = "balanced"


class ActionType(StrEnum):
    """Externally issued actions routed by the combat orchestrator."""

    USE_SKILL = "useSkill"
    END_TURN = "endTurn"
    GET_COMBAT_STATE = "getCombatState"


class EventType(StrEnum):
    """Structured events produced for the presentation layer."""

    ABILITY_USED = "ABILITY_USED"
    ABILITY_FAILED = "ABILITY_FAILED"
    ABILITY_SLOTTED = "ABILITY_SLOTTED"
    ABILITY_UNSLOTTED = "ABILITY_UNSLOTTED"
    ENTITY_DIED = "ENTITY_DIED"
    DAMAGE_DEALT = "DAMAGE_DEALT"
    ENTITY_MOVED = "ENTITY_MOVED"
    CHARACTER_SKILL_GAINED = "CHARACTER_SKILL_GAINED"
    TURN_ORDER_SET = "TURN_ORDER_SET"
    TURN_STARTED = "TURN_STARTED"
    TURN_ENDED = "TURN_ENDED"
    COMBAT_STARTED = "COMBAT_STARTED"
    COMBAT_ENDED = "COMBAT_ENDED"


__all__ = [
    "EntityType",
    "AbilityType",
    "SlotType",
    "ScalingMode",
    "StatusScalingMode",
    "StatusEffectType",
    "TickTiming",
    "CombatPhase",
    "EnemyRole",
    "ActionType",
    "EventType",
]
