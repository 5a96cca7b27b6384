"""Pydantic V2 data models for the dungeon tactics rules engine.

Exports:
    Enums: EntityType, AbilityType, SlotType, ScalingMode, StatusScalingMode,
        StatusEffectType, TickTiming, CombatPhase, EnemyRole, ActionType,
        EventType.
    Entities: Entity, Position, Weapon, Shield, Equipment.
    Abilities: AbilityDefinition and its parts, AbilitySlots, query results.
    Status effects: StatusEffectDefinition, ActiveStatus, TemporaryEffect.
    Skills: SkillRecord, SkillAward.
    Combat: TurnEntry, TurnState, result and snapshot records.
    Events: CombatEvent.
"""

from __future__ import annotations

from dungeon_tactics.models.abilities import (
    AbilityDefinition,
    AbilityScaling,
    AbilitySlots,
    ApReduction,
    CatalogStats,
    EffectivenessBonus,
    EffectSpec,
    NearUnlockAbility,
    RangeIncrease,
    RequirementCheck,
    SkillRequirement,
    SlotLookup,
    UnlockedAbility,
)
from dungeon_tactics.models.combat import (
    AbilityUseResult,
    ActionRequest,
    ActionResult,
    CombatSnapshot,
    EffectOutcome,
    ParticipantView,
    SlotResult,
    SurvivorCounts,
    TurnEntry,
    TurnInfo,
    TurnResult,
    TurnState,
    UsabilityCheck,
)
from dungeon_tactics.models.entities import (
    DEFENSE_BONUS_EFFECT,
    Entity,
    Equipment,
    Position,
    Shield,
    Weapon,
)
from dungeon_tactics.models.enums import (
    AbilityType,
    ActionType,
    CombatPhase,
    EnemyRole,
    EntityType,
    EventType,
    ScalingMode,
    SlotType,
    StatusEffectType,
    StatusScalingMode,
    TickTiming,
)
from dungeon_tactics.models.events import CombatEvent
from dungeon_tactics.models.skills import SkillAward, SkillRecord
from dungeon_tactics.models.status_effects import (
    ActiveStatus,
    StatusEffectDefinition,
    StatusProperty,
    TemporaryEffect,
)


__all__ = [
    # Enums
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
    # Entities
    "DEFENSE_BONUS_EFFECT",
    "Entity",
    "Position",
    "Weapon",
    "Shield",
    "Equipment",
    # Abilities
    "SkillRequirement",
    "EffectSpec",
    "EffectivenessBonus",
    "ApReduction",
    "RangeIncrease",
    "AbilityScaling",
    "AbilityDefinition",
    "RequirementCheck",
    "UnlockedAbility",
    "NearUnlockAbility",
    "CatalogStats",
    "AbilitySlots",
    "SlotLookup",
    # Status effects
    "StatusProperty",
    "StatusEffectDefinition",
    "ActiveStatus",
    "TemporaryEffect",
    # Skills
    "SkillRecord",
    "SkillAward",
    # Combat
    "TurnEntry",
    "TurnState",
    "TurnInfo",
    "SurvivorCounts",
    "TurnResult",
    "EffectOutcome",
    "AbilityUseResult",
    "UsabilityCheck",
    "SlotResult",
    "ActionRequest",
    "ParticipantView",
    "CombatSnapshot",
    "ActionResult",
    # Events
    "CombatEvent",
]
