"""Sample status effect catalog.

Definitions are plain data in the same camelCase shape content authors
write; ``load_default_status_effects`` validates them into a ledger.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from dungeon_tactics.engine.status_effects import StatusEffectLedger


DEFAULT_STATUS_EFFECTS: list[dict[str, Any]] = [
    # Damage over time
    {
        "key": "burn",
        "name": "Burn",
        "type": "damage_over_time",
        "description": "Target takes fire damage each turn",
        "stackable": True,
        "maxStacks": 3,
        "tickTiming": "start_of_turn",
        "properties": {
            "damagePerTick": {"base": 3, "scaling": "source_skill"},
            "duration": {"base": 3, "scaling": "source_skill"},
            "resistance": "fire_resistance",
        },
        "interactions": {
            "extinguished_by": ["ice_damage", "water_damage"],
            "enhanced_by": ["wind_effects"],
            "immune_if": ["fire_immunity"],
        },
    },
    {
        "key": "bleed",
        "name": "Bleeding",
        "type": "damage_over_time",
        "description": "Target loses health from wounds each turn",
        "stackable": True,
        "maxStacks": 5,
        "tickTiming": "start_of_turn",
        "properties": {
            "damagePerTick": {"base": 2, "scaling": "source_weapon"},
            "duration": {"base": 4, "scaling": "none"},
            "healingPenalty": 0.5,
        },
        "interactions": {
            "stopped_by": ["healing_magic", "bandaging"],
            "worsened_by": ["movement", "combat_actions"],
        },
    },
    # Movement impairment
    {
        "key": "slow",
        "name": "Slowed",
        "type": "movement_debuff",
        "description": "Target moves slower and has reduced initiative",
        "tickTiming": "persistent",
        "properties": {
            "movementPenalty": {"base": -2, "scaling": "source_skill"},
            "initiativePenalty": {"base": -3, "scaling": "source_skill"},
            "duration": {"base": 3, "scaling": "source_skill"},
            "resistance": "cold_resistance",
        },
        "interactions": {
            "removed_by": ["haste", "fire_damage"],
            "immune_if": ["freedom_of_movement"],
        },
    },
    {
        "key": "knockdown",
        "name": "Knocked Down",
        "type": "positional_debuff",
        "description": "Target is prone and must spend AP to stand",
        "tickTiming": "instant",
        "properties": {
            "duration": {"base": 1, "scaling": "source_skill"},
            "standUpCost": 1,
            "defensePenalty": -4,
            "attackPenalty": -2,
            "resistance": "knockdown_resistance",
        },
        "interactions": {
            "prevented_by": ["stability_stance", "earth_mastery"],
        },
    },
    # Mental
    {
        "key": "fear",
        "name": "Feared",
        "type": "mental_debuff",
        "description": "Target cannot approach source and has combat penalties",
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 4, "scaling": "source_skill"},
            "attackPenalty": -3,
            "defensePenalty": -2,
            "movementRestriction": "away_from_source",
            "resistance": "fear_resistance",
        },
        "interactions": {
            "removed_by": ["courage_buffs", "high_morale"],
            "immune_if": ["fearless", "undead", "construct"],
        },
    },
    {
        "key": "stun",
        "name": "Stunned",
        "type": "incapacitation",
        "description": "Target cannot take actions for duration",
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 1, "scaling": "source_skill"},
            "actionsPrevented": ["all"],
            "defensePenalty": -6,
            "resistance": "stun_resistance",
        },
        "interactions": {
            "removed_by": ["damage_taken"],
            "immune_if": ["stun_immunity", "undead"],
        },
    },
    # Enhancement
    {
        "key": "haste",
        "name": "Haste",
        "type": "enhancement_buff",
        "description": "Target gains extra movement and initiative",
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 5, "scaling": "source_skill"},
            "movementBonus": {"base": 2, "scaling": "source_skill"},
            "initiativeBonus": {"base": 4, "scaling": "source_skill"},
            "extraActions": 0,
        },
        "interactions": {
            "dispelled_by": ["dispel_magic", "slow"],
        },
    },
    {
        "key": "armor_enhancement",
        "name": "Enhanced Armor",
        "type": "defensive_buff",
        "description": "Magical or temporary armor protection",
        "stackable": True,
        "maxStacks": 3,
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 10, "scaling": "source_skill"},
            "armorBonus": {"base": 5, "scaling": "source_skill"},
            "damageReduction": {"base": 2, "scaling": "source_skill"},
        },
        "interactions": {
            "dispelled_by": ["dispel_magic", "armor_piercing"],
            "stacks_with": ["natural_armor"],
        },
    },
    # Utility
    {
        "key": "invisibility",
        "name": "Invisible",
        "type": "concealment",
        "description": "Target cannot be seen or directly targeted",
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 6, "scaling": "source_skill"},
            "attackBonus": 4,
            "movementSilent": True,
            "resistance": "true_sight",
        },
        "interactions": {
            "broken_by": ["attacking", "loud_actions", "area_effects"],
            "detected_by": ["true_sight", "detect_invisible"],
        },
    },
    {
        "key": "confusion",
        "name": "Confused",
        "type": "mental_debuff",
        "description": "Target may act randomly or attack allies",
        "tickTiming": "on_action",
        "properties": {
            "duration": {"base": 3, "scaling": "source_skill"},
            "randomActionChance": {"base": 0.3, "scaling": "source_skill"},
            "allyAttackChance": {"base": 0.15, "scaling": "source_skill"},
            "resistance": "mental_resistance",
        },
        "interactions": {
            "removed_by": ["clarity_buffs", "damage_taken"],
            "immune_if": ["mindless", "undead"],
        },
    },
    # Magical
    {
        "key": "dispel_vulnerability",
        "name": "Dispel Vulnerable",
        "type": "magical_debuff",
        "description": "Target is vulnerable to dispelling effects",
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 5, "scaling": "source_skill"},
            "dispelSuccessBonus": {"base": 0.4, "scaling": "source_skill"},
            "magicResistancePenalty": {"base": -0.2, "scaling": "source_skill"},
        },
        "interactions": {
            "triggered_by": ["failed_magic_resistance"],
            "removed_by": ["successful_save", "antimagic"],
        },
    },
    # Area control
    {
        "key": "suppression",
        "name": "Suppressed",
        "type": "area_control",
        "description": "Target has difficulty taking offensive actions",
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 2, "scaling": "source_skill"},
            "attackPenalty": -4,
            "spellcastingPenalty": -3,
            "movementPenalty": -1,
            "resistance": "courage",
        },
        "interactions": {
            "area_effect": True,
            "removed_by": ["leaving_area", "courage_buffs"],
        },
    },
    # Tracking
    {
        "key": "marked",
        "name": "Marked",
        "type": "tracking_debuff",
        "description": "Target is marked for enhanced tracking and damage",
        "tickTiming": "persistent",
        "properties": {
            "duration": {"base": 8, "scaling": "source_skill"},
            "damageVulnerability": {"base": 0.25, "scaling": "source_skill"},
            "stealthPenalty": -6,
            "hidingPenalty": -4,
        },
        "interactions": {
            "removed_by": ["dispel_magic", "certain_distances"],
        },
    },
    # Resistances
    {
        "key": "elemental_resistance",
        "name": "Elemental Resistance",
        "type": "damage_resistance",
        "description": "Reduces damage from elemental sources",
        "stackable": True,
        "maxStacks": 5,
        "tickTiming": "on_damage",
        "properties": {
            "duration": {"base": 15, "scaling": "source_skill"},
            "damageReduction": {"base": 0.15, "scaling": "source_skill"},
            "elements": ["fire", "ice", "lightning", "earth"],
        },
        "interactions": {
            "stacks_with": ["natural_resistance"],
            "bypassed_by": ["penetrating_magic"],
        },
    },
]


def load_default_status_effects(ledger: StatusEffectLedger) -> int:
    """Register the sample status effects.

    Returns:
        Number of effects registered.
    """
    return ledger.register_many(DEFAULT_STATUS_EFFECTS)


__all__ = [
    "DEFAULT_STATUS_EFFECTS",
    "load_default_status_effects",
]
