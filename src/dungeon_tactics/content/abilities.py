"""Sample ability catalog.

A representative slice of melee, defensive and magic abilities, written in
the camelCase shape content authors use. Scaling modes must come from the
closed vocabulary (weapon, shield, skill, weapon_skill, strength, none).
The four base abilities are registered by the catalog itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from dungeon_tactics.engine.catalog import AbilityCatalog


# =============================================================================
# Melee
# =============================================================================

MELEE_ABILITIES: list[dict[str, Any]] = [
    {
        "key": "precise_strike",
        "name": "Precise Strike",
        "description": "A careful attack aimed at weak points, trading power for accuracy",
        "type": "active",
        "category": "combat",
        "apCost": 2,
        "range": 1,
        "cooldown": 1,
        "requiresTarget": True,
        "skillRequirements": [{"skill": "one_handed", "level": 1}],
        "baseSuccessRate": -10,
        "effects": {
            "damage": {"base": 0.8, "scaling": "weapon"},
            "accuracy": {"base": 0.9, "scaling": "skill"},
            "criticalChance": {"base": 0.15, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "one_handed", "multiplier": 3.0},
                {"skill": "precision", "multiplier": 2.0},
                {"skill": "critical_strikes", "multiplier": 1.5},
            ],
            "apReduction": [{"skill": "one_handed", "levelsPer": 15, "reduction": 1}],
        },
    },
    {
        "key": "power_strike",
        "name": "Power Strike",
        "description": "A devastating overhead blow that deals massive damage",
        "type": "active",
        "category": "combat",
        "apCost": 3,
        "range": 1,
        "cooldown": 2,
        "requiresTarget": True,
        "skillRequirements": [{"skill": "one_handed", "level": 5}],
        "prerequisites": ["precise_strike"],
        "baseSuccessRate": -25,
        "effects": {
            "damage": {"base": 1.8, "scaling": "weapon"},
            "accuracy": {"base": 0.6, "scaling": "skill"},
            "armorPiercing": {"base": 0.3, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "one_handed", "multiplier": 2.5},
                {"skill": "strength", "multiplier": 1.8},
                {"skill": "weapon_mastery", "multiplier": 2.0},
            ],
            "apReduction": [{"skill": "one_handed", "levelsPer": 10, "reduction": 1}],
        },
    },
    {
        "key": "one_handed_mastery",
        "name": "One-Handed Mastery",
        "description": "Increased damage and accuracy with one-handed weapons",
        "type": "passive",
        "category": "combat",
        "skillRequirements": [{"skill": "one_handed", "level": 8}],
        "baseSuccessRate": 100,
        "effects": {
            "weaponDamageBonus": {"base": 0.1, "scaling": "skill"},
            "weaponAccuracyBonus": {"base": 0.05, "scaling": "skill"},
            "criticalChanceBonus": {"base": 0.02, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "one_handed", "multiplier": 0.5},
                {"skill": "weapon_mastery", "multiplier": 0.3},
            ],
        },
    },
    {
        "key": "heavy_swing",
        "name": "Heavy Swing",
        "description": "A slow but devastating two-handed attack",
        "type": "active",
        "category": "combat",
        "apCost": 3,
        "range": 1,
        "cooldown": 1,
        "requiresTarget": True,
        "skillRequirements": [{"skill": "two_handed", "level": 1}],
        "baseSuccessRate": -15,
        "effects": {
            "damage": {"base": 2.2, "scaling": "weapon"},
            "accuracy": {"base": 0.5, "scaling": "skill"},
            "knockback": {"base": 1, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "two_handed", "multiplier": 2.8},
                {"skill": "strength", "multiplier": 2.2},
            ],
            "apReduction": [{"skill": "two_handed", "levelsPer": 12, "reduction": 1}],
        },
    },
]


# =============================================================================
# Defensive
# =============================================================================

DEFENSIVE_ABILITIES: list[dict[str, Any]] = [
    {
        "key": "shield_bash",
        "name": "Shield Bash",
        "description": "Strike with your shield to damage and stun the enemy",
        "type": "active",
        "category": "defensive",
        "apCost": 2,
        "range": 1,
        "cooldown": 2,
        "requiresTarget": True,
        "skillRequirements": [{"skill": "shields", "level": 1}],
        "baseSuccessRate": 0,
        "effects": {
            "damage": {"base": 0.8, "scaling": "shield"},
            "stunChance": {"base": 0.3, "scaling": "skill"},
            "stunDuration": {"base": 1, "scaling": "skill"},
            "accuracy": {"base": 0.75, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "shields", "multiplier": 2.5},
                {"skill": "strength", "multiplier": 1.8},
                {"skill": "intimidation", "multiplier": 1.2},
            ],
        },
    },
    {
        "key": "dodge_roll",
        "name": "Dodge Roll",
        "description": "Roll away from danger to avoid attacks and reposition",
        "type": "active",
        "category": "defensive",
        "apCost": 2,
        "range": 2,
        "cooldown": 2,
        "skillRequirements": [{"skill": "dodging", "level": 1}],
        "baseSuccessRate": 20,
        "effects": {
            "dodgeChance": {"base": 0.6, "scaling": "skill"},
            "movement": {"base": 2, "scaling": "skill"},
            "temporaryEvasion": {"base": 0.2, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "dodging", "multiplier": 2.8},
                {"skill": "acrobatics", "multiplier": 2.5},
                {"skill": "athletics", "multiplier": 1.8},
            ],
        },
    },
    {
        "key": "endure_pain",
        "name": "Endure Pain",
        "description": "Shrug off damage through sheer willpower",
        "type": "active",
        "category": "defensive",
        "apCost": 2,
        "cooldown": 3,
        "skillRequirements": [{"skill": "toughness", "level": 1}],
        "baseSuccessRate": 25,
        "effects": {
            "defenseBonus": {"base": 2, "scaling": "skill"},
            "duration": {"base": 3, "scaling": "none"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "toughness", "multiplier": 2.5},
                {"skill": "iron_will", "multiplier": 2.8},
            ],
        },
    },
    {
        "key": "armor_expertise",
        "name": "Armor Expertise",
        "description": "Skilled use of armor reduces penalties and increases protection",
        "type": "passive",
        "category": "defensive",
        "skillRequirements": [{"skill": "armor_use", "level": 1}],
        "baseSuccessRate": 100,
        "effects": {
            "armorPenaltyReduction": {"base": 0.2, "scaling": "skill"},
            "armorEffectivenessBonus": {"base": 0.1, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "armor_use", "multiplier": 0.8},
                {"skill": "endurance", "multiplier": 0.3},
            ],
        },
    },
    {
        "key": "last_stand",
        "name": "Last Stand",
        "description": "When near death, fight with desperate strength and resilience",
        "type": "active",
        "category": "defensive",
        "apCost": 0,
        "skillRequirements": [{"skill": "last_stand", "level": 5}],
        "baseSuccessRate": 40,
        "effects": {
            "defenseBonus": {"base": 3, "scaling": "skill"},
            "apRecover": {"base": 1, "scaling": "none"},
            "duration": {"base": 5, "scaling": "none"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "last_stand", "multiplier": 2.8},
                {"skill": "iron_will", "multiplier": 2.5},
            ],
        },
        "tags": ["emergency", "low_health_only"],
    },
]


# =============================================================================
# Magic
# =============================================================================

MAGIC_ABILITIES: list[dict[str, Any]] = [
    {
        "key": "lesser_heal",
        "name": "Lesser Heal",
        "description": "A basic healing spell that restores health",
        "type": "active",
        "category": "magic",
        "apCost": 2,
        "range": 4,
        "cooldown": 1,
        "skillRequirements": [{"skill": "healing", "level": 1}],
        "baseSuccessRate": 10,
        "effects": {
            "healing": {"base": 18, "scaling": "skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "healing", "multiplier": 3.0},
                {"skill": "religion", "multiplier": 2.0},
            ],
        },
    },
    {
        "key": "magic_missile",
        "name": "Magic Missile",
        "description": "Unerring bolts of pure magical force",
        "type": "active",
        "category": "magic",
        "apCost": 2,
        "range": 6,
        "requiresTarget": True,
        "skillRequirements": [{"skill": "arcane_lore", "level": 1}],
        "baseSuccessRate": 15,
        "effects": {
            "damage": {"base": 10, "scaling": "skill"},
            "armorPiercing": {"base": 1, "scaling": "none"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "arcane_lore", "multiplier": 2.8},
                {"skill": "concentration", "multiplier": 2.0},
            ],
            "rangeIncrease": [{"skill": "arcane_lore", "levelsPer": 10, "increase": 1}],
        },
    },
]


DEFAULT_ABILITIES: list[dict[str, Any]] = [
    *MELEE_ABILITIES,
    *DEFENSIVE_ABILITIES,
    *MAGIC_ABILITIES,
]


def load_default_abilities(catalog: AbilityCatalog) -> int:
    """Register the sample abilities.

    Returns:
        Number of abilities registered.
    """
    return catalog.register_many(DEFAULT_ABILITIES)


__all__ = [
    "MELEE_ABILITIES",
    "DEFENSIVE_ABILITIES",
    "MAGIC_ABILITIES",
    "DEFAULT_ABILITIES",
    "load_default_abilities",
]
