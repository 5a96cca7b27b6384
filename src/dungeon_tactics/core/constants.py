"""Rule constants for the dungeon tactics engine.

These values define the game rather than the deployment, so they are plain
module constants instead of settings.
"""

from __future__ import annotations

# =============================================================================
# Skill Progression
# =============================================================================

MAX_SKILL_LEVEL = 100
"""Highest level any skill can reach."""

XP_PER_USE = 1
"""XP granted for each qualifying ability use."""

MASTERY_TITLES: list[tuple[int, str]] = [
    (90, "Grandmaster"),
    (80, "Master"),
    (60, "Expert"),
    (40, "Adept"),
    (20, "Skilled"),
]
"""Minimum average top-skill level for each mastery title, highest first."""

DEFAULT_MASTERY_TITLE = "Novice"

# =============================================================================
# Ability Resolution
# =============================================================================

MIN_SUCCESS_RATE = 5
"""No ability is ever impossible."""

MAX_SUCCESS_RATE = 95
"""Cap on the rolled success rate."""

GUARANTEED_SUCCESS_RATE = 100
"""Base success rate at or above which an ability skips the success roll."""

FAILED_ROLL_AP_FRACTION = 0.3
"""Share of the effective AP cost consumed by a failed success roll."""

LOW_HEALTH_THRESHOLD = 0.25
"""Health fraction at or below which ``low_health_only`` abilities unlock."""

LOW_HEALTH_TAG = "low_health_only"

SKILL_SCALING_PER_LEVEL = 0.1
"""Additive bonus per primary-skill level for the ``skill`` scaling mode."""

WEAPON_SKILL_SCALING_PER_LEVEL = 0.05
"""Multiplicative bonus per primary-skill level for ``weapon_skill``."""

STRENGTH_SCALING_PER_LEVEL = 0.15
"""Additive bonus per strength level for the ``strength`` scaling mode."""

STRENGTH_SKILL = "strength"

STUN_STATUS_KEY = "stun"
"""Ledger key applied by the ``stunChance`` effect."""

# =============================================================================
# Ability Slots
# =============================================================================

MAX_ACTIVE_SLOTS = 9
"""Active slots, bound to hotkeys 1-9."""

MAX_PASSIVE_SLOTS = 5
"""Always-on passive slots."""

ENEMY_TIER_SLOTS: dict[int, tuple[int, int]] = {
    1: (3, 1),
    2: (4, 2),
    3: (5, 2),
    4: (6, 3),
    5: (9, 5),
}
"""(active, passive) slot counts filled by auto-slotting, per enemy tier."""

ROLE_CATEGORY_PRIORITY: dict[str, list[str]] = {
    "tank": ["defensive", "combat", "utility"],
    "dps": ["combat", "offensive", "utility"],
    "caster": ["magic", "utility", "defensive"],
    "support": ["utility", "healing", "defensive"],
    "balanced": ["combat", "defensive", "utility", "magic"],
}
"""Category order used when auto-slotting enemy abilities."""

# =============================================================================
# Turn Order
# =============================================================================

INITIATIVE_DIE = "1d20"

FLOOR_INITIATIVE_BONUS = 2
"""Initiative added per dungeon floor below the first."""

ADJACENT_DISTANCE = 1
"""Manhattan distance at which an enemy attacks instead of moving."""

COMBAT_LOG_SIZE = 10
"""Number of recent events included in a combat state snapshot."""
