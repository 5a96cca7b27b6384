"""Rules engine for the dungeon tactics combat core.

This module provides ability resolution, slot management, skill
progression, status effect lookups, turn scheduling and the orchestrator
that ties them together.

Submodules:
    dice: Seeded dice rolling (numpy random generator)
    progression: XP curve and use-driven skill progression
    status_effects: Status effect definitions and stacking rules
    catalog: Ability registry and effective cost/range/success rate
    slots: Active and passive ability slots
    effects: Effect magnitudes and their application
    resolution: The ability use pipeline
    enemy_ai: Greedy attack-or-approach enemy behavior
    turn_manager: Initiative, turn order and encounter lifecycle
    orchestrator: External action routing

Example:
    >>> from dungeon_tactics.engine import create_orchestrator
    >>>
    >>> orchestrator = create_orchestrator([hero])
    >>> orchestrator.start_combat([goblin])
    >>> orchestrator.handle_action({"type": "endTurn", "entity_id": "hero"})
"""

from __future__ import annotations

# =============================================================================
# Dice Rolling
# =============================================================================
from dungeon_tactics.engine.dice import DiceExpression, DiceRoller

# =============================================================================
# Progression
# =============================================================================
from dungeon_tactics.engine.progression import (
    XP_THRESHOLDS,
    SkillProgressionTracker,
    level_for_xp,
    xp_progress,
    xp_threshold,
    xp_to_next_level,
)

# =============================================================================
# Catalogs
# =============================================================================
from dungeon_tactics.engine.catalog import BASE_ABILITIES, AbilityCatalog
from dungeon_tactics.engine.status_effects import StatusEffectLedger

# =============================================================================
# Resolution
# =============================================================================
from dungeon_tactics.engine.slots import AbilitySlotManager
from dungeon_tactics.engine.effects import (
    EffectApplier,
    PositionOracle,
    compute_effect_magnitudes,
    scale_effect,
)
from dungeon_tactics.engine.resolution import AbilityResolutionEngine

# =============================================================================
# Turn Management
# =============================================================================
from dungeon_tactics.engine.enemy_ai import EnemyController, find_nearest_target, step_toward
from dungeon_tactics.engine.turn_manager import TurnScheduler

# =============================================================================
# Orchestration
# =============================================================================
from dungeon_tactics.engine.orchestrator import (
    CombatOrchestrator,
    EventSink,
    create_orchestrator,
)


__all__ = [
    # Dice Rolling
    "DiceExpression",
    "DiceRoller",
    # Progression
    "XP_THRESHOLDS",
    "SkillProgressionTracker",
    "level_for_xp",
    "xp_progress",
    "xp_threshold",
    "xp_to_next_level",
    # Catalogs
    "BASE_ABILITIES",
    "AbilityCatalog",
    "StatusEffectLedger",
    # Resolution
    "AbilitySlotManager",
    "EffectApplier",
    "PositionOracle",
    "compute_effect_magnitudes",
    "scale_effect",
    "AbilityResolutionEngine",
    # Turn Management
    "EnemyController",
    "find_nearest_target",
    "step_toward",
    "TurnScheduler",
    # Orchestration
    "CombatOrchestrator",
    "EventSink",
    "create_orchestrator",
]
