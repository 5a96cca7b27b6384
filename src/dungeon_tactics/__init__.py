"""Dungeon Tactics - rules engine for a turn-based tactical dungeon RPG.

The engine decides what happens when a combatant uses an ability, how turn
order and enemy behavior unfold, and how skills improve with use. It is a
pure state-transition library: hosts hand it entities and actions, and get
back result objects and structured events to broadcast.

Example:
    >>> from dungeon_tactics import create_orchestrator
    >>> orchestrator = create_orchestrator(party=[hero])
    >>> orchestrator.start_combat([goblin])
"""

from __future__ import annotations

from dungeon_tactics.engine.orchestrator import CombatOrchestrator, create_orchestrator


__all__ = [
    "CombatOrchestrator",
    "create_orchestrator",
]

__version__ = "0.1.0"
