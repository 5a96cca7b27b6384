"""Greedy enemy behavior.

An enemy turn is a loop of single steps: attack the nearest living
opponent when adjacent, otherwise step one tile toward it. Each step costs
1 AP and the loop stops when AP runs out, no opponent is left, or the step
cap is reached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dungeon_tactics.core.constants import ADJACENT_DISTANCE
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.models.enums import EventType
from dungeon_tactics.models.events import CombatEvent


if TYPE_CHECKING:
    from collections.abc import Iterable

    from dungeon_tactics.engine.effects import PositionOracle
    from dungeon_tactics.engine.resolution import AbilityResolutionEngine
    from dungeon_tactics.models.entities import Entity


logger = get_logger(__name__)


def find_nearest_target(enemy: Entity, candidates: Iterable[Entity]) -> tuple[Entity | None, int]:
    """Find the closest living candidate by Manhattan distance.

    Ties keep the first candidate.

    Returns:
        Tuple of (target or None, distance).
    """
    nearest: Entity | None = None
    best = -1
    for candidate in candidates:
        if not candidate.alive or candidate.health <= 0:
            continue
        distance = enemy.distance_to(candidate)
        if nearest is None or distance < best:
            nearest, best = candidate, distance
    return nearest, best


def step_toward(entity: Entity, target: Entity) -> tuple[int, int]:
    """Next tile toward a target along the axis with the larger gap.

    Ties move along x.
    """
    dx = target.x - entity.x
    dy = target.y - entity.y
    if abs(dx) >= abs(dy) and dx != 0:
        return entity.x + (1 if dx > 0 else -1), entity.y
    if dy != 0:
        return entity.x, entity.y + (1 if dy > 0 else -1)
    return entity.x, entity.y


class EnemyController:
    """Runs the attack-or-approach loop for one enemy turn.

    Attacks roll uniformly within the enemy's damage range and bypass
    the armor pipeline that ability damage goes through.
    """

    def __init__(
        self,
        engine: AbilityResolutionEngine,
        position_oracle: PositionOracle,
        *,
        max_steps: int = 20,
    ) -> None:
        self._engine = engine
        self._position_oracle = position_oracle
        self._max_steps = max_steps

    def take_turn(self, enemy: Entity, opponents: list[Entity]) -> list[CombatEvent]:
        """Spend an enemy's AP on attacks and movement.

        Args:
            enemy: The acting enemy. Its AP is consumed.
            opponents: Entities on the opposing side.

        Returns:
            Events produced during the turn.
        """
        events: list[CombatEvent] = []
        if self._engine.is_incapacitated(enemy):
            logger.info("Enemy incapacitated, skipping actions", entity_id=enemy.id)
            enemy.ap = 0
            return events

        steps = 0
        while enemy.ap > 0 and enemy.alive and steps < self._max_steps:
            steps += 1
            target, distance = find_nearest_target(enemy, opponents)
            if target is None:
                break

            if distance <= ADJACENT_DISTANCE:
                events.extend(self.attack(enemy, target))
            else:
                events.extend(self.approach(enemy, target))

        if steps >= self._max_steps and enemy.ap > 0:
            logger.warning("Enemy step cap reached", entity_id=enemy.id, ap=enemy.ap)
            enemy.ap = 0
        return events

    def attack(self, enemy: Entity, target: Entity) -> list[CombatEvent]:
        """Hit an adjacent target for a raw roll from the enemy's damage range.

        Armor and damage reduction do not apply. Health floors at 0.
        """
        low, high = enemy.damage
        damage = self._engine.dice.roll_range(low, high)
        enemy.ap -= 1
        target.health = max(0, target.health - damage)
        events = [
            CombatEvent(
                type=EventType.DAMAGE_DEALT,
                entity_id=enemy.id,
                target_id=target.id,
                data={"damage": damage, "remaining_health": target.health},
            )
        ]
        logger.info(
            "Enemy attacks",
            entity_id=enemy.id,
            target=target.id,
            damage=damage,
            remaining=target.health,
        )
        if target.health == 0:
            events.extend(self._engine.applier.mark_dead(target, killer=enemy))
        return events

    def approach(self, enemy: Entity, target: Entity) -> list[CombatEvent]:
        new_x, new_y = step_toward(enemy, target)
        if (new_x, new_y) == (enemy.x, enemy.y) or not self._position_oracle(new_x, new_y):
            logger.debug("Enemy movement blocked", entity_id=enemy.id, x=new_x, y=new_y)
            enemy.ap = 0
            return []

        origin = (enemy.x, enemy.y)
        enemy.move_to(new_x, new_y)
        enemy.ap -= 1
        return [
            CombatEvent(
                type=EventType.ENTITY_MOVED,
                entity_id=enemy.id,
                target_id=target.id,
                data={"from": list(origin), "to": [new_x, new_y]},
            )
        ]


__all__ = [
    "find_nearest_target",
    "step_toward",
    "EnemyController",
]
