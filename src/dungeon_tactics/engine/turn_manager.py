"""Turn order and encounter lifecycle.

This module provides the initiative roll, turn advancement and
end-of-combat detection for an encounter, and drives enemy turns through
:class:`~dungeon_tactics.engine.enemy_ai.EnemyController`. Enemy turns are
resolved synchronously: control returns to the caller when a player's turn
begins or the encounter ends.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dungeon_tactics.core.config import CombatSettings
from dungeon_tactics.core.constants import FLOOR_INITIATIVE_BONUS, INITIATIVE_DIE
from dungeon_tactics.core.exceptions import InvalidGameStateError, TurnManagementError
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.engine.enemy_ai import EnemyController
from dungeon_tactics.models.combat import (
    SurvivorCounts,
    TurnEntry,
    TurnInfo,
    TurnResult,
    TurnState,
)
from dungeon_tactics.models.enums import CombatPhase, EntityType, EventType
from dungeon_tactics.models.events import CombatEvent


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from dungeon_tactics.engine.effects import PositionOracle
    from dungeon_tactics.engine.resolution import AbilityResolutionEngine
    from dungeon_tactics.models.entities import Entity


logger = get_logger(__name__)


class TurnScheduler:
    """Track initiative order and advance turns for one encounter at a time.

    Example:
        >>> scheduler = TurnScheduler(engine)
        >>> result = scheduler.start_encounter([hero], [goblin])
        >>> scheduler.current_entity.id
        'hero'
        >>> scheduler.end_turn("hero").success
        True
    """

    def __init__(
        self,
        engine: AbilityResolutionEngine,
        settings: CombatSettings | None = None,
        *,
        position_oracle: PositionOracle | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            engine: Resolution engine used for turn-boundary ticks and
                enemy attacks.
            settings: Combat settings; defaults to a fresh CombatSettings.
            position_oracle: Overrides the default arena/occupancy check.
        """
        self._engine = engine
        self._settings = settings or CombatSettings()
        self._external_oracle = position_oracle
        self._state = TurnState()
        self._participants: dict[str, Entity] = {}
        self._vacated_id: str | None = None
        self._vacancy_wrapped = False
        self._controller = EnemyController(
            engine,
            self.is_valid_position,
            max_steps=self._settings.max_ai_steps,
        )
        logger.info("TurnScheduler initialized")

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def in_combat(self) -> bool:
        return self._state.in_combat

    @property
    def participants(self) -> list[Entity]:
        """Every entity that joined the current encounter, dead or alive."""
        return list(self._participants.values())

    @property
    def current_entry(self) -> TurnEntry | None:
        if not self.in_combat:
            return None
        return self._state.current_entry

    @property
    def current_entity(self) -> Entity | None:
        entry = self.current_entry
        if entry is None:
            return None
        return self._participants.get(entry.entity_id)

    def get_participant(self, entity_id: str) -> Entity | None:
        return self._participants.get(entity_id)

    def turn_info(self) -> TurnInfo:
        entry = self.current_entry
        return TurnInfo(
            phase=self._state.phase,
            round=self._state.round,
            current_index=self._state.current_index,
            current_entity_id=entry.entity_id if entry else None,
            current_entity_type=entry.entity_type if entry else None,
            order=list(self._state.order),
        )

    # -------------------------------------------------------------------------
    # Positions
    # -------------------------------------------------------------------------

    def is_valid_position(self, x: int, y: int) -> bool:
        """Check that a tile is inside the arena and not occupied.

        Only living participants of the current encounter occupy tiles.
        """
        if self._external_oracle is not None:
            return self._external_oracle(x, y)
        if not (0 <= x < self._settings.arena_width and 0 <= y < self._settings.arena_height):
            return False
        return not any(
            entity.alive and entity.x == x and entity.y == y
            for entity in self._participants.values()
        )

    # -------------------------------------------------------------------------
    # Encounter lifecycle
    # -------------------------------------------------------------------------

    def roll_initiative(self, entity: Entity, current_floor: int = 1) -> int:
        """Roll d20 + initiative bonus + the floor bonus."""
        roll = self._engine.dice.roll(INITIATIVE_DIE).total
        floor_bonus = (current_floor - 1) * FLOOR_INITIATIVE_BONUS
        return roll + entity.initiative_bonus + floor_bonus

    def start_encounter(
        self,
        players: Sequence[Entity],
        enemies: Sequence[Entity],
        current_floor: int = 1,
        *,
        encounter_id: str | None = None,
    ) -> TurnResult:
        """Roll initiative and begin the first turn.

        Args:
            players: Party members; dead ones are left out.
            enemies: Enemies; dead ones are left out.
            current_floor: Dungeon floor, adds to every initiative roll.
            encounter_id: Optional identifier recorded in the turn state.

        Returns:
            TurnResult with the opening events, including any enemy turns
            resolved before the first player turn.

        Raises:
            InvalidGameStateError: If an encounter is already running.
            TurnManagementError: If no participant is alive.
        """
        if self.in_combat:
            raise InvalidGameStateError(
                "Cannot start an encounter while one is active",
                current_state=self._state.phase.value,
                expected_states=[CombatPhase.EXPLORATION.value],
            )

        living = [
            entity
            for entity in (*players, *enemies)
            if entity.alive and entity.health > 0
        ]
        if not living:
            raise TurnManagementError("Cannot start combat: no living participants")

        entries = [
            TurnEntry(
                entity_id=entity.id,
                entity_type=entity.entity_type,
                initiative=self.roll_initiative(entity, current_floor),
            )
            for entity in living
        ]
        # sorted() is stable with reverse=True, so ties keep insertion order
        order = sorted(entries, key=lambda entry: entry.initiative, reverse=True)

        self._participants = {entity.id: entity for entity in (*players, *enemies)}
        for entity in living:
            entity.in_combat = True
            if entity.max_ap is None:
                entity.max_ap = (
                    self._settings.default_player_ap
                    if entity.is_player
                    else self._settings.default_enemy_ap
                )

        self._state = TurnState(
            order=order,
            current_index=0,
            round=1,
            phase=CombatPhase.COMBAT,
            floor=current_floor,
            encounter_id=encounter_id,
        )
        self._vacated_id = None
        self._vacancy_wrapped = False

        logger.info(
            "Initiative order set",
            order=[f"{entry.entity_id}({entry.initiative})" for entry in order],
            floor=current_floor,
        )
        events = [
            CombatEvent(
                type=EventType.COMBAT_STARTED,
                data={
                    "players": sum(1 for entity in living if entity.is_player),
                    "enemies": sum(1 for entity in living if entity.is_enemy),
                    "floor": current_floor,
                },
            ),
            CombatEvent(
                type=EventType.TURN_ORDER_SET,
                data={
                    "order": [
                        {
                            "entity_id": entry.entity_id,
                            "entity_type": entry.entity_type.value,
                            "initiative": entry.initiative,
                        }
                        for entry in order
                    ]
                },
            ),
        ]
        result = self.start_turn()
        result.events[:0] = events
        return result

    def end_encounter(self, victory: bool | None = None) -> TurnResult:
        """Return to exploration and clear per-encounter state.

        Args:
            victory: True for a party win, False for a wipe, None when
                forced.

        Returns:
            TurnResult with survivor counts and the COMBAT_ENDED event.
        """
        survivors = self._survivors(self._participants.values())
        rounds = self._state.round
        for entity in self._participants.values():
            entity.reset_combat_state()

        self._participants = {}
        self._state = TurnState()
        self._vacated_id = None
        self._vacancy_wrapped = False

        logger.info(
            "Combat ended",
            victory=victory,
            players=survivors.players,
            enemies=survivors.enemies,
            rounds=rounds,
        )
        event = CombatEvent(
            type=EventType.COMBAT_ENDED,
            data={
                "victory": victory,
                "rounds": rounds,
                "survivors": survivors.model_dump(),
            },
        )
        return TurnResult(
            success=True,
            events=[event],
            combat_ended=True,
            victory=victory,
            survivors=survivors,
        )

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def start_turn(self) -> TurnResult:
        """Begin the current participant's turn.

        Dead entries are dropped. Enemy turns are played out and ended
        automatically, so this returns once a player is acting or combat is
        over.
        """
        if not self.in_combat:
            return TurnResult(success=False, reason="Not in combat")

        events: list[CombatEvent] = []
        while True:
            ended = self.check_end_conditions()
            if ended is not None:
                ended.events[:0] = events
                return ended

            entry = self._state.current_entry
            if entry is None:
                self._state.current_index = 0
                continue
            entity = self._participants.get(entry.entity_id)
            if entity is None or not entity.alive or entity.health <= 0:
                self.remove_from_turn_order(entry.entity_id)
                self._consume_vacancy()
                continue

            entity.ap = entity.max_ap if entity.max_ap is not None else entity.ap
            events.append(
                CombatEvent(
                    type=EventType.TURN_STARTED,
                    entity_id=entity.id,
                    data={
                        "entity_type": entity.entity_type.value,
                        "ap": entity.ap,
                        "round": self._state.round,
                    },
                )
            )
            logger.info(
                "Turn started",
                entity_id=entity.id,
                entity_type=entity.entity_type,
                ap=entity.ap,
                round=self._state.round,
            )

            if entity.is_player:
                return TurnResult(success=True, events=events)

            opponents = [
                self._participants[other.entity_id]
                for other in self._state.order
                if other.entity_type == EntityType.PLAYER
                and other.entity_id in self._participants
            ]
            events.extend(self._controller.take_turn(entity, opponents))
            self._remove_dead()
            events.extend(self._finish_turn(entity.id))

    def end_turn(self, entity_id: str | None = None) -> TurnResult:
        """End the acting participant's turn and move to the next one.

        Args:
            entity_id: When given, must match the acting participant.

        Returns:
            TurnResult with the events of every turn resolved until the
            next player acts or combat ends.
        """
        if not self.in_combat:
            return TurnResult(success=False, reason="Not in combat")

        entry = self._state.current_entry
        acting_id = self._vacated_id or (entry.entity_id if entry else None)
        if acting_id is None or (entity_id is not None and entity_id != acting_id):
            return TurnResult(success=False, reason="Not your turn")

        events = self._finish_turn(acting_id)
        result = self.start_turn()
        result.events[:0] = events
        return result

    def _finish_turn(self, entity_id: str) -> list[CombatEvent]:
        entity = self._participants.get(entity_id)
        if entity is not None:
            self._engine.update_effects(entity)
        logger.info("Turn ended", entity_id=entity_id)
        event = CombatEvent(type=EventType.TURN_ENDED, entity_id=entity_id)

        if self._vacated_id is not None:
            self._consume_vacancy()
        elif self._state.order:
            self._advance()
        return [event]

    def _advance(self) -> None:
        next_index = self._state.current_index + 1
        if next_index >= len(self._state.order):
            next_index = 0
            self._state.round += 1
            logger.info("New round started", round=self._state.round)
        self._state.current_index = next_index

    def _consume_vacancy(self) -> None:
        if self._vacancy_wrapped:
            self._state.round += 1
            logger.info("New round started", round=self._state.round)
        self._vacated_id = None
        self._vacancy_wrapped = False

    def remove_from_turn_order(self, entity_id: str) -> bool:
        """Remove a participant from the order (death or disconnect).

        The acting participant stays current when an earlier entry is
        removed. Removing the acting participant makes the next entry
        current without skipping it. The index returns to 0 when it falls
        past the end.

        Returns:
            False if the entity was not in the order.
        """
        order = self._state.order
        index = next(
            (i for i, entry in enumerate(order) if entry.entity_id == entity_id),
            None,
        )
        if index is None:
            return False

        current = self._state.current_index
        self._state.order = order[:index] + order[index + 1 :]
        if index < current:
            current -= 1
        elif index == current and self.in_combat:
            self._vacated_id = entity_id
        if current >= len(self._state.order):
            current = 0
            if self._vacated_id == entity_id:
                self._vacancy_wrapped = True
        self._state.current_index = current

        logger.info("Removed from turn order", entity_id=entity_id, remaining=len(self._state.order))
        return True

    def _remove_dead(self) -> None:
        for entry in list(self._state.order):
            entity = self._participants.get(entry.entity_id)
            if entity is not None and not entity.alive:
                self.remove_from_turn_order(entry.entity_id)

    # -------------------------------------------------------------------------
    # End conditions
    # -------------------------------------------------------------------------

    def check_end_conditions(self) -> TurnResult | None:
        """End the encounter when one side has nobody left in the order.

        Returns:
            The end-of-encounter result, or None while both sides stand.
        """
        in_order = [
            self._participants[entry.entity_id]
            for entry in self._state.order
            if entry.entity_id in self._participants
        ]
        counts = self._survivors(in_order)
        if counts.players == 0:
            logger.info("All party members defeated")
            return self.end_encounter(victory=False)
        if counts.enemies == 0:
            logger.info("All enemies defeated")
            return self.end_encounter(victory=True)
        return None

    @staticmethod
    def _survivors(entities: Iterable[Entity]) -> SurvivorCounts:
        living = [entity for entity in entities if entity.alive and entity.health > 0]
        return SurvivorCounts(
            players=sum(1 for entity in living if entity.is_player),
            enemies=sum(1 for entity in living if entity.is_enemy),
        )


__all__ = [
    "TurnScheduler",
]
