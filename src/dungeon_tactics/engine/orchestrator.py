"""Combat orchestrator - the engine's single external entry point.

The orchestrator enforces one active encounter at a time and routes
externally issued actions:

- ``useSkill`` goes to the resolution engine.
- ``endTurn`` goes to the turn scheduler.
- ``getCombatState`` returns a read-only snapshot.

Every event produced along the way is kept in a bounded combat log and
forwarded to an optional sink, so a presentation or network layer can
broadcast it.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from dungeon_tactics.core.config import Settings, get_settings
from dungeon_tactics.core.constants import COMBAT_LOG_SIZE
from dungeon_tactics.core.logging import bind_context, clear_context, get_logger, log_context
from dungeon_tactics.content.abilities import load_default_abilities
from dungeon_tactics.content.status_effects import load_default_status_effects
from dungeon_tactics.engine.catalog import AbilityCatalog
from dungeon_tactics.engine.dice import DiceRoller
from dungeon_tactics.engine.progression import SkillProgressionTracker
from dungeon_tactics.engine.resolution import AbilityResolutionEngine
from dungeon_tactics.engine.slots import AbilitySlotManager
from dungeon_tactics.engine.status_effects import StatusEffectLedger
from dungeon_tactics.engine.turn_manager import TurnScheduler
from dungeon_tactics.models.combat import (
    ActionRequest,
    ActionResult,
    CombatSnapshot,
    ParticipantView,
    TurnResult,
)
from dungeon_tactics.models.entities import Position
from dungeon_tactics.models.enums import ActionType


if TYPE_CHECKING:
    from dungeon_tactics.models.entities import Entity
    from dungeon_tactics.models.events import CombatEvent


logger = get_logger(__name__)

EventSink = Callable[["CombatEvent"], None]
"""Receives every event the orchestrator produces, in order."""


class CombatOrchestrator:
    """Top-level facade over the resolution engine and turn scheduler.

    Example:
        >>> orchestrator = create_orchestrator([hero])
        >>> orchestrator.start_combat([goblin]).success
        True
        >>> orchestrator.handle_action(
        ...     {"type": "useSkill", "entity_id": "hero",
        ...      "data": {"skillId": "basic_attack", "targetId": "goblin"}}
        ... )
    """

    def __init__(
        self,
        party: Iterable[Entity],
        engine: AbilityResolutionEngine,
        scheduler: TurnScheduler,
        *,
        sink: EventSink | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            party: Player-controlled entities.
            engine: Resolution engine for ability use.
            scheduler: Turn scheduler for the encounter.
            sink: Optional callable receiving every event.
        """
        self._party: dict[str, Entity] = {member.id: member for member in party}
        self._enemies: dict[str, Entity] = {}
        self.engine = engine
        self.scheduler = scheduler
        self._sink = sink
        self._log: deque[CombatEvent] = deque(maxlen=COMBAT_LOG_SIZE)
        logger.info("CombatOrchestrator initialized", party=list(self._party))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def party(self) -> list[Entity]:
        return list(self._party.values())

    @property
    def enemies(self) -> list[Entity]:
        return list(self._enemies.values())

    @property
    def in_combat(self) -> bool:
        return self.scheduler.in_combat

    @property
    def combat_log(self) -> list[CombatEvent]:
        """The most recent events, oldest first."""
        return list(self._log)

    def add_party_member(self, entity: Entity) -> None:
        self._party[entity.id] = entity

    def find_entity(self, entity_id: str) -> Entity | None:
        return self._party.get(entity_id) or self._enemies.get(entity_id)

    # =========================================================================
    # Encounter lifecycle
    # =========================================================================

    def start_combat(self, enemies: Iterable[Entity], current_floor: int = 1) -> ActionResult:
        """Start an encounter against the given enemies.

        Enemies without any slotted ability are auto-slotted for their tier
        and role before initiative is rolled.

        Args:
            enemies: Enemies taking part.
            current_floor: Dungeon floor, adds to initiative.

        Returns:
            ActionResult carrying the opening TurnResult.
        """
        if self.in_combat:
            return ActionResult(success=False, reason="Already in combat")

        enemies = list(enemies)
        players = [member for member in self._party.values() if member.alive]
        if not players:
            return ActionResult(success=False, reason="No living party members")
        if not any(enemy.alive for enemy in enemies):
            return ActionResult(success=False, reason="No living enemies")

        events: list[CombatEvent] = []
        for enemy in enemies:
            if not enemy.ability_slots.occupied():
                events.extend(self.engine.auto_assign_enemy_abilities(enemy))

        encounter_id = uuid4().hex[:12]
        bind_context(encounter_id=encounter_id)
        self._enemies = {enemy.id: enemy for enemy in enemies}
        logger.info(
            "Combat starting",
            players=len(players),
            enemies=len(self._enemies),
            floor=current_floor,
        )

        turn = self.scheduler.start_encounter(
            players,
            enemies,
            current_floor,
            encounter_id=encounter_id,
        )
        events.extend(turn.events)
        self._emit(events)
        if turn.combat_ended:
            self._finish_encounter()
        return ActionResult(success=True, turn=turn, events=events)

    def end_combat(self, victory: bool | None = None) -> ActionResult:
        """End the current encounter and report survivor counts."""
        if not self.in_combat:
            return ActionResult(success=False, reason="Not in combat")

        turn = self.scheduler.end_encounter(victory)
        self._emit(turn.events)
        self._finish_encounter()
        return ActionResult(success=True, turn=turn, events=turn.events)

    def force_start_combat(self, enemies: Iterable[Entity], current_floor: int = 1) -> ActionResult:
        """Start an encounter on request, e.g. from an admin command."""
        logger.warning("Forcing combat start")
        return self.start_combat(enemies, current_floor)

    def force_end_combat(self) -> ActionResult:
        """End the encounter with no winner."""
        logger.warning("Forcing combat end")
        return self.end_combat(victory=None)

    def _finish_encounter(self) -> None:
        self._enemies = {}
        clear_context()

    # =========================================================================
    # Action routing
    # =========================================================================

    def handle_action(self, request: ActionRequest | Mapping[str, Any]) -> ActionResult:
        """Dispatch an externally issued action.

        Args:
            request: An ActionRequest or its dictionary form.

        Returns:
            ActionResult; rejected actions carry a reason and change nothing.
        """
        if not isinstance(request, ActionRequest):
            try:
                request = ActionRequest.model_validate(request)
            except PydanticValidationError as exc:
                return ActionResult(
                    success=False,
                    reason=f"Invalid action: {exc.errors()[0]['msg']}",
                )

        with log_context(action=request.type, actor_id=request.entity_id):
            logger.debug("Handling action")
            match request.type:
                case ActionType.USE_SKILL:
                    return self._handle_use_skill(request)
                case ActionType.END_TURN:
                    return self._handle_end_turn(request)
                case ActionType.GET_COMBAT_STATE:
                    return ActionResult(success=True, state=self.get_combat_state())
                case _:
                    return ActionResult(
                        success=False,
                        reason=f"Unknown combat message type: {request.type}",
                    )

    def _handle_use_skill(self, request: ActionRequest) -> ActionResult:
        entity = self._party.get(request.entity_id or "")
        if entity is None:
            return ActionResult(success=False, reason=f"Unknown entity: {request.entity_id}")

        data = request.data
        ability_key = data.get("skillId") or data.get("abilityKey")
        if not ability_key:
            return ActionResult(success=False, reason="Missing skillId")

        if self.in_combat:
            current = self.scheduler.current_entity
            if current is None or current.id != entity.id:
                return ActionResult(success=False, reason="Not your turn")

        target: Entity | None = None
        target_id = data.get("targetId")
        if target_id:
            target = self.find_entity(target_id)
            if target is None:
                return ActionResult(success=False, reason=f"Target not found: {target_id}")
            if not target.alive:
                return ActionResult(success=False, reason="Target is not alive")

        target_position = _parse_position(data)
        ability = self.engine.catalog.get(ability_key)
        if (
            target_position is not None
            and ability is not None
            and "movement" in ability.effects
            and self.engine.can_use_ability(entity, ability_key, target).can_use
        ):
            reason = self._check_destination(entity, ability_key, target_position)
            if reason is not None:
                return ActionResult(success=False, reason=reason)

        result = self.engine.use_ability(entity, ability_key, target, target_position)
        events = list(result.events)
        self._emit(events)

        turn: TurnResult | None = None
        if self.in_combat and result.success:
            for participant in self.scheduler.participants:
                if not participant.alive:
                    self.scheduler.remove_from_turn_order(participant.id)
            turn = self.scheduler.check_end_conditions()
            if turn is not None:
                self._emit(turn.events)
                events.extend(turn.events)
                self._finish_encounter()

        return ActionResult(
            success=result.success,
            reason=result.reason,
            ability=result,
            turn=turn,
            events=events,
        )

    def _check_destination(self, entity: Entity, ability_key: str, destination: Position) -> str | None:
        if not self.scheduler.is_valid_position(destination.x, destination.y):
            return f"Invalid destination ({destination.x}, {destination.y})"
        reach = self.engine.catalog.calculate_range(entity, ability_key)
        distance = entity.position.distance_to(destination)
        if distance == 0 or distance > reach:
            return f"Destination out of reach ({distance} > {reach})"
        return None

    def _handle_end_turn(self, request: ActionRequest) -> ActionResult:
        if not self.in_combat:
            return ActionResult(success=False, reason="Not in combat")

        turn = self.scheduler.end_turn(request.entity_id)
        if not turn.success:
            return ActionResult(success=False, reason=turn.reason, turn=turn)

        self._emit(turn.events)
        if turn.combat_ended:
            self._finish_encounter()
        return ActionResult(success=True, turn=turn, events=turn.events)

    # =========================================================================
    # State
    # =========================================================================

    def get_combat_state(self) -> CombatSnapshot:
        """Read-only snapshot of the encounter (or the party when idle)."""
        state = self.scheduler.state
        entities = self.scheduler.participants if self.in_combat else self.party
        entry = self.scheduler.current_entry
        return CombatSnapshot(
            in_combat=self.in_combat,
            phase=state.phase,
            round=state.round,
            floor=state.floor,
            current_entity_id=entry.entity_id if entry else None,
            order=list(state.order),
            participants=[_participant_view(entity) for entity in entities],
            combat_log=self.combat_log,
        )

    def _emit(self, events: Iterable[CombatEvent]) -> None:
        for event in events:
            self._log.append(event)
            if self._sink is not None:
                self._sink(event)


# =============================================================================
# Helpers
# =============================================================================


def _parse_position(data: Mapping[str, Any]) -> Position | None:
    position = data.get("targetPosition")
    if isinstance(position, Mapping) and "x" in position and "y" in position:
        return Position(x=int(position["x"]), y=int(position["y"]))
    if data.get("targetX") is not None and data.get("targetY") is not None:
        return Position(x=int(data["targetX"]), y=int(data["targetY"]))
    return None


def _participant_view(entity: Entity) -> ParticipantView:
    return ParticipantView(
        id=entity.id,
        name=entity.name,
        entity_type=entity.entity_type,
        health=entity.health,
        max_health=entity.max_health,
        ap=entity.ap,
        max_ap=entity.max_ap,
        x=entity.x,
        y=entity.y,
        alive=entity.alive,
        status_effects=sorted(entity.status_effects),
    )


def create_orchestrator(
    party: Iterable[Entity],
    settings: Settings | None = None,
    dice: DiceRoller | None = None,
    *,
    sink: EventSink | None = None,
    load_content: bool = True,
) -> CombatOrchestrator:
    """Wire the default catalog, ledger, tracker, slots, engine and scheduler.

    Args:
        party: Player-controlled entities.
        settings: Engine settings; defaults to ``get_settings()``.
        dice: Dice roller; defaults to one seeded from the settings.
        sink: Optional event sink.
        load_content: Register the sample abilities and status effects.

    Returns:
        A ready CombatOrchestrator.
    """
    settings = settings or get_settings()
    combat = settings.combat
    dice = dice or DiceRoller(seed=combat.rng_seed)

    catalog = AbilityCatalog()
    ledger = StatusEffectLedger()
    if load_content:
        load_default_abilities(catalog)
        load_default_status_effects(ledger)

    engine = AbilityResolutionEngine(
        catalog,
        AbilitySlotManager(swap_cooldown=combat.slot_swap_cooldown),
        SkillProgressionTracker(),
        ledger,
        dice,
        stun_duration=combat.stun_default_duration,
        defense_bonus_duration=combat.defense_bonus_default_duration,
    )
    scheduler = TurnScheduler(engine, combat)
    engine.position_oracle = scheduler.is_valid_position
    return CombatOrchestrator(party, engine, scheduler, sink=sink)


__all__ = [
    "EventSink",
    "CombatOrchestrator",
    "create_orchestrator",
]
