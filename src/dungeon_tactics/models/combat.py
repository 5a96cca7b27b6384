"""Pydantic V2 schemas for turn order, action results and combat snapshots.

Every engine operation that can be rejected returns one of these result
objects with a human-readable ``reason`` instead of raising.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from dungeon_tactics.models.entities import Position
from dungeon_tactics.models.enums import CombatPhase, EntityType
from dungeon_tactics.models.events import CombatEvent
from dungeon_tactics.models.skills import SkillAward


# =============================================================================
# Turn Order
# =============================================================================


class TurnEntry(BaseModel):
    """One participant's place in the initiative order."""

    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    entity_id: str = Field(description="Reference to the entity")
    entity_type: EntityType = Field(description="Side the entity fights on")
    initiative: int = Field(description="Initiative score")


class TurnState(BaseModel):
    """Mutable turn-order state for one encounter.

    Attributes:
        order: Participants sorted by initiative, highest first.
        current_index: Index of the acting participant.
        round: Current round, starting at 1 in combat.
        phase: Exploration or combat.
        floor: Dungeon floor the encounter takes place on.
        encounter_id: Identifier bound into logs for the encounter.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    order: list[TurnEntry] = Field(default_factory=list)
    current_index: int = Field(default=0, ge=0)
    round: int = Field(default=0, ge=0)
    phase: CombatPhase = CombatPhase.EXPLORATION
    floor: int = Field(default=1, ge=1)
    encounter_id: str | None = None

    @computed_field(description="Whether an encounter is running")
    @property
    def in_combat(self) -> bool:
        return self.phase == CombatPhase.COMBAT

    @property
    def current_entry(self) -> TurnEntry | None:
        if not self.order or self.current_index >= len(self.order):
            return None
        return self.order[self.current_index]


class TurnInfo(BaseModel):
    """Read-only view of whose turn it is."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    phase: CombatPhase
    round: int
    current_index: int
    current_entity_id: str | None = None
    current_entity_type: EntityType | None = None
    order: list[TurnEntry] = Field(default_factory=list)


class SurvivorCounts(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    players: int = 0
    enemies: int = 0


class TurnResult(BaseModel):
    """Outcome of starting an encounter or ending a turn."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    reason: str | None = None
    events: list[CombatEvent] = Field(default_factory=list)
    combat_ended: bool = False
    victory: bool | None = None
    survivors: SurvivorCounts | None = None


# =============================================================================
# Ability Use
# =============================================================================


class EffectOutcome(BaseModel):
    """What applying an ability's effects actually changed."""

    model_config = ConfigDict(extra="forbid")

    effects_applied: list[str] = Field(default_factory=list)
    targets_affected: list[str] = Field(default_factory=list)
    damage: int = 0
    healing: int = 0
    status_effects: list[str] = Field(default_factory=list)
    moved_to: Position | None = None
    knocked_back_to: Position | None = None
    ap_recovered: int = 0
    defense_bonus: float = 0.0


class AbilityUseResult(BaseModel):
    """Outcome of an ability use attempt.

    Attributes:
        success: Whether the ability resolved.
        reason: Why the attempt was rejected or failed.
        ability_key: The ability attempted.
        failed_roll: True when eligibility passed but the success roll did not.
        effects: Computed effect magnitudes.
        outcome: What applying those effects changed.
        success_rate: Effective success rate used for the roll.
        roll: The percentile roll drawn.
        ap_spent: AP consumed by the attempt.
        skill_awards: Progression awarded for the use.
        events: Structured events for the presentation layer.
    """

    model_config = ConfigDict(extra="forbid")

    success: bool
    reason: str | None = None
    ability_key: str | None = None
    failed_roll: bool = False
    effects: dict[str, float] = Field(default_factory=dict)
    outcome: EffectOutcome | None = None
    success_rate: float | None = None
    roll: float | None = None
    ap_spent: int = 0
    skill_awards: list[SkillAward] = Field(default_factory=list)
    events: list[CombatEvent] = Field(default_factory=list)


class UsabilityCheck(BaseModel):
    """Eligibility verdict for an ability, without side effects."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    can_use: bool
    reason: str | None = None


class SlotResult(BaseModel):
    """Outcome of a slot or unslot request."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    reason: str | None = None
    previous: str | None = None
    events: list[CombatEvent] = Field(default_factory=list)


# =============================================================================
# Orchestration
# =============================================================================


class ActionRequest(BaseModel):
    """An externally issued action.

    ``type`` is kept as a plain string so that unknown action types can be
    rejected with a reason rather than a validation error.
    """

    model_config = ConfigDict(extra="forbid")

    type: str = Field(min_length=1)
    entity_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class ParticipantView(BaseModel):
    """Snapshot of one participant for the presentation layer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    entity_type: EntityType
    health: int
    max_health: int
    ap: int
    max_ap: int | None
    x: int
    y: int
    alive: bool
    status_effects: list[str] = Field(default_factory=list)


class CombatSnapshot(BaseModel):
    """Read-only state of the current encounter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    in_combat: bool
    phase: CombatPhase
    round: int
    floor: int
    current_entity_id: str | None = None
    order: list[TurnEntry] = Field(default_factory=list)
    participants: list[ParticipantView] = Field(default_factory=list)
    combat_log: list[CombatEvent] = Field(default_factory=list)


class ActionResult(BaseModel):
    """Outcome of an orchestrated action."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    reason: str | None = None
    ability: AbilityUseResult | None = None
    turn: TurnResult | None = None
    state: CombatSnapshot | None = None
    events: list[CombatEvent] = Field(default_factory=list)


__all__ = [
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
]
