"""Pydantic V2 schema for combat entities.

A single ``Entity`` model covers players and enemies; ``entity_type``
decides which side it fights on and whether its turns are driven by the AI
step. Entities are created by the host and handed to the engine, which
mutates them in place.
"""

from __future__ import annotations

from typing import Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from dungeon_tactics.models.abilities import AbilitySlots
from dungeon_tactics.models.enums import EnemyRole, EntityType
from dungeon_tactics.models.skills import SkillRecord
from dungeon_tactics.models.status_effects import ActiveStatus, TemporaryEffect


DEFENSE_BONUS_EFFECT = "defenseBonus"


# =============================================================================
# Geometry
# =============================================================================


class Position(BaseModel):
    """A tile coordinate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: int
    y: int

    def distance_to(self, other: Position) -> int:
        """Manhattan distance to another position."""
        return abs(self.x - other.x) + abs(self.y - other.y)


# =============================================================================
# Equipment
# =============================================================================


class Weapon(BaseModel):
    """Equipped weapon; its damage range drives ``weapon`` scaling."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    damage_min: int = Field(ge=0)
    damage_max: int = Field(ge=0)

    @model_validator(mode="after")
    def check_range(self) -> Self:
        if self.damage_max < self.damage_min:
            raise ValueError("damage_max must be >= damage_min")
        return self

    @computed_field(description="Mean of the damage range")
    @property
    def average_damage(self) -> float:
        return (self.damage_min + self.damage_max) / 2


class Shield(BaseModel):
    """Equipped shield; its defense drives ``shield`` scaling."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    defense: float = Field(ge=0)


class Equipment(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    weapon: Weapon | None = None
    shield: Shield | None = None


# =============================================================================
# Entity
# =============================================================================


class Entity(BaseModel):
    """A player or enemy taking part in exploration and combat.

    Attributes:
        id: Unique entity identifier.
        name: Display name.
        entity_type: Player or enemy.
        health: Current health, never below 0.
        max_health: Health cap for healing.
        ap: Current action points.
        max_ap: AP restored at the start of each turn. When unset the
            turn scheduler fills in the configured default for the side.
        x: Column on the arena grid.
        y: Row on the arena grid.
        defense: Flat armor subtracted from incoming damage.
        damage_reduction: Fraction of post-armor damage ignored (0..1).
        initiative_bonus: Added to the initiative d20.
        damage: (low, high) range rolled by the enemy basic attack.
        tier: Enemy tier, drives auto-slot counts.
        role: Enemy role, drives auto-slot category order.
        skills: Skill progress by skill key.
        ability_cooldowns: Turns remaining by ability key.
        status_effects: Applied status effects by ledger key.
        temporary_effects: Timed stat buffs by effect name.
        ability_slots: Active and passive slots.
        unlocked_abilities: Ability keys the entity has unlocked.
        equipment: Weapon and shield.
        resistances: Resistance strength by resistance name.
        in_combat: Whether the entity is in an active encounter.
        alive: False once health reaches 0.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(min_length=1, description="Unique entity ID")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    entity_type: EntityType = Field(description="Player or enemy")
    health: int = Field(ge=0, description="Current health")
    max_health: int = Field(ge=1, description="Maximum health")
    ap: int = Field(default=0, ge=0, description="Current action points")
    max_ap: int | None = Field(
        default=None,
        ge=0,
        description="Action points per turn; the side default applies when unset",
    )
    x: int = Field(default=0, description="Grid column")
    y: int = Field(default=0, description="Grid row")
    defense: float = Field(default=0.0, ge=0, description="Flat armor")
    damage_reduction: float = Field(default=0.0, ge=0, le=1, description="Damage fraction ignored")
    initiative_bonus: int = Field(default=0, description="Initiative modifier")
    damage: tuple[int, int] = Field(default=(1, 3), description="Basic attack damage range")
    tier: int = Field(default=1, ge=1, description="Enemy tier")
    role: EnemyRole = Field(default=EnemyRole.BALANCED, description="Enemy role")
    skills: dict[str, SkillRecord] = Field(default_factory=dict)
    ability_cooldowns: dict[str, int] = Field(default_factory=dict)
    status_effects: dict[str, ActiveStatus] = Field(default_factory=dict)
    temporary_effects: dict[str, TemporaryEffect] = Field(default_factory=dict)
    ability_slots: AbilitySlots = Field(default_factory=AbilitySlots)
    unlocked_abilities: set[str] = Field(default_factory=set)
    equipment: Equipment = Field(default_factory=Equipment)
    resistances: dict[str, float] = Field(default_factory=dict)
    in_combat: bool = False
    alive: bool = True

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        if self.health > self.max_health:
            raise ValueError("health cannot exceed max_health")
        low, high = self.damage
        if low < 0 or high < low:
            raise ValueError("damage must be a (low, high) range with 0 <= low <= high")
        return self

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def is_player(self) -> bool:
        return self.entity_type == EntityType.PLAYER

    @property
    def is_enemy(self) -> bool:
        return self.entity_type == EntityType.ENEMY

    @property
    def position(self) -> Position:
        """Current grid position."""
        return Position(x=self.x, y=self.y)

    @property
    def health_fraction(self) -> float:
        return self.health / self.max_health

    @property
    def effective_defense(self) -> float:
        """Armor including any active ``defenseBonus`` buff."""
        bonus = self.temporary_effects.get(DEFENSE_BONUS_EFFECT)
        return self.defense + (bonus.value if bonus else 0.0)

    def distance_to(self, other: Entity) -> int:
        """Manhattan distance to another entity."""
        return abs(self.x - other.x) + abs(self.y - other.y)

    def skill_level(self, skill_key: str) -> int:
        """Level in a skill, 0 when the skill is not tracked."""
        record = self.skills.get(skill_key)
        return record.level if record else 0

    def tracks_skill(self, skill_key: str) -> bool:
        return skill_key in self.skills

    def move_to(self, x: int, y: int) -> None:
        """Relocate without any collision check."""
        self.x = x
        self.y = y

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reset_combat_state(self) -> None:
        """Clear per-encounter state.

        Cooldowns, status effects, temporary effects and the slot lock do
        not survive an encounter. Skills and slots themselves do.
        """
        self.ability_cooldowns.clear()
        self.status_effects.clear()
        self.temporary_effects.clear()
        self.ability_slots.swap_cooldown = 0
        self.in_combat = False


__all__ = [
    "DEFENSE_BONUS_EFFECT",
    "Position",
    "Weapon",
    "Shield",
    "Equipment",
    "Entity",
]
