"""Pydantic V2 schemas for abilities and ability slots.

Ability content is authored as plain data, usually in camelCase
(``apCost``, ``skillRequirements``). Definitions accept either camelCase or
snake_case field names and are frozen once built.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from dungeon_tactics.core.constants import MAX_ACTIVE_SLOTS, MAX_PASSIVE_SLOTS
from dungeon_tactics.models.enums import AbilityType, ScalingMode, SlotType


_CONTENT_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


# =============================================================================
# Ability Definition Parts
# =============================================================================


class SkillRequirement(BaseModel):
    """Minimum level in a skill needed to use an ability."""

    model_config = _CONTENT_CONFIG

    skill: str = Field(min_length=1)
    level: int = Field(default=0, ge=0)


class EffectSpec(BaseModel):
    """Base magnitude of one named effect and how it scales."""

    model_config = _CONTENT_CONFIG

    base: float = Field(description="Unscaled magnitude")
    scaling: ScalingMode = Field(default=ScalingMode.NONE, description="Scaling mode")


class EffectivenessBonus(BaseModel):
    """Additive bonus of skill level x multiplier applied to every effect."""

    model_config = _CONTENT_CONFIG

    skill: str = Field(min_length=1)
    multiplier: float


class ApReduction(BaseModel):
    """AP cost reduction per block of skill levels."""

    model_config = _CONTENT_CONFIG

    skill: str = Field(min_length=1)
    levels_per: int = Field(ge=1)
    reduction: int = Field(ge=0)


class RangeIncrease(BaseModel):
    """Range increase per block of skill levels."""

    model_config = _CONTENT_CONFIG

    skill: str = Field(min_length=1)
    levels_per: int = Field(ge=1)
    increase: int = Field(ge=0)


class AbilityScaling(BaseModel):
    """Skill-driven modifiers declared by an ability."""

    model_config = _CONTENT_CONFIG

    effectiveness: tuple[EffectivenessBonus, ...] = ()
    ap_reduction: tuple[ApReduction, ...] = ()
    range_increase: tuple[RangeIncrease, ...] = ()


class AbilityDefinition(BaseModel):
    """A registered ability.

    Attributes:
        key: Unique catalog key.
        name: Display name.
        description: Flavor and rules text.
        type: Active abilities are rolled; passives always resolve.
        category: Free-form grouping (combat, defensive, magic, ...).
        ap_cost: Base AP cost before skill reductions.
        range: Base range in tiles; 0 means range is not checked.
        cooldown: Turns before the ability can be used again.
        requires_target: Whether a target entity must be supplied.
        skill_requirements: Minimum skill levels; the first is the primary skill.
        prerequisites: Ability keys that must be unlocked first.
        base_success_rate: Percent chance before skill bonuses (may be negative).
        effects: Named effects and their scaling.
        scaling: Effectiveness, AP reduction and range increase tables.
        tags: Free-form tags; ``low_health_only`` gates use on health.
        unlock_message: Optional text shown when the ability unlocks.
    """

    model_config = _CONTENT_CONFIG

    key: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str
    type: AbilityType
    category: str = Field(min_length=1)
    ap_cost: int = Field(default=0, ge=0)
    range: int = Field(default=0, ge=0)
    cooldown: int = Field(default=0, ge=0)
    requires_target: bool = False
    skill_requirements: tuple[SkillRequirement, ...] = ()
    prerequisites: tuple[str, ...] = ()
    base_success_rate: float
    effects: dict[str, EffectSpec] = Field(default_factory=dict)
    scaling: AbilityScaling = Field(default_factory=AbilityScaling)
    tags: tuple[str, ...] = ()
    unlock_message: str | None = None

    @field_validator("skill_requirements", "prerequisites", "tags", mode="before")
    @classmethod
    def none_as_empty(cls, value: object) -> object:
        """Treat an explicit null list as empty."""
        return () if value is None else value

    @computed_field(description="First skill requirement, used by skill scaling")
    @property
    def primary_skill(self) -> str | None:
        """Get the primary skill key."""
        if not self.skill_requirements:
            return None
        return self.skill_requirements[0].skill

    @property
    def is_active(self) -> bool:
        """Check if this ability is rolled when used."""
        return self.type == AbilityType.ACTIVE

    def has_tag(self, tag: str) -> bool:
        """Check for a content tag."""
        return tag in self.tags


# =============================================================================
# Catalog Query Results
# =============================================================================


class RequirementCheck(BaseModel):
    """Whether an entity meets an ability's requirements, and why not."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    meets: bool
    reason: str | None = None
    missing: tuple[str, ...] = ()


class UnlockedAbility(BaseModel):
    """An ability an entity may use, annotated with its effective numbers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ability: AbilityDefinition
    success_rate: float
    ap_cost: int
    range: int


class NearUnlockAbility(BaseModel):
    """An ability the entity is close to unlocking."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ability: AbilityDefinition
    levels_needed: int = Field(ge=0)
    missing_skills: dict[str, int] = Field(default_factory=dict)


class CatalogStats(BaseModel):
    """Counts of registered abilities."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int
    by_type: dict[str, int]
    by_category: dict[str, int]


# =============================================================================
# Ability Slots
# =============================================================================


class AbilitySlots(BaseModel):
    """Active and passive ability slots for one entity.

    Only slotted abilities can be used. An ability key occupies at most one
    slot across both arrays.

    Attributes:
        active: Active slots, bound to hotkeys 1-9.
        passive: Always-on passive slots.
        swap_cooldown: Turns before slots may change again.
        last_swap_at: When the slots last changed.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    active: list[str | None] = Field(
        default_factory=lambda: [None] * MAX_ACTIVE_SLOTS,
        min_length=MAX_ACTIVE_SLOTS,
        max_length=MAX_ACTIVE_SLOTS,
    )
    passive: list[str | None] = Field(
        default_factory=lambda: [None] * MAX_PASSIVE_SLOTS,
        min_length=MAX_PASSIVE_SLOTS,
        max_length=MAX_PASSIVE_SLOTS,
    )
    swap_cooldown: int = Field(default=0, ge=0)
    last_swap_at: datetime | None = None

    def slots_for(self, slot_type: SlotType) -> list[str | None]:
        """Get the slot array for a slot type."""
        return self.active if slot_type == SlotType.ACTIVE else self.passive

    def occupied(self) -> list[str]:
        """Get every slotted key, active first."""
        return [key for key in (*self.active, *self.passive) if key is not None]


class SlotLookup(BaseModel):
    """Where an ability is slotted, if anywhere."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_slotted: bool
    slot_type: SlotType | None = None
    index: int | None = None


__all__ = [
    "SkillRequirement",
    "EffectSpec",
    "EffectivenessBonus",
    "ApReduction",
    "RangeIncrease",
    "AbilityScaling",
    "AbilityDefinition",
    "RequirementCheck",
    "UnlockedAbility",
    "NearUnlockAbility",
    "CatalogStats",
    "AbilitySlots",
    "SlotLookup",
]
