"""Pydantic V2 schemas for status effects.

Definitions describe what a status effect is; ``ActiveStatus`` records are
what an entity currently carries.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from dungeon_tactics.models.enums import StatusEffectType, StatusScalingMode, TickTiming


class StatusProperty(BaseModel):
    """A scalable numeric property of a status effect."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base: float = 0.0
    scaling: StatusScalingMode = StatusScalingMode.NONE


PropertyValue = StatusProperty | bool | int | float | str | list[str]


class StatusEffectDefinition(BaseModel):
    """A registered status effect.

    Attributes:
        key: Unique ledger key.
        name: Display name.
        description: Rules text.
        type: Effect family.
        stackable: Whether more than one stack may be applied.
        max_stacks: Stack cap for stackable effects (None means unbounded).
        tick_timing: When the effect does its work.
        properties: Scalable properties or fixed values. A string
            ``resistance`` property names the entity resistance that blocks it.
        interactions: Advisory relations to other effects, such as
            ``removed_by`` or ``immune_if``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    key: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    type: StatusEffectType
    stackable: bool = False
    max_stacks: int | None = Field(default=None, ge=1)
    tick_timing: TickTiming
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    interactions: dict[str, list[str] | bool] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_stacking(self) -> StatusEffectDefinition:
        """Non-stackable effects carry a single stack."""
        if not self.stackable and self.max_stacks not in (None, 1):
            raise ValueError("max_stacks requires stackable=True")
        return self

    @property
    def resistance(self) -> str | None:
        """Name of the resistance that blocks this effect, if any."""
        value = self.properties.get("resistance")
        return value if isinstance(value, str) else None


class ActiveStatus(BaseModel):
    """A status effect currently applied to an entity."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    duration: int = Field(ge=0, description="Turns remaining")
    stacks: int = Field(default=1, ge=1, description="Applied stacks")


class TemporaryEffect(BaseModel):
    """A timed stat buff such as ``defenseBonus``."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    value: float
    duration: int = Field(ge=0, description="Turns remaining")


__all__ = [
    "StatusProperty",
    "PropertyValue",
    "StatusEffectDefinition",
    "ActiveStatus",
    "TemporaryEffect",
]
