"""Pydantic V2 schemas for use-driven skill progression."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from dungeon_tactics.core.constants import MAX_SKILL_LEVEL
from dungeon_tactics.models.events import CombatEvent


class SkillRecord(BaseModel):
    """Progress in a single skill.

    The level is always the dense function of xp given by the progression
    table; only the progression tracker writes these fields.

    Attributes:
        level: Current level, 0-100.
        xp: Total experience, never decreases.
        use_count: Number of qualifying uses recorded.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    level: int = Field(default=0, ge=0, le=MAX_SKILL_LEVEL, description="Skill level")
    xp: int = Field(default=0, ge=0, description="Total experience")
    use_count: int = Field(default=0, ge=0, description="Qualifying uses")


class SkillAward(BaseModel):
    """Outcome of awarding one use of a skill."""

    model_config = ConfigDict(extra="forbid")

    skill_key: str
    awarded: bool = Field(description="False when the entity does not track the skill")
    old_level: int = 0
    new_level: int = 0
    xp: int = 0
    event: CombatEvent | None = None

    @computed_field(description="Whether the award crossed a level threshold")
    @property
    def leveled_up(self) -> bool:
        """Check if the level changed."""
        return self.new_level > self.old_level


__all__ = [
    "SkillRecord",
    "SkillAward",
]
