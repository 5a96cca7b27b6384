"""Structured combat events.

Events are plain records returned from engine calls. A presentation or
network layer can broadcast them verbatim; the engine itself never needs a
live subscriber.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dungeon_tactics.models.enums import EventType


class CombatEvent(BaseModel):
    """A single observable state change.

    Attributes:
        type: What happened.
        entity_id: The acting or affected entity.
        target_id: Secondary entity (the target of an ability, the killer).
        ability_key: Ability involved, if any.
        skill_key: Skill involved, if any.
        data: Numeric deltas and other payload.
        timestamp: When the event was produced (UTC).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: EventType = Field(description="Event type")
    entity_id: str | None = Field(default=None, description="Primary entity")
    target_id: str | None = Field(default=None, description="Secondary entity")
    ability_key: str | None = Field(default=None, description="Ability involved")
    skill_key: str | None = Field(default=None, description="Skill involved")
    data: dict[str, Any] = Field(default_factory=dict, description="Event payload")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Creation time",
    )

    def to_message(self) -> dict[str, Any]:
        """Serialize for broadcast.

        Returns:
            JSON-compatible dictionary.
        """
        return self.model_dump(mode="json", exclude_none=True)


__all__ = [
    "CombatEvent",
]
