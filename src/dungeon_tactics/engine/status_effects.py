"""Status effect ledger.

A read-only lookup service for status effect definitions. It answers
stacking, strength and resistance questions for the resolution engine and
never mutates entities.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from dungeon_tactics.core.constants import SKILL_SCALING_PER_LEVEL
from dungeon_tactics.core.exceptions import StatusEffectRegistrationError
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.models.enums import StatusEffectType, StatusScalingMode
from dungeon_tactics.models.status_effects import StatusEffectDefinition, StatusProperty


if TYPE_CHECKING:
    from collections.abc import Iterable

    from dungeon_tactics.models.entities import Entity


logger = get_logger(__name__)

_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "name"),
    ("type", "type"),
    ("tick_timing", "tickTiming"),
)


class StatusEffectLedger:
    """Registry of status effect definitions.

    Example:
        >>> ledger = StatusEffectLedger()
        >>> load_default_status_effects(ledger)
        >>> ledger.can_stack("burn", 2)
        True
    """

    def __init__(self) -> None:
        self._effects: dict[str, StatusEffectDefinition] = {}

    def __len__(self) -> int:
        return len(self._effects)

    def __contains__(self, key: object) -> bool:
        return key in self._effects

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, key: str, data: Mapping[str, Any]) -> StatusEffectDefinition:
        """Register a status effect.

        Args:
            key: Unique ledger key.
            data: Definition fields in camelCase or snake_case.

        Returns:
            The validated definition.

        Raises:
            StatusEffectRegistrationError: If a required field is missing or
                a value fails validation.
        """
        for snake, camel in _REQUIRED_FIELDS:
            if data.get(snake) is None and data.get(camel) is None:
                raise StatusEffectRegistrationError(
                    f"Status effect {key!r} missing required field: {snake}",
                    effect_key=key,
                    field_name=snake,
                )

        try:
            definition = StatusEffectDefinition.model_validate({**data, "key": key})
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field_name = ".".join(str(part) for part in first["loc"])
            raise StatusEffectRegistrationError(
                f"Invalid status effect {key!r}: {first['msg']}",
                effect_key=key,
                field_name=field_name,
                invalid_value=first.get("input"),
            ) from exc

        if key in self._effects:
            logger.warning("Status effect replaced", effect=key)
        self._effects[key] = definition
        logger.debug("Status effect registered", effect=key, type=definition.type)
        return definition

    def register_many(self, effects: Iterable[Mapping[str, Any]]) -> int:
        """Register definitions that each carry their own ``key``.

        Returns:
            Number of effects registered.
        """
        count = 0
        for data in effects:
            payload = dict(data)
            key = payload.pop("key", None)
            if not key:
                raise StatusEffectRegistrationError(
                    "Status effect missing required field: key",
                    field_name="key",
                )
            self.register(key, payload)
            count += 1
        return count

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, key: str) -> StatusEffectDefinition | None:
        return self._effects.get(key)

    def all(self) -> list[StatusEffectDefinition]:
        return list(self._effects.values())

    def by_type(self, effect_type: StatusEffectType | str) -> list[StatusEffectDefinition]:
        """Get every effect of one family."""
        return [effect for effect in self._effects.values() if effect.type == effect_type]

    def summary(self) -> dict[str, list[str]]:
        """Group effect keys by type."""
        by_type: dict[str, list[str]] = {}
        for effect in self._effects.values():
            by_type.setdefault(effect.type.value, []).append(effect.key)
        return by_type

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def can_stack(self, key: str, current_stacks: int = 0) -> bool:
        """Check whether one more stack may be applied.

        Unknown effects never stack. Non-stackable effects may only be
        applied when absent; stackable ones up to ``max_stacks``.
        """
        effect = self._effects.get(key)
        if effect is None:
            return False
        if not effect.stackable:
            return current_stacks == 0
        if effect.max_stacks is None:
            return True
        return current_stacks < effect.max_stacks

    def calculate_strength(
        self,
        key: str,
        source: Entity | None,
        property_key: str,
    ) -> float:
        """Resolve a numeric property against the entity that applied it.

        Scaling modes:
            none: the base value.
            source_skill: base + the source's highest skill level x 0.1.
            source_weapon: base x the source's average weapon damage.

        Args:
            key: Status effect key.
            source: Entity that applied the effect, if known.
            property_key: Property to resolve.

        Returns:
            The resolved value; 0 for unknown effects and absent or
            non-numeric properties.
        """
        effect = self._effects.get(key)
        if effect is None:
            return 0.0

        prop = effect.properties.get(property_key)
        if isinstance(prop, bool) or prop is None:
            return 0.0
        if isinstance(prop, int | float):
            return float(prop)
        if not isinstance(prop, StatusProperty):
            return 0.0

        value = prop.base
        if source is None:
            return value

        match prop.scaling:
            case StatusScalingMode.SOURCE_SKILL:
                if source.skills:
                    best = max(record.level for record in source.skills.values())
                    value += best * SKILL_SCALING_PER_LEVEL
            case StatusScalingMode.SOURCE_WEAPON:
                weapon = source.equipment.weapon
                if weapon is not None:
                    value *= weapon.average_damage
            case StatusScalingMode.NONE:
                pass

        return value

    def has_resistance(self, entity: Entity, key: str) -> bool:
        """Check if the entity resists the effect's named resistance."""
        effect = self._effects.get(key)
        if effect is None or effect.resistance is None:
            return False
        return entity.resistances.get(effect.resistance, 0) > 0


__all__ = [
    "StatusEffectLedger",
]
