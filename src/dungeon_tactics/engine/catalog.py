"""Ability catalog.

The catalog validates ability content at registration time and answers
requirement and effective-number questions (success rate, AP cost, range)
for a given entity. It is constructed once and injected into the
components that need it; it is never a module global.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from dungeon_tactics.core.constants import MAX_SUCCESS_RATE, MIN_SUCCESS_RATE
from dungeon_tactics.core.exceptions import AbilityRegistrationError
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.models.abilities import (
    AbilityDefinition,
    CatalogStats,
    NearUnlockAbility,
    RequirementCheck,
    UnlockedAbility,
)
from dungeon_tactics.models.enums import AbilityType


if TYPE_CHECKING:
    from collections.abc import Iterable

    from dungeon_tactics.models.entities import Entity


logger = get_logger(__name__)

_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "name"),
    ("description", "description"),
    ("type", "type"),
    ("category", "category"),
    ("base_success_rate", "baseSuccessRate"),
)


# =============================================================================
# Base Abilities
# =============================================================================

BASE_ABILITIES: dict[str, dict[str, Any]] = {
    "move": {
        "name": "Move",
        "description": "Move to an adjacent position",
        "type": "active",
        "category": "movement",
        "apCost": 0,
        "range": 1,
        "baseSuccessRate": 100,
        "effects": {"movement": {"base": 1, "scaling": "none"}},
    },
    "basic_attack": {
        "name": "Basic Attack",
        "description": "A simple weapon attack using your equipped weapon",
        "type": "active",
        "category": "combat",
        "apCost": 1,
        "range": 1,
        "requiresTarget": True,
        "baseSuccessRate": 50,
        "effects": {
            "damage": {"base": 1, "scaling": "weapon"},
            "accuracy": {"base": 0.5, "scaling": "weapon_skill"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "one_handed", "multiplier": 2.0},
                {"skill": "two_handed", "multiplier": 2.0},
                {"skill": "unarmed", "multiplier": 2.0},
            ],
        },
    },
    "wait": {
        "name": "Wait",
        "description": "Skip your turn and recover some AP",
        "type": "active",
        "category": "utility",
        "apCost": 0,
        "baseSuccessRate": 100,
        "effects": {"apRecover": {"base": 1, "scaling": "none"}},
    },
    "defend": {
        "name": "Defend",
        "description": "Take a defensive stance, increasing damage resistance",
        "type": "active",
        "category": "defensive",
        "apCost": 1,
        "skillRequirements": [{"skill": "armor_use", "level": 0}],
        "baseSuccessRate": 80,
        "effects": {
            "defenseBonus": {"base": 2, "scaling": "skill"},
            "duration": {"base": 1, "scaling": "none"},
        },
        "scaling": {
            "effectiveness": [
                {"skill": "armor_use", "multiplier": 1.5},
                {"skill": "shields", "multiplier": 1.8},
                {"skill": "toughness", "multiplier": 1.3},
            ],
        },
    },
}
"""Abilities every catalog starts with."""


class AbilityCatalog:
    """Registry of ability definitions.

    Example:
        >>> catalog = AbilityCatalog()
        >>> catalog.has("basic_attack")
        True
        >>> catalog.calculate_success_rate(hero, "basic_attack")
        50.0
    """

    def __init__(self, *, include_base_abilities: bool = True) -> None:
        """Initialize the catalog.

        Args:
            include_base_abilities: Register move, basic_attack, wait and
                defend.
        """
        self._abilities: dict[str, AbilityDefinition] = {}
        if include_base_abilities:
            for key, data in BASE_ABILITIES.items():
                self.register(key, data)

    def __len__(self) -> int:
        return len(self._abilities)

    def __contains__(self, key: object) -> bool:
        return key in self._abilities

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, key: str, data: Mapping[str, Any]) -> AbilityDefinition:
        """Validate and register an ability.

        Optional fields default to zero cost, zero range, no cooldown, no
        target and empty requirement lists. Field names may be camelCase or
        snake_case.

        Args:
            key: Unique catalog key.
            data: Ability fields.

        Returns:
            The validated definition.

        Raises:
            AbilityRegistrationError: If a required field is missing, the
                type is not active or passive, or any value (including an
                effect's scaling mode) fails validation.
        """
        for snake, camel in _REQUIRED_FIELDS:
            if data.get(snake) is None and data.get(camel) is None:
                raise AbilityRegistrationError(
                    f"Ability {key!r} missing required field: {camel}",
                    ability_key=key,
                    field_name=snake,
                )

        ability_type = data.get("type")
        if ability_type not in {member.value for member in AbilityType}:
            raise AbilityRegistrationError(
                f"Invalid ability type for {key!r}: {ability_type}",
                ability_key=key,
                field_name="type",
                invalid_value=ability_type,
            )

        try:
            ability = AbilityDefinition.model_validate({**data, "key": key})
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field_name = ".".join(str(part) for part in first["loc"])
            raise AbilityRegistrationError(
                f"Invalid ability {key!r} at {field_name}: {first['msg']}",
                ability_key=key,
                field_name=field_name,
                invalid_value=first.get("input"),
            ) from exc

        if key in self._abilities:
            logger.warning("Ability replaced", ability=key)
        self._abilities[key] = ability
        logger.debug("Ability registered", ability=key, type=ability.type, category=ability.category)
        return ability

    def register_many(self, abilities: Iterable[Mapping[str, Any]]) -> int:
        """Register definitions that each carry their own ``key``.

        Returns:
            Number of abilities registered.

        Raises:
            AbilityRegistrationError: On the first invalid definition.
        """
        count = 0
        for data in abilities:
            payload = dict(data)
            key = payload.pop("key", None)
            if not key:
                raise AbilityRegistrationError(
                    "Ability missing required field: key",
                    field_name="key",
                )
            self.register(key, payload)
            count += 1
        logger.info("Abilities registered", count=count, total=len(self._abilities))
        return count

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, key: str) -> AbilityDefinition | None:
        return self._abilities.get(key)

    def has(self, key: str) -> bool:
        return key in self._abilities

    def all(self) -> list[AbilityDefinition]:
        """Every ability in registration order."""
        return list(self._abilities.values())

    def by_type(self, ability_type: AbilityType | str) -> list[AbilityDefinition]:
        return [ability for ability in self._abilities.values() if ability.type == ability_type]

    def by_category(self, category: str) -> list[AbilityDefinition]:
        return [ability for ability in self._abilities.values() if ability.category == category]

    def stats(self) -> CatalogStats:
        """Count abilities by type and category."""
        by_type = {member.value: 0 for member in AbilityType}
        by_category: dict[str, int] = {}
        for ability in self._abilities.values():
            by_type[ability.type.value] += 1
            by_category[ability.category] = by_category.get(ability.category, 0) + 1
        return CatalogStats(total=len(self._abilities), by_type=by_type, by_category=by_category)

    # -------------------------------------------------------------------------
    # Requirements
    # -------------------------------------------------------------------------

    def meets_skill_requirements(self, entity: Entity, key: str) -> RequirementCheck:
        """Check every (skill, level) requirement.

        Untracked skills count as level 0, so level-0 requirements are met
        by everyone.
        """
        ability = self._abilities.get(key)
        if ability is None:
            return RequirementCheck(meets=False, reason="Ability not found")

        for requirement in ability.skill_requirements:
            current = entity.skill_level(requirement.skill)
            if current < requirement.level:
                return RequirementCheck(
                    meets=False,
                    reason=(
                        f"Requires {requirement.skill} level {requirement.level} "
                        f"(current: {current})"
                    ),
                    missing=(requirement.skill,),
                )
        return RequirementCheck(meets=True)

    def meets_prerequisites(self, entity: Entity, key: str) -> RequirementCheck:
        """Check that every prerequisite ability is unlocked."""
        ability = self._abilities.get(key)
        if ability is None:
            return RequirementCheck(meets=False, reason="Ability not found")

        for prerequisite in ability.prerequisites:
            if prerequisite not in entity.unlocked_abilities:
                known = self._abilities.get(prerequisite)
                name = known.name if known else prerequisite
                return RequirementCheck(
                    meets=False,
                    reason=f"Requires ability: {name}",
                    missing=(prerequisite,),
                )
        return RequirementCheck(meets=True)

    def can_unlock(self, entity: Entity, key: str) -> RequirementCheck:
        """Skill requirements first, then prerequisites."""
        skill_check = self.meets_skill_requirements(entity, key)
        if not skill_check.meets:
            return skill_check
        return self.meets_prerequisites(entity, key)

    # -------------------------------------------------------------------------
    # Effective numbers
    # -------------------------------------------------------------------------

    def calculate_success_rate(self, entity: Entity, key: str) -> float:
        """Base rate plus effectiveness bonuses, clamped to [5, 95].

        Returns:
            The effective success rate; 0 for unknown abilities.
        """
        ability = self._abilities.get(key)
        if ability is None:
            return 0.0

        rate = ability.base_success_rate
        for bonus in ability.scaling.effectiveness:
            rate += entity.skill_level(bonus.skill) * bonus.multiplier
        return float(min(MAX_SUCCESS_RATE, max(MIN_SUCCESS_RATE, rate)))

    def calculate_ap_cost(self, entity: Entity, key: str) -> int:
        """Base cost minus skill reductions.

        Abilities with a nonzero base cost never drop below 1 AP.
        """
        ability = self._abilities.get(key)
        if ability is None:
            return 0

        cost = ability.ap_cost
        if cost == 0:
            return 0
        for reduction in ability.scaling.ap_reduction:
            steps = math.floor(entity.skill_level(reduction.skill) / reduction.levels_per)
            cost -= steps * reduction.reduction
        return max(1, cost)

    def calculate_range(self, entity: Entity, key: str) -> int:
        """Base range plus skill increases."""
        ability = self._abilities.get(key)
        if ability is None:
            return 0

        value = ability.range
        for increase in ability.scaling.range_increase:
            steps = math.floor(entity.skill_level(increase.skill) / increase.levels_per)
            value += steps * increase.increase
        return value

    # -------------------------------------------------------------------------
    # Unlock queries
    # -------------------------------------------------------------------------

    def get_unlocked_abilities(self, entity: Entity) -> list[UnlockedAbility]:
        """Every ability the entity meets the requirements for."""
        unlocked: list[UnlockedAbility] = []
        for ability in self._abilities.values():
            if not self.can_unlock(entity, ability.key).meets:
                continue
            unlocked.append(
                UnlockedAbility(
                    ability=ability,
                    success_rate=self.calculate_success_rate(entity, ability.key),
                    ap_cost=self.calculate_ap_cost(entity, ability.key),
                    range=self.calculate_range(entity, ability.key),
                )
            )
        return unlocked

    def get_near_unlock_abilities(
        self,
        entity: Entity,
        level_threshold: int = 5,
    ) -> list[NearUnlockAbility]:
        """Abilities within ``level_threshold`` levels of every requirement.

        Returns:
            Matches sorted by the most levels still needed on any one skill,
            fewest first.
        """
        near: list[NearUnlockAbility] = []
        for ability in self._abilities.values():
            if not ability.skill_requirements or self.can_unlock(entity, ability.key).meets:
                continue

            missing: dict[str, int] = {}
            reachable = True
            for requirement in ability.skill_requirements:
                needed = max(0, requirement.level - entity.skill_level(requirement.skill))
                if needed > level_threshold:
                    reachable = False
                    break
                if needed > 0:
                    missing[requirement.skill] = needed

            if reachable and missing:
                near.append(
                    NearUnlockAbility(
                        ability=ability,
                        levels_needed=max(missing.values()),
                        missing_skills=missing,
                    )
                )

        near.sort(key=lambda item: item.levels_needed)
        return near


__all__ = [
    "BASE_ABILITIES",
    "AbilityCatalog",
]
