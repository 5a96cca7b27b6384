"""Ability use resolution.

``AbilityResolutionEngine.use_ability`` is the single entry point for using
an ability, for players and enemies alike. It runs a fixed pipeline and
stops at the first failure:

1. The ability must be slotted.
2. The ability must exist in the catalog.
3. Eligibility: alive, skill requirements, prerequisites, AP, cooldown,
   target, range, status and tag gates.
4. Success roll (active abilities only). A failed roll consumes 30% of the
   AP cost and nothing else.
5. Full AP cost and cooldown.
6. Effect magnitudes.
7. Effect application.
8. One skill use per tracked skill requirement.
9. ABILITY_USED event and result.

Eligibility failures never mutate state.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from dungeon_tactics.core.constants import (
    FAILED_ROLL_AP_FRACTION,
    GUARANTEED_SUCCESS_RATE,
    LOW_HEALTH_TAG,
    LOW_HEALTH_THRESHOLD,
)
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.engine.effects import EffectApplier, compute_effect_magnitudes
from dungeon_tactics.models.combat import AbilityUseResult, UsabilityCheck
from dungeon_tactics.models.enums import EnemyRole, EventType
from dungeon_tactics.models.events import CombatEvent


if TYPE_CHECKING:
    from dungeon_tactics.engine.catalog import AbilityCatalog
    from dungeon_tactics.engine.dice import DiceRoller
    from dungeon_tactics.engine.effects import PositionOracle
    from dungeon_tactics.engine.progression import SkillProgressionTracker
    from dungeon_tactics.engine.slots import AbilitySlotManager
    from dungeon_tactics.engine.status_effects import StatusEffectLedger
    from dungeon_tactics.models.abilities import AbilityDefinition, UnlockedAbility
    from dungeon_tactics.models.entities import Entity, Position


logger = get_logger(__name__)

ACTIONS_PREVENTED_PROPERTY = "actionsPrevented"


class AbilityResolutionEngine:
    """Resolves ability uses against the catalog, slots and progression.

    Example:
        >>> engine = AbilityResolutionEngine(catalog, slots, tracker, ledger, dice)
        >>> result = engine.use_ability(hero, "basic_attack", target=goblin)
        >>> result.success, result.outcome.damage
    """

    def __init__(
        self,
        catalog: AbilityCatalog,
        slots: AbilitySlotManager,
        tracker: SkillProgressionTracker,
        ledger: StatusEffectLedger,
        dice: DiceRoller,
        *,
        stun_duration: int = 1,
        defense_bonus_duration: int = 3,
        position_oracle: PositionOracle | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            catalog: Ability definitions.
            slots: Slot manager that gates use.
            tracker: Skill progression.
            ledger: Status effect definitions.
            dice: Source of success and stun rolls.
            stun_duration: Default stun length in turns.
            defense_bonus_duration: Default defense buff length in turns.
            position_oracle: Validates knockback destinations.
        """
        self.catalog = catalog
        self.slots = slots
        self.tracker = tracker
        self.ledger = ledger
        self.dice = dice
        self.applier = EffectApplier(
            ledger,
            dice,
            stun_duration=stun_duration,
            defense_bonus_duration=defense_bonus_duration,
            position_oracle=position_oracle,
        )

    @property
    def position_oracle(self) -> PositionOracle | None:
        return self.applier.position_oracle

    @position_oracle.setter
    def position_oracle(self, oracle: PositionOracle | None) -> None:
        self.applier.position_oracle = oracle

    # =========================================================================
    # Eligibility
    # =========================================================================

    def can_use_ability(
        self,
        entity: Entity,
        ability_key: str,
        target: Entity | None = None,
    ) -> UsabilityCheck:
        """Run the slot, existence and eligibility checks without mutating.

        Args:
            entity: Entity that wants to act.
            ability_key: Ability to check.
            target: Intended target, if any.

        Returns:
            UsabilityCheck with the first failing reason.
        """
        _, check = self._check(entity, ability_key, target)
        return check

    def _check(
        self,
        entity: Entity,
        ability_key: str,
        target: Entity | None,
    ) -> tuple[AbilityDefinition | None, UsabilityCheck]:
        if not self.slots.is_slotted(entity, ability_key).is_slotted:
            return None, UsabilityCheck(can_use=False, reason="Ability not slotted")

        ability = self.catalog.get(ability_key)
        if ability is None:
            return None, UsabilityCheck(can_use=False, reason="Ability not found")

        reason = self._eligibility_failure(entity, ability, target)
        if reason is not None:
            return ability, UsabilityCheck(can_use=False, reason=reason)
        return ability, UsabilityCheck(can_use=True)

    def _eligibility_failure(
        self,
        entity: Entity,
        ability: AbilityDefinition,
        target: Entity | None,
    ) -> str | None:
        if ability.is_active and (not entity.alive or entity.health <= 0):
            return "Cannot use abilities while unconscious"

        skill_check = self.catalog.meets_skill_requirements(entity, ability.key)
        if not skill_check.meets:
            return skill_check.reason

        prerequisite_check = self.catalog.meets_prerequisites(entity, ability.key)
        if not prerequisite_check.meets:
            return prerequisite_check.reason

        cost = self.catalog.calculate_ap_cost(entity, ability.key)
        if entity.ap < cost:
            return f"Not enough AP (need {cost}, have {entity.ap})"

        remaining = entity.ability_cooldowns.get(ability.key, 0)
        if remaining > 0:
            return f"Ability on cooldown ({remaining} turns remaining)"

        if ability.requires_target and target is None:
            return "Ability requires a target"

        if target is not None and ability.range > 0:
            distance = entity.distance_to(target)
            effective_range = self.catalog.calculate_range(entity, ability.key)
            if distance > effective_range:
                return f"Target out of range ({distance} > {effective_range})"

        if ability.is_active and self.is_incapacitated(entity):
            return "Cannot act while incapacitated"

        if ability.has_tag(LOW_HEALTH_TAG) and entity.health_fraction > LOW_HEALTH_THRESHOLD:
            return f"Can only use when at or below {LOW_HEALTH_THRESHOLD:.0%} health"

        return None

    def is_incapacitated(self, entity: Entity) -> bool:
        """Whether a status effect on the entity prevents all actions."""
        for key in entity.status_effects:
            definition = self.ledger.get(key)
            if definition is None:
                continue
            prevented = definition.properties.get(ACTIONS_PREVENTED_PROPERTY)
            if isinstance(prevented, list) and "all" in prevented:
                return True
        return False

    # =========================================================================
    # Resolution
    # =========================================================================

    def use_ability(
        self,
        entity: Entity,
        ability_key: str,
        target: Entity | None = None,
        target_position: Position | None = None,
    ) -> AbilityUseResult:
        """Use an ability.

        Args:
            entity: Entity using the ability.
            ability_key: Ability to use.
            target: Target entity, if any.
            target_position: Destination for movement effects. Callers must
                validate it; no collision check happens here.

        Returns:
            AbilityUseResult. ``failed_roll`` distinguishes a missed success
            roll from an ineligible attempt.
        """
        ability, check = self._check(entity, ability_key, target)
        if ability is None or not check.can_use:
            logger.debug(
                "Ability rejected",
                entity_id=entity.id,
                ability=ability_key,
                reason=check.reason,
            )
            return AbilityUseResult(success=False, reason=check.reason, ability_key=ability_key)

        success_rate = self.catalog.calculate_success_rate(entity, ability_key)
        cost = self.catalog.calculate_ap_cost(entity, ability_key)

        roll: float | None = None
        if ability.is_active and ability.base_success_rate < GUARANTEED_SUCCESS_RATE:
            roll = self.dice.roll_percent()
            if roll > success_rate:
                return self._fail_roll(entity, ability, target, cost, success_rate, roll)

        entity.ap = max(0, entity.ap - cost)
        if ability.cooldown > 0:
            entity.ability_cooldowns[ability_key] = ability.cooldown

        effects = compute_effect_magnitudes(entity, ability)
        outcome, events = self.applier.apply(entity, ability, effects, target, target_position)

        awards = []
        for requirement in ability.skill_requirements:
            if entity.tracks_skill(requirement.skill):
                award = self.tracker.award_use(entity, requirement.skill)
                awards.append(award)
                if award.event is not None:
                    events.append(award.event)

        events.append(
            CombatEvent(
                type=EventType.ABILITY_USED,
                entity_id=entity.id,
                target_id=target.id if target is not None else None,
                ability_key=ability_key,
                data={
                    "success_rate": success_rate,
                    "roll": roll,
                    "ap_spent": cost,
                    "effects": effects,
                    "damage": outcome.damage,
                    "healing": outcome.healing,
                },
            )
        )
        logger.info(
            "Ability used",
            entity_id=entity.id,
            ability=ability_key,
            target=target.id if target is not None else None,
            success_rate=success_rate,
            roll=roll,
            applied=outcome.effects_applied,
        )
        return AbilityUseResult(
            success=True,
            ability_key=ability_key,
            effects=effects,
            outcome=outcome,
            success_rate=success_rate,
            roll=roll,
            ap_spent=cost,
            skill_awards=awards,
            events=events,
        )

    def _fail_roll(
        self,
        entity: Entity,
        ability: AbilityDefinition,
        target: Entity | None,
        cost: int,
        success_rate: float,
        roll: float,
    ) -> AbilityUseResult:
        spent = min(entity.ap, math.floor(cost * FAILED_ROLL_AP_FRACTION))
        entity.ap -= spent
        event = CombatEvent(
            type=EventType.ABILITY_FAILED,
            entity_id=entity.id,
            target_id=target.id if target is not None else None,
            ability_key=ability.key,
            data={"success_rate": success_rate, "roll": roll, "ap_spent": spent},
        )
        logger.info(
            "Ability failed",
            entity_id=entity.id,
            ability=ability.key,
            success_rate=success_rate,
            roll=roll,
        )
        return AbilityUseResult(
            success=False,
            reason=f"Ability failed ({success_rate:.1f}% chance, rolled {roll:.1f})",
            ability_key=ability.key,
            failed_roll=True,
            success_rate=success_rate,
            roll=roll,
            ap_spent=spent,
            events=[event],
        )

    # =========================================================================
    # Turn boundary
    # =========================================================================

    def update_effects(self, entity: Entity) -> None:
        """Tick every per-turn timer on an entity by one.

        Cooldowns, status effects and temporary effects that reach 0 are
        removed; the slot swap cooldown is decremented.
        """
        for key in list(entity.ability_cooldowns):
            remaining = entity.ability_cooldowns[key] - 1
            if remaining <= 0:
                del entity.ability_cooldowns[key]
            else:
                entity.ability_cooldowns[key] = remaining

        for key in list(entity.status_effects):
            status = entity.status_effects[key]
            if status.duration <= 1:
                del entity.status_effects[key]
            else:
                status.duration -= 1

        for key in list(entity.temporary_effects):
            effect = entity.temporary_effects[key]
            if effect.duration <= 1:
                del entity.temporary_effects[key]
            else:
                effect.duration -= 1

        self.slots.update_swap_cooldown(entity)

    # =========================================================================
    # Queries
    # =========================================================================

    def available_abilities(self, entity: Entity) -> list[UnlockedAbility]:
        """Abilities whose requirements the entity meets."""
        return self.catalog.get_unlocked_abilities(entity)

    def slotted_abilities(self, entity: Entity) -> dict[str, list[tuple[int, str]]]:
        return {
            "active": self.slots.active_abilities(entity),
            "passive": self.slots.passive_abilities(entity),
        }

    def auto_assign_enemy_abilities(
        self,
        enemy: Entity,
        role: EnemyRole | str | None = None,
    ) -> list[CombatEvent]:
        """Slot an enemy's best abilities for its tier and role."""
        candidates = [entry.ability for entry in self.available_abilities(enemy)]
        return self.slots.auto_slot_enemy_abilities(enemy, candidates, role)


__all__ = [
    "AbilityResolutionEngine",
]
