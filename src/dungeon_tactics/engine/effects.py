"""Ability effect magnitudes and their application.

Magnitudes are computed in two stages: exactly one scaling mode turns the
base value into a scaled value, then the ability's effectiveness table adds
``skill level x multiplier`` to every effect uniformly. Application then
handles each known effect key independently.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import TYPE_CHECKING

from dungeon_tactics.core.constants import (
    SKILL_SCALING_PER_LEVEL,
    STRENGTH_SCALING_PER_LEVEL,
    STRENGTH_SKILL,
    STUN_STATUS_KEY,
    WEAPON_SKILL_SCALING_PER_LEVEL,
)
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.models.combat import EffectOutcome
from dungeon_tactics.models.entities import DEFENSE_BONUS_EFFECT, Position
from dungeon_tactics.models.enums import EventType, ScalingMode
from dungeon_tactics.models.events import CombatEvent
from dungeon_tactics.models.status_effects import ActiveStatus, TemporaryEffect


if TYPE_CHECKING:
    from dungeon_tactics.engine.dice import DiceRoller
    from dungeon_tactics.engine.status_effects import StatusEffectLedger
    from dungeon_tactics.models.abilities import AbilityDefinition, EffectSpec
    from dungeon_tactics.models.entities import Entity


logger = get_logger(__name__)

PositionOracle = Callable[[int, int], bool]
"""Answers whether a tile is in bounds and free."""


# =============================================================================
# Magnitudes
# =============================================================================


def scale_effect(entity: Entity, ability: AbilityDefinition, spec: EffectSpec) -> float:
    """Apply an effect's scaling mode to its base value.

    Missing equipment leaves the value unchanged.
    """
    value = spec.base
    primary = ability.primary_skill
    weapon = entity.equipment.weapon

    match spec.scaling:
        case ScalingMode.WEAPON:
            if weapon is not None:
                value *= weapon.average_damage
        case ScalingMode.SHIELD:
            shield = entity.equipment.shield
            if shield is not None:
                value *= shield.defense
        case ScalingMode.SKILL:
            if primary is not None:
                value += entity.skill_level(primary) * SKILL_SCALING_PER_LEVEL
        case ScalingMode.WEAPON_SKILL:
            if weapon is not None:
                value *= weapon.average_damage
                if primary is not None:
                    value *= 1 + entity.skill_level(primary) * WEAPON_SKILL_SCALING_PER_LEVEL
        case ScalingMode.STRENGTH:
            value += entity.skill_level(STRENGTH_SKILL) * STRENGTH_SCALING_PER_LEVEL
        case ScalingMode.NONE:
            pass

    return value


def compute_effect_magnitudes(entity: Entity, ability: AbilityDefinition) -> dict[str, float]:
    """Compute every declared effect's final magnitude.

    The effectiveness bonus is added to each effect regardless of what the
    effect means, and every value is clamped to be non-negative.

    Args:
        entity: The entity using the ability.
        ability: The ability being used.

    Returns:
        Magnitudes by effect name.
    """
    bonus = sum(
        entity.skill_level(entry.skill) * entry.multiplier
        for entry in ability.scaling.effectiveness
    )
    return {
        name: max(0.0, scale_effect(entity, ability, spec) + bonus)
        for name, spec in ability.effects.items()
    }


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# =============================================================================
# Application
# =============================================================================


class EffectApplier:
    """Applies computed effect magnitudes to entities.

    Example:
        >>> applier = EffectApplier(ledger, DiceRoller(seed=1))
        >>> outcome, events = applier.apply(hero, ability, {"damage": 4.0}, target=goblin)
    """

    def __init__(
        self,
        ledger: StatusEffectLedger,
        dice: DiceRoller,
        *,
        stun_duration: int = 1,
        defense_bonus_duration: int = 3,
        position_oracle: PositionOracle | None = None,
    ) -> None:
        """Initialize the applier.

        Args:
            ledger: Status effect definitions for stacking and resistance.
            dice: Source of stun rolls.
            stun_duration: Turns of stun when an ability declares none.
            defense_bonus_duration: Turns of a defense buff when an ability
                declares no ``duration``.
            position_oracle: Validates knockback destinations; when absent,
                any destination is accepted.
        """
        self._ledger = ledger
        self._dice = dice
        self._stun_duration = stun_duration
        self._defense_bonus_duration = defense_bonus_duration
        self.position_oracle = position_oracle

    def apply(
        self,
        entity: Entity,
        ability: AbilityDefinition,
        effects: dict[str, float],
        target: Entity | None = None,
        target_position: Position | None = None,
    ) -> tuple[EffectOutcome, list[CombatEvent]]:
        """Apply every known effect present with a positive magnitude.

        Args:
            entity: The entity using the ability.
            ability: The ability being used.
            effects: Magnitudes from ``compute_effect_magnitudes``.
            target: Target entity, if any.
            target_position: Destination for movement effects.

        Returns:
            Tuple of (outcome, events).
        """
        outcome = EffectOutcome()
        events: list[CombatEvent] = []

        damage = effects.get("damage", 0.0)
        if damage > 0 and target is not None:
            dealt, damage_events = self.apply_damage(
                entity,
                target,
                damage,
                armor_piercing=effects.get("armorPiercing", 0.0),
                ability_key=ability.key,
            )
            outcome.damage = dealt
            outcome.targets_affected.append(target.id)
            outcome.effects_applied.append(f"{dealt} damage")
            events.extend(damage_events)

        healing = effects.get("healing", 0.0)
        if healing > 0:
            heal_target = target if target is not None else entity
            healed = self.apply_healing(heal_target, healing)
            outcome.healing = healed
            outcome.targets_affected.append(heal_target.id)
            outcome.effects_applied.append(f"{healed} healing")

        movement = effects.get("movement", 0.0)
        if movement > 0 and target_position is not None:
            origin = entity.position
            entity.move_to(target_position.x, target_position.y)
            outcome.moved_to = target_position
            outcome.effects_applied.append(f"moved to ({target_position.x}, {target_position.y})")
            events.append(
                CombatEvent(
                    type=EventType.ENTITY_MOVED,
                    entity_id=entity.id,
                    ability_key=ability.key,
                    data={
                        "from": [origin.x, origin.y],
                        "to": [target_position.x, target_position.y],
                    },
                )
            )

        stun_chance = effects.get("stunChance", 0.0)
        if stun_chance > 0 and target is not None and target.alive:
            if self._dice.roll_chance(stun_chance):
                duration = int(effects.get("stunDuration") or self._stun_duration)
                if self.apply_status(target, STUN_STATUS_KEY, duration):
                    outcome.status_effects.append(STUN_STATUS_KEY)
                    outcome.effects_applied.append("stunned target")
                else:
                    outcome.effects_applied.append("stun resisted")

        knockback = effects.get("knockback", 0.0)
        if knockback > 0 and target is not None and target.alive:
            destination = self.apply_knockback(entity, target, knockback)
            if destination is not None:
                outcome.knocked_back_to = destination
                outcome.effects_applied.append("knocked back target")
                events.append(
                    CombatEvent(
                        type=EventType.ENTITY_MOVED,
                        entity_id=target.id,
                        target_id=entity.id,
                        ability_key=ability.key,
                        data={"to": [destination.x, destination.y], "knockback": True},
                    )
                )

        defense_bonus = effects.get("defenseBonus", 0.0)
        if defense_bonus > 0:
            duration = int(effects.get("duration") or self._defense_bonus_duration)
            entity.temporary_effects[DEFENSE_BONUS_EFFECT] = TemporaryEffect(
                value=defense_bonus,
                duration=max(1, duration),
            )
            outcome.defense_bonus = defense_bonus
            outcome.effects_applied.append(f"+{defense_bonus:g} defense")

        ap_recover = effects.get("apRecover", 0.0)
        if ap_recover > 0:
            before = entity.ap
            new_ap = entity.ap + int(ap_recover)
            if entity.max_ap is not None:
                new_ap = min(entity.max_ap, new_ap)
            entity.ap = max(before, new_ap)
            outcome.ap_recovered = entity.ap - before
            outcome.effects_applied.append(f"+{outcome.ap_recovered} AP")

        return outcome, events

    def apply_damage(
        self,
        attacker: Entity,
        target: Entity,
        amount: float,
        *,
        armor_piercing: float = 0.0,
        ability_key: str | None = None,
    ) -> tuple[int, list[CombatEvent]]:
        """Reduce a target's health.

        Armor (defense plus any defense buff, reduced by armor piercing)
        is subtracted with a floor of 1 damage, then the target's damage
        reduction fraction applies, then the result is floored. Health
        never drops below 0.

        Returns:
            Tuple of (damage dealt, events).
        """
        if not target.alive or target.health <= 0:
            return 0, []

        piercing = min(1.0, max(0.0, armor_piercing))
        final = amount
        if piercing < 1.0:
            effective_defense = target.effective_defense * (1.0 - piercing)
            final = max(1.0, amount - effective_defense)
        final *= 1.0 - target.damage_reduction
        dealt = math.floor(final)

        target.health = max(0, target.health - dealt)
        events = [
            CombatEvent(
                type=EventType.DAMAGE_DEALT,
                entity_id=attacker.id,
                target_id=target.id,
                ability_key=ability_key,
                data={"damage": dealt, "remaining_health": target.health},
            )
        ]
        logger.debug(
            "Damage applied",
            attacker=attacker.id,
            target=target.id,
            damage=dealt,
            remaining=target.health,
        )

        if target.health == 0:
            events.extend(self.mark_dead(target, killer=attacker))
        return dealt, events

    def mark_dead(self, entity: Entity, *, killer: Entity | None = None) -> list[CombatEvent]:
        """Flip the alive flag and report the death."""
        if not entity.alive:
            return []
        entity.alive = False
        logger.info("Entity died", entity_id=entity.id, killer=killer.id if killer else None)
        return [
            CombatEvent(
                type=EventType.ENTITY_DIED,
                entity_id=entity.id,
                target_id=killer.id if killer else None,
            )
        ]

    def apply_healing(self, target: Entity, amount: float) -> int:
        """Restore health up to the maximum.

        Returns:
            Health actually restored.
        """
        if not target.alive:
            return 0
        healed = math.floor(min(amount, target.max_health - target.health))
        target.health += healed
        return healed

    def apply_status(self, target: Entity, key: str, duration: int) -> bool:
        """Apply or refresh a status effect.

        A new status starts with one stack. An existing one gains a stack
        when the ledger allows it and keeps the longer duration.

        Returns:
            False if the target resists the effect.
        """
        if self._ledger.has_resistance(target, key):
            logger.debug("Status resisted", entity_id=target.id, status=key)
            return False

        duration = max(1, duration)
        existing = target.status_effects.get(key)
        if existing is None:
            target.status_effects[key] = ActiveStatus(duration=duration)
        else:
            if self._ledger.can_stack(key, existing.stacks):
                existing.stacks += 1
            existing.duration = max(existing.duration, duration)
        logger.debug("Status applied", entity_id=target.id, status=key, duration=duration)
        return True

    def apply_knockback(self, attacker: Entity, target: Entity, distance: float) -> Position | None:
        """Push the target directly away from the attacker.

        Returns:
            The new position, or None when the target did not move.
        """
        dx = target.x - attacker.x
        dy = target.y - attacker.y
        length = math.hypot(dx, dy)
        if length == 0:
            return None

        new_x = _round_half_up(target.x + dx / length * distance)
        new_y = _round_half_up(target.y + dy / length * distance)
        if (new_x, new_y) == (target.x, target.y):
            return None
        if self.position_oracle is not None and not self.position_oracle(new_x, new_y):
            logger.debug("Knockback blocked", entity_id=target.id, x=new_x, y=new_y)
            return None

        target.move_to(new_x, new_y)
        return Position(x=new_x, y=new_y)


__all__ = [
    "PositionOracle",
    "scale_effect",
    "compute_effect_magnitudes",
    "EffectApplier",
]
