"""Ability slot management.

Entities carry 9 active slots (hotkeys 1-9) and 5 passive slots. Only
slotted abilities can be used, and a key occupies at most one slot across
both arrays. Slots are locked during combat and while a swap cooldown runs.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from dungeon_tactics.core.constants import (
    ENEMY_TIER_SLOTS,
    MAX_ACTIVE_SLOTS,
    MAX_PASSIVE_SLOTS,
    ROLE_CATEGORY_PRIORITY,
)
from dungeon_tactics.core.exceptions import InvariantViolationError
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.models.abilities import SlotLookup
from dungeon_tactics.models.combat import SlotResult, UsabilityCheck
from dungeon_tactics.models.enums import AbilityType, EnemyRole, EventType, SlotType
from dungeon_tactics.models.events import CombatEvent


if TYPE_CHECKING:
    from collections.abc import Sequence

    from dungeon_tactics.models.abilities import AbilityDefinition
    from dungeon_tactics.models.entities import Entity


logger = get_logger(__name__)

_CAPACITY: dict[SlotType, int] = {
    SlotType.ACTIVE: MAX_ACTIVE_SLOTS,
    SlotType.PASSIVE: MAX_PASSIVE_SLOTS,
}

_UNKNOWN_CATEGORY_RANK = 999


class AbilitySlotManager:
    """Assigns abilities to slots and enforces the one-slot-per-key rule.

    Example:
        >>> slots = AbilitySlotManager()
        >>> slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0).success
        True
        >>> slots.ability_by_hotkey(hero, 1)
        'basic_attack'
    """

    def __init__(self, *, swap_cooldown: int = 0) -> None:
        """Initialize the slot manager.

        Args:
            swap_cooldown: Turns slots stay locked after any change.
        """
        self._swap_cooldown = swap_cooldown

    # -------------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------------

    def can_swap(self, entity: Entity) -> UsabilityCheck:
        """Check whether the entity may change its slots right now."""
        if entity.in_combat:
            return UsabilityCheck(can_use=False, reason="Cannot change abilities during combat")
        remaining = entity.ability_slots.swap_cooldown
        if remaining > 0:
            return UsabilityCheck(
                can_use=False,
                reason=f"Ability swap on cooldown: {remaining} turns remaining",
            )
        return UsabilityCheck(can_use=True)

    def slot(
        self,
        entity: Entity,
        ability_key: str,
        slot_type: SlotType | str,
        index: int,
    ) -> SlotResult:
        """Place an ability in a slot.

        The key is first removed from any slot it already occupies.

        Args:
            entity: Entity whose slots change.
            ability_key: Ability to place.
            slot_type: Active or passive.
            index: Zero-based slot index.

        Returns:
            SlotResult with the previous occupant of the slot.

        Raises:
            InvariantViolationError: If the entity's slots already hold a
                key twice.
        """
        if slot_type not in _CAPACITY:
            return SlotResult(success=False, reason=f"Invalid slot type: {slot_type}")
        slot_type = SlotType(slot_type)
        capacity = _CAPACITY[slot_type]
        if not 0 <= index < capacity:
            return SlotResult(
                success=False,
                reason=f"Invalid slot index: {index}. Must be 0-{capacity - 1}",
            )

        check = self.can_swap(entity)
        if not check.can_use:
            return SlotResult(success=False, reason=check.reason)

        self._check_unique(entity)

        self._remove_everywhere(entity, ability_key)
        array = entity.ability_slots.slots_for(slot_type)
        previous = array[index]
        array[index] = ability_key
        self._mark_changed(entity)

        event = CombatEvent(
            type=EventType.ABILITY_SLOTTED,
            entity_id=entity.id,
            ability_key=ability_key,
            data={"slot_type": slot_type.value, "slot_index": index, "replaced": previous},
        )
        logger.info(
            "Ability slotted",
            entity_id=entity.id,
            ability=ability_key,
            slot_type=slot_type,
            index=index,
            replaced=previous,
        )
        return SlotResult(success=True, previous=previous, events=[event])

    def unslot(self, entity: Entity, slot_type: SlotType | str, index: int) -> SlotResult:
        """Empty a slot.

        Returns:
            SlotResult whose ``previous`` is the removed key.
        """
        if slot_type not in _CAPACITY:
            return SlotResult(success=False, reason=f"Invalid slot type: {slot_type}")
        slot_type = SlotType(slot_type)
        capacity = _CAPACITY[slot_type]
        if not 0 <= index < capacity:
            return SlotResult(success=False, reason=f"Invalid {slot_type.value} slot index")

        check = self.can_swap(entity)
        if not check.can_use:
            return SlotResult(success=False, reason=check.reason)

        array = entity.ability_slots.slots_for(slot_type)
        removed = array[index]
        array[index] = None
        self._mark_changed(entity)

        event = CombatEvent(
            type=EventType.ABILITY_UNSLOTTED,
            entity_id=entity.id,
            ability_key=removed,
            data={"slot_type": slot_type.value, "slot_index": index},
        )
        logger.info("Ability unslotted", entity_id=entity.id, ability=removed, index=index)
        return SlotResult(success=True, previous=removed, events=[event])

    def clear_all(self, entity: Entity) -> None:
        """Empty every slot, ignoring the swap lock (death or despawn)."""
        slots = entity.ability_slots
        slots.active = [None] * MAX_ACTIVE_SLOTS
        slots.passive = [None] * MAX_PASSIVE_SLOTS
        slots.last_swap_at = datetime.now(UTC)

    def update_swap_cooldown(self, entity: Entity) -> None:
        """Tick the swap cooldown down by one turn."""
        slots = entity.ability_slots
        if slots.swap_cooldown > 0:
            slots.swap_cooldown -= 1

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_slotted(self, entity: Entity, ability_key: str) -> SlotLookup:
        """Find where an ability is slotted."""
        slots = entity.ability_slots
        if ability_key in slots.active:
            return SlotLookup(
                is_slotted=True,
                slot_type=SlotType.ACTIVE,
                index=slots.active.index(ability_key),
            )
        if ability_key in slots.passive:
            return SlotLookup(
                is_slotted=True,
                slot_type=SlotType.PASSIVE,
                index=slots.passive.index(ability_key),
            )
        return SlotLookup(is_slotted=False)

    def active_abilities(self, entity: Entity) -> list[tuple[int, str]]:
        """Slotted actives as (hotkey, key) pairs."""
        return [
            (index + 1, key)
            for index, key in enumerate(entity.ability_slots.active)
            if key is not None
        ]

    def passive_abilities(self, entity: Entity) -> list[tuple[int, str]]:
        """Slotted passives as (index, key) pairs."""
        return [
            (index, key)
            for index, key in enumerate(entity.ability_slots.passive)
            if key is not None
        ]

    def ability_by_hotkey(self, entity: Entity, hotkey: int) -> str | None:
        """Get the ability bound to hotkey 1-9."""
        if not 1 <= hotkey <= MAX_ACTIVE_SLOTS:
            return None
        return entity.ability_slots.active[hotkey - 1]

    def slot_info(self, entity: Entity) -> dict[str, dict[str, object]]:
        """Used and free slot counts per slot type."""
        info: dict[str, dict[str, object]] = {}
        for slot_type, capacity in _CAPACITY.items():
            array = entity.ability_slots.slots_for(slot_type)
            used = sum(1 for key in array if key is not None)
            info[slot_type.value] = {
                "used": used,
                "available": capacity - used,
                "max": capacity,
                "slots": list(array),
            }
        return info

    # -------------------------------------------------------------------------
    # Enemies
    # -------------------------------------------------------------------------

    def auto_slot_enemy_abilities(
        self,
        enemy: Entity,
        candidates: Sequence[AbilityDefinition],
        role: EnemyRole | str | None = None,
    ) -> list[CombatEvent]:
        """Fill an enemy's slots from candidate abilities.

        Slot counts come from the enemy's tier; within each ability type,
        candidates are ordered by the role's category priority. Ties keep
        candidate order and unknown categories sort last. Existing slots are
        replaced.

        Args:
            enemy: Enemy whose slots are filled.
            candidates: Abilities available to the enemy, in catalog order.
            role: Enemy role; defaults to the enemy's own role.

        Returns:
            A single ABILITY_SLOTTED event summarizing the assignment.
        """
        role_key = EnemyRole(role) if role is not None else enemy.role
        active_count, passive_count = ENEMY_TIER_SLOTS[min(enemy.tier, max(ENEMY_TIER_SLOTS))]
        priority = ROLE_CATEGORY_PRIORITY[role_key.value]

        def rank(ability: AbilityDefinition) -> int:
            if ability.category in priority:
                return priority.index(ability.category)
            return _UNKNOWN_CATEGORY_RANK

        unique: dict[str, AbilityDefinition] = {}
        for ability in candidates:
            unique.setdefault(ability.key, ability)

        actives = sorted(
            (ability for ability in unique.values() if ability.type == AbilityType.ACTIVE),
            key=rank,
        )
        passives = sorted(
            (ability for ability in unique.values() if ability.type == AbilityType.PASSIVE),
            key=rank,
        )

        slots = enemy.ability_slots
        active_keys = [ability.key for ability in actives[:active_count]]
        passive_keys = [ability.key for ability in passives[:passive_count]]
        slots.active = active_keys + [None] * (MAX_ACTIVE_SLOTS - len(active_keys))
        slots.passive = passive_keys + [None] * (MAX_PASSIVE_SLOTS - len(passive_keys))
        slots.last_swap_at = datetime.now(UTC)

        logger.info(
            "Enemy abilities auto-slotted",
            entity_id=enemy.id,
            tier=enemy.tier,
            role=role_key,
            active=active_keys,
            passive=passive_keys,
        )
        return [
            CombatEvent(
                type=EventType.ABILITY_SLOTTED,
                entity_id=enemy.id,
                data={
                    "auto": True,
                    "role": role_key.value,
                    "active": active_keys,
                    "passive": passive_keys,
                },
            )
        ]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _remove_everywhere(self, entity: Entity, ability_key: str) -> bool:
        slots = entity.ability_slots
        removed = False
        for array in (slots.active, slots.passive):
            for index, key in enumerate(array):
                if key == ability_key:
                    array[index] = None
                    removed = True
        return removed

    def _mark_changed(self, entity: Entity) -> None:
        slots = entity.ability_slots
        slots.last_swap_at = datetime.now(UTC)
        if self._swap_cooldown > 0:
            slots.swap_cooldown = self._swap_cooldown

    @staticmethod
    def _check_unique(entity: Entity) -> None:
        occupied = entity.ability_slots.occupied()
        if len(occupied) != len(set(occupied)):
            duplicates = sorted({key for key in occupied if occupied.count(key) > 1})
            raise InvariantViolationError(
                f"Ability slotted more than once: {', '.join(duplicates)}",
                invariant="one_slot_per_ability",
                details={"entity_id": entity.id},
            )


__all__ = [
    "AbilitySlotManager",
]
