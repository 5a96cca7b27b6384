"""Tests for ability slot management."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from dungeon_tactics.core.exceptions import InvariantViolationError
from dungeon_tactics.engine.slots import AbilitySlotManager
from dungeon_tactics.models.enums import EnemyRole, EntityType, EventType, SlotType


if TYPE_CHECKING:
    from collections.abc import Callable

    from dungeon_tactics.engine.catalog import AbilityCatalog


class TestSlotting:
    """Tests for slot and unslot."""

    def test_slot_active(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test slotting into an empty active slot."""
        result = slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0)

        assert result.success is True
        assert result.previous is None
        assert hero.ability_slots.active[0] == "basic_attack"
        assert result.events[0].type == EventType.ABILITY_SLOTTED
        assert hero.ability_slots.last_swap_at is not None

    def test_slot_accepts_string_type(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test the slot type may be given as a plain string."""
        result = slots.slot(hero, "armor_expertise", "passive", 4)

        assert result.success is True
        assert hero.ability_slots.passive[4] == "armor_expertise"

    def test_move_between_slots(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test re-slotting moves the key rather than duplicating it."""
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 3)

        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 5)

        assert hero.ability_slots.active[3] is None
        assert hero.ability_slots.active[5] == "basic_attack"
        assert hero.ability_slots.occupied() == ["basic_attack"]

    def test_move_and_back(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test slot 3 to 5 and back leaves one copy in slot 3."""
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 3)
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 5)

        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 3)

        assert hero.ability_slots.active[3] == "basic_attack"
        assert hero.ability_slots.active[5] is None
        assert hero.ability_slots.occupied().count("basic_attack") == 1

    def test_move_across_types(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test a key moves out of the active array into the passive one."""
        slots.slot(hero, "defend", SlotType.ACTIVE, 0)

        slots.slot(hero, "defend", SlotType.PASSIVE, 0)

        assert hero.ability_slots.active[0] is None
        assert hero.ability_slots.passive[0] == "defend"

    def test_replace_reports_previous(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test replacing an occupant returns it as previous."""
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0)

        result = slots.slot(hero, "wait", SlotType.ACTIVE, 0)

        assert result.previous == "basic_attack"
        assert hero.ability_slots.active[0] == "wait"

    @pytest.mark.parametrize(("slot_type", "index"), [(SlotType.ACTIVE, 9), (SlotType.PASSIVE, 5), (SlotType.ACTIVE, -1)])
    def test_invalid_index(self, slots: AbilitySlotManager, hero: Any, slot_type: SlotType, index: int) -> None:
        """Test indices outside the slot array are rejected."""
        result = slots.slot(hero, "basic_attack", slot_type, index)

        assert result.success is False
        assert result.reason.startswith("Invalid slot index")

    def test_invalid_slot_type(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test unknown slot types are rejected."""
        result = slots.slot(hero, "basic_attack", "reaction", 0)

        assert result.success is False
        assert result.reason == "Invalid slot type: reaction"

    def test_locked_in_combat(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test slots cannot change during combat."""
        hero.in_combat = True

        result = slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0)

        assert result.success is False
        assert result.reason == "Cannot change abilities during combat"
        assert hero.ability_slots.occupied() == []

    def test_swap_cooldown(self, hero: Any) -> None:
        """Test a swap cooldown locks slots until it ticks down."""
        slots = AbilitySlotManager(swap_cooldown=2)
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0)

        blocked = slots.slot(hero, "wait", SlotType.ACTIVE, 1)
        slots.update_swap_cooldown(hero)
        slots.update_swap_cooldown(hero)
        allowed = slots.slot(hero, "wait", SlotType.ACTIVE, 1)

        assert blocked.success is False
        assert "2 turns remaining" in blocked.reason
        assert allowed.success is True

    def test_unslot(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test unslotting returns the removed key."""
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 2)

        result = slots.unslot(hero, SlotType.ACTIVE, 2)

        assert result.success is True
        assert result.previous == "basic_attack"
        assert hero.ability_slots.active[2] is None
        assert result.events[0].type == EventType.ABILITY_UNSLOTTED

    def test_unslot_invalid_index(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test unslot validates the index."""
        result = slots.unslot(hero, SlotType.PASSIVE, 7)

        assert result.success is False
        assert result.reason == "Invalid passive slot index"

    def test_clear_all_ignores_lock(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test clearing works even while slots are locked."""
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0)
        hero.in_combat = True

        slots.clear_all(hero)

        assert hero.ability_slots.occupied() == []

    def test_duplicate_slots_raise(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test hand-edited duplicate slots are reported, not repaired."""
        hero.ability_slots.active[0] = "wait"
        hero.ability_slots.active[1] = "wait"

        with pytest.raises(InvariantViolationError):
            slots.slot(hero, "basic_attack", SlotType.ACTIVE, 2)


class TestQueries:
    """Tests for slot queries."""

    def test_is_slotted(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test locating a slotted key."""
        slots.slot(hero, "armor_expertise", SlotType.PASSIVE, 1)

        lookup = slots.is_slotted(hero, "armor_expertise")

        assert lookup.is_slotted is True
        assert lookup.slot_type == SlotType.PASSIVE
        assert lookup.index == 1
        assert slots.is_slotted(hero, "wait").is_slotted is False

    def test_hotkeys(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test hotkeys are 1-based."""
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0)
        slots.slot(hero, "wait", SlotType.ACTIVE, 8)

        assert slots.ability_by_hotkey(hero, 1) == "basic_attack"
        assert slots.ability_by_hotkey(hero, 9) == "wait"
        assert slots.ability_by_hotkey(hero, 10) is None
        assert slots.ability_by_hotkey(hero, 0) is None
        assert slots.active_abilities(hero) == [(1, "basic_attack"), (9, "wait")]

    def test_slot_info(self, slots: AbilitySlotManager, hero: Any) -> None:
        """Test used and free counts."""
        slots.slot(hero, "basic_attack", SlotType.ACTIVE, 0)

        info = slots.slot_info(hero)

        assert info["active"]["used"] == 1
        assert info["active"]["available"] == 8
        assert info["passive"]["max"] == 5


class TestAutoSlot:
    """Tests for enemy auto-slotting."""

    def test_tier_one_balanced(
        self,
        slots: AbilitySlotManager,
        catalog: AbilityCatalog,
        make_entity: Callable[..., Any],
    ) -> None:
        """Test a tier 1 balanced enemy gets 3 actives by category priority."""
        enemy = make_entity("orc", entity_type=EntityType.ENEMY)
        candidates = [catalog.get(key) for key in ("move", "wait", "defend", "basic_attack")]

        events = slots.auto_slot_enemy_abilities(enemy, candidates)

        assert enemy.ability_slots.active[:3] == ["basic_attack", "defend", "wait"]
        assert enemy.ability_slots.active[3:] == [None] * 6
        assert events[0].data["auto"] is True

    def test_role_priority(
        self,
        slots: AbilitySlotManager,
        catalog: AbilityCatalog,
        make_entity: Callable[..., Any],
    ) -> None:
        """Test a caster prefers magic abilities."""
        enemy = make_entity("shaman", entity_type=EntityType.ENEMY)
        candidates = [catalog.get(key) for key in ("basic_attack", "magic_missile", "wait", "lesser_heal")]

        slots.auto_slot_enemy_abilities(enemy, candidates, EnemyRole.CASTER)

        assert enemy.ability_slots.active[:3] == ["magic_missile", "lesser_heal", "wait"]

    def test_tier_counts_and_passives(
        self,
        slots: AbilitySlotManager,
        catalog: AbilityCatalog,
        make_entity: Callable[..., Any],
    ) -> None:
        """Test higher tiers fill more slots, including passives."""
        enemy = make_entity("warlord", entity_type=EntityType.ENEMY, tier=4)

        slots.auto_slot_enemy_abilities(enemy, catalog.all(), "tank")

        active = [key for key in enemy.ability_slots.active if key]
        passive = [key for key in enemy.ability_slots.passive if key]
        assert len(active) == 6
        assert passive == ["armor_expertise", "one_handed_mastery"]
        assert active[0] in {ability.key for ability in catalog.by_category("defensive")}

    def test_duplicates_and_replacement(
        self,
        slots: AbilitySlotManager,
        catalog: AbilityCatalog,
        make_entity: Callable[..., Any],
    ) -> None:
        """Test duplicate candidates are slotted once and old slots replaced."""
        enemy = make_entity("orc", entity_type=EntityType.ENEMY)
        enemy.ability_slots.active[8] = "move"
        attack = catalog.get("basic_attack")

        slots.auto_slot_enemy_abilities(enemy, [attack, attack])

        assert enemy.ability_slots.occupied() == ["basic_attack"]
