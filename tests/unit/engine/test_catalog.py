"""Tests for the ability catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from dungeon_tactics.core.exceptions import AbilityRegistrationError
from dungeon_tactics.engine.catalog import BASE_ABILITIES, AbilityCatalog
from dungeon_tactics.models.enums import AbilityType, ScalingMode


if TYPE_CHECKING:
    from collections.abc import Callable


def _ability(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": "Test Ability",
        "description": "For tests",
        "type": "active",
        "category": "combat",
        "baseSuccessRate": 50,
    }
    data.update(overrides)
    return data


class TestRegistration:
    """Tests for registering ability content."""

    def test_base_abilities_present(self) -> None:
        """Test a new catalog starts with the four base abilities."""
        catalog = AbilityCatalog()

        assert len(catalog) == 4
        for key in BASE_ABILITIES:
            assert catalog.has(key)

    def test_without_base_abilities(self) -> None:
        """Test the base abilities can be left out."""
        assert len(AbilityCatalog(include_base_abilities=False)) == 0

    def test_defaults_applied(self) -> None:
        """Test optional fields get their defaults."""
        catalog = AbilityCatalog(include_base_abilities=False)

        ability = catalog.register("jab", _ability())

        assert ability.key == "jab"
        assert ability.ap_cost == 0
        assert ability.range == 0
        assert ability.cooldown == 0
        assert ability.requires_target is False
        assert ability.skill_requirements == ()
        assert ability.prerequisites == ()
        assert ability.primary_skill is None

    def test_snake_case_accepted(self) -> None:
        """Test snake_case field names register too."""
        catalog = AbilityCatalog(include_base_abilities=False)
        data = _ability(ap_cost=2, requires_target=True)
        data["base_success_rate"] = data.pop("baseSuccessRate")

        ability = catalog.register("jab", data)

        assert ability.ap_cost == 2
        assert ability.requires_target is True
        assert ability.base_success_rate == 50

    def test_null_lists_treated_as_empty(self) -> None:
        """Test explicit nulls for list fields."""
        catalog = AbilityCatalog(include_base_abilities=False)

        ability = catalog.register("jab", _ability(skillRequirements=None, prerequisites=None))

        assert ability.skill_requirements == ()
        assert ability.prerequisites == ()

    @pytest.mark.parametrize("missing", ["name", "description", "type", "category", "baseSuccessRate"])
    def test_missing_required_field(self, missing: str) -> None:
        """Test each required field is enforced."""
        catalog = AbilityCatalog(include_base_abilities=False)
        data = _ability()
        del data[missing]

        with pytest.raises(AbilityRegistrationError) as exc_info:
            catalog.register("broken", data)

        assert missing in str(exc_info.value)
        assert exc_info.value.details["ability_key"] == "broken"

    def test_invalid_type(self) -> None:
        """Test only active and passive are accepted."""
        catalog = AbilityCatalog(include_base_abilities=False)

        with pytest.raises(AbilityRegistrationError) as exc_info:
            catalog.register("broken", _ability(type="reactive"))

        assert exc_info.value.details["field_name"] == "type"

    def test_unknown_scaling_mode(self) -> None:
        """Test a scaling label outside the vocabulary fails registration."""
        catalog = AbilityCatalog(include_base_abilities=False)

        with pytest.raises(AbilityRegistrationError):
            catalog.register(
                "broken",
                _ability(effects={"damage": {"base": 1, "scaling": "charisma"}}),
            )

    def test_unknown_field_rejected(self) -> None:
        """Test typos in field names are not silently dropped."""
        catalog = AbilityCatalog(include_base_abilities=False)

        with pytest.raises(AbilityRegistrationError):
            catalog.register("broken", _ability(apCots=2))

    def test_register_many_requires_key(self) -> None:
        """Test bulk registration needs a key on every entry."""
        catalog = AbilityCatalog(include_base_abilities=False)

        with pytest.raises(AbilityRegistrationError):
            catalog.register_many([_ability()])

    def test_register_many(self) -> None:
        """Test bulk registration returns the count."""
        catalog = AbilityCatalog(include_base_abilities=False)

        count = catalog.register_many([_ability(key="a"), _ability(key="b")])

        assert count == 2
        assert catalog.has("a") and catalog.has("b")

    def test_replace_keeps_single_entry(self) -> None:
        """Test registering a key twice replaces the definition."""
        catalog = AbilityCatalog(include_base_abilities=False)
        catalog.register("jab", _ability(apCost=1))

        catalog.register("jab", _ability(apCost=3))

        assert len(catalog) == 1
        assert catalog.get("jab").ap_cost == 3


class TestLookup:
    """Tests for catalog queries."""

    def test_get_unknown(self, catalog: AbilityCatalog) -> None:
        """Test unknown keys return None."""
        assert catalog.get("fireball") is None
        assert "fireball" not in catalog

    def test_effect_scaling_parsed(self, catalog: AbilityCatalog) -> None:
        """Test effect specs are parsed into the closed vocabulary."""
        attack = catalog.get("basic_attack")

        assert attack.effects["damage"].scaling == ScalingMode.WEAPON
        assert attack.effects["accuracy"].scaling == ScalingMode.WEAPON_SKILL

    def test_by_type(self, catalog: AbilityCatalog) -> None:
        """Test filtering by ability type."""
        passives = {ability.key for ability in catalog.by_type(AbilityType.PASSIVE)}

        assert passives == {"one_handed_mastery", "armor_expertise"}

    def test_by_category(self, catalog: AbilityCatalog) -> None:
        """Test filtering by category."""
        assert {ability.key for ability in catalog.by_category("magic")} == {
            "lesser_heal",
            "magic_missile",
        }

    def test_stats(self, catalog: AbilityCatalog) -> None:
        """Test counts by type and category."""
        stats = catalog.stats()

        assert stats.total == 15
        assert stats.by_type == {"active": 13, "passive": 2}
        assert stats.by_category["magic"] == 2

    def test_all_in_registration_order(self, catalog: AbilityCatalog) -> None:
        """Test base abilities come first."""
        keys = [ability.key for ability in catalog.all()]

        assert keys[:4] == ["move", "basic_attack", "wait", "defend"]


class TestRequirements:
    """Tests for skill requirements and prerequisites."""

    def test_untracked_skill_counts_as_zero(
        self,
        catalog: AbilityCatalog,
        make_entity: Callable[..., Any],
    ) -> None:
        """Test level-0 requirements are met without tracking the skill."""
        entity = make_entity()

        assert catalog.meets_skill_requirements(entity, "defend").meets is True

    def test_skill_requirement_reason(self, catalog: AbilityCatalog, hero: Any) -> None:
        """Test the reason names the skill and levels."""
        check = catalog.meets_skill_requirements(hero, "precise_strike")

        assert check.meets is False
        assert check.reason == "Requires one_handed level 1 (current: 0)"
        assert check.missing == ("one_handed",)

    def test_prerequisite_reason(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test a missing prerequisite is reported by name."""
        entity = make_entity(skills={"one_handed": 5})

        check = catalog.can_unlock(entity, "power_strike")

        assert check.meets is False
        assert check.reason == "Requires ability: Precise Strike"

    def test_prerequisite_met(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test unlocking the prerequisite satisfies it."""
        entity = make_entity(skills={"one_handed": 5}, unlocked_abilities={"precise_strike"})

        assert catalog.can_unlock(entity, "power_strike").meets is True

    def test_unknown_ability(self, catalog: AbilityCatalog, hero: Any) -> None:
        """Test requirement checks on unknown keys."""
        assert catalog.can_unlock(hero, "fireball").reason == "Ability not found"


class TestEffectiveNumbers:
    """Tests for success rate, AP cost and range."""

    def test_success_rate_skill_bonus(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test -10 base plus 3.0 x level 5 gives 5."""
        entity = make_entity(skills={"one_handed": 5})

        assert catalog.calculate_success_rate(entity, "precise_strike") == 5.0

    def test_success_rate_grows_with_skill(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test each multiplier adds per level."""
        entity = make_entity(skills={"one_handed": 10, "precision": 5})

        assert catalog.calculate_success_rate(entity, "precise_strike") == 30.0

    @pytest.mark.parametrize("level", [0, 1, 20, 50, 100])
    def test_success_rate_clamped(
        self,
        catalog: AbilityCatalog,
        make_entity: Callable[..., Any],
        level: int,
    ) -> None:
        """Test rates stay within [5, 95] at any skill level."""
        entity = make_entity(skills={"one_handed": level, "strength": level, "weapon_mastery": level})

        for ability in catalog.all():
            rate = catalog.calculate_success_rate(entity, ability.key)
            assert 5 <= rate <= 95

    def test_success_rate_unknown(self, catalog: AbilityCatalog, hero: Any) -> None:
        """Test unknown abilities have a zero rate."""
        assert catalog.calculate_success_rate(hero, "fireball") == 0.0

    def test_ap_cost_reduction(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test AP cost drops one per 15 levels."""
        novice = make_entity(skills={"one_handed": 1})
        veteran = make_entity("veteran", skills={"one_handed": 15})

        assert catalog.calculate_ap_cost(novice, "precise_strike") == 2
        assert catalog.calculate_ap_cost(veteran, "precise_strike") == 1

    def test_ap_cost_floor_of_one(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test a nonzero cost never drops below 1."""
        master = make_entity(skills={"one_handed": 60})

        assert catalog.calculate_ap_cost(master, "precise_strike") == 1

    def test_zero_cost_stays_zero(self, catalog: AbilityCatalog, hero: Any) -> None:
        """Test free abilities stay free."""
        assert catalog.calculate_ap_cost(hero, "wait") == 0

    def test_range_increase(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test range grows one per 10 levels."""
        mage = make_entity(skills={"arcane_lore": 25})

        assert catalog.calculate_range(mage, "magic_missile") == 8


class TestUnlockQueries:
    """Tests for unlocked and near-unlock queries."""

    def test_unlocked_abilities_for_novice(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test an untrained entity can use only the base abilities."""
        entity = make_entity()

        unlocked = {entry.ability.key for entry in catalog.get_unlocked_abilities(entity)}

        assert unlocked == set(BASE_ABILITIES)

    def test_unlocked_entries_annotated(self, catalog: AbilityCatalog, make_entity: Callable[..., Any]) -> None:
        """Test unlocked entries carry effective numbers."""
        entity = make_entity(skills={"one_handed": 15})

        entry = next(
            item
            for item in catalog.get_unlocked_abilities(entity)
            if item.ability.key == "precise_strike"
        )

        assert entry.ap_cost == 1
        assert entry.range == 1
        assert entry.success_rate == 35.0

    def test_near_unlock(self, catalog: AbilityCatalog, hero: Any) -> None:
        """Test abilities within five levels are listed, closest first."""
        near = catalog.get_near_unlock_abilities(hero)
        keys = [entry.ability.key for entry in near]

        assert "precise_strike" in keys
        assert "power_strike" in keys
        assert "one_handed_mastery" not in keys
        assert [entry.levels_needed for entry in near] == sorted(
            entry.levels_needed for entry in near
        )
        power = next(entry for entry in near if entry.ability.key == "power_strike")
        assert power.missing_skills == {"one_handed": 5}

    def test_near_unlock_threshold(self, catalog: AbilityCatalog, hero: Any) -> None:
        """Test a tighter threshold filters further."""
        keys = {entry.ability.key for entry in catalog.get_near_unlock_abilities(hero, 1)}

        assert "precise_strike" in keys
        assert "power_strike" not in keys
