"""Tests for greedy enemy behavior."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from dungeon_tactics.engine.enemy_ai import EnemyController, find_nearest_target, step_toward
from dungeon_tactics.models.enums import EventType
from dungeon_tactics.models.status_effects import ActiveStatus


if TYPE_CHECKING:
    from collections.abc import Callable

    from dungeon_tactics.engine.resolution import AbilityResolutionEngine


@pytest.fixture
def controller(engine: AbilityResolutionEngine) -> EnemyController:
    return EnemyController(engine, lambda x, y: True)


class TestTargeting:
    """Tests for target selection and stepping."""

    def test_nearest_living(self, make_entity: Callable[..., Any], goblin: Any) -> None:
        """Test dead candidates are skipped."""
        near = make_entity("near", x=6, y=6, health=0, alive=False)
        far = make_entity("far", x=9, y=5)

        target, distance = find_nearest_target(goblin, [near, far])

        assert target is far
        assert distance == 3

    def test_ties_keep_first(self, make_entity: Callable[..., Any], goblin: Any) -> None:
        """Test equal distances keep candidate order."""
        first = make_entity("first", x=6, y=7)
        second = make_entity("second", x=6, y=3)

        target, _ = find_nearest_target(goblin, [first, second])

        assert target is first

    def test_no_candidates(self, goblin: Any) -> None:
        """Test an empty field yields no target."""
        assert find_nearest_target(goblin, [])[0] is None

    @pytest.mark.parametrize(
        ("start", "goal", "expected"),
        [
            ((0, 0), (3, 1), (1, 0)),
            ((0, 0), (1, 3), (0, 1)),
            ((0, 0), (2, 2), (1, 0)),
            ((5, 5), (5, 2), (5, 4)),
            ((5, 5), (1, 4), (4, 5)),
            ((5, 5), (5, 5), (5, 5)),
        ],
    )
    def test_step_toward(
        self,
        make_entity: Callable[..., Any],
        start: tuple[int, int],
        goal: tuple[int, int],
        expected: tuple[int, int],
    ) -> None:
        """Test steps follow the axis with the larger gap, ties on x."""
        mover = make_entity("mover", x=start[0], y=start[1])
        target = make_entity("target", x=goal[0], y=goal[1])

        assert step_toward(mover, target) == expected


class TestTakeTurn:
    """Tests for the attack-or-approach loop."""

    def test_adjacent_attacks(self, controller: EnemyController, goblin: Any, hero: Any) -> None:
        """Test an adjacent enemy spends all AP attacking."""
        events = controller.take_turn(goblin, [hero])

        assert [event.type for event in events] == [EventType.DAMAGE_DEALT, EventType.DAMAGE_DEALT]
        assert hero.health == 26
        assert goblin.ap == 0

    def test_armor_ignored(
        self,
        engine: AbilityResolutionEngine,
        scripted_dice_factory: Callable[..., Any],
        goblin: Any,
        hero: Any,
    ) -> None:
        """Test enemy attacks subtract the raw roll regardless of defense."""
        engine.dice = scripted_dice_factory(ranges=[3, 3])
        controller = EnemyController(engine, lambda x, y: True)
        hero.defense = 10
        hero.damage_reduction = 0.5

        events = controller.take_turn(goblin, [hero])

        assert hero.health == 24
        assert [event.data["damage"] for event in events] == [3, 3]

    def test_health_floors_at_zero(
        self,
        engine: AbilityResolutionEngine,
        scripted_dice_factory: Callable[..., Any],
        goblin: Any,
        hero: Any,
    ) -> None:
        """Test an overkill roll leaves health at zero and reports the death."""
        engine.dice = scripted_dice_factory(ranges=[4])
        controller = EnemyController(engine, lambda x, y: True)
        hero.health = 1

        events = controller.take_turn(goblin, [hero])

        assert hero.health == 0
        assert [event.type for event in events] == [EventType.DAMAGE_DEALT, EventType.ENTITY_DIED]
        assert events[0].data == {"damage": 4, "remaining_health": 0}
        assert events[1].target_id == goblin.id

    def test_approach(self, controller: EnemyController, goblin: Any, hero: Any) -> None:
        """Test a distant enemy steps toward its target."""
        goblin.move_to(9, 5)

        events = controller.take_turn(goblin, [hero])

        assert (goblin.x, goblin.y) == (7, 5)
        assert [event.type for event in events] == [EventType.ENTITY_MOVED, EventType.ENTITY_MOVED]
        assert events[0].data == {"from": [9, 5], "to": [8, 5]}
        assert hero.health == 30

    def test_move_then_attack(self, controller: EnemyController, goblin: Any, hero: Any) -> None:
        """Test an enemy closes the gap and strikes in one turn."""
        goblin.move_to(7, 5)

        events = controller.take_turn(goblin, [hero])

        assert [event.type for event in events] == [EventType.ENTITY_MOVED, EventType.DAMAGE_DEALT]
        assert hero.health == 28

    def test_blocked_movement_ends_turn(self, engine: AbilityResolutionEngine, goblin: Any, hero: Any) -> None:
        """Test a blocked step forfeits the remaining AP."""
        controller = EnemyController(engine, lambda x, y: False)
        goblin.move_to(9, 5)

        events = controller.take_turn(goblin, [hero])

        assert events == []
        assert (goblin.x, goblin.y) == (9, 5)
        assert goblin.ap == 0

    def test_incapacitated_skips(self, controller: EnemyController, goblin: Any, hero: Any) -> None:
        """Test a stunned enemy does nothing."""
        goblin.status_effects["stun"] = ActiveStatus(duration=1)

        events = controller.take_turn(goblin, [hero])

        assert events == []
        assert goblin.ap == 0
        assert hero.health == 30

    def test_no_living_opponents(self, controller: EnemyController, goblin: Any, hero: Any) -> None:
        """Test the loop stops when nobody is left to fight."""
        hero.health = 0
        hero.alive = False

        assert controller.take_turn(goblin, [hero]) == []
        assert goblin.ap == 2

    def test_stops_after_kill(self, controller: EnemyController, goblin: Any, hero: Any) -> None:
        """Test a killing blow ends the loop with AP left."""
        hero.health = 2

        events = controller.take_turn(goblin, [hero])

        assert hero.alive is False
        assert events[-1].type == EventType.ENTITY_DIED
        assert goblin.ap == 1

    def test_step_cap(self, engine: AbilityResolutionEngine, goblin: Any, hero: Any) -> None:
        """Test the step cap ends the turn and zeroes AP."""
        controller = EnemyController(engine, lambda x, y: True, max_steps=1)
        goblin.move_to(12, 5)

        events = controller.take_turn(goblin, [hero])

        assert len(events) == 1
        assert goblin.ap == 0

    def test_rolled_damage(self, engine: AbilityResolutionEngine, scripted_dice_factory: Callable[..., Any], goblin: Any, hero: Any) -> None:
        """Test damage is rolled within the enemy's range."""
        engine.dice = scripted_dice_factory(ranges=[4, 3])
        controller = EnemyController(engine, lambda x, y: True)

        controller.take_turn(goblin, [hero])

        assert hero.health == 23
