"""Integration tests for combat flow.

Tests complete encounters through the orchestrator, from initiative to the
end of combat.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from dungeon_tactics.core.config import CombatSettings, Settings
from dungeon_tactics.core.constants import COMBAT_LOG_SIZE
from dungeon_tactics.engine.orchestrator import CombatOrchestrator, create_orchestrator
from dungeon_tactics.models.entities import Equipment, Shield, Weapon
from dungeon_tactics.models.enums import EventType, SlotType


if TYPE_CHECKING:
    from collections.abc import Callable

    from dungeon_tactics.models.events import CombatEvent


def _slot_all(orchestrator: CombatOrchestrator, entity: Any, *keys: str) -> None:
    for index, key in enumerate(keys):
        result = orchestrator.engine.slots.slot(entity, key, SlotType.ACTIVE, index)
        assert result.success, result.reason


def _fight(orchestrator: CombatOrchestrator, attacker: Any, target: Any, max_actions: int = 50) -> None:
    """Attack whenever AP allows, otherwise end the turn, until combat ends."""
    for _ in range(max_actions):
        if not orchestrator.in_combat:
            return
        if attacker.ap >= 1:
            orchestrator.handle_action(
                {
                    "type": "useSkill",
                    "entity_id": attacker.id,
                    "data": {"skillId": "basic_attack", "targetId": target.id},
                }
            )
        else:
            orchestrator.handle_action({"type": "endTurn", "entity_id": attacker.id})


@pytest.fixture
def guard(make_entity: Callable[..., Any]) -> Any:
    """A shield-bearing fighter."""
    return make_entity(
        "guard",
        x=5,
        y=5,
        skills={"shields": 1, "armor_use": 0},
        equipment=Equipment(
            weapon=Weapon(name="Mace", damage_min=2, damage_max=4),
            shield=Shield(name="Kite Shield", defense=2),
        ),
    )


class TestCombatFlow:
    """Test complete combat scenarios."""

    def test_stun_then_victory(
        self,
        guard: Any,
        goblin: Any,
        scripted_dice_factory: Callable[..., Any],
    ) -> None:
        """Stun the goblin, take a free round, then finish it off."""
        events: list[CombatEvent] = []
        orchestrator = create_orchestrator(
            [guard],
            Settings(),
            scripted_dice_factory(chances=[True]),
            sink=events.append,
        )
        _slot_all(orchestrator, guard, "basic_attack", "shield_bash", "wait")

        # Ties keep the party ahead of enemies
        start = orchestrator.start_combat([goblin])
        assert start.success is True
        assert orchestrator.scheduler.current_entity is guard

        bash = orchestrator.handle_action(
            {
                "type": "useSkill",
                "entity_id": "guard",
                "data": {"skillId": "shield_bash", "targetId": "goblin"},
            }
        )
        assert bash.success is True
        assert "stun" in goblin.status_effects
        assert guard.ap == 1
        assert guard.skills["shields"].use_count == 1

        # Skill and effectiveness push the stun to three turns; one is spent
        assert goblin.status_effects["stun"].duration == 3
        end = orchestrator.handle_action({"type": "endTurn", "entity_id": "guard"})
        assert end.success is True
        assert guard.health == 30
        assert goblin.status_effects["stun"].duration == 2
        assert orchestrator.scheduler.state.round == 2
        assert guard.ap == 3

        again = orchestrator.handle_action(
            {
                "type": "useSkill",
                "entity_id": "guard",
                "data": {"skillId": "shield_bash", "targetId": "goblin"},
            }
        )
        assert again.success is False
        assert again.reason == "Ability on cooldown (1 turns remaining)"

        _fight(orchestrator, guard, goblin)

        assert orchestrator.in_combat is False
        assert goblin.alive is False
        assert guard.alive is True
        assert guard.in_combat is False
        assert guard.ability_cooldowns == {}
        assert events[-1].type == EventType.COMBAT_ENDED
        assert events[-1].data["victory"] is True
        assert EventType.COMBAT_STARTED in [event.type for event in events]

    def test_enemy_ambush_defeat(
        self,
        hero: Any,
        goblin: Any,
        scripted_dice_factory: Callable[..., Any],
    ) -> None:
        """A wounded hero falls before getting a turn."""
        orchestrator = create_orchestrator([hero], Settings(), scripted_dice_factory(d20s=[5, 15]))
        hero.health = 3

        result = orchestrator.start_combat([goblin])

        assert result.success is True
        assert result.turn.combat_ended is True
        assert result.turn.victory is False
        assert hero.alive is False
        assert orchestrator.in_combat is False

        # A fresh encounter cannot start without a living party
        assert orchestrator.start_combat([goblin]).reason == "No living party members"

    def test_two_fighters_share_the_order(
        self,
        hero: Any,
        make_entity: Callable[..., Any],
        goblin: Any,
        dice: Any,
    ) -> None:
        """Both party members act in initiative order before the enemy."""
        ally = make_entity("ally", x=6, y=6, equipment=Equipment(weapon=Weapon(name="Axe", damage_min=2, damage_max=6)))
        orchestrator = create_orchestrator([hero, ally], Settings(), dice)
        _slot_all(orchestrator, hero, "basic_attack")
        _slot_all(orchestrator, ally, "basic_attack")

        orchestrator.start_combat([goblin])
        assert orchestrator.scheduler.current_entity is hero

        orchestrator.handle_action(
            {"type": "useSkill", "entity_id": "hero", "data": {"skillId": "basic_attack", "targetId": "goblin"}}
        )
        orchestrator.handle_action({"type": "endTurn", "entity_id": "hero"})
        assert orchestrator.scheduler.current_entity is ally

        result = orchestrator.handle_action(
            {"type": "useSkill", "entity_id": "ally", "data": {"skillId": "basic_attack", "targetId": "goblin"}}
        )
        assert result.success is True
        assert goblin.health == 4

        state = orchestrator.get_combat_state()
        assert state.current_entity_id == "ally"
        assert len(state.combat_log) <= COMBAT_LOG_SIZE

    def test_seeded_encounter_replays(self, hero: Any, goblin: Any) -> None:
        """Two encounters from the same seed play out identically."""
        outcomes = []
        for _ in range(2):
            fighter = hero.model_copy(deep=True)
            enemy = goblin.model_copy(deep=True)
            settings = Settings(combat=CombatSettings(rng_seed=1234))
            orchestrator = create_orchestrator([fighter], settings)
            _slot_all(orchestrator, fighter, "basic_attack")

            orchestrator.start_combat([enemy])
            _fight(orchestrator, fighter, enemy, max_actions=200)

            assert orchestrator.in_combat is False
            assert fighter.alive is not enemy.alive
            assert len(orchestrator.combat_log) <= COMBAT_LOG_SIZE
            outcomes.append(
                (fighter.health, enemy.health, [(event.type, event.data) for event in orchestrator.combat_log])
            )

        assert outcomes[0] == outcomes[1]
