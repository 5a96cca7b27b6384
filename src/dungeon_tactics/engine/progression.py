"""Use-driven skill progression.

Skills gain exactly 1 XP per qualifying use. Levels follow a fixed,
non-linear XP table:

    threshold(0) = 0
    threshold(L) = threshold(L - 1) + step(L)

    step(L) = 10 + 2L             for L <= 10
            = 30 + 5(L - 10)      for L <= 30
            = 100 + 10(L - 30)    for L <= 60
            = 200 + 20(L - 60)    beyond

A skill's level is always the largest L whose threshold its XP has reached.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import TYPE_CHECKING

from dungeon_tactics.core.constants import (
    DEFAULT_MASTERY_TITLE,
    MASTERY_TITLES,
    MAX_SKILL_LEVEL,
    XP_PER_USE,
)
from dungeon_tactics.core.exceptions import InvariantViolationError
from dungeon_tactics.core.logging import get_logger
from dungeon_tactics.models.enums import EventType
from dungeon_tactics.models.events import CombatEvent
from dungeon_tactics.models.skills import SkillAward, SkillRecord


if TYPE_CHECKING:
    from collections.abc import Iterable

    from dungeon_tactics.models.entities import Entity


logger = get_logger(__name__)


# =============================================================================
# XP Table
# =============================================================================


def _xp_step(level: int) -> int:
    if level <= 10:
        return 10 + 2 * level
    if level <= 30:
        return 30 + 5 * (level - 10)
    if level <= 60:
        return 100 + 10 * (level - 30)
    return 200 + 20 * (level - 60)


def _build_thresholds() -> tuple[int, ...]:
    thresholds = [0]
    for level in range(1, MAX_SKILL_LEVEL + 1):
        thresholds.append(thresholds[-1] + _xp_step(level))
    return tuple(thresholds)


XP_THRESHOLDS: tuple[int, ...] = _build_thresholds()
"""Total XP required for each level 0-100, indexed by level."""


def xp_threshold(level: int) -> int:
    """Get the total XP required to reach a level.

    Args:
        level: Target level, 0-100.

    Returns:
        The XP threshold.

    Raises:
        ValueError: If the level is outside 0-100.
    """
    if not 0 <= level <= MAX_SKILL_LEVEL:
        raise ValueError(f"Level must be between 0 and {MAX_SKILL_LEVEL}, got {level}")
    return XP_THRESHOLDS[level]


def level_for_xp(xp: int) -> int:
    """Determine skill level based on XP.

    Works for any XP value, including amounts far beyond the level cap.
    """
    if xp <= 0:
        return 0
    return min(MAX_SKILL_LEVEL, bisect_right(XP_THRESHOLDS, xp) - 1)


def xp_to_next_level(xp: int) -> int:
    """Get XP still needed for the next level. Returns 0 at the level cap."""
    level = level_for_xp(xp)
    if level >= MAX_SKILL_LEVEL:
        return 0
    return XP_THRESHOLDS[level + 1] - xp


def xp_progress(record: SkillRecord) -> tuple[int, int]:
    """Get (xp_into_level, xp_span_of_level).

    Returns:
        Tuple of (progress, total) for progress bar display; (0, 0) at the
        level cap.
    """
    if record.level >= MAX_SKILL_LEVEL:
        return (0, 0)

    current_threshold = XP_THRESHOLDS[record.level]
    next_threshold = XP_THRESHOLDS[record.level + 1]
    return (record.xp - current_threshold, next_threshold - current_threshold)


# =============================================================================
# Tracker
# =============================================================================


class SkillProgressionTracker:
    """Awards skill uses and keeps levels consistent with XP.

    The tracker is stateless; all progress lives on ``Entity.skills`` and
    persists across encounters.

    Example:
        >>> tracker = SkillProgressionTracker()
        >>> tracker.initialize(hero, ["one_handed", "shields"])
        >>> award = tracker.award_use(hero, "one_handed")
        >>> award.xp
        1
    """

    def initialize(self, entity: Entity, skill_keys: Iterable[str]) -> None:
        """Start tracking skills on an entity.

        Skills the entity already tracks keep their progress.

        Args:
            entity: The entity to initialize.
            skill_keys: Every skill the entity should track.
        """
        added = 0
        for skill_key in skill_keys:
            if skill_key not in entity.skills:
                entity.skills[skill_key] = SkillRecord()
                added += 1
        logger.debug("Skills initialized", entity_id=entity.id, added=added)

    def award_use(self, entity: Entity, skill_key: str) -> SkillAward:
        """Award one use of a skill.

        Args:
            entity: The entity that used the skill.
            skill_key: The skill to award.

        Returns:
            SkillAward describing the change. Untracked skills are a no-op
            with ``awarded=False``.
        """
        record = entity.skills.get(skill_key)
        if record is None:
            logger.debug("Skill not tracked", entity_id=entity.id, skill=skill_key)
            return SkillAward(skill_key=skill_key, awarded=False)

        old_level = record.level
        new_xp = record.xp + XP_PER_USE
        new_level = level_for_xp(new_xp)
        self._check_monotonic(entity, skill_key, record, new_xp)

        record.xp = new_xp
        record.use_count += 1
        record.level = new_level

        event = None
        if new_level > old_level:
            event = CombatEvent(
                type=EventType.CHARACTER_SKILL_GAINED,
                entity_id=entity.id,
                skill_key=skill_key,
                data={"old_level": old_level, "new_level": new_level, "xp_gain": XP_PER_USE},
            )
            logger.info(
                "Skill level gained",
                entity_id=entity.id,
                skill=skill_key,
                old_level=old_level,
                new_level=new_level,
            )

        return SkillAward(
            skill_key=skill_key,
            awarded=True,
            old_level=old_level,
            new_level=new_level,
            xp=new_xp,
            event=event,
        )

    def bulk_advance(self, entity: Entity, skill_key: str, levels: int) -> SkillAward:
        """Advance a skill by whole levels.

        The skill lands exactly on the XP threshold of its new level, which
        is capped at 100.

        Args:
            entity: The entity to advance.
            skill_key: The skill to advance.
            levels: Number of levels to add.

        Returns:
            SkillAward describing the change; ``awarded=False`` for
            untracked skills.

        Raises:
            InvariantViolationError: If the advance would lower XP.
        """
        record = entity.skills.get(skill_key)
        if record is None:
            return SkillAward(skill_key=skill_key, awarded=False)

        old_level = record.level
        target_level = min(MAX_SKILL_LEVEL, old_level + levels)
        target_xp = XP_THRESHOLDS[target_level]
        self._check_monotonic(entity, skill_key, record, target_xp)

        record.level = target_level
        record.xp = target_xp

        event = CombatEvent(
            type=EventType.CHARACTER_SKILL_GAINED,
            entity_id=entity.id,
            skill_key=skill_key,
            data={
                "old_level": old_level,
                "new_level": target_level,
                "xp_gain": target_xp - XP_THRESHOLDS[old_level],
            },
        )
        logger.info(
            "Skill advanced",
            entity_id=entity.id,
            skill=skill_key,
            old_level=old_level,
            new_level=target_level,
        )
        return SkillAward(
            skill_key=skill_key,
            awarded=True,
            old_level=old_level,
            new_level=target_level,
            xp=target_xp,
            event=event,
        )

    @staticmethod
    def _check_monotonic(
        entity: Entity,
        skill_key: str,
        record: SkillRecord,
        new_xp: int,
    ) -> None:
        if new_xp < record.xp:
            raise InvariantViolationError(
                f"XP for {skill_key!r} would decrease from {record.xp} to {new_xp}",
                invariant="xp_monotonic",
                details={"entity_id": entity.id, "skill": skill_key},
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def top_skills(self, entity: Entity, count: int = 10) -> list[tuple[str, SkillRecord]]:
        """Get the entity's highest trained skills.

        Untrained skills (level 0) are excluded. Ties on level are broken by
        XP, then by the order the skills were added.
        """
        trained = [(key, record) for key, record in entity.skills.items() if record.level > 0]
        trained.sort(key=lambda item: (item[1].level, item[1].xp), reverse=True)
        return trained[:count]

    def total_skill_points(self, entity: Entity) -> int:
        """Sum of all skill levels."""
        return sum(record.level for record in entity.skills.values())

    def mastery_title(self, entity: Entity) -> str:
        """Get a title from the average level of the top 5 skills."""
        top = self.top_skills(entity, 5)
        if not top:
            return DEFAULT_MASTERY_TITLE

        average = sum(record.level for _, record in top) / len(top)
        for minimum, title in MASTERY_TITLES:
            if average >= minimum:
                return title
        return DEFAULT_MASTERY_TITLE


__all__ = [
    "XP_THRESHOLDS",
    "xp_threshold",
    "level_for_xp",
    "xp_to_next_level",
    "xp_progress",
    "SkillProgressionTracker",
]
