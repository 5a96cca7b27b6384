"""Random number source for the rules engine.

Every stochastic step in the engine (initiative, success rolls, stun
chances, enemy damage) draws from a single injected ``DiceRoller`` so that
encounters can be replayed from a seed and tests can script exact rolls.

Dice expressions are parsed and rolled by the d20 library; percentile and
range draws come from a seeded numpy generator.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

import d20
import numpy as np

from dungeon_tactics.core.exceptions import DiceRollError
from dungeon_tactics.core.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class DiceExpression:
    """The result of rolling a dice expression.

    Attributes:
        expression: The original dice expression string.
        total: The total result of the roll.
        dice: Individual kept dice results.
        modifier: Static modifier applied.
    """

    expression: str
    total: int
    dice: list[int]
    modifier: int


class DiceRoller:
    """Seedable dice and percentile roller.

    d20 rolls through the module-level ``random`` generator, so each roller
    keeps its own generator state and swaps it in for the duration of a roll.
    Two rollers built from the same seed replay the same dice even when
    their rolls interleave.

    Example:
        >>> roller = DiceRoller(seed=7)
        >>> roller.roll("1d20+5").total
        >>> roller.roll("2d20kh1").dice
        >>> roller.roll_percent()
    """

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
        """
        self._seed = seed
        self._rng = np.random.default_rng(seed)
        self._dice_state = random.Random(seed).getstate()
        logger.debug("DiceRoller initialized", seed=seed)

    @property
    def seed(self) -> int | None:
        """The seed this roller was created with."""
        return self._seed

    def roll(self, expression: str) -> DiceExpression:
        """Roll dice according to the given expression.

        Args:
            expression: Dice expression in d20 notation (e.g., '1d20',
                '2d6+3', 'd4-1', '2d20kh1').

        Returns:
            DiceExpression containing roll results.

        Raises:
            DiceRollError: If the expression is empty or cannot be rolled.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        outer_state = random.getstate()
        random.setstate(self._dice_state)
        try:
            result = d20.roll(expression)
        except d20.RollError as exc:
            raise DiceRollError(
                f"Invalid dice expression: {expression!r}",
                expression=expression,
            ) from exc
        finally:
            self._dice_state = random.getstate()
            random.setstate(outer_state)

        dice = self._extract_dice_values(result.expr, expression)
        modifier = result.total - sum(dice)

        logger.debug("Dice rolled", expression=expression, dice=dice, total=result.total)
        return DiceExpression(
            expression=expression,
            total=result.total,
            dice=dice,
            modifier=modifier,
        )

    def _extract_dice_values(self, expr: Any, expression: str) -> list[int]:
        """Collect the kept dice from a d20 expression tree.

        Raises:
            DiceRollError: If a dice term rolls no dice (e.g. '0d6').
        """
        values: list[int] = []

        def traverse(node: Any) -> None:
            if isinstance(node, d20.Dice):
                if node.num < 1:
                    raise DiceRollError(
                        "Dice count must be positive",
                        expression=expression,
                    )
                values.extend(die.number for die in node.values if die.kept)
            else:
                for child in node.children:
                    traverse(child)

        traverse(expr)
        return values

    def roll_d20(self) -> int:
        """Roll a single d20.

        Returns:
            A value in 1..20.
        """
        return self.roll("1d20").total

    def roll_range(self, low: int, high: int) -> int:
        """Roll a uniform integer within an inclusive range.

        Args:
            low: Smallest possible result.
            high: Largest possible result.

        Returns:
            A value in low..high.

        Raises:
            DiceRollError: If high is below low.
        """
        if high < low:
            raise DiceRollError(
                f"Empty range {low}..{high}",
                expression=f"{low}..{high}",
            )
        return int(self._rng.integers(low, high, endpoint=True))

    def roll_percent(self) -> float:
        """Draw a uniform value in [0, 100).

        Returns:
            The percentile roll.
        """
        return float(self._rng.random() * 100)

    def roll_chance(self, probability: float) -> bool:
        """Bernoulli trial.

        Args:
            probability: Chance of success as a fraction (values >= 1 always
                succeed, values <= 0 never do).

        Returns:
            True if the trial succeeded.
        """
        if probability <= 0:
            return False
        if probability >= 1:
            return True
        return bool(self._rng.random() < probability)


__all__ = [
    "DiceExpression",
    "DiceRoller",
]
