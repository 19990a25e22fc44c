"""Problem generation with a three-branch difficulty controller."""

import random

from times_trainer.models.level import DifficultyRange, Level
from times_trainer.models.problem import Problem
from times_trainer.models.rules import DrillRules


def adjusted_max(
    level_range: DifficultyRange,
    rolling_accuracy: float | None,
    rules: DrillRules | None = None,
) -> int:
    """Upper operand bound after adapting to the learner's accuracy.

    The controller is discrete, not continuous: above ``widen_above_accuracy``
    the bound grows by ``difficulty_step`` (capped at ``difficulty_ceiling``),
    below ``narrow_below_accuracy`` it shrinks by the same step (floored at the
    range's low end), and anything in between, including both thresholds
    themselves, keeps the level's own bound. No accuracy means no adaptation.
    """
    rules = rules or DrillRules()
    high = level_range.high
    if rolling_accuracy is None:
        return high
    if rolling_accuracy > rules.widen_above_accuracy:
        return min(high + rules.difficulty_step, rules.difficulty_ceiling)
    if rolling_accuracy < rules.narrow_below_accuracy:
        return max(high - rules.difficulty_step, level_range.low)
    return high


def generate_problems(
    level: Level,
    rolling_accuracy: float | None = None,
    *,
    rules: DrillRules | None = None,
    rng: random.Random | None = None,
) -> list[Problem]:
    """Generate the problem batch for one play-through of ``level``.

    Args:
        level: Level whose range bounds the operands.
        rolling_accuracy: Profile-wide accuracy (0-100), or None.
        rules: Batch size and controller settings.
        rng: Random source, mainly for tests.

    Returns:
        ``rules.problems_per_level`` problems with operands drawn
        independently and uniformly from ``[range.low, adjusted_max]``.
    """
    rules = rules or DrillRules()
    rng = rng or random.Random()
    low = level.range.low
    high = adjusted_max(level.range, rolling_accuracy, rules)
    return [
        Problem(operand_a=rng.randint(low, high), operand_b=rng.randint(low, high))
        for _ in range(rules.problems_per_level)
    ]
