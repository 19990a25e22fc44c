"""Tunable drill rules shared by the generator, queue and engine."""

from pydantic import BaseModel, Field


class DrillRules(BaseModel):
    """Numeric policy knobs for a drill session.

    Built from ``Settings.drill_rules`` in the application; the defaults match
    the shipped ``config/settings.yaml``.
    """

    problems_per_level: int = Field(default=10, ge=1)
    requeue_offset: int = Field(default=3, ge=1)
    feedback_delay_ms: int = Field(default=1500, ge=0)
    xp_per_correct: int = Field(default=10, ge=0)
    leaderboard_capacity: int = Field(default=100, ge=1)
    player_name: str = "Student"

    # Three-branch difficulty controller
    difficulty_ceiling: int = 20
    difficulty_step: int = Field(default=2, ge=0)
    widen_above_accuracy: float = 90.0
    narrow_below_accuracy: float = 50.0
