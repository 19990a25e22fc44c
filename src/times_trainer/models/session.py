"""Drill session data models."""

import uuid
from enum import StrEnum

from pydantic import BaseModel, Field

from times_trainer.models.leaderboard import LeaderboardEntry
from times_trainer.models.level import Level
from times_trainer.models.problem import Problem
from times_trainer.models.user_profile import UserProfile


class DrillState(StrEnum):
    """Drill session lifecycle states."""

    IDLE = "idle"
    PLAYING = "playing"
    AWAITING_ACKNOWLEDGEMENT = "awaiting_acknowledgement"
    COMPLETED = "completed"


class Feedback(StrEnum):
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class SessionStats(BaseModel):
    """Per-session counters. ``total == correct + wrong`` always holds."""

    total: int = 0
    correct: int = 0
    wrong: int = 0
    total_time_ms: int = 0

    def record(self, is_correct: bool, elapsed_ms: int) -> None:
        """Record one answered attempt."""
        self.total += 1
        if is_correct:
            self.correct += 1
        else:
            self.wrong += 1
        self.total_time_ms += max(0, elapsed_ms)


class PendingTransition(BaseModel):
    """Delayed move to the next problem, fulfilled by the UI layer.

    The UI waits ``delay_ms`` while showing "correct" feedback, then calls
    ``DrillEngine.advance(transition_id)``. Stale ids are ignored.
    """

    transition_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    delay_ms: int


class LevelResult(BaseModel):
    """Summary of a completed level."""

    level_id: int
    xp_gained: int
    avg_time_ms: float
    accuracy: int
    is_perfect: bool
    is_new_best_time: bool


class TrainerContext(BaseModel):
    """Everything that outlives a single session."""

    profile: UserProfile = Field(default_factory=UserProfile)
    levels: list[Level] = Field(default_factory=list)
    leaderboard: list[LeaderboardEntry] = Field(default_factory=list)

    def find_level(self, level_id: int) -> Level | None:
        for level in self.levels:
            if level.id == level_id:
                return level
        return None


class SessionSnapshot(BaseModel):
    """Read-only view state emitted after every engine transition."""

    state: DrillState
    level_id: int | None = None
    current_problem: Problem | None = None
    expected_answer: int | None = None
    feedback: Feedback = Feedback.NONE
    stats: SessionStats = Field(default_factory=SessionStats)
    remaining: int = 0
    progress_percent: float = 0.0
    pending_transition: PendingTransition | None = None
    last_result: LevelResult | None = None
    levels: list[Level] = Field(default_factory=list)
    profile: UserProfile = Field(default_factory=UserProfile)
