"""User profile model for tracking drill progress across sessions."""

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    total_xp: int = Field(default=0, ge=0)
    levels_completed: int = Field(default=0, ge=0)  # highest completed level id
    total_questions: int = Field(default=0, ge=0)
    correct_questions: int = Field(default=0, ge=0)
    accuracy: int = Field(default=0, ge=0, le=100)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    fastest_avg_time_ms: float | None = None

    @property
    def rolling_accuracy(self) -> float | None:
        """Accuracy used to adapt difficulty, or None without any history."""
        if self.total_questions == 0:
            return None
        return float(self.accuracy)
