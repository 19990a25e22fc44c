"""Level catalog models."""

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class LevelType(StrEnum):
    """Visual category of a level on the level map."""

    EXERCISE = "exercise"
    CHEST = "chest"
    TROPHY = "trophy"

    @classmethod
    def for_level(cls, level_id: int) -> "LevelType":
        """Derive the level type from its id."""
        if level_id % 10 == 0:
            return cls.TROPHY
        elif level_id % 5 == 0:
            return cls.CHEST
        else:
            return cls.EXERCISE


class DifficultyRange(BaseModel):
    """Inclusive operand range for a level."""

    low: int
    high: int

    @model_validator(mode="after")
    def _check_order(self) -> "DifficultyRange":
        if self.low > self.high:
            raise ValueError(f"range low {self.low} exceeds high {self.high}")
        return self


class Level(BaseModel):
    id: int = Field(ge=1)
    title: str
    is_unlocked: bool = False
    is_completed: bool = False
    range: DifficultyRange
    type: LevelType = LevelType.EXERCISE
    xp_reward: int = 10
