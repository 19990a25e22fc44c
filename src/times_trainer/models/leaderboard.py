"""Leaderboard entry model."""

import time
import uuid

from pydantic import BaseModel, Field


def _now_ms() -> int:
    return int(time.time() * 1000)


class LeaderboardEntry(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    score: int
    accuracy: int
    streak: int
    xp_gained: int = 0
    timestamp: int = Field(default_factory=_now_ms)  # epoch milliseconds
