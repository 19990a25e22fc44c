"""Profile badges."""

from collections.abc import Callable

from pydantic import BaseModel

from times_trainer.models.user_profile import UserProfile


class Achievement(BaseModel):
    key: str
    title: str
    description: str


_RULES: list[tuple[Achievement, Callable[[UserProfile], bool]]] = [
    (
        Achievement(key="beginner", title="Beginner", description="Complete 5 levels"),
        lambda p: p.levels_completed >= 5,
    ),
    (
        Achievement(key="pro", title="Pro", description="Complete 10 levels"),
        lambda p: p.levels_completed >= 10,
    ),
    (
        Achievement(key="sharpshooter", title="Sharpshooter", description="Reach 90% accuracy"),
        lambda p: p.accuracy >= 90,
    ),
    (
        Achievement(key="on_fire", title="On Fire", description="7 perfect levels in a row"),
        lambda p: p.current_streak >= 7,
    ),
]


def earned_achievements(profile: UserProfile) -> list[Achievement]:
    return [achievement for achievement, earned in _RULES if earned(profile)]
