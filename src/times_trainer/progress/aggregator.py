"""Fold a completed session into the persistent profile and level table."""

from times_trainer.models.level import Level
from times_trainer.models.session import LevelResult, SessionStats
from times_trainer.models.user_profile import UserProfile

XP_PER_CORRECT = 10


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half up, 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def average_time_ms(stats: SessionStats) -> float:
    if stats.total <= 0:
        raise ValueError("cannot average an empty session")
    return stats.total_time_ms / stats.total


def summarize_session(
    stats: SessionStats,
    level_id: int,
    profile: UserProfile,
    xp_per_correct: int = XP_PER_CORRECT,
) -> LevelResult:
    """Describe a finished session relative to the profile it will update.

    Args:
        stats: Final session counters (``total`` must be positive).
        level_id: Completed level.
        profile: Profile before the session is folded in.
        xp_per_correct: XP granted per correct answer.
    """
    avg_time_ms = average_time_ms(stats)
    fastest = profile.fastest_avg_time_ms
    return LevelResult(
        level_id=level_id,
        xp_gained=stats.correct * xp_per_correct,
        avg_time_ms=avg_time_ms,
        accuracy=percent(stats.correct, stats.total),
        is_perfect=stats.wrong == 0,
        is_new_best_time=fastest is None or avg_time_ms < fastest,
    )


def update_profile(
    profile: UserProfile,
    stats: SessionStats,
    level_id: int,
    xp_per_correct: int = XP_PER_CORRECT,
) -> UserProfile:
    avg_time_ms = average_time_ms(stats)
    total_questions = profile.total_questions + stats.total
    correct_questions = profile.correct_questions + stats.correct
    streak = profile.current_streak + 1 if stats.wrong == 0 else 0
    fastest = profile.fastest_avg_time_ms
    if fastest is None or avg_time_ms < fastest:
        fastest = avg_time_ms

    return profile.model_copy(update={
        "total_xp": profile.total_xp + stats.correct * xp_per_correct,
        "levels_completed": max(profile.levels_completed, level_id),
        "total_questions": total_questions,
        "correct_questions": correct_questions,
        "accuracy": percent(correct_questions, total_questions),
        "current_streak": streak,
        "longest_streak": max(profile.longest_streak, streak),
        "fastest_avg_time_ms": fastest,
    })


def update_levels(levels: list[Level], level_id: int) -> list[Level]:
    """Mark ``level_id`` completed and unlock the level right after it."""
    updated = []
    for level in levels:
        if level.id == level_id:
            level = level.model_copy(update={"is_completed": True})
        elif level.id == level_id + 1:
            level = level.model_copy(update={"is_unlocked": True})
        updated.append(level)
    return updated


def complete_level(
    profile: UserProfile,
    levels: list[Level],
    stats: SessionStats,
    level_id: int,
    *,
    xp_per_correct: int = XP_PER_CORRECT,
) -> tuple[UserProfile, list[Level]]:
    """Apply a completed level to the profile and the level table.

    Nothing is mutated in place; callers swap in both results together.

    Returns:
        The updated profile and level list.
    """
    return (
        update_profile(profile, stats, level_id, xp_per_correct),
        update_levels(levels, level_id),
    )
