"""Bounded, score-sorted leaderboard."""

from times_trainer.models.leaderboard import LeaderboardEntry
from times_trainer.models.user_profile import UserProfile

LEADERBOARD_CAPACITY = 100


def rank_entries(
    entries: list[LeaderboardEntry], capacity: int = LEADERBOARD_CAPACITY
) -> list[LeaderboardEntry]:
    """Sort by score, highest first, and keep the top ``capacity``.

    The sort is stable: entries with equal scores keep their existing order,
    so an older entry stays ahead of a newer one with the same score.
    """
    return sorted(entries, key=lambda entry: entry.score, reverse=True)[:capacity]


def submit_score(
    leaderboard: list[LeaderboardEntry],
    profile: UserProfile,
    session_xp: int,
    *,
    name: str = "Student",
    capacity: int = LEADERBOARD_CAPACITY,
) -> list[LeaderboardEntry]:
    """Record a finished session on the leaderboard.

    Args:
        leaderboard: Current entries.
        profile: Profile after the session was folded in.
        session_xp: XP earned in the session.
        name: Player name shown on the board.
        capacity: Maximum number of entries kept.
    """
    entry = LeaderboardEntry(
        name=name,
        score=profile.total_xp,
        accuracy=profile.accuracy,
        streak=profile.current_streak,
        xp_gained=session_xp,
    )
    return rank_entries([*leaderboard, entry], capacity)
