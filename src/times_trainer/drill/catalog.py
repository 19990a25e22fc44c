"""Level catalog: the fixed 50-level map and its difficulty bands."""

from collections.abc import Iterable

from times_trainer.models.level import DifficultyRange, Level, LevelType

LEVEL_COUNT = 50

# (last level id in band, low, high)
DIFFICULTY_BANDS: list[tuple[int, int, int]] = [
    (5, 2, 5),
    (10, 2, 10),
    (20, 3, 12),
    (30, 5, 15),
    (40, 8, 18),
]
TOP_BAND: tuple[int, int] = (10, 20)


def range_for_level(level_id: int) -> DifficultyRange:
    """Return the operand range for a level id."""
    for last_id, low, high in DIFFICULTY_BANDS:
        if level_id <= last_id:
            return DifficultyRange(low=low, high=high)
    low, high = TOP_BAND
    return DifficultyRange(low=low, high=high)


def generate_levels(count: int = LEVEL_COUNT) -> list[Level]:
    """Build the ordered level catalog. Only level 1 starts unlocked."""
    return [
        Level(
            id=level_id,
            title=f"Level {level_id}",
            is_unlocked=level_id == 1,
            is_completed=False,
            range=range_for_level(level_id),
            type=LevelType.for_level(level_id),
        )
        for level_id in range(1, count + 1)
    ]


def merge_levels(persisted: Iterable[Level], catalog: list[Level]) -> list[Level]:
    """Left-join the current catalog with previously stored levels.

    Stored unlock/complete flags win; ids the stored list does not know about
    (e.g. after the catalog grew from 10 to 50 levels) keep the catalog's
    defaults. Ranges, titles and types always come from the catalog.
    """
    stored = {level.id: level for level in persisted}
    merged = []
    for level in catalog:
        previous = stored.get(level.id)
        if previous is None:
            merged.append(level)
            continue
        merged.append(level.model_copy(update={
            "is_unlocked": previous.is_unlocked or level.is_unlocked,
            "is_completed": previous.is_completed,
        }))
    return merged
