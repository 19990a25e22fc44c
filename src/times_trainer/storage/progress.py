"""Progress persistence: profile, level table and leaderboard as independent keys."""

import asyncio

import structlog
from pydantic import TypeAdapter, ValidationError

from times_trainer.drill.catalog import generate_levels, merge_levels
from times_trainer.models.leaderboard import LeaderboardEntry
from times_trainer.models.level import Level
from times_trainer.models.session import TrainerContext
from times_trainer.models.user_profile import UserProfile
from times_trainer.storage.kv_store import KeyValueStore

logger = structlog.get_logger()

PROFILE_KEY = "math-profile"
LEVELS_KEY = "math-levels"
LEADERBOARD_KEY = "math-leaderboard"

_levels_adapter = TypeAdapter(list[Level])
_leaderboard_adapter = TypeAdapter(list[LeaderboardEntry])


class ProgressRepository:
    """Loads and saves a ``TrainerContext`` through a key-value store.

    Reads never fail: missing, unreadable or malformed values fall back to
    defaults. Write failures are logged and dropped; the in-memory context
    stays authoritative and the next save overwrites whatever is stored.

    Args:
        store: Backing key-value store.
        level_count: Size of the current level catalog.
    """

    def __init__(self, store: KeyValueStore, level_count: int = 50) -> None:
        self.store = store
        self.level_count = level_count
        self._write_lock = asyncio.Lock()

    async def load_context(self) -> TrainerContext:
        profile = await self._load(PROFILE_KEY, UserProfile.model_validate_json)
        stored_levels = await self._load(LEVELS_KEY, _levels_adapter.validate_json)
        leaderboard = await self._load(LEADERBOARD_KEY, _leaderboard_adapter.validate_json)

        catalog = generate_levels(self.level_count)
        levels = merge_levels(stored_levels, catalog) if stored_levels else catalog
        return TrainerContext(
            profile=profile or UserProfile(),
            levels=levels,
            leaderboard=leaderboard or [],
        )

    async def save_context(self, context: TrainerContext) -> bool:
        """Write all three parts. Returns False if any write failed."""
        async with self._write_lock:
            try:
                await self.store.set(PROFILE_KEY, context.profile.model_dump_json())
                await self.store.set(LEVELS_KEY, _levels_adapter.dump_json(context.levels).decode())
                await self.store.set(
                    LEADERBOARD_KEY, _leaderboard_adapter.dump_json(context.leaderboard).decode()
                )
            except Exception:
                logger.exception("progress_save_failed")
                return False
        logger.info(
            "progress_saved",
            total_xp=context.profile.total_xp,
            leaderboard_size=len(context.leaderboard),
        )
        return True

    async def _load(self, key: str, parse):
        try:
            raw = await self.store.get(key)
        except (OSError, ValueError):
            logger.warning("progress_read_failed", key=key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return parse(raw)
        except (ValidationError, ValueError):
            logger.warning("progress_malformed", key=key)
            return None
