"""REST API routes for levels, profile and leaderboard."""

from fastapi import APIRouter, Query

from times_trainer.config import get_settings
from times_trainer.progress.achievements import earned_achievements
from times_trainer.storage.kv_store import JsonFileStore
from times_trainer.storage.progress import ProgressRepository

router = APIRouter(prefix="/api")


def get_repository() -> ProgressRepository:
    settings = get_settings()
    return ProgressRepository(JsonFileStore(settings.progress_dir), level_count=settings.level_count)


@router.get("/levels")
async def list_levels() -> list[dict]:
    """Level map with unlock/completion flags."""
    context = await get_repository().load_context()
    return [level.model_dump(mode="json") for level in context.levels]


@router.get("/profile")
async def get_profile() -> dict:
    """Profile totals plus earned achievements."""
    context = await get_repository().load_context()
    return {
        "profile": context.profile.model_dump(mode="json"),
        "achievements": [a.model_dump() for a in earned_achievements(context.profile)],
    }


@router.get("/leaderboard")
async def get_leaderboard(limit: int = Query(default=100, ge=1, le=100)) -> list[dict]:
    """Top leaderboard entries, best score first."""
    context = await get_repository().load_context()
    return [entry.model_dump(mode="json") for entry in context.leaderboard[:limit]]


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
