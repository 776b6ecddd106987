# app/api/v1/routes/stats.py
from fastapi import APIRouter, Depends
from app.api.v1.dependencies import get_progress_service
from app.core.schemas.progress import StreakRead, UserStatsSnapshot
from app.core.utils import get_current_user
from app.models.user import User
from app.services.progress_service import ProgressService

router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=UserStatsSnapshot)
async def get_stats(
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return await service.stats.project(current_user.id, service.clock().date())


@router.post("/stats/reconcile", response_model=UserStatsSnapshot)
async def reconcile_stats(
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    """Пересчитать счетчики по журналу"""
    return await service.reconcile(current_user.id)


@router.get("/streak", response_model=StreakRead)
async def get_streak(
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    streak = await service.get_streak(current_user.id)
    if streak is None:
        return StreakRead()
    return streak
