# app/api/v1/routes/achievements.py
from typing import List
from fastapi import APIRouter, Depends
from app.api.v1.dependencies import get_progress_service
from app.core.schemas.progress import AchievementProgressRead, UserAchievementRead
from app.core.utils import get_current_user
from app.models.user import User
from app.services.progress_service import ProgressService

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("", response_model=List[UserAchievementRead])
async def list_achievements(
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    """Полученные достижения, сначала новые"""
    return await service.achievements.list_user_achievements(current_user.id)


@router.get("/catalog", response_model=List[AchievementProgressRead])
async def achievements_catalog(
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    """Весь каталог с прогрессом пользователя по каждому достижению"""
    return await service.achievements.catalog_progress(current_user.id)


@router.post("/check", response_model=List[UserAchievementRead])
async def check_achievements(
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    """Принудительная проверка, возвращает только новые награды"""
    return await service.evaluate_achievements(current_user.id)
