# app/api/v1/routes/activity.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.v1.dependencies import get_clock
from app.core.database import db_helper
from app.core.schemas.progress import DailyActivityRead
from app.core.utils import get_current_user
from app.models.user import User
from app.repositories.activity_repository import ActivityRepository
from app.services.activity_service import ActivityAggregator

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=List[DailyActivityRead])
async def get_activity(
    year: Optional[int] = Query(None, ge=1, le=9999),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_helper.session_getter),
    clock=Depends(get_clock),
):
    """Календарь вкладов за год (по умолчанию текущий)"""
    if year is None:
        year = clock().year
    aggregator = ActivityAggregator(ActivityRepository(session))
    return await aggregator.get_year_contributions(current_user.id, year)
