# app/repositories/activity_repository.py
from datetime import date
from typing import Optional, List
from sqlalchemy import select, update, case, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.progress import DailyActivity

class ActivityRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int, activity_date: date) -> Optional[DailyActivity]:
        stmt = select(DailyActivity).where(
            DailyActivity.user_id == user_id,
            DailyActivity.activity_date == activity_date,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: int, activity_date: date) -> DailyActivity:
        """Строка дня создается лениво при первом выполнении"""
        activity = await self.get(user_id, activity_date)
        if activity is not None:
            return activity

        activity = DailyActivity(
            user_id=user_id,
            activity_date=activity_date,
            tasks_completed=0,
            activity_level=0,
        )
        self.session.add(activity)
        await self.session.flush()
        return activity

    async def apply_delta(self, user_id: int, activity_date: date, delta: int) -> DailyActivity:
        """Атомарно изменить счетчик дня (не ниже нуля) и пересчитать уровень"""
        activity = await self.get_or_create(user_id, activity_date)

        new_value = DailyActivity.tasks_completed + delta
        stmt = (
            update(DailyActivity)
            .where(DailyActivity.id == activity.id)
            .values(tasks_completed=case((new_value < 0, 0), else_=new_value))
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.refresh(activity)

        activity.activity_level = DailyActivity.level_for(activity.tasks_completed)
        await self.session.flush()
        return activity

    async def set_count(self, user_id: int, activity_date: date, tasks_completed: int) -> DailyActivity:
        """Жестко выставить счетчик дня (используется при сверке)"""
        activity = await self.get_or_create(user_id, activity_date)
        activity.tasks_completed = max(tasks_completed, 0)
        activity.activity_level = DailyActivity.level_for(activity.tasks_completed)
        await self.session.flush()
        return activity

    async def list_between(self, user_id: int, start: date, end: date) -> List[DailyActivity]:
        stmt = (
            select(DailyActivity)
            .where(
                DailyActivity.user_id == user_id,
                DailyActivity.activity_date >= start,
                DailyActivity.activity_date <= end,
            )
            .order_by(DailyActivity.activity_date)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_user(self, user_id: int) -> List[DailyActivity]:
        stmt = select(DailyActivity).where(DailyActivity.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active_dates(self, user_id: int) -> List[date]:
        """Дни с хотя бы одной выполненной задачей, от новых к старым"""
        stmt = (
            select(DailyActivity.activity_date)
            .where(
                DailyActivity.user_id == user_id,
                DailyActivity.tasks_completed > 0,
            )
            .order_by(DailyActivity.activity_date.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_between(self, user_id: int, start: date, end: date) -> int:
        stmt = select(func.coalesce(func.sum(DailyActivity.tasks_completed), 0)).where(
            DailyActivity.user_id == user_id,
            DailyActivity.activity_date >= start,
            DailyActivity.activity_date <= end,
        )
        return (await self.session.execute(stmt)).scalar() or 0
