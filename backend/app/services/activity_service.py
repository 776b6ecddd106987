# app/services/activity_service.py
from datetime import date, timedelta
from typing import Dict, Iterable, List
from app.core.exceptions import ValidationError
from app.core.schemas.progress import DailyActivityRead
from app.models.progress import DailyActivity
from app.repositories.activity_repository import ActivityRepository


def build_year_calendar(year: int, activities: Iterable[DailyActivity]) -> List[DailyActivityRead]:
    """Ровно одна запись на каждый день года, пустые дни заполняются нулями"""
    by_date: Dict[date, DailyActivity] = {a.activity_date: a for a in activities}

    calendar = []
    current = date(year, 1, 1)
    end = date(year, 12, 31)
    while current <= end:
        activity = by_date.get(current)
        tasks = activity.tasks_completed if activity else 0
        calendar.append(DailyActivityRead(
            date=current,
            tasks_completed=tasks,
            activity_level=DailyActivity.level_for(tasks),
        ))
        current += timedelta(days=1)
    return calendar


class ActivityAggregator:
    """Дневная активность пользователя для календаря вкладов"""

    def __init__(self, activity_repository: ActivityRepository):
        self.activity_repository = activity_repository

    async def record_completion(self, user_id: int, activity_date: date, delta: int) -> DailyActivity:
        """+1 при выполнении задачи, -1 при снятии отметки"""
        if delta not in (1, -1):
            raise ValidationError("delta must be +1 or -1")
        return await self.activity_repository.apply_delta(user_id, activity_date, delta)

    async def get_year_contributions(self, user_id: int, year: int) -> List[DailyActivityRead]:
        if year < 1 or year > 9999:
            raise ValidationError("Year is out of range")
        activities = await self.activity_repository.list_between(
            user_id, date(year, 1, 1), date(year, 12, 31)
        )
        return build_year_calendar(year, activities)

    async def rolling_total(self, user_id: int, today: date, window_days: int = 7) -> int:
        """Сумма выполненных задач за скользящее окно, заканчивающееся сегодня"""
        start = today - timedelta(days=window_days - 1)
        return await self.activity_repository.sum_between(user_id, start, today)
