# app/services/streak_service.py
import logging
from datetime import date, timedelta
from typing import Iterable, Optional, Tuple
from app.models.progress import UserStreak
from app.repositories.activity_repository import ActivityRepository
from app.repositories.stats_repository import UserStatsRepository

logger = logging.getLogger(__name__)


def calculate_current_streak(
    active_dates: Iterable[date],
    today: date,
    grace_today: bool = True,
) -> Tuple[int, Optional[date]]:
    """
    Длина текущей серии подряд идущих активных дней и ее первый день.

    Серия отсчитывается от сегодняшнего дня. Если сегодня еще ничего не
    сделано и grace_today включен, отсчет идет от вчерашнего дня: день
    еще не закончился, серия не считается прерванной.
    """
    days = sorted({d for d in active_dates if d <= today}, reverse=True)
    if not days:
        return 0, None

    anchor = today
    if days[0] != today and grace_today:
        anchor = today - timedelta(days=1)

    streak = 0
    for day in days:
        if day == anchor - timedelta(days=streak):
            streak += 1
        else:
            break

    if streak == 0:
        return 0, None
    return streak, anchor - timedelta(days=streak - 1)


class StreakCalculator:
    def __init__(
        self,
        activity_repository: ActivityRepository,
        stats_repository: UserStatsRepository,
        grace_today: bool = True,
    ):
        self.activity_repository = activity_repository
        self.stats_repository = stats_repository
        self.grace_today = grace_today

    async def recompute_streak(self, user_id: int, today: date) -> UserStreak:
        """Полный пересчет серии по дневной активности (не инкремент)"""
        active_dates = await self.activity_repository.list_active_dates(user_id)
        streak = await self.stats_repository.get_or_create_streak(user_id)

        current, start = calculate_current_streak(active_dates, today, self.grace_today)
        past_dates = [d for d in active_dates if d <= today]

        streak.current_streak = current
        streak.longest_streak = max(streak.longest_streak or 0, current)
        streak.streak_start_date = start
        streak.last_active_date = past_dates[0] if past_dates else None

        await self.stats_repository.session.flush()
        logger.debug(f"Streak for user {user_id}: current={current}, longest={streak.longest_streak}")
        return streak
