# app/repositories/stats_repository.py
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.engagement import UserStats
from app.models.progress import UserStreak

class UserStatsRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_stats(self, user_id: int, for_update: bool = False):
        """Получить накопительные счетчики пользователя"""
        if for_update:
            # Свежая копия строки, чтобы версия сравнивалась с актуальной
            return await self.session.get(
                UserStats, user_id, populate_existing=True, with_for_update=True
            )
        return await self.session.get(UserStats, user_id)

    async def get_or_create_stats(self, user_id: int, weekly_goal: int = 10) -> UserStats:
        stats = await self.get_stats(user_id, for_update=True)
        if stats is not None:
            return stats

        stats = UserStats(
            user_id=user_id,
            total_completed=0,
            experience_points=0,
            level=1,
            weekly_goal=weekly_goal,
            total_study_time=0,
            easy_solved=0,
            medium_solved=0,
            hard_solved=0,
        )
        self.session.add(stats)
        await self.session.flush()
        return stats

    async def get_streak(self, user_id: int):
        return await self.session.get(UserStreak, user_id)

    async def get_or_create_streak(self, user_id: int) -> UserStreak:
        """Серия создается с нулями при первой активности"""
        streak = await self.get_streak(user_id)
        if streak is not None:
            return streak

        streak = UserStreak(user_id=user_id, current_streak=0, longest_streak=0)
        self.session.add(streak)
        await self.session.flush()
        return streak
