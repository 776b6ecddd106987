# app/repositories/achievement_repository.py
from datetime import datetime
from typing import List, Optional, Set
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.engagement import Achievement, UserAchievement

class AchievementRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_catalog(self) -> List[Achievement]:
        """Весь каталог достижений"""
        result = await self.session.execute(select(Achievement).order_by(Achievement.id))
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Optional[Achievement]:
        stmt = select(Achievement).where(Achievement.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_to_catalog(self, **fields) -> Achievement:
        achievement = Achievement(**fields)
        self.session.add(achievement)
        await self.session.flush()
        return achievement

    async def list_earned_ids(self, user_id: int) -> Set[int]:
        """ID уже полученных пользователем достижений"""
        stmt = select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def list_user_achievements(self, user_id: int) -> List[UserAchievement]:
        """Полученные достижения, сначала новые"""
        stmt = (
            select(UserAchievement)
            .where(UserAchievement.user_id == user_id)
            .order_by(UserAchievement.earned_at.desc(), UserAchievement.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().unique().all())

    async def award(self, user_id: int, achievement: Achievement, earned_at: datetime) -> UserAchievement:
        """Выдать достижение. Повтор упадет на уникальном ключе (user, achievement)"""
        user_achievement = UserAchievement(
            user_id=user_id,
            achievement_id=achievement.id,
            earned_at=earned_at,
        )
        user_achievement.achievement = achievement
        self.session.add(user_achievement)
        await self.session.flush()
        return user_achievement
