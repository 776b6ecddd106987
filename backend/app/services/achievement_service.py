# app/services/achievement_service.py
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import ProgressConfig, settings
from app.core.schemas.progress import AchievementProgressRead, AchievementRead
from app.core.utils import local_now
from app.models.engagement import Achievement, CriteriaType, UserAchievement
from app.repositories.achievement_repository import AchievementRepository
from app.repositories.roadmap_repository import RoadmapRepository
from app.repositories.stats_repository import UserStatsRepository
from app.services.stats_service import StatsProjector

logger = logging.getLogger(__name__)

# Статический каталог. После засева не меняется.
ACHIEVEMENT_CATALOG = [
    {
        "slug": "first_steps",
        "title": "First Steps",
        "description": "Complete your first learning task",
        "category": "Getting Started",
        "icon": "star",
        "criteria_type": CriteriaType.TASKS_COMPLETED.value,
        "criteria_value": 1,
        "reward_xp": 0,
    },
    {
        "slug": "task_master",
        "title": "Task Master",
        "description": "Complete 10 learning tasks",
        "category": "Progress",
        "icon": "check-circle",
        "criteria_type": CriteriaType.TASKS_COMPLETED.value,
        "criteria_value": 10,
        "reward_xp": 50,
    },
    {
        "slug": "century_club",
        "title": "Century Club",
        "description": "Complete 100 learning tasks",
        "category": "Progress",
        "icon": "target",
        "criteria_type": CriteriaType.TASKS_COMPLETED.value,
        "criteria_value": 100,
        "reward_xp": 500,
    },
    {
        "slug": "week_warrior",
        "title": "Week Warrior",
        "description": "Maintain a 7-day learning streak",
        "category": "Consistency",
        "icon": "flame",
        "criteria_type": CriteriaType.STREAK_DAYS.value,
        "criteria_value": 7,
        "reward_xp": 75,
    },
    {
        "slug": "monthly_master",
        "title": "Monthly Master",
        "description": "Maintain a 30-day learning streak",
        "category": "Consistency",
        "icon": "calendar",
        "criteria_type": CriteriaType.STREAK_DAYS.value,
        "criteria_value": 30,
        "reward_xp": 300,
    },
    {
        "slug": "learning_legend",
        "title": "Learning Legend",
        "description": "Maintain a 100-day learning streak",
        "category": "Consistency",
        "icon": "award",
        "criteria_type": CriteriaType.STREAK_DAYS.value,
        "criteria_value": 100,
        "reward_xp": 1000,
    },
    {
        "slug": "road_runner",
        "title": "Road Runner",
        "description": "Complete your first roadmap",
        "category": "Milestones",
        "icon": "book-open",
        "criteria_type": CriteriaType.ROADMAPS_COMPLETED.value,
        "criteria_value": 1,
        "reward_xp": 100,
    },
    {
        "slug": "path_pioneer",
        "title": "Path Pioneer",
        "description": "Complete 5 different roadmaps",
        "category": "Milestones",
        "icon": "trophy",
        "criteria_type": CriteriaType.ROADMAPS_COMPLETED.value,
        "criteria_value": 5,
        "reward_xp": 500,
    },
    {
        "slug": "time_traveler",
        "title": "Time Traveler",
        "description": "Spend 100 hours learning",
        "category": "Dedication",
        "icon": "clock",
        "criteria_type": CriteriaType.TIME_SPENT.value,
        "criteria_value": 6000,  # минуты
        "reward_xp": 400,
    },
]


@dataclass
class CriteriaSnapshot:
    """Текущие значения всех критериев пользователя"""
    tasks_completed: int = 0
    streak_days: int = 0
    roadmaps_completed: int = 0
    time_spent: int = 0


# Новый тип критерия добавляется только здесь (и в CriteriaType)
CRITERIA_GETTERS: Dict[CriteriaType, Callable[[CriteriaSnapshot], int]] = {
    CriteriaType.TASKS_COMPLETED: lambda s: s.tasks_completed,
    CriteriaType.STREAK_DAYS: lambda s: s.streak_days,
    CriteriaType.ROADMAPS_COMPLETED: lambda s: s.roadmaps_completed,
    CriteriaType.TIME_SPENT: lambda s: s.time_spent,
}


def current_value(criteria_type: str, snapshot: CriteriaSnapshot) -> int:
    try:
        getter = CRITERIA_GETTERS[CriteriaType(criteria_type)]
    except ValueError:
        logger.warning(f"Unknown achievement criteria type: {criteria_type}")
        return 0
    return getter(snapshot)


async def seed_achievement_catalog(session: AsyncSession) -> int:
    """Засеять каталог, существующие записи не трогаем. Возвращает число добавленных."""
    repository = AchievementRepository(session)
    added = 0
    for definition in ACHIEVEMENT_CATALOG:
        if await repository.get_by_slug(definition["slug"]) is None:
            await repository.add_to_catalog(**definition)
            added += 1
    await session.commit()
    if added:
        logger.info(f"Seeded {added} achievements into the catalog")
    return added


class AchievementEvaluator:
    def __init__(
        self,
        session: AsyncSession,
        config: ProgressConfig = settings.progress,
        clock: Callable[[], datetime] = local_now,
    ):
        self.session = session
        self.clock = clock
        self.achievement_repository = AchievementRepository(session)
        self.stats_repository = UserStatsRepository(session)
        self.roadmap_repository = RoadmapRepository(session)
        self.stats_projector = StatsProjector(session, config)

    async def load_criteria(self, user_id: int) -> CriteriaSnapshot:
        """Значения критериев из уже обновленных агрегатов"""
        stats = await self.stats_repository.get_stats(user_id)
        streak = await self.stats_repository.get_streak(user_id)
        return CriteriaSnapshot(
            tasks_completed=stats.total_completed if stats else 0,
            streak_days=streak.current_streak if streak else 0,
            roadmaps_completed=await self.roadmap_repository.count_completed_roadmaps(user_id),
            time_spent=stats.total_study_time if stats else 0,
        )

    async def evaluate(self, user_id: int) -> List[UserAchievement]:
        """
        Выдать все достижения, порог которых достигнут, но которые еще не получены.
        Награды и XP пишутся в одной транзакции (коммит делает вызывающий).
        """
        catalog = await self.achievement_repository.list_catalog()
        earned_ids = await self.achievement_repository.list_earned_ids(user_id)
        pending = [a for a in catalog if a.id not in earned_ids]
        if not pending:
            return []

        snapshot = await self.load_criteria(user_id)
        qualified = [
            a for a in pending
            if current_value(a.criteria_type, snapshot) >= a.criteria_value
        ]
        if not qualified:
            return []

        earned_at = self.clock()
        awards = []
        total_xp = 0
        for achievement in qualified:
            awards.append(await self.achievement_repository.award(user_id, achievement, earned_at))
            total_xp += achievement.reward_xp

        stats = await self.stats_projector.load_for_update(user_id)
        self.stats_projector.add_experience(stats, total_xp)
        await self.session.flush()

        logger.info(
            f"User {user_id} earned {len(awards)} achievement(s): "
            f"{[a.slug for a in qualified]}, +{total_xp} XP"
        )
        return awards

    async def list_user_achievements(self, user_id: int) -> List[UserAchievement]:
        return await self.achievement_repository.list_user_achievements(user_id)

    async def catalog_progress(self, user_id: int) -> List[AchievementProgressRead]:
        """Прогресс по каждому достижению каталога"""
        catalog = await self.achievement_repository.list_catalog()
        earned_ids = await self.achievement_repository.list_earned_ids(user_id)
        snapshot = await self.load_criteria(user_id)

        items = []
        for achievement in catalog:
            value = current_value(achievement.criteria_type, snapshot)
            target = achievement.criteria_value
            percentage = 100.0 if target <= 0 else round(min(value, target) / target * 100, 1)
            items.append(AchievementProgressRead(
                achievement=AchievementRead.model_validate(achievement),
                current_value=min(value, target),
                target_value=target,
                percentage=percentage,
                earned=achievement.id in earned_ids,
            ))
        return items
