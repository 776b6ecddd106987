# app/services/stats_service.py
import logging
from collections import Counter
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import ProgressConfig, settings
from app.core.schemas.progress import UserStatsSnapshot, ProblemsSolved
from app.models.engagement import UserStats
from app.models.progress import CompletionEvent
from app.models.roadmap import TaskDifficulty
from app.repositories.activity_repository import ActivityRepository
from app.repositories.completion_repository import CompletionRepository
from app.repositories.roadmap_repository import RoadmapRepository
from app.repositories.stats_repository import UserStatsRepository
from app.services.activity_service import ActivityAggregator

logger = logging.getLogger(__name__)

DIFFICULTY_FIELDS = {
    TaskDifficulty.EASY.value: "easy_solved",
    TaskDifficulty.MEDIUM.value: "medium_solved",
    TaskDifficulty.HARD.value: "hard_solved",
}


def level_for(experience_points: int, xp_per_level: int = 300) -> int:
    return max(experience_points, 0) // xp_per_level + 1


class StatsProjector:
    """
    Накопительные счетчики пользователя и сводка для дашборда.

    Счетчики меняются на +1/-1 при каждом переходе задачи, а не
    пересчитываются по всему журналу. Для исправления расхождений есть
    reconcile().
    """

    def __init__(self, session: AsyncSession, config: ProgressConfig = settings.progress):
        self.session = session
        self.config = config
        self.stats_repository = UserStatsRepository(session)
        self.activity_repository = ActivityRepository(session)
        self.activity = ActivityAggregator(self.activity_repository)
        self.completion_repository = CompletionRepository(session)
        self.roadmap_repository = RoadmapRepository(session)

    async def load_for_update(self, user_id: int) -> UserStats:
        return await self.stats_repository.get_or_create_stats(user_id, weekly_goal=self.config.WEEKLY_GOAL)

    def add_experience(self, stats: UserStats, amount: int) -> None:
        """XP не уходит ниже нуля, уровень пересчитывается сразу"""
        stats.experience_points = max(0, (stats.experience_points or 0) + amount)
        stats.level = level_for(stats.experience_points, self.config.XP_PER_LEVEL)

    def add_study_time(self, stats: UserStats, minutes: int) -> None:
        stats.total_study_time = max(0, (stats.total_study_time or 0) + minutes)

    def _bump_difficulty(self, stats: UserStats, difficulty: str, delta: int) -> None:
        field = DIFFICULTY_FIELDS.get(difficulty)
        if field is None:
            logger.warning(f"Unknown task difficulty {difficulty!r}, per-difficulty counters untouched")
            return
        setattr(stats, field, max(0, (getattr(stats, field) or 0) + delta))

    def apply_completion(self, stats: UserStats, event: CompletionEvent) -> None:
        stats.total_completed = (stats.total_completed or 0) + 1
        self._bump_difficulty(stats, event.difficulty, 1)
        self.add_study_time(stats, event.time_spent_minutes)
        self.add_experience(stats, self.config.XP_PER_TASK)

    def apply_uncompletion(self, stats: UserStats, event: CompletionEvent) -> None:
        stats.total_completed = max(0, (stats.total_completed or 0) - 1)
        self._bump_difficulty(stats, event.difficulty, -1)
        self.add_study_time(stats, -event.time_spent_minutes)
        self.add_experience(stats, -self.config.XP_PER_TASK)

    async def project(self, user_id: int, today: date) -> UserStatsSnapshot:
        """Сводка для дашборда и профиля"""
        stats = await self.stats_repository.get_stats(user_id)
        streak = await self.stats_repository.get_streak(user_id)

        weekly_progress = await self.activity.rolling_total(user_id, today, self.config.WEEKLY_WINDOW_DAYS)
        roadmaps_completed = await self.roadmap_repository.count_completed_roadmaps(user_id)

        snapshot = UserStatsSnapshot(
            weekly_progress=weekly_progress,
            weekly_goal=self.config.WEEKLY_GOAL,
            roadmaps_completed=roadmaps_completed,
        )
        if streak is not None:
            snapshot.current_streak = streak.current_streak
            snapshot.longest_streak = streak.longest_streak
        if stats is None:
            return snapshot

        snapshot.total_completed = stats.total_completed
        snapshot.experience_points = stats.experience_points
        snapshot.level = level_for(stats.experience_points, self.config.XP_PER_LEVEL)
        snapshot.weekly_goal = stats.weekly_goal
        snapshot.total_study_time = stats.total_study_time
        snapshot.problems_solved = ProblemsSolved(
            easy=stats.easy_solved,
            medium=stats.medium_solved,
            hard=stats.hard_solved,
            total=stats.easy_solved + stats.medium_solved + stats.hard_solved,
        )
        return snapshot

    async def reconcile(self, user_id: int) -> UserStats:
        """
        Пересчитать счетчики и календарь по журналу.
        XP не трогаем: это отдельный накопитель (награды за достижения).
        """
        events = await self.completion_repository.list_by_user(user_id, completed_only=True)
        stats = await self.load_for_update(user_id)

        stats.total_completed = len(events)
        stats.total_study_time = sum(e.time_spent_minutes for e in events)
        for field in DIFFICULTY_FIELDS.values():
            setattr(stats, field, 0)
        for event in events:
            self._bump_difficulty(stats, event.difficulty, 1)

        per_day = Counter(e.completed_on for e in events if e.completed_on is not None)
        for activity in await self.activity_repository.list_by_user(user_id):
            if activity.activity_date not in per_day and activity.tasks_completed:
                await self.activity_repository.set_count(user_id, activity.activity_date, 0)
        for day, count in per_day.items():
            await self.activity_repository.set_count(user_id, day, count)

        await self.session.flush()
        logger.info(f"Stats reconciled for user {user_id}: total_completed={stats.total_completed}")
        return stats
