# app/services/progress_service.py
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import ProgressConfig, settings
from app.core.exceptions import (
    AuthorizationError,
    ConflictingUpdateError,
    DatabaseError,
    NotFoundError,
)
from app.core.schemas.progress import UserStatsSnapshot
from app.core.utils import local_now
from app.models.engagement import UserAchievement
from app.models.progress import CompletionEvent, UserStreak
from app.models.roadmap import Roadmap, RoadmapModule, RoadmapTask
from app.repositories.activity_repository import ActivityRepository
from app.repositories.completion_repository import CompletionRepository
from app.repositories.roadmap_repository import RoadmapRepository
from app.repositories.stats_repository import UserStatsRepository
from app.services.achievement_service import AchievementEvaluator
from app.services.activity_service import ActivityAggregator
from app.services.concurrency import UserLockRegistry, run_in_transaction
from app.services.stats_service import StatsProjector
from app.services.streak_service import StreakCalculator
from app.services.ws_manager import NotificationManager

logger = logging.getLogger(__name__)


@dataclass
class TaskCompletionResult:
    event: CompletionEvent
    snapshot: UserStatsSnapshot
    streak: UserStreak
    changed: bool = False
    new_achievements: List[UserAchievement] = field(default_factory=list)
    achievements_stale: bool = False


class ProgressService:
    """
    Отметка задач и все, что из нее следует: журнал, календарь, счетчики,
    серия, достижения и уведомления.

    Журнал, календарь, счетчики и серия пишутся в одной транзакции.
    Достижения считаются отдельной единицей работы уже после коммита:
    их сбой не откатывает отметку, а возвращается как achievements_stale.
    """

    def __init__(
        self,
        session: AsyncSession,
        locks: UserLockRegistry,
        notifier: Optional[NotificationManager] = None,
        config: ProgressConfig = settings.progress,
        clock: Callable[[], datetime] = local_now,
    ):
        self.session = session
        self.locks = locks
        self.notifier = notifier
        self.config = config
        self.clock = clock

        self.roadmap_repository = RoadmapRepository(session)
        self.ledger = CompletionRepository(session)
        stats_repository = UserStatsRepository(session)
        activity_repository = ActivityRepository(session)
        self.activity = ActivityAggregator(activity_repository)
        self.streaks = StreakCalculator(activity_repository, stats_repository, config.STREAK_GRACE_TODAY)
        self.stats = StatsProjector(session, config)
        self.achievements = AchievementEvaluator(session, config, clock)

    # === ОТМЕТКА ЗАДАЧИ ===
    async def set_task_completion(
        self,
        user_id: int,
        roadmap_id: int,
        module_id: int,
        task_id: int,
        completed: bool,
        time_spent_minutes: int = 0,
    ) -> TaskCompletionResult:
        async with self.locks.hold(user_id):
            event, streak, changed = await run_in_transaction(
                self.session,
                lambda: self._apply_completion(
                    user_id, roadmap_id, module_id, task_id, completed, time_spent_minutes
                ),
            )
            new_achievements, stale = await self._evaluate_after_commit(user_id)
            if stale:
                # Откат оценки сбросил загруженные объекты, перечитываем
                await self.session.refresh(event)
                await self.session.refresh(streak)
            snapshot = await self.stats.project(user_id, self.clock().date())

        if changed:
            logger.info(
                f"Task {task_id} in roadmap {roadmap_id} marked "
                f"{'completed' if completed else 'not completed'} by user {user_id}"
            )
        await self._notify(user_id, event, streak, changed, new_achievements)

        return TaskCompletionResult(
            event=event,
            snapshot=snapshot,
            streak=streak,
            changed=changed,
            new_achievements=new_achievements,
            achievements_stale=stale,
        )

    async def set_completion_by_task(
        self,
        user_id: int,
        task_id: int,
        completed: bool,
        time_spent_minutes: int = 0,
    ) -> TaskCompletionResult:
        """Отметка по одному task_id: модуль и роадмап находим сами"""
        path = await self.roadmap_repository.get_task_path(task_id)
        if path is None:
            raise NotFoundError("Task not found")
        task, module, roadmap = path
        return await self.set_task_completion(
            user_id, roadmap.id, module.id, task.id, completed, time_spent_minutes
        )

    async def _resolve_task(
        self, user_id: int, roadmap_id: int, module_id: int, task_id: int
    ) -> Tuple[Roadmap, RoadmapModule, RoadmapTask]:
        """Проверка существования и владения"""
        roadmap = await self.roadmap_repository.get_roadmap(roadmap_id)
        if roadmap is None:
            raise NotFoundError("Roadmap not found")
        if roadmap.owner_id != user_id:
            raise AuthorizationError("Roadmap belongs to another user")

        module = await self.roadmap_repository.get_module(roadmap_id, module_id)
        if module is None:
            raise NotFoundError("Module not found")

        task = await self.roadmap_repository.get_task(module_id, task_id)
        if task is None:
            raise NotFoundError("Task not found")

        return roadmap, module, task

    async def _apply_completion(
        self,
        user_id: int,
        roadmap_id: int,
        module_id: int,
        task_id: int,
        completed: bool,
        time_spent_minutes: int,
    ) -> Tuple[CompletionEvent, UserStreak, bool]:
        _, _, task = await self._resolve_task(user_id, roadmap_id, module_id, task_id)

        now = self.clock()
        today = now.date()

        event = await self.ledger.get_or_create(
            user_id, roadmap_id, module_id, task_id, difficulty=task.difficulty
        )
        stats = await self.stats.load_for_update(user_id)
        was_completed = bool(event.completed)

        changed = completed != was_completed

        if completed and not was_completed:
            event.time_spent_minutes = (event.time_spent_minutes or 0) + time_spent_minutes
            event.completed = True
            event.completed_at = now
            event.completed_on = today
            await self.activity.record_completion(user_id, today, 1)
            self.stats.apply_completion(stats, event)
        elif not completed and was_completed:
            # Снимаем выполнение с того дня, которому оно было засчитано
            credited_day = event.completed_on or (event.completed_at.date() if event.completed_at else today)
            event.completed = False
            event.completed_at = None
            event.completed_on = None
            await self.activity.record_completion(user_id, credited_day, -1)
            # Из итога вычитается только время, которое в него входило
            self.stats.apply_uncompletion(stats, event)
            event.time_spent_minutes = (event.time_spent_minutes or 0) + time_spent_minutes
        else:
            event.time_spent_minutes = (event.time_spent_minutes or 0) + time_spent_minutes
            if completed and time_spent_minutes:
                # Дозапись времени к уже выполненной задаче
                self.stats.add_study_time(stats, time_spent_minutes)

        if changed:
            stats.last_activity_at = now

        streak = await self.streaks.recompute_streak(user_id, today)
        await self.session.flush()
        return event, streak, changed

    # === ДОСТИЖЕНИЯ ===
    async def _evaluate_after_commit(self, user_id: int) -> Tuple[List[UserAchievement], bool]:
        try:
            awards = await run_in_transaction(
                self.session, lambda: self.achievements.evaluate(user_id)
            )
            return awards, False
        except (ConflictingUpdateError, DatabaseError):
            logger.exception(f"Achievement evaluation failed for user {user_id}, progress is saved")
            return [], True

    async def evaluate_achievements(self, user_id: int) -> List[UserAchievement]:
        """Ручная проверка достижений"""
        async with self.locks.hold(user_id):
            awards = await run_in_transaction(
                self.session, lambda: self.achievements.evaluate(user_id)
            )
        for award in awards:
            if self.notifier is not None:
                await self.notifier.achievement_earned(user_id, award.achievement)
        return awards

    # === СВЕРКА ===
    async def reconcile(self, user_id: int) -> UserStatsSnapshot:
        """Пересчитать счетчики по журналу и заново посчитать серию"""
        async with self.locks.hold(user_id):
            async def operation():
                await self.stats.reconcile(user_id)
                return await self.streaks.recompute_streak(user_id, self.clock().date())

            await run_in_transaction(self.session, operation)
            return await self.stats.project(user_id, self.clock().date())

    async def get_streak(self, user_id: int) -> Optional[UserStreak]:
        return await self.streaks.stats_repository.get_streak(user_id)

    async def _notify(
        self,
        user_id: int,
        event: CompletionEvent,
        streak: UserStreak,
        changed: bool,
        new_achievements: List[UserAchievement],
    ) -> None:
        if self.notifier is None:
            return
        if changed:
            await self.notifier.progress_updated(
                user_id, event.roadmap_id, event.module_id, event.task_id, event.completed
            )
            await self.notifier.streak_updated(user_id, streak.current_streak)
        for award in new_achievements:
            await self.notifier.achievement_earned(user_id, award.achievement)
