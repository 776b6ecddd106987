# app/services/roadmap_service.py
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.schemas.roadmap import (
    DifficultyDistribution,
    ModuleProgressRead,
    RoadmapCreate,
    RoadmapModuleRead,
    RoadmapProgressRead,
    RoadmapRead,
    RoadmapTaskRead,
)
from app.models.roadmap import Roadmap
from app.repositories.completion_repository import CompletionRepository
from app.repositories.roadmap_repository import RoadmapRepository
from app.services.concurrency import UserLockRegistry, run_in_transaction
from app.services.stats_service import DIFFICULTY_FIELDS

logger = logging.getLogger(__name__)


class RoadmapService:
    def __init__(self, session: AsyncSession, locks: UserLockRegistry):
        self.session = session
        self.locks = locks
        self.roadmap_repository = RoadmapRepository(session)
        self.completion_repository = CompletionRepository(session)

    async def _get_owned(self, user_id: int, roadmap_id: int) -> Roadmap:
        roadmap = await self.roadmap_repository.get_roadmap(roadmap_id)
        if roadmap is None:
            raise NotFoundError("Roadmap not found")
        if roadmap.owner_id != user_id:
            raise AuthorizationError("Roadmap belongs to another user")
        return roadmap

    async def create(self, user_id: int, roadmap_create: RoadmapCreate) -> RoadmapRead:
        roadmap = await run_in_transaction(
            self.session,
            lambda: self.roadmap_repository.create(user_id, roadmap_create),
        )
        logger.info(f"Roadmap {roadmap.id} created for user {user_id}")
        return await self.get(user_id, roadmap.id)

    async def get(self, user_id: int, roadmap_id: int) -> RoadmapRead:
        roadmap = await self._get_owned(user_id, roadmap_id)
        modules = await self.roadmap_repository.list_modules_with_tasks(roadmap_id)
        return RoadmapRead(
            id=roadmap.id,
            owner_id=roadmap.owner_id,
            title=roadmap.title,
            description=roadmap.description,
            modules=[
                RoadmapModuleRead(
                    id=module.id,
                    title=module.title,
                    order_index=module.order_index,
                    tasks=[RoadmapTaskRead.model_validate(t) for t in tasks],
                )
                for module, tasks in modules
            ],
        )

    async def get_progress(self, user_id: int, roadmap_id: int) -> RoadmapProgressRead:
        """Прогресс по роадмапу: модули, проценты, сложность, время"""
        await self._get_owned(user_id, roadmap_id)
        modules = await self.roadmap_repository.list_modules_with_tasks(roadmap_id)
        events = {
            e.task_id: e
            for e in await self.completion_repository.list_by_roadmap(user_id, roadmap_id)
        }

        progress = RoadmapProgressRead(roadmap_id=roadmap_id, total_modules=len(modules))
        distribution = {field: 0 for field in DIFFICULTY_FIELDS.values()}

        for module, tasks in modules:
            done = 0
            for task in tasks:
                event = events.get(task.id)
                if event is not None:
                    progress.total_time_spent += event.time_spent_minutes
                if event is not None and event.completed:
                    done += 1
                    field = DIFFICULTY_FIELDS.get(task.difficulty)
                    if field:
                        distribution[field] += 1

            module_completed = len(tasks) > 0 and done == len(tasks)
            progress.modules.append(ModuleProgressRead(
                module_id=module.id,
                title=module.title,
                total_tasks=len(tasks),
                completed_tasks=done,
                completed=module_completed,
            ))
            progress.total_tasks += len(tasks)
            progress.completed_tasks += done
            if module_completed:
                progress.completed_modules += 1

        if progress.total_tasks:
            progress.progress = round(progress.completed_tasks / progress.total_tasks * 100, 1)
        progress.difficulty_distribution = DifficultyDistribution(
            easy=distribution["easy_solved"],
            medium=distribution["medium_solved"],
            hard=distribution["hard_solved"],
        )
        return progress

    async def delete(self, user_id: int, roadmap_id: int) -> None:
        """Удаление вместе с журналом. Накопленные счетчики не откатываются."""
        async with self.locks.hold(user_id):
            await self._get_owned(user_id, roadmap_id)
            await run_in_transaction(
                self.session,
                lambda: self.roadmap_repository.delete(roadmap_id),
            )
        logger.info(f"Roadmap {roadmap_id} deleted by user {user_id}")
