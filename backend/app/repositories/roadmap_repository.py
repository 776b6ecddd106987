# app/repositories/roadmap_repository.py
from typing import Optional, List, Tuple
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.roadmap import Roadmap, RoadmapModule, RoadmapTask
from app.models.progress import CompletionEvent
from app.core.schemas.roadmap import RoadmapCreate

class RoadmapRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_roadmap(self, roadmap_id: int) -> Optional[Roadmap]:
        """Получить роадмап по ID"""
        return await self.session.get(Roadmap, roadmap_id)

    async def get_module(self, roadmap_id: int, module_id: int) -> Optional[RoadmapModule]:
        """Модуль, только если он принадлежит роадмапу"""
        stmt = select(RoadmapModule).where(
            RoadmapModule.id == module_id,
            RoadmapModule.roadmap_id == roadmap_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_task(self, module_id: int, task_id: int) -> Optional[RoadmapTask]:
        """Задача, только если она лежит в модуле"""
        stmt = select(RoadmapTask).where(
            RoadmapTask.id == task_id,
            RoadmapTask.module_id == module_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_task_path(self, task_id: int) -> Optional[Tuple[RoadmapTask, RoadmapModule, Roadmap]]:
        """Задача вместе с модулем и роадмапом"""
        stmt = (
            select(RoadmapTask, RoadmapModule, Roadmap)
            .join(RoadmapModule, RoadmapTask.module_id == RoadmapModule.id)
            .join(Roadmap, RoadmapModule.roadmap_id == Roadmap.id)
            .where(RoadmapTask.id == task_id)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        return tuple(row) if row else None

    async def create(self, owner_id: int, roadmap_create: RoadmapCreate) -> Roadmap:
        """Создать роадмап со всем деревом модулей и задач"""
        roadmap = Roadmap(
            owner_id=owner_id,
            title=roadmap_create.title,
            description=roadmap_create.description,
        )
        self.session.add(roadmap)
        await self.session.flush()  # Получаем ID без коммита

        for module_index, module_create in enumerate(roadmap_create.modules):
            module = RoadmapModule(
                roadmap_id=roadmap.id,
                title=module_create.title,
                order_index=module_index,
            )
            self.session.add(module)
            await self.session.flush()

            for task_index, task_create in enumerate(module_create.tasks):
                self.session.add(RoadmapTask(
                    module_id=module.id,
                    title=task_create.title,
                    difficulty=task_create.difficulty.value,
                    order_index=task_index,
                ))

        await self.session.flush()
        return roadmap

    async def list_modules_with_tasks(self, roadmap_id: int) -> List[Tuple[RoadmapModule, List[RoadmapTask]]]:
        """Модули роадмапа по порядку, у каждого свои задачи"""
        modules_stmt = (
            select(RoadmapModule)
            .where(RoadmapModule.roadmap_id == roadmap_id)
            .order_by(RoadmapModule.order_index, RoadmapModule.id)
        )
        modules = (await self.session.execute(modules_stmt)).scalars().all()

        tasks_stmt = (
            select(RoadmapTask)
            .join(RoadmapModule, RoadmapTask.module_id == RoadmapModule.id)
            .where(RoadmapModule.roadmap_id == roadmap_id)
            .order_by(RoadmapTask.order_index, RoadmapTask.id)
        )
        tasks = (await self.session.execute(tasks_stmt)).scalars().all()

        tasks_by_module = {module.id: [] for module in modules}
        for task in tasks:
            tasks_by_module[task.module_id].append(task)

        return [(module, tasks_by_module[module.id]) for module in modules]

    async def count_completed_roadmaps(self, user_id: int) -> int:
        """Сколько роадмапов пользователя пройдено полностью (пустые не считаются)"""
        totals = (
            select(
                RoadmapModule.roadmap_id.label("roadmap_id"),
                func.count(RoadmapTask.id).label("total"),
            )
            .join(RoadmapTask, RoadmapTask.module_id == RoadmapModule.id)
            .group_by(RoadmapModule.roadmap_id)
            .subquery()
        )
        done = (
            select(
                CompletionEvent.roadmap_id.label("roadmap_id"),
                func.count(CompletionEvent.id).label("done"),
            )
            .where(
                CompletionEvent.user_id == user_id,
                CompletionEvent.completed.is_(True),
            )
            .group_by(CompletionEvent.roadmap_id)
            .subquery()
        )
        stmt = (
            select(func.count(Roadmap.id))
            .join(totals, totals.c.roadmap_id == Roadmap.id)
            .join(done, done.c.roadmap_id == Roadmap.id)
            .where(
                Roadmap.owner_id == user_id,
                done.c.done >= totals.c.total,
            )
        )
        return (await self.session.execute(stmt)).scalar() or 0

    async def delete(self, roadmap_id: int) -> None:
        """Удалить роадмап каскадом вместе с записями журнала"""
        module_ids = select(RoadmapModule.id).where(RoadmapModule.roadmap_id == roadmap_id)

        await self.session.execute(
            delete(CompletionEvent).where(CompletionEvent.roadmap_id == roadmap_id)
        )
        await self.session.execute(
            delete(RoadmapTask).where(RoadmapTask.module_id.in_(module_ids))
        )
        await self.session.execute(
            delete(RoadmapModule).where(RoadmapModule.roadmap_id == roadmap_id)
        )
        await self.session.execute(
            delete(Roadmap).where(Roadmap.id == roadmap_id)
        )
