# app/repositories/completion_repository.py
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.progress import CompletionEvent

class CompletionRepository:
    """Журнал выполнения задач. Единственный источник правды о прогрессе."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int, roadmap_id: int, module_id: int, task_id: int) -> Optional[CompletionEvent]:
        """Получить запись журнала по полному ключу задачи"""
        stmt = select(CompletionEvent).where(
            CompletionEvent.user_id == user_id,
            CompletionEvent.roadmap_id == roadmap_id,
            CompletionEvent.module_id == module_id,
            CompletionEvent.task_id == task_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        user_id: int,
        roadmap_id: int,
        module_id: int,
        task_id: int,
        difficulty: str,
    ) -> CompletionEvent:
        """Upsert: одна запись на задачу, повторная отметка обновляет ее"""
        event = await self.get(user_id, roadmap_id, module_id, task_id)
        if event is not None:
            return event

        event = CompletionEvent(
            user_id=user_id,
            roadmap_id=roadmap_id,
            module_id=module_id,
            task_id=task_id,
            completed=False,
            difficulty=difficulty,
            time_spent_minutes=0,
        )
        self.session.add(event)
        await self.session.flush()
        return event

    async def list_by_user(self, user_id: int, completed_only: bool = False) -> List[CompletionEvent]:
        """Все записи пользователя"""
        stmt = select(CompletionEvent).where(CompletionEvent.user_id == user_id)
        if completed_only:
            stmt = stmt.where(CompletionEvent.completed.is_(True))
        result = await self.session.execute(stmt.order_by(CompletionEvent.id))
        return list(result.scalars().all())

    async def list_by_roadmap(self, user_id: int, roadmap_id: int) -> List[CompletionEvent]:
        stmt = select(CompletionEvent).where(
            CompletionEvent.user_id == user_id,
            CompletionEvent.roadmap_id == roadmap_id,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
