# app/api/v1/dependencies.py
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.database import db_helper
from app.core.utils import local_now
from app.services.concurrency import UserLockRegistry
from app.services.progress_service import ProgressService
from app.services.roadmap_service import RoadmapService
from app.services.ws_manager import NotificationManager


def get_notifier(request: Request) -> NotificationManager:
    """Менеджер уведомлений живет в app.state (один на процесс)"""
    return request.app.state.notifier


def get_user_locks(request: Request) -> UserLockRegistry:
    return request.app.state.user_locks


def get_clock():
    """Часы сервиса, в тестах подменяются через dependency_overrides"""
    return local_now


def get_progress_service(
    session: AsyncSession = Depends(db_helper.session_getter),
    notifier: NotificationManager = Depends(get_notifier),
    locks: UserLockRegistry = Depends(get_user_locks),
    clock=Depends(get_clock),
) -> ProgressService:
    return ProgressService(session, locks, notifier, settings.progress, clock)


def get_roadmap_service(
    session: AsyncSession = Depends(db_helper.session_getter),
    locks: UserLockRegistry = Depends(get_user_locks),
) -> RoadmapService:
    return RoadmapService(session, locks)
