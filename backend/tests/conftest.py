# tests/conftest.py
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Настройки читаются при импорте app.core.config, поэтому окружение задаем до импортов
_TMP_DIR = tempfile.mkdtemp(prefix="roadmap-progress-tests-")
os.environ.setdefault("SECURITY__JWT_SECRET_KEY", "test-secret-key-for-progress-tracker")
os.environ["DB__DB_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["PROGRESS__RATE_LIMIT_ENABLED"] = "false"

import pytest

from app.core.config import settings
from app.core.database import db_helper
from app.core.schemas.roadmap import ModuleCreate, RoadmapCreate, TaskCreate
from app.models import Base, User
from app.models.roadmap import TaskDifficulty
from app.repositories.roadmap_repository import RoadmapRepository
from app.services.achievement_service import seed_achievement_catalog
from app.services.concurrency import UserLockRegistry
from app.services.progress_service import ProgressService
from app.services.ws_manager import NotificationManager


class FakeClock:
    """Часы, которые двигаются только вручную"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 1) -> None:
        self.now += timedelta(days=days)


@pytest.fixture
async def database():
    """Чистая схема и засеянный каталог на каждый тест"""
    async with db_helper.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with db_helper.session_factory() as session:
        await seed_achievement_catalog(session)
    yield
    await db_helper.dispose()


@pytest.fixture
async def session(database):
    async with db_helper.session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier():
    return NotificationManager()


@pytest.fixture
def progress_service(session, notifier, clock):
    return ProgressService(session, UserLockRegistry(), notifier, settings.progress, clock)


async def _create_user(session, email: str) -> User:
    user = User(email=email, role="user")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def user(session):
    return await _create_user(session, "learner@example.com")


@pytest.fixture
async def other_user(session):
    return await _create_user(session, "someone.else@example.com")


@pytest.fixture
def make_roadmap(session):
    """Создает роадмап: modules - список списков сложностей задач"""

    async def factory(owner, modules=None, title="Python Backend"):
        modules = modules if modules is not None else [[TaskDifficulty.EASY, TaskDifficulty.MEDIUM]]
        roadmap_create = RoadmapCreate(
            title=title,
            modules=[
                ModuleCreate(
                    title=f"Module {i + 1}",
                    tasks=[
                        TaskCreate(title=f"Task {i + 1}.{j + 1}", difficulty=difficulty)
                        for j, difficulty in enumerate(difficulties)
                    ],
                )
                for i, difficulties in enumerate(modules)
            ],
        )
        roadmap = await RoadmapRepository(session).create(owner.id, roadmap_create)
        await session.commit()
        return await RoadmapTree.load(session, roadmap.id)

    return factory


class RoadmapTree:
    """Роадмап с модулями и задачами по порядку, для удобства в тестах"""

    def __init__(self, roadmap_id, modules):
        self.id = roadmap_id
        self.modules = modules

    @classmethod
    async def load(cls, session, roadmap_id):
        modules = await RoadmapRepository(session).list_modules_with_tasks(roadmap_id)
        return cls(roadmap_id, modules)

    def task(self, module_index: int = 0, task_index: int = 0):
        """(roadmap_id, module_id, task_id) для вызова сервиса"""
        module, tasks = self.modules[module_index]
        return self.id, module.id, tasks[task_index].id

    @property
    def all_tasks(self):
        return [
            (self.id, module.id, task.id)
            for module, tasks in self.modules
            for task in tasks
        ]
