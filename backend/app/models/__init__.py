# app/models/__init__.py
from .base import Base
from .user import User, UserRole
from .roadmap import Roadmap, RoadmapModule, RoadmapTask, TaskDifficulty
from .progress import CompletionEvent, DailyActivity, UserStreak
from .engagement import UserStats, Achievement, UserAchievement, CriteriaType

# Этот список нужен, чтобы IDE и инструменты видели, что экспортируется
__all__ = [
    "Base",
    "User", "UserRole",
    "Roadmap", "RoadmapModule", "RoadmapTask", "TaskDifficulty",
    "CompletionEvent", "DailyActivity", "UserStreak",
    "UserStats", "Achievement", "UserAchievement", "CriteriaType",
]
