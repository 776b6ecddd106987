# app/models/roadmap.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, func
import enum
from .base import Base

class TaskDifficulty(str, enum.Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

class Roadmap(Base):
    """Дерево модулей и задач, которое присылает сервис генерации"""
    __tablename__ = "roadmaps"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __str__(self):
        return self.title

class RoadmapModule(Base):
    __tablename__ = "roadmap_modules"

    id = Column(Integer, primary_key=True, index=True)
    roadmap_id = Column(Integer, ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    order_index = Column(Integer, default=0)

    def __str__(self):
        return f"{self.title} (Роадмап: {self.roadmap_id})"

class RoadmapTask(Base):
    __tablename__ = "roadmap_tasks"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("roadmap_modules.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    difficulty = Column(String, default=TaskDifficulty.MEDIUM.value, nullable=False) # Easy / Medium / Hard
    order_index = Column(Integer, default=0)

    def __str__(self):
        return f"{self.title} ({self.difficulty})"
