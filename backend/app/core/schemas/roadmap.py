# app/core/schemas/roadmap.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from app.models.roadmap import TaskDifficulty

# --- Создание роадмапа (дерево приходит от сервиса генерации) ---

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    difficulty: TaskDifficulty = TaskDifficulty.MEDIUM

class ModuleCreate(BaseModel):
    title: str = Field(..., min_length=1)
    tasks: List[TaskCreate] = []

class RoadmapCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    modules: List[ModuleCreate] = []

# --- Чтение ---

class RoadmapTaskRead(BaseModel):
    id: int
    title: str
    difficulty: str
    order_index: int

    model_config = ConfigDict(from_attributes=True)

class RoadmapModuleRead(BaseModel):
    id: int
    title: str
    order_index: int
    tasks: List[RoadmapTaskRead] = []

class RoadmapRead(BaseModel):
    id: int
    owner_id: int
    title: str
    description: Optional[str] = None
    modules: List[RoadmapModuleRead] = []

# --- Прогресс по роадмапу ---

class ModuleProgressRead(BaseModel):
    module_id: int
    title: str
    total_tasks: int
    completed_tasks: int
    completed: bool

class DifficultyDistribution(BaseModel):
    easy: int = 0
    medium: int = 0
    hard: int = 0

class RoadmapProgressRead(BaseModel):
    roadmap_id: int
    progress: float = 0.0
    total_modules: int = 0
    completed_modules: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    total_time_spent: int = 0
    difficulty_distribution: DifficultyDistribution = Field(default_factory=DifficultyDistribution)
    modules: List[ModuleProgressRead] = []
