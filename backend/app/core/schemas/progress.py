# app/core/schemas/progress.py
import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

class TaskCompletionRequest(BaseModel):
    completed: bool = Field(..., description="Отметить задачу выполненной или снять отметку")
    time_spent_minutes: int = Field(0, ge=0, description="Потраченное время в минутах")

class CompletionEventRead(BaseModel):
    id: int
    user_id: int
    roadmap_id: int
    module_id: int
    task_id: int
    completed: bool
    difficulty: str
    time_spent_minutes: int
    completed_at: Optional[datetime.datetime] = None
    completed_on: Optional[datetime.date] = None

    model_config = ConfigDict(from_attributes=True)

class DailyActivityRead(BaseModel):
    date: datetime.date
    tasks_completed: int = 0
    activity_level: int = Field(0, ge=0, le=4)

class StreakRead(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    streak_start_date: Optional[datetime.date] = None
    last_active_date: Optional[datetime.date] = None

    model_config = ConfigDict(from_attributes=True)

class ProblemsSolved(BaseModel):
    easy: int = 0
    medium: int = 0
    hard: int = 0
    total: int = 0

class UserStatsSnapshot(BaseModel):
    total_completed: int = 0
    experience_points: int = 0
    level: int = 1
    weekly_progress: int = 0
    weekly_goal: int = 10
    total_study_time: int = 0
    problems_solved: ProblemsSolved = Field(default_factory=ProblemsSolved)
    roadmaps_completed: int = 0
    current_streak: int = 0
    longest_streak: int = 0

class AchievementRead(BaseModel):
    id: int
    slug: str
    title: str
    description: Optional[str] = None
    category: str
    icon: Optional[str] = None
    criteria_type: str
    criteria_value: int
    reward_xp: int

    model_config = ConfigDict(from_attributes=True)

class UserAchievementRead(BaseModel):
    achievement_id: int
    earned_at: datetime.datetime
    achievement: AchievementRead

    model_config = ConfigDict(from_attributes=True)

class AchievementProgressRead(BaseModel):
    achievement: AchievementRead
    current_value: int
    target_value: int
    percentage: float
    earned: bool

class TaskCompletionResponse(BaseModel):
    ledger_event: CompletionEventRead
    snapshot: UserStatsSnapshot
    new_achievements: List[UserAchievementRead] = []
    achievements_stale: bool = False
