# app/models/progress.py
from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint, Index, func
)
from .base import Base

MAX_ACTIVITY_LEVEL = 4

class CompletionEvent(Base):
    """
    Запись журнала выполнения: одна строка на (user, roadmap, module, task).
    Снятие отметки не удаляет строку, а переводит completed в False.
    """
    __tablename__ = "completion_events"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    roadmap_id = Column(Integer, ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False)
    module_id = Column(Integer, ForeignKey("roadmap_modules.id", ondelete="CASCADE"), nullable=False)
    task_id = Column(Integer, ForeignKey("roadmap_tasks.id", ondelete="CASCADE"), nullable=False)

    completed = Column(Boolean, default=False, nullable=False)
    difficulty = Column(String, nullable=False) # Easy / Medium / Hard
    time_spent_minutes = Column(Integer, default=0, nullable=False)

    completed_at = Column(DateTime(timezone=True), nullable=True)
    # Календарный день (локальное время сервера), которому засчитано выполнение
    completed_on = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "roadmap_id", "module_id", "task_id", name="uq_completion_events_user_task"),
        CheckConstraint("time_spent_minutes >= 0", name="time_spent_non_negative"),
        Index("ix_completion_events_user_completed_on", "user_id", "completed_on"),
    )

class DailyActivity(Base):
    """Одна строка на (user, день) для календаря активности"""
    __tablename__ = "daily_activity"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    activity_date = Column(Date, nullable=False)
    tasks_completed = Column(Integer, default=0, nullable=False)
    activity_level = Column(Integer, default=0, nullable=False) # 0-4 как на GitHub

    __table_args__ = (
        UniqueConstraint("user_id", "activity_date", name="uq_daily_activity_user_date"),
        CheckConstraint("tasks_completed >= 0", name="tasks_completed_non_negative"),
        CheckConstraint("activity_level BETWEEN 0 AND 4", name="activity_level_range"),
    )

    @staticmethod
    def level_for(tasks_completed: int) -> int:
        return min(MAX_ACTIVITY_LEVEL, max(tasks_completed, 0) // 2)

class UserStreak(Base):
    __tablename__ = "user_streaks"

    # user_id как первичный ключ: одна строка на пользователя
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    streak_start_date = Column(Date, nullable=True)
    last_active_date = Column(Date, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return (
            f"<UserStreak user_id={self.user_id} current={self.current_streak} "
            f"longest={self.longest_streak} last_active={self.last_active_date}>"
        )
