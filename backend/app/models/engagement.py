# app/models/engagement.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
import enum
from .base import Base

class CriteriaType(str, enum.Enum):
    TASKS_COMPLETED = "tasks_completed"
    STREAK_DAYS = "streak_days"
    ROADMAPS_COMPLETED = "roadmaps_completed"
    TIME_SPENT = "time_spent"

class UserStats(Base):
    """Накопительные счетчики пользователя (обновляются инкрементально)"""
    __tablename__ = "user_stats"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    total_completed = Column(Integer, default=0, nullable=False)
    experience_points = Column(Integer, default=0, nullable=False)
    level = Column(Integer, default=1, nullable=False)
    weekly_goal = Column(Integer, default=10, nullable=False)
    total_study_time = Column(Integer, default=0, nullable=False) # в минутах
    easy_solved = Column(Integer, default=0, nullable=False)
    medium_solved = Column(Integer, default=0, nullable=False)
    hard_solved = Column(Integer, default=0, nullable=False)
    last_activity_at = Column(DateTime(timezone=True), nullable=True)

    # Оптимистическая блокировка: UPDATE ... WHERE version = :old
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String)
    category = Column(String, nullable=False)
    icon = Column(String)
    criteria_type = Column(String, nullable=False) # tasks_completed / streak_days / roadmaps_completed / time_spent
    criteria_value = Column(Integer, nullable=False)
    reward_xp = Column(Integer, default=0, nullable=False)

    def __str__(self):
        return self.title

class UserAchievement(Base):
    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    achievement_id = Column(Integer, ForeignKey("achievements.id"), nullable=False)
    earned_at = Column(DateTime(timezone=True), server_default=func.now())

    achievement = relationship("Achievement", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements_user_achievement"),
    )
