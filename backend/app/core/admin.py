# app/core/admin.py
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from fastapi import Request
from app.core.security import verify_password
from app.core.config import settings
from app.repositories.user_repository import UserRepository
from app.core.database import db_helper
from app.models.user import User, UserRole
from app.models.roadmap import Roadmap
from app.models.progress import CompletionEvent, DailyActivity, UserStreak
from app.models.engagement import Achievement, UserAchievement, UserStats

# 1. Настройка авторизации в админке
class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        email, password = form["username"], form["password"]

        async with db_helper.session_factory() as session:
            user = await UserRepository(session).get_by_email(email)

            # Проверяем пароль и роль
            if user and verify_password(password, user.password_hash):
                if user.role == UserRole.ADMIN.value:
                    request.session.update({"admin_user_id": user.id})
                    return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return request.session.get("admin_user_id") is not None

authentication_backend = AdminAuth(secret_key=settings.security.JWT_SECRET_KEY.get_secret_value())

# 2. Представления моделей. Все только на чтение: данные меняются через API

class ReadOnlyView(ModelView):
    can_create = False
    can_edit = False
    can_delete = False

class UserAdmin(ReadOnlyView, model=User):
    column_list = [User.id, User.email, User.role, User.created_at]
    column_searchable_list = [User.email]
    column_sortable_list = [User.id, User.created_at]
    icon = "fa-solid fa-user"

class RoadmapAdmin(ReadOnlyView, model=Roadmap):
    column_list = [Roadmap.id, Roadmap.owner_id, Roadmap.title, Roadmap.created_at]
    column_searchable_list = [Roadmap.title]
    icon = "fa-solid fa-route"

class AchievementAdmin(ReadOnlyView, model=Achievement):
    column_list = [
        Achievement.id, Achievement.slug, Achievement.title,
        Achievement.criteria_type, Achievement.criteria_value, Achievement.reward_xp,
    ]
    icon = "fa-solid fa-trophy"

class UserAchievementAdmin(ReadOnlyView, model=UserAchievement):
    column_list = [UserAchievement.id, UserAchievement.user_id, UserAchievement.achievement, UserAchievement.earned_at]
    column_sortable_list = [UserAchievement.earned_at]
    icon = "fa-solid fa-medal"

class CompletionEventAdmin(ReadOnlyView, model=CompletionEvent):
    column_list = [
        CompletionEvent.id, CompletionEvent.user_id, CompletionEvent.roadmap_id,
        CompletionEvent.task_id, CompletionEvent.completed, CompletionEvent.difficulty,
        CompletionEvent.time_spent_minutes, CompletionEvent.completed_on,
    ]
    column_sortable_list = [CompletionEvent.id, CompletionEvent.completed_on]
    icon = "fa-solid fa-list-check"

class DailyActivityAdmin(ReadOnlyView, model=DailyActivity):
    column_list = [
        DailyActivity.user_id, DailyActivity.activity_date,
        DailyActivity.tasks_completed, DailyActivity.activity_level,
    ]
    column_sortable_list = [DailyActivity.activity_date]
    icon = "fa-solid fa-calendar-days"

class UserStatsAdmin(ReadOnlyView, model=UserStats):
    column_list = [
        UserStats.user_id, UserStats.total_completed, UserStats.experience_points,
        UserStats.level, UserStats.total_study_time, UserStats.version,
    ]
    icon = "fa-solid fa-chart-line"

class UserStreakAdmin(ReadOnlyView, model=UserStreak):
    column_list = [
        UserStreak.user_id, UserStreak.current_streak,
        UserStreak.longest_streak, UserStreak.last_active_date,
    ]
    icon = "fa-solid fa-fire"

# 3. Функция инициализации
def setup_admin(app, engine):
    admin = Admin(app, engine, authentication_backend=authentication_backend, title=settings.admin.ADMIN_TITLE)

    admin.add_view(UserAdmin)
    admin.add_view(RoadmapAdmin)
    admin.add_view(AchievementAdmin)
    admin.add_view(UserAchievementAdmin)
    admin.add_view(CompletionEventAdmin)
    admin.add_view(DailyActivityAdmin)
    admin.add_view(UserStatsAdmin)
    admin.add_view(UserStreakAdmin)
    return admin
