"""initial progress schema

Revision ID: 5b1e7c3a9d20
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5b1e7c3a9d20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "roadmaps",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], name=op.f("fk_roadmaps_owner_id_users")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_roadmaps")),
    )
    op.create_index(op.f("ix_roadmaps_id"), "roadmaps", ["id"], unique=False)
    op.create_index(op.f("ix_roadmaps_owner_id"), "roadmaps", ["owner_id"], unique=False)

    op.create_table(
        "roadmap_modules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("roadmap_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["roadmap_id"], ["roadmaps.id"],
            name=op.f("fk_roadmap_modules_roadmap_id_roadmaps"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_roadmap_modules")),
    )
    op.create_index(op.f("ix_roadmap_modules_id"), "roadmap_modules", ["id"], unique=False)
    op.create_index(op.f("ix_roadmap_modules_roadmap_id"), "roadmap_modules", ["roadmap_id"], unique=False)

    op.create_table(
        "roadmap_tasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("module_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("difficulty", sa.String(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["module_id"], ["roadmap_modules.id"],
            name=op.f("fk_roadmap_tasks_module_id_roadmap_modules"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_roadmap_tasks")),
    )
    op.create_index(op.f("ix_roadmap_tasks_id"), "roadmap_tasks", ["id"], unique=False)
    op.create_index(op.f("ix_roadmap_tasks_module_id"), "roadmap_tasks", ["module_id"], unique=False)

    op.create_table(
        "completion_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("roadmap_id", sa.Integer(), nullable=False),
        sa.Column("module_id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("difficulty", sa.String(), nullable=False),
        sa.Column("time_spent_minutes", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_on", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.CheckConstraint("time_spent_minutes >= 0", name=op.f("ck_completion_events_time_spent_non_negative")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_completion_events_user_id_users")),
        sa.ForeignKeyConstraint(
            ["roadmap_id"], ["roadmaps.id"],
            name=op.f("fk_completion_events_roadmap_id_roadmaps"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["module_id"], ["roadmap_modules.id"],
            name=op.f("fk_completion_events_module_id_roadmap_modules"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["task_id"], ["roadmap_tasks.id"],
            name=op.f("fk_completion_events_task_id_roadmap_tasks"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_completion_events")),
        sa.UniqueConstraint(
            "user_id", "roadmap_id", "module_id", "task_id",
            name="uq_completion_events_user_task",
        ),
    )
    op.create_index(op.f("ix_completion_events_id"), "completion_events", ["id"], unique=False)
    op.create_index(
        "ix_completion_events_user_completed_on", "completion_events",
        ["user_id", "completed_on"], unique=False,
    )

    op.create_table(
        "daily_activity",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("activity_date", sa.Date(), nullable=False),
        sa.Column("tasks_completed", sa.Integer(), nullable=False),
        sa.Column("activity_level", sa.Integer(), nullable=False),
        sa.CheckConstraint("tasks_completed >= 0", name=op.f("ck_daily_activity_tasks_completed_non_negative")),
        sa.CheckConstraint("activity_level BETWEEN 0 AND 4", name=op.f("ck_daily_activity_activity_level_range")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_daily_activity_user_id_users")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_daily_activity")),
        sa.UniqueConstraint("user_id", "activity_date", name="uq_daily_activity_user_date"),
    )
    op.create_index(op.f("ix_daily_activity_id"), "daily_activity", ["id"], unique=False)

    op.create_table(
        "user_streaks",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("longest_streak", sa.Integer(), nullable=False),
        sa.Column("streak_start_date", sa.Date(), nullable=True),
        sa.Column("last_active_date", sa.Date(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_streaks_user_id_users")),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_user_streaks")),
    )

    op.create_table(
        "user_stats",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("total_completed", sa.Integer(), nullable=False),
        sa.Column("experience_points", sa.Integer(), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("weekly_goal", sa.Integer(), nullable=False),
        sa.Column("total_study_time", sa.Integer(), nullable=False),
        sa.Column("easy_solved", sa.Integer(), nullable=False),
        sa.Column("medium_solved", sa.Integer(), nullable=False),
        sa.Column("hard_solved", sa.Integer(), nullable=False),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_stats_user_id_users")),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_user_stats")),
    )

    op.create_table(
        "achievements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("criteria_type", sa.String(), nullable=False),
        sa.Column("criteria_value", sa.Integer(), nullable=False),
        sa.Column("reward_xp", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_achievements")),
    )
    op.create_index(op.f("ix_achievements_id"), "achievements", ["id"], unique=False)
    op.create_index(op.f("ix_achievements_slug"), "achievements", ["slug"], unique=True)

    op.create_table(
        "user_achievements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("achievement_id", sa.Integer(), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_user_achievements_user_id_users")),
        sa.ForeignKeyConstraint(
            ["achievement_id"], ["achievements.id"],
            name=op.f("fk_user_achievements_achievement_id_achievements"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_achievements")),
        sa.UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements_user_achievement"),
    )
    op.create_index(op.f("ix_user_achievements_id"), "user_achievements", ["id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_user_achievements_id"), table_name="user_achievements")
    op.drop_table("user_achievements")
    op.drop_index(op.f("ix_achievements_slug"), table_name="achievements")
    op.drop_index(op.f("ix_achievements_id"), table_name="achievements")
    op.drop_table("achievements")
    op.drop_table("user_stats")
    op.drop_table("user_streaks")
    op.drop_index(op.f("ix_daily_activity_id"), table_name="daily_activity")
    op.drop_table("daily_activity")
    op.drop_index("ix_completion_events_user_completed_on", table_name="completion_events")
    op.drop_index(op.f("ix_completion_events_id"), table_name="completion_events")
    op.drop_table("completion_events")
    op.drop_index(op.f("ix_roadmap_tasks_module_id"), table_name="roadmap_tasks")
    op.drop_index(op.f("ix_roadmap_tasks_id"), table_name="roadmap_tasks")
    op.drop_table("roadmap_tasks")
    op.drop_index(op.f("ix_roadmap_modules_roadmap_id"), table_name="roadmap_modules")
    op.drop_index(op.f("ix_roadmap_modules_id"), table_name="roadmap_modules")
    op.drop_table("roadmap_modules")
    op.drop_index(op.f("ix_roadmaps_owner_id"), table_name="roadmaps")
    op.drop_index(op.f("ix_roadmaps_id"), table_name="roadmaps")
    op.drop_table("roadmaps")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
