# tests/test_stats.py
from datetime import timedelta

from app.core.config import settings
from app.models.roadmap import TaskDifficulty
from app.repositories.activity_repository import ActivityRepository
from app.repositories.stats_repository import UserStatsRepository
from app.services.stats_service import StatsProjector, level_for


def test_level_thresholds():
    assert level_for(0) == 1
    assert level_for(299) == 1
    assert level_for(300) == 2
    assert level_for(905) == 4
    assert level_for(-10) == 1


async def test_empty_user_gets_a_zero_snapshot(session, user, clock):
    snapshot = await StatsProjector(session, settings.progress).project(user.id, clock().date())

    assert snapshot.total_completed == 0
    assert snapshot.level == 1
    assert snapshot.weekly_goal == settings.progress.WEEKLY_GOAL
    assert snapshot.current_streak == 0


async def test_weekly_progress_is_a_rolling_window(progress_service, session, user, make_roadmap, clock):
    roadmap = await make_roadmap(user, [[TaskDifficulty.EASY] * 3])
    first, second, third = roadmap.all_tasks

    clock.advance(-7)  # ровно за границей семидневного окна
    await progress_service.set_task_completion(user.id, *first, True)
    clock.advance(1)
    await progress_service.set_task_completion(user.id, *second, True)
    clock.advance(6)
    await progress_service.set_task_completion(user.id, *third, True)

    snapshot = await progress_service.stats.project(user.id, clock().date())

    assert snapshot.total_completed == 3
    assert snapshot.weekly_progress == 2
    # Через неделю без активности окно пустое, а итоги на месте
    snapshot = await progress_service.stats.project(user.id, clock().date() + timedelta(days=7))
    assert snapshot.weekly_progress == 0
    assert snapshot.total_completed == 3


async def test_completed_roadmaps_are_counted(progress_service, user, make_roadmap):
    done = await make_roadmap(user, [[TaskDifficulty.EASY], [TaskDifficulty.HARD]])
    await make_roadmap(user, [[TaskDifficulty.EASY]], title="Untouched")
    await make_roadmap(user, [], title="Empty")

    for task in done.all_tasks:
        result = await progress_service.set_task_completion(user.id, *task, True)

    assert result.snapshot.roadmaps_completed == 1
    assert result.snapshot.problems_solved.easy == 1
    assert result.snapshot.problems_solved.hard == 1
    assert "road_runner" in [a.achievement.slug for a in result.new_achievements]


async def test_reconcile_repairs_drifted_counters(progress_service, session, user, make_roadmap, clock):
    roadmap = await make_roadmap(user, [[TaskDifficulty.EASY, TaskDifficulty.HARD, TaskDifficulty.MEDIUM]])
    first, second, _ = roadmap.all_tasks
    await progress_service.set_task_completion(user.id, *first, True, 20)
    await progress_service.set_task_completion(user.id, *second, True, 40)
    xp_before = (await progress_service.stats.project(user.id, clock().date())).experience_points

    # Портим счетчики и календарь в обход сервиса
    stats = await UserStatsRepository(session).get_stats(user.id, for_update=True)
    stats.total_completed = 42
    stats.total_study_time = 1
    stats.hard_solved = 0
    activity_repository = ActivityRepository(session)
    await activity_repository.set_count(user.id, clock().date(), 9)
    await activity_repository.set_count(user.id, clock().date() - timedelta(days=3), 4)
    await session.commit()

    snapshot = await progress_service.reconcile(user.id)

    assert snapshot.total_completed == 2
    assert snapshot.total_study_time == 60
    assert snapshot.problems_solved.easy == 1
    assert snapshot.problems_solved.hard == 1
    assert snapshot.experience_points == xp_before
    assert snapshot.current_streak == 1
    assert (await activity_repository.get(user.id, clock().date())).tasks_completed == 2
    assert (await activity_repository.get(user.id, clock().date() - timedelta(days=3))).tasks_completed == 0
