# tests/test_progress_service.py
import json
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import AuthorizationError, NotFoundError
from app.models.roadmap import TaskDifficulty
from app.repositories.activity_repository import ActivityRepository
from app.repositories.achievement_repository import AchievementRepository
from app.repositories.stats_repository import UserStatsRepository


class RecordingSocket:
    def __init__(self):
        self.sent = []

    async def accept(self):
        pass

    async def send_text(self, data):
        self.sent.append(data)


class BrokenSocket(RecordingSocket):
    async def send_text(self, data):
        raise RuntimeError("connection reset by peer")


async def tasks_on(session, user_id, day):
    activity = await ActivityRepository(session).get(user_id, day)
    return activity.tasks_completed if activity else 0


async def test_first_easy_task_updates_every_aggregate(progress_service, session, user, make_roadmap, clock):
    roadmap = await make_roadmap(user, [[TaskDifficulty.EASY]])

    result = await progress_service.set_task_completion(user.id, *roadmap.task(), True)

    assert result.changed
    assert result.event.completed
    assert result.event.difficulty == "Easy"
    assert result.snapshot.total_completed == 1
    assert result.snapshot.experience_points == 10
    assert result.snapshot.level == 1
    assert result.snapshot.problems_solved.easy == 1
    assert result.snapshot.current_streak == 1

    activity = await ActivityRepository(session).get(user.id, clock().date())
    assert activity.tasks_completed == 1
    assert activity.activity_level == 0


async def test_two_tasks_same_day_reach_level_one(progress_service, session, user, make_roadmap, clock):
    roadmap = await make_roadmap(user)

    for task in roadmap.all_tasks:
        await progress_service.set_task_completion(user.id, *task, True)

    activity = await ActivityRepository(session).get(user.id, clock().date())
    assert activity.tasks_completed == 2
    assert activity.activity_level == 1


async def test_seven_day_streak_awards_week_warrior(progress_service, session, user, make_roadmap, clock):
    # Восьмая задача остается открытой, чтобы роадмап не считался пройденным
    roadmap = await make_roadmap(user, [[TaskDifficulty.MEDIUM] * 8])
    clock.advance(-6)

    results = []
    for task in roadmap.all_tasks[:7]:
        results.append(await progress_service.set_task_completion(user.id, *task, True))
        clock.advance(1)

    last = results[-1]
    assert last.snapshot.current_streak == 7
    assert [a.achievement.slug for a in last.new_achievements] == ["week_warrior"]
    # 7 задач по 10 XP и награда за серию
    assert last.snapshot.experience_points == 7 * 10 + 75
    assert last.snapshot.weekly_progress == 7


async def test_skipped_day_does_not_chain(progress_service, user, make_roadmap, clock):
    roadmap = await make_roadmap(user)
    first, second = roadmap.all_tasks

    clock.advance(-2)
    await progress_service.set_task_completion(user.id, *first, True)
    clock.advance(2)
    result = await progress_service.set_task_completion(user.id, *second, True)

    assert result.streak.current_streak == 1
    assert result.streak.streak_start_date == clock().date()


async def test_unchecking_only_completion_of_a_day_drops_it_from_the_chain(
    progress_service, session, user, make_roadmap, clock
):
    roadmap = await make_roadmap(user)
    first, second = roadmap.all_tasks
    yesterday = clock().date() - timedelta(days=1)

    clock.advance(-1)
    await progress_service.set_task_completion(user.id, *first, True)
    clock.advance(1)
    result = await progress_service.set_task_completion(user.id, *second, True)
    assert result.streak.current_streak == 2

    result = await progress_service.set_task_completion(user.id, *first, False)

    assert await tasks_on(session, user.id, yesterday) == 0
    assert result.streak.current_streak == 1
    assert result.streak.longest_streak == 2


async def test_round_trip_restores_counters(progress_service, session, user, make_roadmap, clock):
    roadmap = await make_roadmap(user)
    task = roadmap.task()

    await progress_service.set_task_completion(user.id, *task, True)
    result = await progress_service.set_task_completion(user.id, *task, False)

    assert result.changed
    assert not result.event.completed
    assert result.event.completed_at is None
    assert result.snapshot.total_completed == 0
    assert result.snapshot.experience_points == 0
    assert result.snapshot.problems_solved.total == 0
    assert await tasks_on(session, user.id, clock().date()) == 0


async def test_uncompleting_credits_the_original_day(progress_service, session, user, make_roadmap, clock):
    roadmap = await make_roadmap(user)
    task = roadmap.task()
    completion_day = clock().date()

    await progress_service.set_task_completion(user.id, *task, True)
    clock.advance(3)
    await progress_service.set_task_completion(user.id, *task, False)

    assert await tasks_on(session, user.id, completion_day) == 0
    assert await tasks_on(session, user.id, clock().date()) == 0


async def test_repeated_toggle_is_a_noop(progress_service, notifier, user, make_roadmap):
    roadmap = await make_roadmap(user)
    task = roadmap.task()
    socket = RecordingSocket()
    await notifier.connect(socket, user.id)

    await progress_service.set_task_completion(user.id, *task, True)
    sent_after_first = len(socket.sent)
    result = await progress_service.set_task_completion(user.id, *task, True)

    assert not result.changed
    assert result.snapshot.total_completed == 1
    assert result.snapshot.experience_points == 10
    assert len(socket.sent) == sent_after_first


async def test_uncompleting_an_open_task_is_a_noop(progress_service, user, make_roadmap):
    roadmap = await make_roadmap(user)

    result = await progress_service.set_task_completion(user.id, *roadmap.task(), False)

    assert not result.changed
    assert result.snapshot.total_completed == 0
    assert result.snapshot.experience_points == 0


async def test_experience_never_goes_negative(progress_service, session, user, make_roadmap):
    roadmap = await make_roadmap(user)
    task = roadmap.task()
    await progress_service.set_task_completion(user.id, *task, True)

    # Кто-то обнулил XP в обход сервиса
    stats = await UserStatsRepository(session).get_stats(user.id, for_update=True)
    stats.experience_points = 0
    await session.commit()

    result = await progress_service.set_task_completion(user.id, *task, False)

    assert result.snapshot.experience_points == 0
    assert result.snapshot.level == 1


async def test_time_spent_accumulates_only_for_completed_tasks(progress_service, user, make_roadmap):
    roadmap = await make_roadmap(user)
    task = roadmap.task()

    result = await progress_service.set_task_completion(user.id, *task, False, 15)
    assert result.event.time_spent_minutes == 15
    assert result.snapshot.total_study_time == 0

    result = await progress_service.set_task_completion(user.id, *task, True, 30)
    assert result.event.time_spent_minutes == 45
    assert result.snapshot.total_study_time == 45

    result = await progress_service.set_task_completion(user.id, *task, True, 5)
    assert result.snapshot.total_study_time == 50

    result = await progress_service.set_task_completion(user.id, *task, False)
    assert result.snapshot.total_study_time == 0


async def test_uncheck_with_time_removes_only_previously_counted_minutes(progress_service, user, make_roadmap):
    roadmap = await make_roadmap(user)
    first, second = roadmap.all_tasks

    await progress_service.set_task_completion(user.id, *first, True, 30)
    result = await progress_service.set_task_completion(user.id, *second, True, 20)
    assert result.snapshot.total_study_time == 50

    result = await progress_service.set_task_completion(user.id, *first, False, 15)

    assert result.changed
    assert result.event.time_spent_minutes == 45
    assert result.snapshot.total_study_time == 20

    # Повторная отметка возвращает в итог все накопленное на задаче время
    result = await progress_service.set_task_completion(user.id, *first, True)
    assert result.snapshot.total_study_time == 65


async def test_foreign_roadmap_is_forbidden(progress_service, user, other_user, make_roadmap):
    roadmap = await make_roadmap(other_user)

    with pytest.raises(AuthorizationError):
        await progress_service.set_task_completion(user.id, *roadmap.task(), True)


async def test_unknown_roadmap_module_or_task_is_not_found(progress_service, user, make_roadmap):
    roadmap = await make_roadmap(user, [[TaskDifficulty.EASY], [TaskDifficulty.HARD]])
    roadmap_id, module_id, task_id = roadmap.task(0, 0)
    _, other_module_id, other_task_id = roadmap.task(1, 0)

    with pytest.raises(NotFoundError):
        await progress_service.set_task_completion(user.id, 9999, module_id, task_id, True)
    with pytest.raises(NotFoundError):
        await progress_service.set_task_completion(user.id, roadmap_id, 9999, task_id, True)
    with pytest.raises(NotFoundError):
        # Задача есть, но лежит в другом модуле
        await progress_service.set_task_completion(user.id, roadmap_id, module_id, other_task_id, True)


async def test_failed_toggle_leaves_nothing_behind(progress_service, session, user, other_user, make_roadmap):
    roadmap = await make_roadmap(other_user)

    with pytest.raises(AuthorizationError):
        await progress_service.set_task_completion(user.id, *roadmap.task(), True)

    assert await UserStatsRepository(session).get_stats(user.id) is None


async def test_completion_by_task_id_resolves_the_path(progress_service, user, make_roadmap):
    roadmap = await make_roadmap(user)
    roadmap_id, module_id, task_id = roadmap.task()

    result = await progress_service.set_completion_by_task(user.id, task_id, True)

    assert (result.event.roadmap_id, result.event.module_id) == (roadmap_id, module_id)

    with pytest.raises(NotFoundError):
        await progress_service.set_completion_by_task(user.id, 9999, True)


async def test_evaluation_failure_keeps_the_toggle(progress_service, session, user, make_roadmap):
    roadmap = await make_roadmap(user)

    async def broken_evaluate(user_id):
        raise OperationalError("INSERT INTO user_achievements", {}, Exception("disk I/O error"))

    progress_service.achievements.evaluate = broken_evaluate

    result = await progress_service.set_task_completion(user.id, *roadmap.task(), True)

    assert result.achievements_stale
    assert result.new_achievements == []
    assert result.event.completed
    assert result.snapshot.total_completed == 1
    assert await AchievementRepository(session).list_earned_ids(user.id) == set()


async def test_notifications_are_pushed_after_a_transition(progress_service, notifier, user, make_roadmap):
    roadmap = await make_roadmap(user)
    socket = RecordingSocket()
    await notifier.connect(socket, user.id)

    await progress_service.set_task_completion(user.id, *roadmap.task(), True)

    types = [json.loads(message)["type"] for message in socket.sent]
    assert types == ["connected", "progress_updated", "streak_updated", "achievement_earned"]


async def test_broken_socket_never_fails_the_toggle(progress_service, notifier, user, make_roadmap):
    roadmap = await make_roadmap(user)
    notifier.active_connections[user.id] = {BrokenSocket()}

    result = await progress_service.set_task_completion(user.id, *roadmap.task(), True)

    assert result.event.completed
    assert not notifier.is_connected(user.id)
