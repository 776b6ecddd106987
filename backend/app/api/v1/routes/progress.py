# app/api/v1/routes/progress.py
from fastapi import APIRouter, Depends, Request
from app.api.v1.dependencies import get_progress_service
from app.core.config import settings
from app.core.rate_limit import limiter
from app.core.schemas.progress import (
    CompletionEventRead,
    TaskCompletionRequest,
    TaskCompletionResponse,
    UserAchievementRead,
)
from app.core.utils import get_current_user
from app.models.user import User
from app.services.progress_service import ProgressService, TaskCompletionResult

router = APIRouter(tags=["progress"])


def to_response(result: TaskCompletionResult) -> TaskCompletionResponse:
    return TaskCompletionResponse(
        ledger_event=CompletionEventRead.model_validate(result.event),
        snapshot=result.snapshot,
        new_achievements=[UserAchievementRead.model_validate(a) for a in result.new_achievements],
        achievements_stale=result.achievements_stale,
    )


@router.post("/tasks/{task_id}/completion", response_model=TaskCompletionResponse)
@limiter.limit(settings.progress.TOGGLE_RATE_LIMIT)
async def set_completion_by_task(
    request: Request,
    task_id: int,
    payload: TaskCompletionRequest,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    """Отметить задачу выполненной или снять отметку"""
    result = await service.set_completion_by_task(
        current_user.id, task_id, payload.completed, payload.time_spent_minutes
    )
    return to_response(result)


@router.put(
    "/roadmaps/{roadmap_id}/modules/{module_id}/tasks/{task_id}/completion",
    response_model=TaskCompletionResponse,
)
@limiter.limit(settings.progress.TOGGLE_RATE_LIMIT)
async def set_task_completion(
    request: Request,
    roadmap_id: int,
    module_id: int,
    task_id: int,
    payload: TaskCompletionRequest,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    result = await service.set_task_completion(
        current_user.id,
        roadmap_id,
        module_id,
        task_id,
        payload.completed,
        payload.time_spent_minutes,
    )
    return to_response(result)
