# app/api/v1/routes/roadmaps.py
from fastapi import APIRouter, Depends, status
from app.api.v1.dependencies import get_roadmap_service
from app.core.schemas.roadmap import RoadmapCreate, RoadmapProgressRead, RoadmapRead
from app.core.utils import get_current_user
from app.models.user import User
from app.services.roadmap_service import RoadmapService

router = APIRouter(prefix="/roadmaps", tags=["roadmaps"])


@router.post("", response_model=RoadmapRead, status_code=status.HTTP_201_CREATED)
async def create_roadmap(
    roadmap: RoadmapCreate,
    current_user: User = Depends(get_current_user),
    service: RoadmapService = Depends(get_roadmap_service),
):
    """Сохранить дерево модулей и задач от сервиса генерации"""
    return await service.create(current_user.id, roadmap)


@router.get("/{roadmap_id}", response_model=RoadmapRead)
async def get_roadmap(
    roadmap_id: int,
    current_user: User = Depends(get_current_user),
    service: RoadmapService = Depends(get_roadmap_service),
):
    return await service.get(current_user.id, roadmap_id)


@router.get("/{roadmap_id}/progress", response_model=RoadmapProgressRead)
async def get_roadmap_progress(
    roadmap_id: int,
    current_user: User = Depends(get_current_user),
    service: RoadmapService = Depends(get_roadmap_service),
):
    return await service.get_progress(current_user.id, roadmap_id)


@router.delete("/{roadmap_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_roadmap(
    roadmap_id: int,
    current_user: User = Depends(get_current_user),
    service: RoadmapService = Depends(get_roadmap_service),
):
    await service.delete(current_user.id, roadmap_id)
