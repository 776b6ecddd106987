from fastapi import APIRouter
from .progress import router as progress_router
from .activity import router as activity_router
from .achievements import router as achievements_router
from .stats import router as stats_router
from .roadmaps import router as roadmaps_router


api_router = APIRouter()

api_router.include_router(progress_router)
api_router.include_router(activity_router)
api_router.include_router(achievements_router)
api_router.include_router(stats_router)
api_router.include_router(roadmaps_router)
