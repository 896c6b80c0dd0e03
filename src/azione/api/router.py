from fastapi import APIRouter

from azione.api.routes.analyses import router as analyses_router
from azione.api.routes.health import router as health_router
from azione.api.routes.preferences import router as preferences_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(analyses_router)
api_router.include_router(preferences_router)
