from fastapi import APIRouter

from trichter.api.v2.routes import health, realtime, runs

api_router = APIRouter()
api_router.include_router(health.router, prefix="/v2", tags=["health"])
api_router.include_router(runs.router, prefix="/v2/runs", tags=["runs"])
api_router.include_router(realtime.router, prefix="/v2/realtime", tags=["realtime"])
