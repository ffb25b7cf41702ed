from fastapi import APIRouter

from services.indexer.src.indexer.routes.actions import router as actions_router

api_router = APIRouter(prefix="/api")
api_router.include_router(actions_router)

__all__ = ["api_router"]
