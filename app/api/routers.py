from fastapi import APIRouter

from app.api.v1.repository import router as repository_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(repository_router)
