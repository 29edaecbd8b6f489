from fastapi import APIRouter

from app.api.v1.endpoints import deletion

api_router = APIRouter()

# Include data deletion callback and status endpoints
api_router.include_router(
    deletion.router, tags=["data-deletion"])
