"""API v1 router."""
from fastapi import APIRouter

from app.api.v1 import posts_maintenance

api_router: APIRouter = APIRouter()
api_router.include_router(posts_maintenance.router)
