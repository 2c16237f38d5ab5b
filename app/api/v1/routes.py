"""
API Router
Combines all endpoint routers
"""
from fastapi import APIRouter
from app.api.v1.endpoints import assignments

api_router = APIRouter()

api_router.include_router(assignments.router)
