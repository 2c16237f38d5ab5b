"""
Health Check Endpoint
Provides health status for Docker health checks and monitoring
"""
from fastapi import APIRouter, status
from datetime import datetime
from typing import Dict

from app.api.v1.dependencies import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint for Docker and monitoring systems.

    Returns:
        Dict with status, timestamp and the active storage backend
    """
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "service": "lead-assignment",
        "storage_backend": get_settings().storage_backend,
    }


@router.get("/", status_code=status.HTTP_200_OK)
async def root() -> Dict[str, str]:
    """
    Root endpoint.

    Returns:
        Welcome message
    """
    return {
        "message": "Lead Assignment API",
        "status": "running",
        "version": "1.0.0",
        "docs": "/docs"
    }
