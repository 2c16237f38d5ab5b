"""
FastAPI Application Entry Point
"""
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.routes import api_router
from app.api.v1.endpoints import health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan - startup and shutdown events.

    Startup:
    - Validates storage and cache configuration
    - Connects the workload stats cache to Redis when enabled
    """
    logger.info("Starting Lead Assignment service...")

    environment = os.getenv("ENVIRONMENT", "development")
    strict_validation = environment == "production"

    try:
        from app.core.validation import validate_config_on_startup
        validate_config_on_startup(strict=strict_validation)
    except RuntimeError as e:
        if strict_validation:
            logger.error(f"Startup failed: {e}")
            raise
        else:
            logger.warning(f"Configuration warnings (non-fatal in {environment}): {e}")

    from app.api.v1.dependencies import get_stats_cache
    stats_cache = get_stats_cache()
    if stats_cache is not None:
        await stats_cache.initialize()
        logger.info(
            f"Workload stats cache enabled (ttl={stats_cache.ttl_seconds}s, "
            f"redis={stats_cache.redis_enabled})"
        )

    logger.info("Lead Assignment service started successfully")

    yield

    logger.info("Lead Assignment service shutdown complete")


app = FastAPI(
    title="Lead Assignment Service",
    description="Assigns inbound leads to telecallers and balances their workload",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
