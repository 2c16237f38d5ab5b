"""
API Dependencies
Shared dependencies wiring the store and assignment services
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from supabase import create_client, Client
from dotenv import load_dotenv

from app.core.config import AssignmentConfig, ConfigManager, Settings
from app.domain.interfaces.lead_store import LeadStore
from app.domain.services.assignment_service import AssignmentService
from app.domain.services.stats_cache import StatsCache
from app.domain.services.workforce_snapshot import WorkforceSnapshotProvider
from app.domain.services.workload_balancer import WorkloadBalancer
from app.domain.services.workload_reporter import WorkloadReporter
from app.infrastructure.storage.factory import LeadStoreFactory

load_dotenv()


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_assignment_config() -> AssignmentConfig:
    return ConfigManager().get_assignment_config()


def get_supabase() -> Client:
    """
    Get Supabase client with validation.

    Raises:
        RuntimeError: If Supabase URL or SERVICE_KEY is not configured
    """
    settings = get_settings()
    url = settings.supabase_url
    key = settings.supabase_service_key

    if not url:
        raise RuntimeError(
            "SUPABASE_URL is not configured. "
            "Set SUPABASE_URL environment variable."
        )
    if not key:
        raise RuntimeError(
            "SUPABASE_SERVICE_KEY is not configured. "
            "Set SUPABASE_SERVICE_KEY environment variable."
        )

    return create_client(url, key)


@lru_cache
def get_lead_store() -> LeadStore:
    """
    Get the configured lead store.

    The memory backend lives for the whole process so its data survives
    between requests.
    """
    backend = get_settings().storage_backend
    if backend == "supabase":
        return LeadStoreFactory.create(backend, supabase=get_supabase())
    return LeadStoreFactory.create(backend)


@lru_cache
def get_stats_cache() -> Optional[StatsCache]:
    """Stats cache, or None when the TTL is 0"""
    ttl = get_assignment_config().stats_cache_ttl_seconds
    if ttl <= 0:
        return None
    return StatsCache(ttl_seconds=ttl, redis_url=get_settings().redis_url)


def get_snapshot_provider(
    store: LeadStore = Depends(get_lead_store),
    config: AssignmentConfig = Depends(get_assignment_config)
) -> WorkforceSnapshotProvider:
    return WorkforceSnapshotProvider(
        store,
        eligible_roles=config.eligible_roles,
        open_statuses=config.open_statuses,
        active_status=config.active_status
    )


def get_assignment_service(
    store: LeadStore = Depends(get_lead_store),
    snapshot_provider: WorkforceSnapshotProvider = Depends(get_snapshot_provider),
    config: AssignmentConfig = Depends(get_assignment_config),
    stats_cache: Optional[StatsCache] = Depends(get_stats_cache)
) -> AssignmentService:
    return AssignmentService(
        store,
        snapshot_provider,
        strict_reassignment=config.strict_reassignment,
        manager_role=config.manager_role,
        stats_cache=stats_cache,
        default_algorithm=config.default_algorithm
    )


def get_workload_balancer(
    store: LeadStore = Depends(get_lead_store),
    snapshot_provider: WorkforceSnapshotProvider = Depends(get_snapshot_provider),
    assignment_service: AssignmentService = Depends(get_assignment_service),
    config: AssignmentConfig = Depends(get_assignment_config)
) -> WorkloadBalancer:
    return WorkloadBalancer(
        store,
        snapshot_provider,
        assignment_service,
        margin=config.balance_margin,
        movable_statuses=config.movable_statuses,
        iterate_to_fixed_point=config.iterate_to_fixed_point,
        max_passes=config.max_balance_passes
    )


def get_workload_reporter(
    snapshot_provider: WorkforceSnapshotProvider = Depends(get_snapshot_provider),
    stats_cache: Optional[StatsCache] = Depends(get_stats_cache)
) -> WorkloadReporter:
    return WorkloadReporter(snapshot_provider, cache=stats_cache)
