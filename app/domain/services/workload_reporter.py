"""
Workload Reporter
Read-only workload distribution statistics
"""
import logging
from typing import Optional

from app.domain.models.assignment import WorkloadShare, WorkloadStats
from app.domain.services.assignment_service import WorkforceUnavailableError
from app.domain.services.stats_cache import StatsCache
from app.domain.services.workforce_snapshot import WorkforceSnapshotProvider

logger = logging.getLogger(__name__)


class WorkloadReporter:
    """Aggregates a fresh snapshot into per-telecaller shares"""

    CACHE_KEY = "workload"

    def __init__(
        self,
        snapshot_provider: WorkforceSnapshotProvider,
        cache: Optional[StatsCache] = None
    ):
        self.snapshot_provider = snapshot_provider
        self.cache = cache

    async def get_workload_stats(self) -> WorkloadStats:
        """
        Get workload statistics.

        An empty roster yields empty stats. A failed roster read raises
        WorkforceUnavailableError.
        """
        if self.cache is not None:
            cached = await self.cache.get(self.CACHE_KEY)
            if cached is not None:
                return WorkloadStats.model_validate(cached)

        snapshot = await self.snapshot_provider.take_snapshot()
        if not snapshot.ok:
            raise WorkforceUnavailableError(snapshot.error)

        stats = self.build_stats(snapshot.telecallers)

        if self.cache is not None:
            await self.cache.set(self.CACHE_KEY, stats.model_dump(mode="json"))

        return stats

    @staticmethod
    def build_stats(telecallers) -> WorkloadStats:
        total_leads = sum(t.active_leads for t in telecallers)
        avg_workload = total_leads / len(telecallers) if telecallers else 0

        return WorkloadStats(
            telecallers=list(telecallers),
            total_leads=total_leads,
            # halves round up
            avg_workload=int(avg_workload + 0.5),
            distribution=[
                WorkloadShare(
                    telecaller_id=t.id,
                    name=t.name,
                    leads=t.active_leads,
                    percentage=(
                        f"{t.active_leads / total_leads * 100:.1f}%" if total_leads > 0 else "0%"
                    ),
                )
                for t in telecallers
            ],
        )
