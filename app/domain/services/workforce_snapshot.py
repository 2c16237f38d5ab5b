"""
Workforce Snapshot Provider
Reads the eligible telecaller roster with live open-lead counts
"""
import logging
from typing import Iterable, List

from app.domain.interfaces.lead_store import LeadStore
from app.domain.models.assignment import WorkforceSnapshot
from app.domain.models.telecaller import TelecallerWorkload

logger = logging.getLogger(__name__)


class WorkforceSnapshotProvider:
    """
    Builds a WorkforceSnapshot on demand.

    Nothing is cached: each call re-reads the roster and recounts every
    telecaller's open leads, so the sum of `active_leads` matches the number
    of assigned open leads at the moment of the read.
    """

    def __init__(
        self,
        store: LeadStore,
        eligible_roles: Iterable[str] = ("employee", "manager"),
        open_statuses: Iterable[str] = ("new", "follow-up", "interested"),
        active_status: str = "active"
    ):
        self.store = store
        self.eligible_roles = tuple(eligible_roles)
        self.open_statuses = tuple(open_statuses)
        self.active_status = active_status

    async def take_snapshot(self) -> WorkforceSnapshot:
        """
        Read eligible telecallers and their workloads.

        Never raises: read errors come back as a failed snapshot.
        """
        try:
            telecallers = await self.store.list_eligible_telecallers(
                self.eligible_roles,
                status=self.active_status
            )

            workloads: List[TelecallerWorkload] = []
            for telecaller in telecallers:
                active_leads = await self.store.count_open_leads(telecaller, self.open_statuses)
                workloads.append(
                    TelecallerWorkload(**telecaller.model_dump(), active_leads=active_leads)
                )

            logger.debug(
                f"Workforce snapshot: {len(workloads)} telecallers, "
                f"{sum(w.active_leads for w in workloads)} open leads"
            )
            return WorkforceSnapshot(telecallers=tuple(workloads))

        except Exception as e:
            logger.error(f"Error getting telecallers with workload: {e}")
            return WorkforceSnapshot.failed(str(e) or type(e).__name__)
