"""
Assignment Service
Auto-assigns leads to telecallers and handles manual reassignment
"""
import logging
from typing import Iterable, List, Optional

from app.domain.interfaces.lead_store import LeadStore
from app.domain.models.assignment import (
    AssignedBy,
    AssignmentAlgorithm,
    AssignmentResult,
    WorkforceSnapshot,
)
from app.domain.models.lead import Lead
from app.domain.services.assignment_strategies import get_strategy, rule_based
from app.domain.services.stats_cache import StatsCache
from app.domain.services.workforce_snapshot import WorkforceSnapshotProvider

logger = logging.getLogger(__name__)


class AssignmentError(Exception):
    """Base class for errors that abort an assignment before any write."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NoEligibleTelecallersError(AssignmentError):
    """Raised when the roster has no active telecaller in an eligible role."""
    def __init__(self, message: str = "No active telecallers found"):
        super().__init__(message)


class WorkforceUnavailableError(AssignmentError):
    """Raised when the telecaller roster could not be read."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Could not read telecaller workload: {reason}")


class IneligibleTelecallerError(AssignmentError):
    """Raised by strict reassignment when the target is not an eligible telecaller."""
    def __init__(self, telecaller: str):
        self.telecaller = telecaller
        super().__init__(f"Telecaller {telecaller} is not active or not eligible for leads")


def require_workforce(snapshot: WorkforceSnapshot) -> WorkforceSnapshot:
    """
    Turn a snapshot into a usable roster or raise.

    A read failure and an empty roster raise different errors.
    """
    if not snapshot.ok:
        raise WorkforceUnavailableError(snapshot.error)
    if snapshot.is_empty:
        raise NoEligibleTelecallersError()
    return snapshot


class AssignmentService:
    """
    Orchestrates auto-assignment of leads.

    Flow for auto_assign:
    1. Take a workforce snapshot (fail fast if nobody can take leads)
    2. Fetch the requested leads, dropping unknown ids
    3. Run the selected strategy
    4. Persist each lead individually, counting per-lead failures

    Writes are not batched: a failure on one lead does not roll back or
    block the others, and a crash mid-loop leaves the batch partially
    assigned.
    """

    def __init__(
        self,
        store: LeadStore,
        snapshot_provider: WorkforceSnapshotProvider,
        strict_reassignment: bool = False,
        manager_role: str = "manager",
        stats_cache: Optional[StatsCache] = None,
        default_algorithm: str = AssignmentAlgorithm.ROUND_ROBIN
    ):
        self.store = store
        self.snapshot_provider = snapshot_provider
        self.strict_reassignment = strict_reassignment
        self.manager_role = manager_role
        self.stats_cache = stats_cache
        self.default_algorithm = default_algorithm

    def _run_strategy(
        self,
        algorithm: AssignmentAlgorithm,
        leads: List[Lead],
        snapshot: WorkforceSnapshot
    ) -> List[Lead]:
        telecallers = list(snapshot.telecallers)
        if algorithm == AssignmentAlgorithm.RULE_BASED:
            return rule_based(leads, telecallers, manager_role=self.manager_role)
        return get_strategy(algorithm)(leads, telecallers)

    async def auto_assign(
        self,
        lead_ids: Iterable[str],
        algorithm: Optional[str] = None
    ) -> AssignmentResult:
        """
        Auto-assign leads to telecallers.

        Args:
            lead_ids: Leads to assign; unknown ids are skipped silently
            algorithm: One of AssignmentAlgorithm; None uses default_algorithm

        Returns:
            AssignmentResult with success/failed counts and failed lead ids

        Raises:
            UnknownAlgorithmError: If algorithm is not registered
            WorkforceUnavailableError: If the roster could not be read
            NoEligibleTelecallersError: If no telecaller can take leads
        """
        algorithm = algorithm or self.default_algorithm
        get_strategy(algorithm)
        algorithm = AssignmentAlgorithm(algorithm)

        snapshot = require_workforce(await self.snapshot_provider.take_snapshot())

        requested = list(dict.fromkeys(lead_ids))
        leads = await self.store.get_leads(requested) if requested else []
        # Keep the caller's order
        by_id = {lead.id: lead for lead in leads}
        leads = [by_id[lead_id] for lead_id in requested if lead_id in by_id]

        if len(leads) < len(requested):
            logger.info(f"Skipping {len(requested) - len(leads)} unknown lead ids")

        assigned_leads = self._run_strategy(algorithm, leads, snapshot)

        result = AssignmentResult(algorithm=algorithm)
        for lead in assigned_leads:
            try:
                await self.store.update_assignment(
                    lead.id,
                    telecaller=lead.telecaller,
                    assigned_by=lead.assigned_by
                )
                result.success += 1
            except Exception as e:
                logger.error(f"Failed to assign lead {lead.id}: {e}")
                result.failed += 1
                result.failed_lead_ids.append(lead.id)

        if result.success:
            await self._invalidate_stats()

        logger.info(
            f"Auto-assigned {result.success}/{len(assigned_leads)} leads "
            f"with {algorithm.value} ({result.failed} failed)"
        )
        return result

    async def auto_assign_unassigned(
        self,
        algorithm: Optional[str] = None,
        limit: Optional[int] = None
    ) -> AssignmentResult:
        """Assign the backlog of leads that have no telecaller, oldest first."""
        algorithm = algorithm or self.default_algorithm
        get_strategy(algorithm)
        unassigned = await self.store.list_unassigned_leads(limit=limit)
        return await self.auto_assign([lead.id for lead in unassigned], algorithm)

    async def reassign(
        self,
        lead_id: str,
        to_telecaller: str,
        reassigned_by: str = "admin",
        assigned_by: str = AssignedBy.MANUAL
    ) -> None:
        """
        Move a lead to another telecaller, overwriting its assignment.

        Unless strict_reassignment is on, a manual move is not checked
        against the eligible roster; this is the administrative override
        path. Balancer moves always target telecallers from a fresh
        snapshot and skip the check.

        Args:
            lead_id: Lead to move
            to_telecaller: Email of the new telecaller
            reassigned_by: Who moved it
            assigned_by: Provenance tag (manual, or system-balance for the balancer)

        Raises:
            IneligibleTelecallerError: Strict mode and target not eligible
            WorkforceUnavailableError: Strict mode and roster unreadable
            LeadNotFoundError: Lead does not exist
        """
        assigned_by = AssignedBy(assigned_by)

        if self.strict_reassignment and assigned_by == AssignedBy.MANUAL:
            snapshot = await self.snapshot_provider.take_snapshot()
            if not snapshot.ok:
                raise WorkforceUnavailableError(snapshot.error)
            if to_telecaller not in {t.email for t in snapshot.telecallers}:
                raise IneligibleTelecallerError(to_telecaller)

        try:
            await self.store.update_assignment(
                lead_id,
                telecaller=to_telecaller,
                assigned_by=assigned_by.value,
                reassigned_by=reassigned_by
            )
        except Exception as e:
            logger.error(f"Error reassigning lead {lead_id}: {e}")
            raise

        await self._invalidate_stats()
        logger.info(f"Lead {lead_id} reassigned to {to_telecaller} by {reassigned_by}")

    async def _invalidate_stats(self) -> None:
        if self.stats_cache is not None:
            await self.stats_cache.invalidate()
