"""
Workload Balancer
Moves leads from overloaded to underloaded telecallers
"""
import logging
from typing import Dict, Iterable, List

from app.domain.interfaces.lead_store import LeadStore
from app.domain.models.assignment import AssignedBy, BalanceResult
from app.domain.models.telecaller import TelecallerWorkload
from app.domain.services.assignment_service import AssignmentService
from app.domain.services.workforce_snapshot import WorkforceSnapshotProvider

logger = logging.getLogger(__name__)


class WorkloadBalancer:
    """
    Redistributes open leads around the mean workload.

    A telecaller is overloaded above `avg + margin` and underloaded below
    `avg - margin`, where avg is the floored mean of the snapshot. Only
    leads in `movable_statuses` are moved, so leads in an active
    conversation (e.g. "interested") stay with their telecaller.

    Each pass is greedy: overloaded telecallers are drained in snapshot
    order into the first underloaded telecaller until it reaches avg, and
    global balance is not re-checked between telecallers. With
    `iterate_to_fixed_point` the pass is repeated on fresh snapshots until
    nothing moves or `max_passes` is reached.
    """

    def __init__(
        self,
        store: LeadStore,
        snapshot_provider: WorkforceSnapshotProvider,
        assignment_service: AssignmentService,
        margin: int = 2,
        movable_statuses: Iterable[str] = ("new", "follow-up"),
        iterate_to_fixed_point: bool = False,
        max_passes: int = 5
    ):
        self.store = store
        self.snapshot_provider = snapshot_provider
        self.assignment_service = assignment_service
        self.margin = margin
        self.movable_statuses = tuple(movable_statuses)
        self.iterate_to_fixed_point = iterate_to_fixed_point
        self.max_passes = max_passes

    async def balance_workload(self) -> BalanceResult:
        """
        Balance workload across all eligible telecallers.

        Returns:
            BalanceResult with the number of leads moved

        Raises:
            Exception: Propagates reassignment write errors; leads moved
                before the error stay moved
        """
        result = BalanceResult()

        max_passes = self.max_passes if self.iterate_to_fixed_point else 1
        while result.passes < max_passes:
            moved, avg = await self._balance_pass()
            if result.passes == 0:
                result.average_workload = avg
            result.passes += 1
            result.redistributed += moved
            if moved == 0:
                break

        if result.redistributed:
            logger.info(
                f"Workload balanced: {result.redistributed} leads redistributed "
                f"in {result.passes} pass(es), avg={result.average_workload}"
            )
        return result

    async def _balance_pass(self) -> tuple[int, int]:
        """Run one greedy pass. Returns (leads moved, floored average)."""
        snapshot = await self.snapshot_provider.take_snapshot()

        if not snapshot.ok:
            logger.warning(f"Skipping workload balance, roster unavailable: {snapshot.error}")
            return 0, 0
        if snapshot.is_empty:
            return 0, 0

        telecallers = list(snapshot.telecallers)
        avg = snapshot.total_active_leads // len(telecallers)

        loads: Dict[str, int] = {t.id: t.active_leads for t in telecallers}
        overloaded = [t for t in telecallers if t.active_leads > avg + self.margin]
        underloaded: List[TelecallerWorkload] = [
            t for t in telecallers if t.active_leads < avg - self.margin
        ]

        if not overloaded or not underloaded:
            return 0, avg

        redistributed = 0

        for source in overloaded:
            excess = loads[source.id] - avg

            leads = await self.store.list_leads_for_telecaller(
                source,
                self.movable_statuses,
                limit=excess
            )

            for lead in leads[:excess]:
                if not underloaded:
                    break

                target = underloaded[0]
                await self.assignment_service.reassign(
                    lead.id,
                    target.email,
                    reassigned_by=AssignedBy.SYSTEM_BALANCE.value,
                    assigned_by=AssignedBy.SYSTEM_BALANCE
                )
                redistributed += 1

                loads[source.id] -= 1
                loads[target.id] += 1
                if loads[target.id] >= avg:
                    underloaded.pop(0)

        return redistributed, avg
