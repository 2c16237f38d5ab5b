"""
In-Memory Lead Store
Dict-backed LeadStore for local development and tests
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from app.domain.interfaces.lead_store import LeadStore, LeadNotFoundError
from app.domain.models.lead import Lead
from app.domain.models.telecaller import Telecaller


class InMemoryLeadStore(LeadStore):
    """
    LeadStore holding users and leads in insertion-ordered dicts.

    Failure injection:
    - fail_reads: every read raises ConnectionError
    - fail_writes_for: ids whose update_assignment raises ConnectionError
    """

    def __init__(
        self,
        telecallers: Optional[Iterable[Telecaller]] = None,
        leads: Optional[Iterable[Lead]] = None
    ):
        self._telecallers: Dict[str, Telecaller] = {}
        self._leads: Dict[str, Lead] = {}
        self.fail_reads = False
        self.fail_writes_for: Set[str] = set()
        self.writes: List[str] = []  # lead ids in write order

        for telecaller in telecallers or []:
            self.add_telecaller(telecaller)
        for lead in leads or []:
            self.add_lead(lead)

    @property
    def name(self) -> str:
        return "memory"

    def add_telecaller(self, telecaller: Telecaller) -> None:
        self._telecallers[telecaller.id] = telecaller

    def add_lead(self, lead: Lead) -> None:
        self._leads[lead.id] = lead

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        return self._leads.get(lead_id)

    def all_leads(self) -> List[Lead]:
        return list(self._leads.values())

    def _check_reads(self) -> None:
        if self.fail_reads:
            raise ConnectionError("in-memory store configured to fail reads")

    async def list_eligible_telecallers(
        self,
        roles: Iterable[str],
        status: str = "active"
    ) -> List[Telecaller]:
        self._check_reads()
        allowed = set(roles)
        return [
            t for t in self._telecallers.values()
            if t.role in allowed and t.status == status
        ]

    async def count_open_leads(self, telecaller: Telecaller, statuses: Iterable[str]) -> int:
        self._check_reads()
        wanted = set(statuses)
        return sum(
            1 for lead in self._leads.values()
            if lead.telecaller == telecaller.email and lead.status in wanted
        )

    async def get_leads(self, lead_ids: Iterable[str]) -> List[Lead]:
        self._check_reads()
        wanted = set(lead_ids)
        return [lead for lead_id, lead in self._leads.items() if lead_id in wanted]

    async def list_leads_for_telecaller(
        self,
        telecaller: Telecaller,
        statuses: Iterable[str],
        limit: Optional[int] = None
    ) -> List[Lead]:
        self._check_reads()
        wanted = set(statuses)
        leads = [
            lead for lead in self._leads.values()
            if lead.telecaller == telecaller.email and lead.status in wanted
        ]
        return leads if limit is None else leads[:limit]

    async def list_unassigned_leads(self, limit: Optional[int] = None) -> List[Lead]:
        self._check_reads()
        leads = [lead for lead in self._leads.values() if lead.telecaller is None]
        return leads if limit is None else leads[:limit]

    async def update_assignment(
        self,
        lead_id: str,
        telecaller: str,
        assigned_by: str,
        reassigned_by: Optional[str] = None
    ) -> None:
        if lead_id in self.fail_writes_for:
            raise ConnectionError(f"write rejected for lead {lead_id}")

        lead = self._leads.get(lead_id)
        if lead is None:
            raise LeadNotFoundError(lead_id)

        now = datetime.utcnow()
        update = {
            "telecaller": telecaller,
            "assigned_at": now,
            "assigned_by": assigned_by,
            "updated_at": now,
        }
        if reassigned_by is not None:
            update["reassigned_by"] = reassigned_by

        self._leads[lead_id] = lead.model_copy(update=update)
        self.writes.append(lead_id)
