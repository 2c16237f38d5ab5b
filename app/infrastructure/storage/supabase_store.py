"""
Supabase Lead Store
Reads telecallers from `users` and reads/writes assignments on `leads`
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from supabase import Client

from app.domain.interfaces.lead_store import LeadStore, LeadNotFoundError
from app.domain.models.lead import Lead
from app.domain.models.telecaller import Telecaller

logger = logging.getLogger(__name__)


class SupabaseLeadStore(LeadStore):
    """
    LeadStore backed by Supabase tables.

    Tables:
    - users: id, email, name, role, status
    - leads: id, name, phone, email, company, status, priority, source,
             telecaller, assigned_at, assigned_by, reassigned_by,
             created_at, updated_at

    Leads reference their telecaller by email.
    """

    USERS_TABLE = "users"
    LEADS_TABLE = "leads"

    def __init__(self, supabase: Client):
        self.supabase = supabase

    @property
    def name(self) -> str:
        return "supabase"

    async def list_eligible_telecallers(
        self,
        roles: Iterable[str],
        status: str = "active"
    ) -> List[Telecaller]:
        response = self.supabase.table(self.USERS_TABLE).select(
            "id, email, name, role, status"
        ).in_("role", list(roles)).eq("status", status).execute()

        return [
            Telecaller(
                id=str(row["id"]),
                email=row["email"],
                name=row.get("name"),
                role=row.get("role", "employee"),
                status=row.get("status", status),
            )
            for row in (response.data or [])
        ]

    async def count_open_leads(self, telecaller: Telecaller, statuses: Iterable[str]) -> int:
        response = self.supabase.table(self.LEADS_TABLE).select(
            "id", count="exact"
        ).eq("telecaller", telecaller.email).in_("status", list(statuses)).execute()

        if response.count is not None:
            return response.count
        return len(response.data or [])

    async def get_leads(self, lead_ids: Iterable[str]) -> List[Lead]:
        ids = list(lead_ids)
        if not ids:
            return []

        response = self.supabase.table(self.LEADS_TABLE).select("*").in_("id", ids).execute()
        return [Lead.from_record(row) for row in (response.data or [])]

    async def list_leads_for_telecaller(
        self,
        telecaller: Telecaller,
        statuses: Iterable[str],
        limit: Optional[int] = None
    ) -> List[Lead]:
        query = self.supabase.table(self.LEADS_TABLE).select("*").eq(
            "telecaller", telecaller.email
        ).in_("status", list(statuses)).order("created_at")

        if limit is not None:
            query = query.limit(limit)

        response = query.execute()
        return [Lead.from_record(row) for row in (response.data or [])]

    async def list_unassigned_leads(self, limit: Optional[int] = None) -> List[Lead]:
        query = self.supabase.table(self.LEADS_TABLE).select("*").is_(
            "telecaller", "null"
        ).order("created_at")

        if limit is not None:
            query = query.limit(limit)

        response = query.execute()
        return [Lead.from_record(row) for row in (response.data or [])]

    async def update_assignment(
        self,
        lead_id: str,
        telecaller: str,
        assigned_by: str,
        reassigned_by: Optional[str] = None
    ) -> None:
        now = datetime.utcnow().isoformat()
        update_data = {
            "telecaller": telecaller,
            "assigned_at": now,
            "assigned_by": assigned_by,
            "updated_at": now,
        }
        if reassigned_by is not None:
            update_data["reassigned_by"] = reassigned_by

        response = self.supabase.table(self.LEADS_TABLE).update(update_data).eq("id", lead_id).execute()

        if not response.data:
            raise LeadNotFoundError(lead_id)

        logger.debug(f"Lead {lead_id} assigned to {telecaller} ({assigned_by})")
