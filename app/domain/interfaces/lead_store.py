"""
Lead Store Interface
Abstract base class for the data store holding users and leads
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from app.domain.models.lead import Lead
from app.domain.models.telecaller import Telecaller


class LeadNotFoundError(Exception):
    """Raised when an assignment write targets a lead that does not exist."""
    def __init__(self, lead_id: str):
        self.lead_id = lead_id
        self.message = f"Lead {lead_id} not found"
        super().__init__(self.message)


class LeadStore(ABC):
    """Abstract base class for lead/telecaller persistence backends"""

    @abstractmethod
    async def list_eligible_telecallers(
        self,
        roles: Iterable[str],
        status: str = "active"
    ) -> List[Telecaller]:
        """
        List telecallers whose role is in `roles` and whose status matches.

        Returns:
            Telecallers in store order
        """
        pass

    @abstractmethod
    async def count_open_leads(self, telecaller: Telecaller, statuses: Iterable[str]) -> int:
        """Count leads assigned to `telecaller` whose status is in `statuses`"""
        pass

    @abstractmethod
    async def get_leads(self, lead_ids: Iterable[str]) -> List[Lead]:
        """
        Fetch leads by id.

        Unknown ids are simply absent from the result.
        """
        pass

    @abstractmethod
    async def list_leads_for_telecaller(
        self,
        telecaller: Telecaller,
        statuses: Iterable[str],
        limit: Optional[int] = None
    ) -> List[Lead]:
        """List leads assigned to `telecaller` with a status in `statuses`, in store order"""
        pass

    @abstractmethod
    async def list_unassigned_leads(self, limit: Optional[int] = None) -> List[Lead]:
        """List leads with no telecaller, oldest first"""
        pass

    @abstractmethod
    async def update_assignment(
        self,
        lead_id: str,
        telecaller: str,
        assigned_by: str,
        reassigned_by: Optional[str] = None
    ) -> None:
        """
        Persist a single lead's assignment.

        Implementations stamp `assigned_at` and `updated_at` with the write
        time. Raises LeadNotFoundError for unknown ids and propagates
        backend errors.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name"""
        pass
