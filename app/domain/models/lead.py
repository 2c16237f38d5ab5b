"""
Lead Domain Models
"""
from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class LeadStatus(str, Enum):
    """Call-tracking status of a lead"""
    NEW = "new"
    FOLLOW_UP = "follow-up"
    INTERESTED = "interested"
    NOT_INTERESTED = "not-interested"
    NOT_PICKED = "not-picked"
    CONVERTED = "converted"


class LeadPriority(str, Enum):
    """Priority set at intake (manual entry or bulk import)"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LeadSource(str, Enum):
    """Known intake sources. Free-form sources are also accepted on Lead."""
    REFERRAL = "referral"
    WEBSITE = "website"
    BULK_UPLOAD = "bulk-upload"
    MANUAL = "manual"


class Lead(BaseModel):
    """
    Inbound sales lead eligible for assignment to a telecaller.

    The assignee is referenced by the telecaller's email, which is what the
    leads table stores in its `telecaller` column.
    """
    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    status: str = LeadStatus.NEW.value
    priority: LeadPriority = LeadPriority.MEDIUM
    source: str = LeadSource.BULK_UPLOAD.value

    # Assignment
    telecaller: Optional[str] = None
    assigned_at: Optional[datetime] = None
    assigned_by: Optional[str] = None  # manual, auto-<algorithm>, system-balance
    reassigned_by: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"use_enum_values": True}

    @property
    def is_assigned(self) -> bool:
        return self.telecaller is not None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Lead":
        """
        Build a Lead from a store row.

        Unknown priorities fall back to medium so a bad import row never
        blocks assignment of the rest of the batch.
        """
        data = dict(record)
        data["id"] = str(data["id"])

        priority = str(data.get("priority") or LeadPriority.MEDIUM.value).lower()
        if priority not in {p.value for p in LeadPriority}:
            priority = LeadPriority.MEDIUM.value
        data["priority"] = priority

        if not data.get("status"):
            data["status"] = LeadStatus.NEW.value
        if not data.get("source"):
            data["source"] = LeadSource.BULK_UPLOAD.value

        fields = cls.model_fields.keys()
        return cls(**{k: v for k, v in data.items() if k in fields})

    def with_assignment(self, telecaller: str, assigned_by: str) -> "Lead":
        """Return a copy carrying the given assignee and provenance tag."""
        return self.model_copy(update={"telecaller": telecaller, "assigned_by": assigned_by})
