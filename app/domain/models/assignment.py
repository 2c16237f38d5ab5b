"""
Assignment Models
Algorithms, provenance tags, and the result types returned by the
assignment, balancing and reporting services.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Tuple
from enum import Enum

from app.domain.models.telecaller import TelecallerWorkload


class AssignmentAlgorithm(str, Enum):
    """Auto-assignment algorithms selectable by the caller"""
    ROUND_ROBIN = "roundRobin"
    WORKLOAD_BALANCE = "workloadBalance"
    RULE_BASED = "ruleBased"


class AssignedBy(str, Enum):
    """
    Provenance tag written to `assigned_by`.

    This is the only record of why a lead ended up with its telecaller, so
    every path that writes an assignment stamps a distinct tag.
    """
    MANUAL = "manual"
    AUTO_ROUND_ROBIN = "auto-roundRobin"
    AUTO_WORKLOAD_BALANCE = "auto-workloadBalance"
    AUTO_RULE_BASED = "auto-ruleBased"
    SYSTEM_BALANCE = "system-balance"

    @classmethod
    def for_algorithm(cls, algorithm: AssignmentAlgorithm) -> "AssignedBy":
        return cls(f"auto-{AssignmentAlgorithm(algorithm).value}")


class WorkforceSnapshot(BaseModel):
    """
    Point-in-time read of eligible telecallers and their open-lead counts.

    A failed read is reported through `error` instead of an empty roster, so
    callers can tell "nobody is eligible" apart from "the store is down".
    """
    telecallers: Tuple[TelecallerWorkload, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return len(self.telecallers) == 0

    @property
    def total_active_leads(self) -> int:
        return sum(t.active_leads for t in self.telecallers)

    @classmethod
    def failed(cls, reason: str) -> "WorkforceSnapshot":
        return cls(error=reason)


class AssignmentResult(BaseModel):
    """Aggregate outcome of an auto-assignment batch"""
    success: int = 0
    failed: int = 0
    failed_lead_ids: List[str] = Field(default_factory=list)
    algorithm: Optional[AssignmentAlgorithm] = None

    model_config = {"use_enum_values": True}


class BalanceResult(BaseModel):
    """Outcome of a workload balancing run"""
    redistributed: int = 0
    average_workload: int = 0
    passes: int = 0


class WorkloadShare(BaseModel):
    """One telecaller's share of the open leads"""
    telecaller_id: str
    name: str
    leads: int
    percentage: str


class WorkloadStats(BaseModel):
    """Workload distribution across eligible telecallers"""
    telecallers: List[TelecallerWorkload] = Field(default_factory=list)
    total_leads: int = 0
    avg_workload: int = 0
    distribution: List[WorkloadShare] = Field(default_factory=list)
