"""Domain models"""

# Lead models
from .lead import (
    LeadStatus,
    LeadPriority,
    LeadSource,
    Lead,
)

# Telecaller models
from .telecaller import (
    TelecallerRole,
    Telecaller,
    TelecallerWorkload,
)

# Assignment models
from .assignment import (
    AssignmentAlgorithm,
    AssignedBy,
    WorkforceSnapshot,
    AssignmentResult,
    BalanceResult,
    WorkloadShare,
    WorkloadStats,
)

__all__ = [
    # Lead models
    "LeadStatus",
    "LeadPriority",
    "LeadSource",
    "Lead",
    # Telecaller models
    "TelecallerRole",
    "Telecaller",
    "TelecallerWorkload",
    # Assignment models
    "AssignmentAlgorithm",
    "AssignedBy",
    "WorkforceSnapshot",
    "AssignmentResult",
    "BalanceResult",
    "WorkloadShare",
    "WorkloadStats",
]
