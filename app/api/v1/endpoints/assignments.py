"""
Assignment Endpoints
Auto-assignment, manual reassignment, balancing and workload stats
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.api.v1.dependencies import (
    get_assignment_service,
    get_workload_balancer,
    get_workload_reporter,
)
from app.domain.interfaces.lead_store import LeadNotFoundError
from app.domain.models.assignment import (
    AssignmentAlgorithm,
    AssignmentResult,
    BalanceResult,
    WorkloadStats,
)
from app.domain.services.assignment_service import (
    AssignmentService,
    IneligibleTelecallerError,
    NoEligibleTelecallersError,
    WorkforceUnavailableError,
)
from app.domain.services.workload_balancer import WorkloadBalancer
from app.domain.services.workload_reporter import WorkloadReporter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["assignments"])


class AutoAssignRequest(BaseModel):
    """Assign specific leads"""
    lead_ids: List[str] = Field(default_factory=list)
    algorithm: Optional[AssignmentAlgorithm] = None  # None uses the configured default


class AssignUnassignedRequest(BaseModel):
    """Assign the unassigned backlog"""
    algorithm: Optional[AssignmentAlgorithm] = None  # None uses the configured default
    limit: Optional[int] = Field(default=None, ge=1)


class ReassignRequest(BaseModel):
    """Move a lead to another telecaller"""
    telecaller: str = Field(..., description="Email of the new telecaller")
    reassigned_by: str = "admin"


class ReassignResponse(BaseModel):
    lead_id: str
    telecaller: str
    assigned_by: str = "manual"


def _raise_http(error: Exception) -> None:
    """Map domain errors to HTTP errors"""
    if isinstance(error, NoEligibleTelecallersError):
        raise HTTPException(status_code=409, detail=error.message)
    if isinstance(error, WorkforceUnavailableError):
        raise HTTPException(status_code=503, detail=error.message)
    if isinstance(error, IneligibleTelecallerError):
        raise HTTPException(status_code=422, detail=error.message)
    if isinstance(error, LeadNotFoundError):
        raise HTTPException(status_code=404, detail=error.message)
    raise error


@router.get("/algorithms", response_model=List[str])
async def list_algorithms():
    """List the available auto-assignment algorithms"""
    return [algorithm.value for algorithm in AssignmentAlgorithm]


@router.post("/auto", response_model=AssignmentResult)
async def auto_assign_leads(
    request: AutoAssignRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """
    Auto-assign the given leads to telecallers.

    Unknown lead ids are skipped. Per-lead write failures are counted in
    `failed` and listed in `failed_lead_ids`; they do not fail the request.
    """
    try:
        return await service.auto_assign(request.lead_ids, request.algorithm)
    except (NoEligibleTelecallersError, WorkforceUnavailableError) as e:
        _raise_http(e)


@router.post("/auto/unassigned", response_model=AssignmentResult)
async def auto_assign_unassigned_leads(
    request: AssignUnassignedRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """Auto-assign every lead that has no telecaller yet"""
    try:
        return await service.auto_assign_unassigned(request.algorithm, limit=request.limit)
    except (NoEligibleTelecallersError, WorkforceUnavailableError) as e:
        _raise_http(e)


@router.post("/{lead_id}/reassign", response_model=ReassignResponse)
async def reassign_lead(
    lead_id: str,
    request: ReassignRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """Manually move a lead to another telecaller"""
    try:
        await service.reassign(lead_id, request.telecaller, reassigned_by=request.reassigned_by)
    except (IneligibleTelecallerError, WorkforceUnavailableError, LeadNotFoundError) as e:
        _raise_http(e)

    return ReassignResponse(lead_id=lead_id, telecaller=request.telecaller)


@router.post("/balance", response_model=BalanceResult)
async def balance_workload(
    balancer: WorkloadBalancer = Depends(get_workload_balancer)
):
    """Redistribute open leads from overloaded to underloaded telecallers"""
    return await balancer.balance_workload()


@router.get("/workload", response_model=WorkloadStats)
async def get_workload_stats(
    reporter: WorkloadReporter = Depends(get_workload_reporter)
):
    """Workload distribution across eligible telecallers"""
    try:
        return await reporter.get_workload_stats()
    except WorkforceUnavailableError as e:
        _raise_http(e)
