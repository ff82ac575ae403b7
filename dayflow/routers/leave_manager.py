from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayflow.core.context import RequestContext
from dayflow.core.schemas import ApiResponse
from dayflow.database import get_db
from dayflow.models.leave_request import LeaveStatus
from dayflow.routers.auth_deps import require_admin
from dayflow.schemas.leave import (
    AllocationUpdate,
    CompanyLeaveRequest,
    LeaveAllocationResponse,
    LeaveRequestResponse,
    RejectRequest,
)
from dayflow.services.leave_service import LeaveService

router = APIRouter(prefix="/leave/admin", tags=["leave-manager"])


@router.get("/requests", response_model=ApiResponse[List[CompanyLeaveRequest]])
def list_company_leave_requests(
    status: Optional[LeaveStatus] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    requests = LeaveService(db, ctx).list_company_requests(status.value if status else None)
    return ApiResponse.ok(
        [CompanyLeaveRequest.from_request(r) for r in requests],
        metadata={"count": len(requests)},
    )


@router.post("/requests/{request_id}/approve", response_model=ApiResponse[LeaveRequestResponse])
def approve_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    request = LeaveService(db, ctx).approve_request(request_id)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(request))


@router.post("/requests/{request_id}/reject", response_model=ApiResponse[LeaveRequestResponse])
def reject_leave_request(
    request_id: int,
    payload: Optional[RejectRequest] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    reason = payload.reason if payload else None
    request = LeaveService(db, ctx).reject_request(request_id, reason)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(request))


@router.get("/allocations/{profile_id}", response_model=ApiResponse[List[LeaveAllocationResponse]])
def list_employee_allocations(
    profile_id: str,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    allocations = LeaveService(db, ctx).list_employee_allocations(profile_id, year)
    return ApiResponse.ok([LeaveAllocationResponse.model_validate(a) for a in allocations])


@router.put("/allocations/{profile_id}", response_model=ApiResponse[LeaveAllocationResponse])
def set_employee_allocation(
    profile_id: str,
    payload: AllocationUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    allocation = LeaveService(db, ctx).set_allocation(
        profile_id, payload.leave_type, payload.total_days, payload.year
    )
    return ApiResponse.ok(LeaveAllocationResponse.model_validate(allocation))
