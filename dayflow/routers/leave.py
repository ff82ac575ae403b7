from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayflow.core.context import RequestContext
from dayflow.core.schemas import ApiResponse
from dayflow.database import get_db
from dayflow.models.leave_request import LeaveType
from dayflow.routers.auth_deps import get_request_context
from dayflow.schemas.leave import (
    AvailableDaysResponse,
    LeaveAllocationResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
)
from dayflow.services.leave_service import LeaveService

router = APIRouter(prefix="/leave", tags=["leave"])


@router.post("/requests", response_model=ApiResponse[LeaveRequestResponse], status_code=201)
def submit_leave_request(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    request = LeaveService(db, ctx).create_request(
        payload.leave_type, payload.start_date, payload.end_date, payload.reason
    )
    return ApiResponse.ok(LeaveRequestResponse.model_validate(request))


@router.get("/requests", response_model=ApiResponse[List[LeaveRequestResponse]])
def list_my_leave_requests(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    requests = LeaveService(db, ctx).list_my_requests()
    return ApiResponse.ok(
        [LeaveRequestResponse.model_validate(r) for r in requests],
        metadata={"count": len(requests)},
    )


@router.post("/requests/{request_id}/cancel", response_model=ApiResponse[LeaveRequestResponse])
def cancel_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    request = LeaveService(db, ctx).cancel_request(request_id)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(request))


@router.get("/allocations", response_model=ApiResponse[List[LeaveAllocationResponse]])
def list_my_allocations(
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    allocations = LeaveService(db, ctx).list_my_allocations(year)
    return ApiResponse.ok([LeaveAllocationResponse.model_validate(a) for a in allocations])


@router.get("/available/{leave_type}", response_model=ApiResponse[AvailableDaysResponse])
def get_available_days(
    leave_type: LeaveType,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    return ApiResponse.ok(AvailableDaysResponse(**LeaveService(db, ctx).available_days(leave_type, year)))
