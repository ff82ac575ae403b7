from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from dayflow.core.context import RequestContext
from dayflow.core.limiter import PUNCH_RATE_LIMIT, limiter
from dayflow.core.schemas import ApiResponse
from dayflow.database import get_db
from dayflow.routers.auth_deps import get_request_context, require_admin
from dayflow.schemas.attendance import (
    AttendanceRecordResponse,
    CompanyAttendanceRow,
    TodayAttendanceResponse,
)
from dayflow.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/check-in", response_model=ApiResponse[AttendanceRecordResponse])
@limiter.limit(PUNCH_RATE_LIMIT)
def check_in(
    request: Request,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    record = AttendanceService(db, ctx).check_in()
    return ApiResponse.ok(AttendanceRecordResponse.model_validate(record))


@router.post("/check-out", response_model=ApiResponse[AttendanceRecordResponse])
@limiter.limit(PUNCH_RATE_LIMIT)
def check_out(
    request: Request,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    record = AttendanceService(db, ctx).check_out()
    return ApiResponse.ok(AttendanceRecordResponse.model_validate(record))


@router.get("/today", response_model=ApiResponse[TodayAttendanceResponse])
def get_today(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    return ApiResponse.ok(TodayAttendanceResponse.model_validate(AttendanceService(db, ctx).today()))


@router.get("/history", response_model=ApiResponse[List[AttendanceRecordResponse]])
def get_my_history(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    records = AttendanceService(db, ctx).my_history(start_date, end_date)
    return ApiResponse.ok([AttendanceRecordResponse.model_validate(r) for r in records])


@router.get("/company/date/{day}", response_model=ApiResponse[List[CompanyAttendanceRow]])
def get_company_attendance_by_date(
    day: date,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    records = AttendanceService(db, ctx).by_date(day)
    return ApiResponse.ok(
        [CompanyAttendanceRow.from_record(r) for r in records],
        metadata={"date": day.isoformat(), "count": len(records)},
    )


@router.get("/company/range", response_model=ApiResponse[List[CompanyAttendanceRow]])
def get_company_attendance_by_range(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    records = AttendanceService(db, ctx).by_range(start_date, end_date)
    return ApiResponse.ok(
        [CompanyAttendanceRow.from_record(r) for r in records],
        metadata={"count": len(records)},
    )
