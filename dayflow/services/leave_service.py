"""
Leave Service Layer

Leave request lifecycle: pending -> approved | rejected | cancelled.
All three targets are terminal.

Approval is a single unit of work: the status change, the allocation
increment and the attendance back-fill commit together or not at all.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from dayflow.core import datetime_utils
from dayflow.core.config import settings
from dayflow.core.exceptions import (
    AllocationMissingError,
    CrossTenantError,
    InputValidationError,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
)
from dayflow.core.security import sanitize_input
from dayflow.database import upsert
from dayflow.models.attendance import AttendanceRecord
from dayflow.models.leave_allocation import LeaveAllocation
from dayflow.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from dayflow.models.profile import AttendanceStatus, Profile
from dayflow.services.base import BaseService

logger = logging.getLogger(__name__)


def default_total_days(leave_type: LeaveType) -> float:
    """Default yearly allocation size for a leave type (0 for unpaid)."""
    return {
        LeaveType.PAID: settings.leave.default_paid_days,
        LeaveType.SICK: settings.leave.default_sick_days,
        LeaveType.CASUAL: settings.leave.default_casual_days,
    }.get(leave_type, 0.0)


ALLOCATED_TYPES = (LeaveType.PAID, LeaveType.SICK, LeaveType.CASUAL)


def grant_default_allocations(db: Session, profile_id: str, year: int) -> List[LeaveAllocation]:
    """
    Add the default paid, sick and casual allocations for a year.
    Types already allocated for that year are left alone. Does not commit.
    """
    existing = {
        row.leave_type for row in db.query(LeaveAllocation.leave_type).filter(
            LeaveAllocation.profile_id == profile_id,
            LeaveAllocation.year == year,
        )
    }
    granted = []
    for leave_type in ALLOCATED_TYPES:
        if leave_type.value in existing:
            continue
        allocation = LeaveAllocation(
            profile_id=profile_id,
            leave_type=leave_type.value,
            year=year,
            total_days=default_total_days(leave_type),
            used_days=0.0,
        )
        db.add(allocation)
        granted.append(allocation)
    return granted


def parse_leave_type(value) -> LeaveType:
    if isinstance(value, LeaveType):
        return value
    try:
        return LeaveType(value)
    except ValueError:
        raise InputValidationError(f"Unknown leave type: {value}", details={"leave_type": value})


class LeaveService(BaseService):

    # ------------------------------------------------------------------
    # Employee self-service
    # ------------------------------------------------------------------
    def create_request(
        self,
        leave_type,
        start_date: Optional[date],
        end_date: Optional[date],
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        """
        Validate and file a pending request for the caller.
        Unpaid leave is unlimited; every other type must fit in the
        remaining allocation for the year of start_date.
        """
        ctx = self.require_caller()

        if not leave_type or start_date is None or end_date is None:
            raise InputValidationError("Missing required fields")
        leave_type = parse_leave_type(leave_type)

        days_count = datetime_utils.inclusive_days(start_date, end_date)
        if days_count <= 0:
            raise InputValidationError(
                "End date must be after start date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

        if leave_type != LeaveType.UNPAID:
            with self.reading("fetch leave allocation"):
                allocation = self._get_allocation(ctx.user_id, leave_type, start_date.year)
            if allocation is None:
                raise AllocationMissingError(leave_type.label)
            available = allocation.remaining_days
            if days_count > available:
                raise InsufficientBalanceError(leave_type.label, days_count, available)

        request = LeaveRequest(
            profile_id=ctx.user_id,
            leave_type=leave_type.value,
            start_date=start_date,
            end_date=end_date,
            days_count=days_count,
            reason=sanitize_input(reason) if reason else None,
            status=LeaveStatus.PENDING.value,
        )
        with self.transaction("create leave request"):
            self.db.add(request)
        self.db.refresh(request)

        logger.info(
            f"Leave request {request.id} filed by {ctx.user_id}: {leave_type.value} x{days_count}",
            extra={"leave_request_id": request.id, "profile_id": ctx.user_id},
        )
        return request

    def cancel_request(self, request_id: int) -> LeaveRequest:
        ctx = self.require_caller()

        with self.reading("fetch leave request"):
            request = self.db.query(LeaveRequest).filter(
                LeaveRequest.id == request_id,
                LeaveRequest.profile_id == ctx.user_id,
            ).first()
        if not request:
            raise NotFoundError("Leave request not found")
        if LeaveStatus(request.status).is_terminal:
            raise InvalidStateError(
                "Only pending requests can be cancelled",
                details={"status": request.status},
            )

        # Pending requests never touched used_days, so nothing to roll back
        with self.transaction("cancel leave request"):
            request.status = LeaveStatus.CANCELLED.value
        logger.info(f"Leave request {request.id} cancelled by {ctx.user_id}")
        return request

    def list_my_requests(self) -> List[LeaveRequest]:
        ctx = self.require_caller()
        with self.reading("fetch leave requests"):
            return self.db.query(LeaveRequest).filter(
                LeaveRequest.profile_id == ctx.user_id
            ).order_by(LeaveRequest.start_date.desc(), LeaveRequest.id.desc()).all()

    def list_my_allocations(self, year: Optional[int] = None) -> List[LeaveAllocation]:
        ctx = self.require_caller()
        with self.reading("fetch leave allocations"):
            query = self.db.query(LeaveAllocation).filter(LeaveAllocation.profile_id == ctx.user_id)
            if year is not None:
                query = query.filter(LeaveAllocation.year == year)
            return query.order_by(LeaveAllocation.year.desc(), LeaveAllocation.leave_type).all()

    def available_days(self, leave_type, year: Optional[int] = None) -> Dict[str, Any]:
        ctx = self.require_caller()
        leave_type = parse_leave_type(leave_type)
        year = year or datetime_utils.utc_today().year

        if leave_type == LeaveType.UNPAID:
            return {
                "leave_type": leave_type.value,
                "year": year,
                "unlimited": True,
                "available_days": None,
                "total_days": 0.0,
                "used_days": 0.0,
            }

        with self.reading("fetch leave allocation"):
            allocation = self._get_allocation(ctx.user_id, leave_type, year)
        if allocation is None:
            total, used = 0.0, 0.0
        else:
            total, used = allocation.total_days, allocation.used_days
        return {
            "leave_type": leave_type.value,
            "year": year,
            "unlimited": False,
            "available_days": total - used,
            "total_days": total,
            "used_days": used,
        }

    # ------------------------------------------------------------------
    # Admin decisions
    # ------------------------------------------------------------------
    def approve_request(self, request_id: int) -> LeaveRequest:
        ctx = self.require_admin("Only admins can approve leave requests")
        request = self._get_pending_for_decision(request_id, "approved")

        today = datetime_utils.utc_today()
        with self.transaction("approve leave request"):
            request.status = LeaveStatus.APPROVED.value
            request.approved_by = ctx.user_id
            request.approved_at = datetime_utils.utc_now()

            if request.leave_type != LeaveType.UNPAID.value:
                self._consume_allocation(request)

            self._mark_days_on_leave(request)

            if request.covers(today):
                request.profile.attendance_status = AttendanceStatus.ON_LEAVE.value

        self.db.refresh(request)
        logger.info(
            f"Leave request {request.id} approved by {ctx.user_id} "
            f"({request.days_count} day(s), {request.start_date} to {request.end_date})",
            extra={"leave_request_id": request.id, "approver_id": ctx.user_id},
        )
        return request

    def reject_request(self, request_id: int, reason: Optional[str] = None) -> LeaveRequest:
        ctx = self.require_admin("Only admins can reject leave requests")
        request = self._get_pending_for_decision(request_id, "rejected")

        with self.transaction("reject leave request"):
            request.status = LeaveStatus.REJECTED.value
            request.approved_by = ctx.user_id
            request.approved_at = datetime_utils.utc_now()
            request.rejection_reason = sanitize_input(reason) if reason else None

        self.db.refresh(request)
        logger.info(f"Leave request {request.id} rejected by {ctx.user_id}")
        return request

    def list_company_requests(self, status: Optional[str] = None) -> List[LeaveRequest]:
        ctx = self.require_admin("Only admins can view company leave requests")
        with self.reading("fetch company leave requests"):
            query = self.db.query(LeaveRequest).join(
                Profile, LeaveRequest.profile_id == Profile.id
            ).options(joinedload(LeaveRequest.profile)).filter(
                Profile.company_id == ctx.company_id
            )
            if status:
                query = query.filter(LeaveRequest.status == status)
            return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()

    def list_employee_allocations(self, profile_id: str, year: Optional[int] = None) -> List[LeaveAllocation]:
        self.require_admin("Only admins can view employee leave allocations")
        profile = self._get_company_profile(profile_id)
        with self.reading("fetch leave allocations"):
            query = self.db.query(LeaveAllocation).filter(LeaveAllocation.profile_id == profile.id)
            if year is not None:
                query = query.filter(LeaveAllocation.year == year)
            return query.order_by(LeaveAllocation.year.desc(), LeaveAllocation.leave_type).all()

    def set_allocation(
        self,
        profile_id: str,
        leave_type,
        total_days: float,
        year: Optional[int] = None,
    ) -> LeaveAllocation:
        """
        Grant or resize an employee's allocation for a year.
        Only total_days is written; used_days is kept as it is.
        """
        ctx = self.require_admin("Only admins can adjust leave allocations")
        leave_type = parse_leave_type(leave_type)
        if leave_type == LeaveType.UNPAID:
            raise InputValidationError("Unpaid leave has no allocation", details={"leave_type": leave_type.value})
        if total_days is None or total_days < 0:
            raise InputValidationError("Total days must not be negative", details={"total_days": total_days})
        year = year or datetime_utils.utc_today().year
        profile = self._get_company_profile(profile_id)

        stmt = upsert(self.db, LeaveAllocation).values(
            profile_id=profile.id,
            leave_type=leave_type.value,
            year=year,
            total_days=float(total_days),
            used_days=0.0,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["profile_id", "leave_type", "year"],
            set_={"total_days": stmt.excluded.total_days, "updated_at": func.now()},
        )
        with self.transaction("set leave allocation"):
            self.db.execute(stmt)

        with self.reading("fetch leave allocation"):
            allocation = self._get_allocation(profile.id, leave_type, year)
            self.db.refresh(allocation)
        logger.info(
            f"{leave_type.value} allocation for {profile.id} ({year}) set to {total_days} by {ctx.user_id}",
            extra={"profile_id": profile.id, "approver_id": ctx.user_id},
        )
        return allocation

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _get_company_profile(self, profile_id: str) -> Profile:
        with self.reading("fetch employee"):
            profile = self.db.query(Profile).filter(
                Profile.id == profile_id,
                Profile.company_id == self.company_id,
            ).first()
        if not profile:
            raise NotFoundError("Employee not found")
        return profile

    def _get_allocation(self, profile_id: str, leave_type: LeaveType, year: int) -> Optional[LeaveAllocation]:
        return self.db.query(LeaveAllocation).filter(
            LeaveAllocation.profile_id == profile_id,
            LeaveAllocation.leave_type == leave_type.value,
            LeaveAllocation.year == year,
        ).first()

    def _get_pending_for_decision(self, request_id: int, target: str) -> LeaveRequest:
        with self.reading("fetch leave request"):
            request = self.db.query(LeaveRequest).options(
                joinedload(LeaveRequest.profile)
            ).filter(LeaveRequest.id == request_id).first()
        if not request:
            raise NotFoundError("Leave request not found")
        if request.profile is None or request.profile.company_id != self.company_id:
            raise CrossTenantError(f"Cannot mark requests as {target} for employees in a different company")
        if LeaveStatus(request.status).is_terminal:
            raise InvalidStateError(
                f"Only pending requests can be {target}",
                details={"status": request.status},
            )
        return request

    def _consume_allocation(self, request: LeaveRequest):
        """
        used_days += days_count as one server-side statement.
        A missing row is created with the type's default total_days.
        """
        leave_type = LeaveType(request.leave_type)
        stmt = upsert(self.db, LeaveAllocation).values(
            profile_id=request.profile_id,
            leave_type=leave_type.value,
            year=request.start_date.year,
            total_days=default_total_days(leave_type),
            used_days=float(request.days_count),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["profile_id", "leave_type", "year"],
            set_={
                "used_days": LeaveAllocation.used_days + stmt.excluded.used_days,
                "updated_at": func.now(),
            },
        )
        self.db.execute(stmt)

    def _mark_days_on_leave(self, request: LeaveRequest):
        """
        One batch upsert of an on_leave record per day in the range.
        Existing rows for those days lose their check-in/out times.
        """
        rows = [
            {
                "profile_id": request.profile_id,
                "date": day,
                "status": AttendanceStatus.ON_LEAVE.value,
                "check_in_time": None,
                "check_out_time": None,
            }
            for day in datetime_utils.iter_dates(request.start_date, request.end_date)
        ]
        stmt = upsert(self.db, AttendanceRecord).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=["profile_id", "date"],
            set_={
                "status": stmt.excluded.status,
                "check_in_time": None,
                "check_out_time": None,
                "updated_at": func.now(),
            },
        )
        self.db.execute(stmt)
