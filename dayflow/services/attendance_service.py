"""
Attendance Service Layer

One AttendanceRecord per profile per calendar day. A day has a single
check-in/check-out cycle: checking in again overwrites the check-in time,
and check-out is not ordered against check-in.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import contains_eager

from dayflow.core import datetime_utils
from dayflow.core.exceptions import InputValidationError, NoCheckInError, OnApprovedLeaveError
from dayflow.database import upsert
from dayflow.models.attendance import AttendanceRecord
from dayflow.models.leave_request import LeaveRequest, LeaveStatus
from dayflow.models.profile import AttendanceStatus, Profile
from dayflow.services.base import BaseService

logger = logging.getLogger(__name__)


class AttendanceService(BaseService):

    def check_in(self) -> AttendanceRecord:
        ctx = self.require_caller()
        today = datetime_utils.utc_today()
        now = datetime_utils.utc_now()

        with self.reading("check leave coverage"):
            leave = self._approved_leave_on(ctx.user_id, today)
        if leave is not None:
            logger.info(f"Check-in blocked for {ctx.user_id}: on approved leave {leave.id}")
            raise OnApprovedLeaveError(leave.id)

        stmt = upsert(self.db, AttendanceRecord).values(
            profile_id=ctx.user_id,
            date=today,
            check_in_time=now,
            status=AttendanceStatus.PRESENT.value,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["profile_id", "date"],
            set_={
                "check_in_time": stmt.excluded.check_in_time,
                "status": stmt.excluded.status,
                "updated_at": func.now(),
            },
        )
        with self.transaction("check in"):
            self.db.execute(stmt)

        record = self._record_on(ctx.user_id, today)
        logger.info(f"{ctx.user_id} checked in at {now.isoformat()}")
        return record

    def check_out(self) -> AttendanceRecord:
        ctx = self.require_caller()
        today = datetime_utils.utc_today()

        with self.reading("fetch today's attendance"):
            record = self._record_on(ctx.user_id, today)
        if record is None:
            raise NoCheckInError()

        now = datetime_utils.utc_now()
        with self.transaction("check out"):
            record.check_out_time = now
        logger.info(f"{ctx.user_id} checked out at {now.isoformat()}")
        return record

    def today(self) -> Dict[str, Any]:
        """Today's record (or None) and the approved leave covering today, if any."""
        ctx = self.require_caller()
        today = datetime_utils.utc_today()
        with self.reading("fetch today's attendance"):
            leave = self._approved_leave_on(ctx.user_id, today)
            record = self._record_on(ctx.user_id, today)
        return {
            "date": today,
            "attendance": record,
            "on_leave": leave is not None,
            "leave": leave,
        }

    def my_history(self, start_date: date, end_date: date) -> List[AttendanceRecord]:
        ctx = self.require_caller()
        self._validate_range(start_date, end_date)
        with self.reading("fetch attendance history"):
            return self.db.query(AttendanceRecord).filter(
                AttendanceRecord.profile_id == ctx.user_id,
                AttendanceRecord.date >= start_date,
                AttendanceRecord.date <= end_date,
            ).order_by(AttendanceRecord.date.desc()).all()

    def by_date(self, day: date) -> List[AttendanceRecord]:
        self.require_admin("Only admins can view company attendance")
        with self.reading("fetch attendance by date"):
            return self._company_query().filter(
                AttendanceRecord.date == day
            ).order_by(AttendanceRecord.check_in_time.desc().nulls_last()).all()

    def by_range(self, start_date: date, end_date: date) -> List[AttendanceRecord]:
        self.require_admin("Only admins can view company attendance")
        self._validate_range(start_date, end_date)
        with self.reading("fetch attendance range"):
            return self._company_query().filter(
                AttendanceRecord.date >= start_date,
                AttendanceRecord.date <= end_date,
            ).order_by(AttendanceRecord.date.desc(), AttendanceRecord.check_in_time.desc().nulls_last()).all()

    def _company_query(self):
        return self.db.query(AttendanceRecord).join(
            Profile, AttendanceRecord.profile_id == Profile.id
        ).options(contains_eager(AttendanceRecord.profile)).filter(
            Profile.company_id == self.company_id
        )

    def _record_on(self, profile_id: str, day: date) -> Optional[AttendanceRecord]:
        return self.db.query(AttendanceRecord).filter(
            AttendanceRecord.profile_id == profile_id,
            AttendanceRecord.date == day,
        ).first()

    def _approved_leave_on(self, profile_id: str, day: date) -> Optional[LeaveRequest]:
        return self.db.query(LeaveRequest).filter(
            LeaveRequest.profile_id == profile_id,
            LeaveRequest.status == LeaveStatus.APPROVED.value,
            LeaveRequest.start_date <= day,
            LeaveRequest.end_date >= day,
        ).first()

    @staticmethod
    def _validate_range(start_date: date, end_date: date):
        if start_date is None or end_date is None:
            raise InputValidationError("Both start and end dates are required")
        if end_date < start_date:
            raise InputValidationError(
                "End date must not precede start date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )
