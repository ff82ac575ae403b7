from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Optional

from dayflow.schemas.leave import LeaveRequestResponse


class AttendanceRecordResponse(BaseModel):
    id: int
    profile_id: str
    date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class TodayAttendanceResponse(BaseModel):
    date: date
    attendance: Optional[AttendanceRecordResponse] = None
    on_leave: bool
    leave: Optional[LeaveRequestResponse] = None

    model_config = ConfigDict(from_attributes=True)


class CompanyAttendanceRow(AttendanceRecordResponse):
    employee_id: Optional[str] = None
    first_name: str
    last_name: str
    department: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_record(cls, record) -> "CompanyAttendanceRow":
        base = AttendanceRecordResponse.model_validate(record).model_dump()
        return cls(
            **base,
            employee_id=record.profile.employee_id,
            first_name=record.profile.first_name,
            last_name=record.profile.last_name,
            department=record.profile.department,
            avatar_url=record.profile.avatar_url,
        )
