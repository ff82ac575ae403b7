from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional

from dayflow.models.leave_request import LeaveType


class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)


class LeaveRequestResponse(BaseModel):
    id: int
    profile_id: str
    leave_type: str
    start_date: date
    end_date: date
    days_count: int
    reason: Optional[str] = None
    status: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CompanyLeaveRequest(LeaveRequestResponse):
    """Leave request row with the requester's identity, for the admin queue."""
    employee_id: Optional[str] = None
    first_name: str
    last_name: str
    department: Optional[str] = None

    @classmethod
    def from_request(cls, request) -> "CompanyLeaveRequest":
        base = LeaveRequestResponse.model_validate(request).model_dump()
        return cls(
            **base,
            employee_id=request.profile.employee_id,
            first_name=request.profile.first_name,
            last_name=request.profile.last_name,
            department=request.profile.department,
        )


class RejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class LeaveAllocationResponse(BaseModel):
    id: int
    leave_type: str
    year: int
    total_days: float
    used_days: float
    remaining_days: float

    model_config = ConfigDict(from_attributes=True)


class AvailableDaysResponse(BaseModel):
    leave_type: str
    year: int
    unlimited: bool
    available_days: Optional[float] = None
    total_days: float
    used_days: float


class AllocationUpdate(BaseModel):
    leave_type: LeaveType
    total_days: float = Field(..., ge=0)
    year: Optional[int] = Field(None, ge=2000, le=2100)
