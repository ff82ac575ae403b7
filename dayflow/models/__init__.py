# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import company, profile, leave_request, leave_allocation, attendance, salary_info

# Explicit class exports for cleaner imports
from .company import Company, EmployeeSerialCounter
from .profile import Profile, UserRole, AttendanceStatus, EmployeeStatus
from .leave_request import LeaveRequest, LeaveType, LeaveStatus
from .leave_allocation import LeaveAllocation
from .attendance import AttendanceRecord
from .salary_info import SalaryInfo

__all__ = [
    "Company",
    "EmployeeSerialCounter",
    "Profile",
    "UserRole",
    "AttendanceStatus",
    "EmployeeStatus",
    "LeaveRequest",
    "LeaveType",
    "LeaveStatus",
    "LeaveAllocation",
    "AttendanceRecord",
    "SalaryInfo",
]
