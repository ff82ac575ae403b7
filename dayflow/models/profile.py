"""
Profile Model.
One row per identity subject; the id is the subject issued by the identity provider.
"""
import enum
import uuid
from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from dayflow.database import Base


class UserRole(str, enum.Enum):
    """
    Only two roles exist. HR permissions are folded into ADMIN;
    legacy "hr" values are canonicalised by dayflow.core.context.canonical_role.
    """
    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ON_LEAVE = "on_leave"
    ABSENT = "absent"


class EmployeeStatus(str, enum.Enum):
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    INACTIVE = "Inactive"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    employee_id = Column(String, unique=True, nullable=True, index=True)  # Login ID, e.g. ACJODO20240007
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False, default=UserRole.EMPLOYEE.value)
    designation = Column(String, nullable=True)
    department = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    joining_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=EmployeeStatus.ACTIVE.value)
    attendance_status = Column(String, nullable=False, default=AttendanceStatus.ABSENT.value)

    # Private information
    date_of_birth = Column(Date, nullable=True)
    mailing_address = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    personal_email = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    marital_status = Column(String, nullable=True)

    # Bank details (account_number and pan_id are Fernet-encrypted)
    bank_name = Column(String, nullable=True)
    account_number = Column(String, nullable=True)
    bank_address = Column(String, nullable=True)
    ifsc_code = Column(String, nullable=True)
    pan_id = Column(String, nullable=True)

    # Resume / about
    about = Column(Text, nullable=True)
    what_i_love = Column(Text, nullable=True)
    hobbies = Column(Text, nullable=True)
    skills = Column(JSON, nullable=True)
    certifications = Column(JSON, nullable=True)

    manager_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    location = Column(String, nullable=True)

    password_hash = Column(String, nullable=True)
    is_first_login = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    company = relationship("Company", back_populates="profiles")
    manager = relationship("Profile", remote_side=[id])
    leave_requests = relationship("LeaveRequest", foreign_keys="[LeaveRequest.profile_id]", back_populates="profile", cascade="all, delete-orphan")
    leave_allocations = relationship("LeaveAllocation", back_populates="profile", cascade="all, delete-orphan")
    attendance_records = relationship("AttendanceRecord", back_populates="profile", cascade="all, delete-orphan")
    salary_info = relationship("SalaryInfo", back_populates="profile", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Profile {self.email} ({self.role})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
