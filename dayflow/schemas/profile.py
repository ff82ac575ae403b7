from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import date, datetime
from typing import Any, List, Optional

from dayflow.core.context import canonical_role
from dayflow.core.security import decrypt_data
from dayflow.models.profile import EmployeeStatus, UserRole

# Fields an employee may change on their own profile
SELF_EDITABLE_FIELDS = frozenset({
    "phone", "avatar_url", "location",
    "date_of_birth", "mailing_address", "nationality", "personal_email", "gender", "marital_status",
    "bank_name", "account_number", "bank_address", "ifsc_code", "pan_id",
    "about", "what_i_love", "hobbies", "certifications",
})

# Stored encrypted at rest
ENCRYPTED_FIELDS = frozenset({"account_number", "pan_id"})


class EmployeeSummary(BaseModel):
    """Directory listing row."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    designation: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    attendance_status: str
    status: str


class ProfilePublic(EmployeeSummary):
    phone: Optional[str] = None
    role: str
    joining_date: Optional[date] = None
    manager_id: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    what_i_love: Optional[str] = None
    hobbies: Optional[str] = None
    skills: List[str] = []
    certifications: List[str] = []

    @field_validator("skills", "certifications", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return v or []


class ProfileDetail(ProfilePublic):
    """Full profile, visible to the owner and to admins."""
    company_id: Optional[int] = None
    date_of_birth: Optional[date] = None
    mailing_address: Optional[str] = None
    nationality: Optional[str] = None
    personal_email: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    bank_address: Optional[str] = None
    ifsc_code: Optional[str] = None
    pan_id: Optional[str] = None
    is_first_login: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_profile(cls, profile) -> "ProfileDetail":
        detail = cls.model_validate(profile)
        return detail.model_copy(update={
            "account_number": decrypt_data(profile.account_number),
            "pan_id": decrypt_data(profile.pan_id),
        })


class EmployeeCreate(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    joining_date: Optional[date] = None
    role: UserRole = UserRole.EMPLOYEE

    @field_validator("role", mode="before")
    @classmethod
    def _canonical_role(cls, v):
        return canonical_role(v)


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    joining_date: Optional[date] = None
    status: Optional[EmployeeStatus] = None
    role: Optional[UserRole] = None
    manager_id: Optional[str] = None
    location: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def _canonical_role(cls, v):
        return canonical_role(v) if v is not None else None


class EmployeeCreated(BaseModel):
    profile: ProfileDetail
    login_id: str
    temporary_password: str
    email_sent: bool


class ProfileFieldUpdate(BaseModel):
    field: str
    value: Any = None


class SkillRequest(BaseModel):
    skill: str = Field(..., min_length=1, max_length=100)


class PasswordReset(BaseModel):
    new_password: str


class CompanyRegistration(BaseModel):
    company_name: str = Field(..., min_length=1)
    admin_first_name: str = Field(..., min_length=1)
    admin_last_name: str = ""
    email: EmailStr
    phone: Optional[str] = None
    user_id: Optional[str] = None
