"""
Employee Service Layer

Company bootstrap, employee provisioning, directory reads, self-service
profile edits and salary records. Salary and employee-management
operations are gated by the caller's role.
"""
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from dayflow.core import datetime_utils
from dayflow.core.exceptions import (
    AccessDeniedError,
    InputValidationError,
    NotFoundError,
)
from dayflow.core.security import encrypt_data, get_password_hash, sanitize_input
from dayflow.models.company import Company
from dayflow.models.profile import AttendanceStatus, EmployeeStatus, Profile, UserRole
from dayflow.models.salary_info import SalaryInfo
from dayflow.schemas.profile import (
    ENCRYPTED_FIELDS,
    SELF_EDITABLE_FIELDS,
    CompanyRegistration,
    EmployeeCreate,
    EmployeeUpdate,
)
from dayflow.schemas.salary import SalaryInfoUpdate
from dayflow.services.base import BaseService
from dayflow.services.credentials import generate_login_id, generate_password, name_code, next_serial_number
from dayflow.services.leave_service import grant_default_allocations
from dayflow.services.notification import EmailService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

_DATE_FIELDS = {"date_of_birth"}
_LIST_FIELDS = {"certifications"}


def register_company(db: Session, data: CompanyRegistration) -> Tuple[Company, Profile]:
    """
    Create a company with its first admin. The admin takes joining serial 1
    for the current year and the default leave allocations for it.
    """
    year = datetime_utils.utc_today().year
    company = Company(
        name=data.company_name,
        code=name_code(data.company_name),
        email=data.email,
        phone=data.phone,
    )
    try:
        db.add(company)
        db.flush()

        serial = next_serial_number(db, company.id, year)
        admin = Profile(
            id=data.user_id or str(uuid.uuid4()),
            company_id=company.id,
            employee_id=generate_login_id(
                data.company_name, data.admin_first_name, data.admin_last_name or "Admin", year, serial
            ),
            first_name=data.admin_first_name,
            last_name=data.admin_last_name,
            email=data.email,
            phone=data.phone,
            role=UserRole.ADMIN.value,
            designation="Administrator",
            department="Management",
            joining_date=datetime_utils.utc_today(),
            status=EmployeeStatus.ACTIVE.value,
            attendance_status=AttendanceStatus.ABSENT.value,
            # Admin chose their own password at sign-up
            is_first_login=False,
        )
        db.add(admin)
        db.flush()
        grant_default_allocations(db, admin.id, year)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(company)
    db.refresh(admin)
    logger.info(f"Registered company {company.name} ({company.code}) with admin {admin.employee_id}")
    return company, admin


class EmployeeService(BaseService):

    # ------------------------------------------------------------------
    # Directory
    # ------------------------------------------------------------------
    def list_employees(self) -> List[Profile]:
        self.require_caller()
        with self.reading("fetch employees"):
            return self.db.query(Profile).filter(
                Profile.company_id == self.company_id
            ).order_by(Profile.first_name.asc(), Profile.last_name.asc()).all()

    def get_employee(self, profile_id: str) -> Profile:
        self.require_caller()
        with self.reading("fetch employee"):
            profile = self.db.query(Profile).filter(
                Profile.id == profile_id,
                Profile.company_id == self.company_id,
            ).first()
        if not profile:
            raise NotFoundError("Employee not found")
        return profile

    def can_see_private(self, profile: Profile) -> bool:
        return self.ctx is not None and (self.ctx.is_admin or self.ctx.user_id == profile.id)

    # ------------------------------------------------------------------
    # Admin management
    # ------------------------------------------------------------------
    def create_employee(self, data: EmployeeCreate) -> Dict[str, Any]:
        """
        Provision a profile with a generated login ID and temporary password,
        then e-mail the credentials. E-mail failure does not undo provisioning.
        """
        ctx = self.require_admin("Only Admin or HR can create employees")
        if not ctx.can_manage_employees:
            raise AccessDeniedError("Only Admin or HR can create employees")

        with self.reading("fetch company"):
            company = self.db.get(Company, self.company_id) if self.company_id is not None else None
            email_taken = self.db.query(Profile.id).filter(Profile.email == data.email).first()
        if not company:
            raise NotFoundError("Company not found")
        if email_taken:
            raise InputValidationError("Email already in use", details={"email": data.email})

        joining_date = data.joining_date or datetime_utils.utc_today()
        temp_password = generate_password()

        with self.transaction("create employee"):
            serial = next_serial_number(self.db, company.id, joining_date.year)
            login_id = generate_login_id(company.name, data.first_name, data.last_name, joining_date.year, serial)
            profile = Profile(
                id=str(uuid.uuid4()),
                company_id=company.id,
                employee_id=login_id,
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                phone=data.phone,
                role=data.role.value,
                designation=data.designation,
                department=data.department,
                joining_date=joining_date,
                status=EmployeeStatus.ACTIVE.value,
                attendance_status=AttendanceStatus.ABSENT.value,
                password_hash=get_password_hash(temp_password),
                is_first_login=True,
            )
            self.db.add(profile)
            self.db.flush()
            # New hires start with the default allocations for the joining year and this year
            for year in sorted({joining_date.year, datetime_utils.utc_today().year}):
                grant_default_allocations(self.db, profile.id, year)
        self.db.refresh(profile)
        logger.info(f"Employee {login_id} created by {ctx.user_id}", extra={"profile_id": profile.id})

        email_result = EmailService.send_employee_credentials(
            email=profile.email,
            name=profile.full_name,
            login_id=login_id,
            temp_password=temp_password,
            company_name=company.name,
        )
        if not email_result.get("success"):
            logger.warning(f"Credentials e-mail for {login_id} not delivered: {email_result.get('error')}")

        return {
            "profile": profile,
            "login_id": login_id,
            "temporary_password": temp_password,
            "email_sent": bool(email_result.get("success")),
        }

    def update_employee(self, profile_id: str, data: EmployeeUpdate) -> Profile:
        ctx = self.require_admin("Only Admin or HR can update employee information")
        profile = self.get_employee(profile_id)

        changes = data.model_dump(exclude_unset=True)
        if "email" in changes and changes["email"] != profile.email:
            with self.reading("check email"):
                taken = self.db.query(Profile.id).filter(
                    Profile.email == changes["email"], Profile.id != profile.id
                ).first()
            if taken:
                raise InputValidationError("Email already in use", details={"email": changes["email"]})
        if changes.get("manager_id"):
            self.get_employee(changes["manager_id"])

        with self.transaction("update employee"):
            for field, value in changes.items():
                if hasattr(value, "value"):
                    value = value.value
                setattr(profile, field, value)
        logger.info(f"Employee {profile.id} updated by {ctx.user_id}: {sorted(changes)}")
        return profile

    def reset_password(self, profile_id: str, new_password: str) -> Profile:
        ctx = self.require_admin("Only Admin or HR can update employee passwords")
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise InputValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        profile = self.get_employee(profile_id)

        with self.transaction("reset password"):
            profile.password_hash = get_password_hash(new_password)
            profile.is_first_login = True
        logger.info(f"Password reset for {profile.id} by {ctx.user_id}")
        return profile

    # ------------------------------------------------------------------
    # Self-service
    # ------------------------------------------------------------------
    def update_own_field(self, field: str, value: Any) -> Profile:
        ctx = self.require_caller()
        if field not in SELF_EDITABLE_FIELDS:
            raise InputValidationError(f"Field '{field}' cannot be edited", details={"field": field})
        value = self._coerce_field(field, value)

        profile = self._own_profile()
        with self.transaction("update profile"):
            setattr(profile, field, value)
        logger.info(f"{ctx.user_id} updated profile field {field}")
        return profile

    def add_skill(self, skill: str) -> Profile:
        skill = sanitize_input(skill)
        if not skill:
            raise InputValidationError("Skill must not be empty")
        profile = self._own_profile()
        skills = list(profile.skills or [])
        if skill not in skills:
            skills.append(skill)
            with self.transaction("add skill"):
                # Reassign so the JSON column is flagged dirty
                profile.skills = skills
        return profile

    def remove_skill(self, skill: str) -> Profile:
        skill = sanitize_input(skill)
        profile = self._own_profile()
        skills = [s for s in (profile.skills or []) if s != skill]
        with self.transaction("remove skill"):
            profile.skills = skills
        return profile

    # ------------------------------------------------------------------
    # Salary
    # ------------------------------------------------------------------
    def get_salary_info(self, profile_id: str) -> Optional[SalaryInfo]:
        ctx = self.require_caller()
        if not ctx.can_view_salary:
            raise AccessDeniedError("Only Admin or HR can view salary info")
        profile = self.get_employee(profile_id)
        with self.reading("fetch salary info"):
            return self.db.query(SalaryInfo).filter(SalaryInfo.profile_id == profile.id).first()

    def upsert_salary_info(self, profile_id: str, data: SalaryInfoUpdate) -> SalaryInfo:
        ctx = self.require_admin("Only admin or HR can update salary info")
        profile = self.get_employee(profile_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        with self.transaction("update salary info"):
            salary = self.db.query(SalaryInfo).filter(SalaryInfo.profile_id == profile.id).first()
            if salary is None:
                salary = SalaryInfo(profile_id=profile.id)
                self.db.add(salary)
            for field, value in changes.items():
                setattr(salary, field, value)
        self.db.refresh(salary)
        logger.info(f"Salary info for {profile.id} saved by {ctx.user_id}: {sorted(changes)}")
        return salary

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _own_profile(self) -> Profile:
        ctx = self.require_caller()
        with self.reading("fetch profile"):
            profile = self.db.get(Profile, ctx.user_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    @staticmethod
    def _coerce_field(field: str, value: Any) -> Any:
        if value in ("", None):
            return [] if field in _LIST_FIELDS else None
        if field in _DATE_FIELDS:
            if isinstance(value, date):
                return value
            try:
                return date.fromisoformat(str(value))
            except ValueError:
                raise InputValidationError(f"Invalid date for {field}", details={"value": value})
        if field in _LIST_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise InputValidationError(f"{field} must be a list of strings")
            return [sanitize_input(v) for v in value]
        if not isinstance(value, str):
            raise InputValidationError(f"{field} must be a string")
        value = sanitize_input(value)
        if field in ENCRYPTED_FIELDS:
            return encrypt_data(value)
        return value
