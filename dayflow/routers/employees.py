from typing import List, Optional, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayflow.core.context import RequestContext
from dayflow.core.schemas import ApiResponse
from dayflow.database import get_db
from dayflow.routers.auth_deps import get_request_context, require_admin
from dayflow.schemas.profile import (
    EmployeeCreate,
    EmployeeCreated,
    EmployeeSummary,
    EmployeeUpdate,
    PasswordReset,
    ProfileDetail,
    ProfilePublic,
)
from dayflow.schemas.salary import SalaryInfoResponse, SalaryInfoUpdate
from dayflow.services.employee_service import EmployeeService


router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=ApiResponse[List[EmployeeSummary]])
def list_employees(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    employees = EmployeeService(db, ctx).list_employees()
    return ApiResponse.ok(
        [EmployeeSummary.model_validate(e) for e in employees],
        metadata={"count": len(employees)},
    )


@router.post("", response_model=ApiResponse[EmployeeCreated], status_code=201)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    result = EmployeeService(db, ctx).create_employee(payload)
    return ApiResponse.ok(EmployeeCreated(
        profile=ProfileDetail.from_profile(result["profile"]),
        login_id=result["login_id"],
        temporary_password=result["temporary_password"],
        email_sent=result["email_sent"],
    ))


@router.get("/{profile_id}", response_model=ApiResponse[Union[ProfileDetail, ProfilePublic]])
def get_employee(
    profile_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    service = EmployeeService(db, ctx)
    profile = service.get_employee(profile_id)
    # Private fields only for the owner and admins
    if service.can_see_private(profile):
        return ApiResponse.ok(ProfileDetail.from_profile(profile))
    return ApiResponse.ok(ProfilePublic.model_validate(profile))


@router.patch("/{profile_id}", response_model=ApiResponse[ProfileDetail])
def update_employee(
    profile_id: str,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    profile = EmployeeService(db, ctx).update_employee(profile_id, payload)
    return ApiResponse.ok(ProfileDetail.from_profile(profile))


@router.post("/{profile_id}/reset-password", response_model=ApiResponse[dict])
def reset_employee_password(
    profile_id: str,
    payload: PasswordReset,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    profile = EmployeeService(db, ctx).reset_password(profile_id, payload.new_password)
    return ApiResponse.ok({"profile_id": profile.id, "is_first_login": profile.is_first_login})


@router.get("/{profile_id}/salary", response_model=ApiResponse[Optional[SalaryInfoResponse]])
def get_salary_info(
    profile_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    salary = EmployeeService(db, ctx).get_salary_info(profile_id)
    return ApiResponse.ok(SalaryInfoResponse.model_validate(salary) if salary else None)


@router.put("/{profile_id}/salary", response_model=ApiResponse[SalaryInfoResponse])
def upsert_salary_info(
    profile_id: str,
    payload: SalaryInfoUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_admin)
):
    salary = EmployeeService(db, ctx).upsert_salary_info(profile_id, payload)
    return ApiResponse.ok(SalaryInfoResponse.model_validate(salary))
