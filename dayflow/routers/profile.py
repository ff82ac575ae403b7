from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayflow.core.context import RequestContext
from dayflow.core.schemas import ApiResponse
from dayflow.database import get_db
from dayflow.models.profile import Profile
from dayflow.routers.auth_deps import get_current_profile, get_request_context
from dayflow.schemas.profile import ProfileDetail, ProfileFieldUpdate, SkillRequest
from dayflow.services.employee_service import EmployeeService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/me", response_model=ApiResponse[ProfileDetail])
def get_my_profile(profile: Profile = Depends(get_current_profile)):
    return ApiResponse.ok(ProfileDetail.from_profile(profile))


@router.patch("/me", response_model=ApiResponse[ProfileDetail])
def update_my_field(
    payload: ProfileFieldUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    profile = EmployeeService(db, ctx).update_own_field(payload.field, payload.value)
    return ApiResponse.ok(ProfileDetail.from_profile(profile))


@router.post("/me/skills", response_model=ApiResponse[ProfileDetail])
def add_skill(
    payload: SkillRequest,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    profile = EmployeeService(db, ctx).add_skill(payload.skill)
    return ApiResponse.ok(ProfileDetail.from_profile(profile))


@router.delete("/me/skills/{skill}", response_model=ApiResponse[ProfileDetail])
def remove_skill(
    skill: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    profile = EmployeeService(db, ctx).remove_skill(skill)
    return ApiResponse.ok(ProfileDetail.from_profile(profile))
