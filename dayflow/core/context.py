"""
Per-request caller context and role gate.

Built once per request by dayflow.routers.auth_deps.get_request_context and
passed explicitly into every service call.
"""
from dataclasses import dataclass
from typing import Optional

from dayflow.models.profile import Profile, UserRole

# Legacy role literals accepted on input
_ROLE_ALIASES = {
    "hr": UserRole.ADMIN,
}


def canonical_role(value) -> UserRole:
    """
    Single canonicalisation point for role values entering the system.
    Unknown values fall back to EMPLOYEE (least privilege).
    """
    if isinstance(value, UserRole):
        return value
    if value is None:
        return UserRole.EMPLOYEE
    raw = str(value).strip().lower()
    if raw in _ROLE_ALIASES:
        return _ROLE_ALIASES[raw]
    try:
        return UserRole(raw)
    except ValueError:
        return UserRole.EMPLOYEE


@dataclass(frozen=True)
class RequestContext:
    user_id: str
    role: UserRole
    company_id: Optional[int]
    profile: Optional[Profile] = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "RequestContext":
        return cls(
            user_id=profile.id,
            role=canonical_role(profile.role),
            company_id=profile.company_id,
            profile=profile,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def can_manage_employees(self) -> bool:
        return self.is_admin

    @property
    def can_view_salary(self) -> bool:
        return self.is_admin
