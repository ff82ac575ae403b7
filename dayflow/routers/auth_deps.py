"""
Caller identity and role dependencies.

Authentication happens upstream: the gateway forwards the verified profile
ID in the X-User-ID header. These dependencies resolve it to a Profile and
build the RequestContext that every service call receives.
"""
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from dayflow.core.config import settings
from dayflow.core.context import RequestContext
from dayflow.core.exceptions import AccessDeniedError, AuthenticationError
from dayflow.core.logging import actor_id_var
from dayflow.database import get_db
from dayflow.models.profile import Profile

logger = logging.getLogger(__name__)

user_id_header = APIKeyHeader(name=settings.user_id_header, auto_error=False)


def get_current_profile(
    user_id: Optional[str] = Depends(user_id_header),
    db: Session = Depends(get_db)
) -> Profile:
    if not user_id:
        raise AuthenticationError()

    profile = db.get(Profile, user_id)
    if profile is None:
        logger.warning(f"Authentication failed: profile {user_id} not found")
        raise AuthenticationError("Unknown user")
    return profile


async def get_request_context(profile: Profile = Depends(get_current_profile)) -> RequestContext:
    actor_id_var.set(profile.id)
    return RequestContext.from_profile(profile)


def require_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """Route-level admin gate. Services re-check, so this only fails fast."""
    if not ctx.is_admin:
        raise AccessDeniedError("Admin access required")
    return ctx
