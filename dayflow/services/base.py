import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dayflow.core.context import RequestContext
from dayflow.core.exceptions import AccessDeniedError, AuthenticationError, StoreError


class BaseService:
    """
    Common plumbing for services bound to one DB session and one caller.
    """

    def __init__(self, db: Session, ctx: Optional[RequestContext] = None):
        self.db = db
        self.ctx = ctx
        self._logger = logging.getLogger(self.__class__.__module__)

    @property
    def company_id(self) -> Optional[int]:
        return self.ctx.company_id if self.ctx else None

    def require_caller(self) -> RequestContext:
        if self.ctx is None or not self.ctx.user_id:
            raise AuthenticationError()
        return self.ctx

    def require_admin(self, message: str = "Only admins can perform this action") -> RequestContext:
        ctx = self.require_caller()
        if not ctx.is_admin:
            self.log_warning(f"Access denied for {ctx.user_id} (role={ctx.role.value}): {message}")
            raise AccessDeniedError(message)
        return ctx

    @contextmanager
    def transaction(self, action: str):
        """
        Unit of work: commits on success, rolls back and raises StoreError
        on any SQLAlchemy failure. Domain errors pass through after rollback.
        """
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Store failure during {action}: {e}", exc_info=True)
            raise StoreError(f"Failed to {action}") from e
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def reading(self, action: str):
        """Read-only counterpart of transaction(): maps store failures to StoreError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Store failure during {action}: {e}", exc_info=True)
            raise StoreError(f"Failed to {action}") from e

    def log_warning(self, message: str):
        self._logger.warning(message)
