from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from dayflow.database import Base

class LeaveAllocation(Base):
    __tablename__ = "leave_allocations"
    __table_args__ = (
        UniqueConstraint("profile_id", "leave_type", "year", name="uq_allocation_profile_type_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    leave_type = Column(String, nullable=False, index=True)  # LeaveType value
    year = Column(Integer, nullable=False)
    total_days = Column(Float, default=0.0, nullable=False)
    used_days = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profile = relationship("Profile", back_populates="leave_allocations")

    @property
    def remaining_days(self) -> float:
        return (self.total_days or 0.0) - (self.used_days or 0.0)
