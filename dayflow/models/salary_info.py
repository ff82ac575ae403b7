from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from dayflow.database import Base

class SalaryInfo(Base):
    __tablename__ = "salary_info"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(String(36), ForeignKey("profiles.id"), unique=True, nullable=False)
    monthly_wage = Column(Float, default=0.0)
    yearly_wage = Column(Float, default=0.0)
    working_days_per_week = Column(Integer, default=5)
    break_time_hours = Column(Float, default=1.0)
    pf_employer = Column(Float, default=0.0)
    pf_employee = Column(Float, default=0.0)
    professional_tax = Column(Float, default=0.0)

    # Components: absolute amount per month plus the share of the wage it represents
    basic_salary = Column(Float, default=0.0)
    basic_salary_percentage = Column(Float, default=0.0)
    hra = Column(Float, default=0.0)
    hra_percentage = Column(Float, default=0.0)
    dearness_allowance = Column(Float, default=0.0)
    dearness_allowance_percentage = Column(Float, default=0.0)
    standard_allowance = Column(Float, default=0.0)
    standard_allowance_percentage = Column(Float, default=0.0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profile = relationship("Profile", back_populates="salary_info")
