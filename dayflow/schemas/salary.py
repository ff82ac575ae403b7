from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class SalaryInfoBase(BaseModel):
    monthly_wage: Optional[float] = Field(None, ge=0)
    yearly_wage: Optional[float] = Field(None, ge=0)
    working_days_per_week: Optional[int] = Field(None, ge=1, le=7)
    break_time_hours: Optional[float] = Field(None, ge=0)
    pf_employer: Optional[float] = Field(None, ge=0)
    pf_employee: Optional[float] = Field(None, ge=0)
    professional_tax: Optional[float] = Field(None, ge=0)
    basic_salary: Optional[float] = Field(None, ge=0)
    basic_salary_percentage: Optional[float] = Field(None, ge=0, le=100)
    hra: Optional[float] = Field(None, ge=0)
    hra_percentage: Optional[float] = Field(None, ge=0, le=100)
    dearness_allowance: Optional[float] = Field(None, ge=0)
    dearness_allowance_percentage: Optional[float] = Field(None, ge=0, le=100)
    standard_allowance: Optional[float] = Field(None, ge=0)
    standard_allowance_percentage: Optional[float] = Field(None, ge=0, le=100)


class SalaryInfoUpdate(SalaryInfoBase):
    pass


class SalaryInfoResponse(SalaryInfoBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    profile_id: str
