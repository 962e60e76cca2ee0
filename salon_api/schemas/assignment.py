from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

CompensationType = Literal["commission", "fixed"]


class AssignmentCreate(BaseModel):
    hairdresser_id: str
    salon_id: str
    start_date: date
    end_date: Optional[date] = None
    compensation_type: CompensationType = "commission"
    commission_percentage: Decimal = Field(default=Decimal("50"), ge=0, le=100)
    tax_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    fixed_salary: Decimal = Field(default=Decimal("0"), ge=0)

    @model_validator(mode="after")
    def validate_dates(self) -> "AssignmentCreate":
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "hairdresser_id": "hairdresser-id",
                "salon_id": "salon-id",
                "start_date": "2024-01-01",
                "end_date": None,
                "compensation_type": "commission",
                "commission_percentage": 50,
                "tax_percentage": 0,
                "fixed_salary": 0,
            }
        }
    )


class AssignmentUpdate(BaseModel):
    hairdresser_id: Optional[str] = None
    salon_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    compensation_type: Optional[CompensationType] = None
    commission_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    tax_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    fixed_salary: Optional[Decimal] = Field(default=None, ge=0)


class AssignmentOut(BaseModel):
    id: str
    hairdresser_id: str
    salon_id: str
    start_date: date
    end_date: Optional[date] = None
    compensation_type: str
    commission_percentage: float
    tax_percentage: float
    fixed_salary: float
    created_at: Optional[datetime] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    salon_name: Optional[str] = None


class AssignmentDeleteOut(BaseModel):
    message: str
    assignment: AssignmentOut
