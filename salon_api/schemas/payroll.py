from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SalaryCostOut(BaseModel):
    id: str
    hairdresser_id: Optional[str] = None
    last_name: str
    first_name: str
    net_salary: float
    gross_salary: float
    total_cost: float
    charges: float
    month: int
    year: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    h_first_name: Optional[str] = None
    h_last_name: Optional[str] = None
    matricule: Optional[str] = None
    tax_percentage: Optional[float] = None
    generated_revenue: Optional[float] = None
    service_count: Optional[int] = None


class SalaryCostUpdate(BaseModel):
    net_salary: Optional[Decimal] = None
    gross_salary: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None
    charges: Optional[Decimal] = None
    hairdresser_id: Optional[str] = None


class SalaryMonthOut(BaseModel):
    year: int
    month: int


class SalarySummaryOut(BaseModel):
    total_employees: int
    total_net: float
    total_gross: float
    total_cost: float
    total_charges: float


class SalaryImportIn(BaseModel):
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    data: Optional[list[dict[str, Any]]] = None
    csv_content: Optional[str] = None
    delimiter: Optional[str] = None

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if len(value) != 1:
            raise ValueError("delimiter must be a single character")
        return value

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "month": 3,
                "year": 2024,
                "data": [
                    {
                        "last_name": "Durand",
                        "first_name": "Camille",
                        "net_salary": 1650.0,
                        "gross_salary": 2100.0,
                        "total_cost": 2900.0,
                        "charges": 800.0,
                    }
                ],
            }
        }
    )


class SalaryImportErrorOut(BaseModel):
    row: dict[str, Any]
    error: str


class SalaryImportOut(BaseModel):
    success: bool
    imported: int
    errors: Optional[list[SalaryImportErrorOut]] = None
    message: str


class SalaryDeleteMonthOut(BaseModel):
    success: bool
    deleted: int
    message: str


class SuccessMessageOut(BaseModel):
    success: bool
    message: str


class SalaryPaymentCreate(BaseModel):
    salary_cost_id: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class SalaryPaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class SalaryPaymentOut(BaseModel):
    id: str
    salary_cost_id: str
    amount: float
    payment_date: date
    payment_method: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class SalaryPaymentDeleteOut(BaseModel):
    message: str
    deleted: SalaryPaymentOut


class SalaryPaymentTotalOut(BaseModel):
    total_paid: float


class SalaryPaymentTotalsIn(BaseModel):
    salary_cost_ids: Optional[list[str]] = Field(
        default=None,
        validation_alias=AliasChoices("salaryCostIds", "salary_cost_ids"),
    )
