from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FixedExpenseCreate(BaseModel):
    salon_id: Optional[str] = None
    category: str = "other"
    name: str
    description: Optional[str] = None
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    effective_from: Optional[date] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name is required")
        return cleaned

    @field_validator("category")
    @classmethod
    def normalize_category(cls, value: str) -> str:
        cleaned = value.strip()
        return cleaned or "other"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "salon_id": None,
                "category": "rent",
                "name": "Loyer",
                "description": "Bail commercial",
                "amount": 1000,
                "effective_from": "2024-01-01",
            }
        }
    )


class FixedExpenseUpdate(BaseModel):
    salon_id: Optional[str] = None
    category: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name cannot be empty")
        return cleaned


class FixedExpenseAmountIn(BaseModel):
    amount: Decimal = Field(ge=0)
    effective_from: date

    model_config = ConfigDict(
        json_schema_extra={"example": {"amount": 1200, "effective_from": "2024-03-01"}}
    )


class FixedExpenseAmountOut(BaseModel):
    id: str
    fixed_expense_id: str
    amount: float
    effective_from: date
    created_at: Optional[datetime] = None


class FixedExpenseOut(BaseModel):
    id: str
    salon_id: Optional[str] = None
    category: str
    name: str
    description: str
    is_active: bool
    created_at: Optional[datetime] = None
    salon_name: Optional[str] = None


class FixedExpenseWithAmountOut(FixedExpenseOut):
    amount: float
    amount_effective_from: Optional[date] = None


class FixedExpenseDetailOut(FixedExpenseOut):
    amounts: list[FixedExpenseAmountOut]


class FixedExpenseAmountSetOut(BaseModel):
    message: str
    amount: float
    effective_from: date


class FixedExpenseDeleteOut(BaseModel):
    message: str
    expense: FixedExpenseOut


class FixedExpenseTotalOut(BaseModel):
    total: float
