import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ExpenseType = Literal["variable", "fixed"]


class ExpenseCreate(BaseModel):
    salon_id: Optional[str] = None
    type: ExpenseType = "variable"
    category: str = "other"
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    date: Optional[datetime.date] = None
    description: Optional[str] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: str) -> str:
        cleaned = value.strip()
        return cleaned or "other"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "salon_id": "salon-id",
                "type": "variable",
                "category": "supplies",
                "amount": 84.5,
                "date": "2024-03-02",
                "description": "Serviettes",
            }
        }
    )


class ExpenseUpdate(BaseModel):
    salon_id: Optional[str] = None
    type: Optional[ExpenseType] = None
    category: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    date: Optional[datetime.date] = None
    description: Optional[str] = None


class ExpenseOut(BaseModel):
    id: str
    salon_id: Optional[str] = None
    type: str
    category: str
    amount: float
    date: datetime.date
    description: str
    created_at: Optional[datetime.datetime] = None
    salon_name: Optional[str] = None


class ExpenseDeleteOut(BaseModel):
    message: str
    expense: ExpenseOut


class ExpenseCategoryOut(BaseModel):
    value: str
    label: str
