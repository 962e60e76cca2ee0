from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceCreate(BaseModel):
    name: str
    price_salon: Decimal = Field(default=Decimal("0"), ge=0)
    price_coiffeur: Decimal = Field(default=Decimal("0"), ge=0)
    duration_minutes: int = Field(default=30, gt=0)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name is required")
        return cleaned

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Coupe femme",
                "price_salon": 35.0,
                "price_coiffeur": 17.5,
                "duration_minutes": 45,
            }
        }
    )


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    price_salon: Optional[Decimal] = Field(default=None, ge=0)
    price_coiffeur: Optional[Decimal] = Field(default=None, ge=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
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


class ServiceOut(BaseModel):
    id: str
    name: str
    price_salon: float
    price_coiffeur: float
    duration_minutes: int
    is_active: bool
    created_at: Optional[datetime] = None


class ServiceDeleteOut(BaseModel):
    message: str
    service: ServiceOut
