from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HairdresserCreate(BaseModel):
    matricule: Optional[str] = None
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    rib_1: Optional[str] = None
    rib_2: Optional[str] = None
    tax_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    is_active: Optional[bool] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("first_name and last_name are required")
        return cleaned

    @field_validator("matricule", "email", "phone")
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "matricule": "C-014",
                "first_name": "Camille",
                "last_name": "Durand",
                "email": "camille.durand@example.com",
                "phone": "0611223344",
                "tax_percentage": 0,
            }
        }
    )


class HairdresserUpdate(BaseModel):
    matricule: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    rib_1: Optional[str] = None
    rib_2: Optional[str] = None
    tax_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    is_active: Optional[bool] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("first_name and last_name cannot be empty")
        return cleaned

    @field_validator("matricule", "email", "phone")
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class HairdresserOut(BaseModel):
    id: str
    matricule: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    phone: str
    rib_1: str
    rib_2: str
    tax_percentage: float
    is_active: bool
    created_at: Optional[datetime] = None


class HairdresserDeleteOut(BaseModel):
    message: str
    hairdresser: HairdresserOut
