from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


def _strip_required(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("name is required")
    return cleaned


class SalonCreate(BaseModel):
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _strip_required(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Salon République",
                "address": "12 place de la République",
                "city": "Lyon",
                "phone": "0478000000",
                "email": "republique@example.com",
                "is_active": True,
            }
        }
    )


class SalonUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _strip_required(value)


class SalonOut(BaseModel):
    id: str
    name: str
    address: str
    city: str
    phone: str
    email: str
    is_active: bool
    created_at: Optional[datetime] = None


class SalonDeleteOut(BaseModel):
    message: str
    salon: SalonOut
