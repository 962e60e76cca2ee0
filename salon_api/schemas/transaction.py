from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    # Stored as local wall-clock time.
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class TransactionCreate(BaseModel):
    service_date_time: Optional[datetime] = None
    salon_id: str
    hairdresser_id: str
    service_id: Optional[str] = None
    service_name: Optional[str] = None
    price_salon: Decimal = Field(default=Decimal("0"), ge=0)
    price_coiffeur: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: str = "cash"

    @field_validator("service_date_time")
    @classmethod
    def normalize_datetime(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_local_naive(value)

    @field_validator("payment_method")
    @classmethod
    def normalize_payment_method(cls, value: str) -> str:
        cleaned = value.strip().lower()
        return cleaned or "cash"

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "service_date_time": "2024-03-14T10:30:00",
                "salon_id": "salon-id",
                "hairdresser_id": "hairdresser-id",
                "service_id": "service-id",
                "service_name": "Coupe femme",
                "price_salon": 35.0,
                "price_coiffeur": 17.5,
                "payment_method": "card",
            }
        }
    )


class TransactionUpdate(BaseModel):
    service_date_time: Optional[datetime] = None
    salon_id: Optional[str] = None
    hairdresser_id: Optional[str] = None
    service_id: Optional[str] = None
    service_name: Optional[str] = None
    price_salon: Optional[Decimal] = Field(default=None, ge=0)
    price_coiffeur: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: Optional[str] = None

    @field_validator("service_date_time")
    @classmethod
    def normalize_datetime(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_local_naive(value)


class TransactionOut(BaseModel):
    id: str
    service_date_time: datetime
    salon_id: str
    hairdresser_id: str
    service_id: Optional[str] = None
    service_name: str
    price_salon: float
    price_coiffeur: float
    payment_method: str
    created_at: Optional[datetime] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    hairdresser_name: Optional[str] = None
    salon_name: Optional[str] = None
    service_display_name: Optional[str] = None


class TransactionDeleteOut(BaseModel):
    message: str
    transaction: TransactionOut
