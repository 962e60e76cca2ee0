from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MovementType = Literal["entry", "exit", "sale", "transfer_in", "transfer_out", "adjustment"]


class CategoryIn(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name is required")
        return cleaned


class CategoryOut(BaseModel):
    id: str
    name: str
    created_at: Optional[datetime] = None


class CategoryDeleteOut(BaseModel):
    message: str
    category: CategoryOut


class ProductCreate(BaseModel):
    name: str
    reference: Optional[str] = None
    category_id: Optional[str] = None
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0)
    sale_price: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name is required")
        return cleaned

    @field_validator("reference", "category_id")
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Shampooing kératine 500ml",
                "reference": "SHK-500",
                "category_id": "category-id",
                "purchase_price": 6.2,
                "sale_price": 14.9,
            }
        }
    )


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    reference: Optional[str] = None
    category_id: Optional[str] = None
    purchase_price: Optional[Decimal] = Field(default=None, ge=0)
    sale_price: Optional[Decimal] = Field(default=None, ge=0)
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


class ProductOut(BaseModel):
    id: str
    name: str
    reference: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    purchase_price: float
    sale_price: float
    is_active: bool
    created_at: Optional[datetime] = None


class ProductWithTotalsOut(ProductOut):
    total_stock: int
    salon_count: int


class SalonProductOut(ProductOut):
    stock_quantity: int
    alert_threshold: int
    stock_id: Optional[str] = None


class LowStockProductOut(ProductOut):
    stock_quantity: int
    alert_threshold: int
    salon_id: Optional[str] = None
    salon_name: Optional[str] = None
    salon_city: Optional[str] = None


class ProductDeleteOut(BaseModel):
    message: str
    product: ProductOut


class StockSetIn(BaseModel):
    product_id: str
    salon_id: str
    quantity: int = Field(default=0, ge=0)
    alert_threshold: int = Field(default=5, ge=0)


class StockOut(BaseModel):
    id: str
    product_id: str
    salon_id: str
    quantity: int
    alert_threshold: int
    salon_name: Optional[str] = None
    salon_city: Optional[str] = None


class StockAdjustIn(BaseModel):
    quantity_change: int
    movement_type: Optional[MovementType] = None
    reason: Optional[str] = None
    unit_price: Optional[Decimal] = Field(default=None, ge=0)


class MovementIn(BaseModel):
    product_id: str
    salon_id: str
    movement_type: MovementType
    quantity: int
    reason: Optional[str] = None
    unit_price: Optional[Decimal] = Field(default=None, ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "product_id": "product-id",
                "salon_id": "salon-id",
                "movement_type": "entry",
                "quantity": 12,
                "reason": "Livraison fournisseur",
                "unit_price": 6.2,
            }
        }
    )


class MovementOut(BaseModel):
    id: str
    product_id: str
    salon_id: str
    movement_type: str
    quantity: int
    previous_stock: int
    new_stock: int
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    product_name: Optional[str] = None
    product_reference: Optional[str] = None
    salon_name: Optional[str] = None
    category_name: Optional[str] = None


class MovementCreateOut(BaseModel):
    movement: MovementOut
    new_stock: int


class StockSummaryOut(BaseModel):
    total_products: int
    total_stock: int
    stock_value_purchase: float
    stock_value_sale: float
    low_stock_count: int
