from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from salon_api.core.money import to_money
from salon_api.core.observability import log_event
from salon_api.models.product import ProductStock, StockMovement

OUTGOING_MOVEMENTS = ("exit", "sale", "transfer_out")
INCOMING_MOVEMENTS = ("entry", "transfer_in")


class InsufficientStockError(ValueError):
    pass


def signed_quantity(movement_type: str, quantity: int) -> int:
    """Stock delta for a movement; ``adjustment`` keeps the sign it was given."""
    if movement_type in OUTGOING_MOVEMENTS:
        return -abs(quantity)
    if movement_type in INCOMING_MOVEMENTS:
        return abs(quantity)
    return quantity


def get_or_create_stock(db: Session, product_id: str, salon_id: str) -> ProductStock:
    stock = db.execute(
        select(ProductStock).where(
            ProductStock.product_id == product_id,
            ProductStock.salon_id == salon_id,
        )
    ).scalar_one_or_none()
    if stock is None:
        stock = ProductStock(product_id=product_id, salon_id=salon_id, quantity=0)
        db.add(stock)
        db.flush()
    return stock


def apply_movement(
    db: Session,
    stock: ProductStock,
    *,
    quantity_change: int,
    movement_type: str,
    reason: str | None = None,
    unit_price: Decimal | None = None,
) -> StockMovement:
    """Apply a signed change to ``stock`` and record the movement. Caller commits."""
    previous = stock.quantity or 0
    new_quantity = previous + quantity_change
    if new_quantity < 0:
        raise InsufficientStockError(f"stock would drop to {new_quantity}")

    stock.quantity = new_quantity
    quantity = abs(quantity_change)
    movement = StockMovement(
        product_id=stock.product_id,
        salon_id=stock.salon_id,
        movement_type=movement_type,
        quantity=quantity,
        previous_stock=previous,
        new_stock=new_quantity,
        unit_price=to_money(unit_price) if unit_price else None,
        total_price=to_money(Decimal(quantity) * unit_price) if unit_price else None,
        reason=reason or None,
    )
    db.add(movement)
    db.flush()
    log_event(
        "stock.movement",
        product_id=stock.product_id,
        salon_id=stock.salon_id,
        movement_type=movement_type,
        previous_stock=previous,
        new_stock=new_quantity,
    )
    return movement
