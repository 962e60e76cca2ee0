from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.dates import day_start
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.core.money import money_float, to_money
from salon_api.models.product import (
    DEFAULT_ALERT_THRESHOLD,
    Product,
    ProductCategory,
    ProductStock,
    StockMovement,
)
from salon_api.models.salon import Salon
from salon_api.schemas.product import (
    LowStockProductOut,
    MovementCreateOut,
    MovementIn,
    MovementOut,
    ProductCreate,
    ProductDeleteOut,
    ProductOut,
    ProductUpdate,
    ProductWithTotalsOut,
    SalonProductOut,
    StockAdjustIn,
    StockOut,
    StockSetIn,
    StockSummaryOut,
)
from salon_api.services.stock_service import (
    InsufficientStockError,
    apply_movement,
    get_or_create_stock,
    signed_quantity,
)

router = APIRouter(prefix="/products", tags=["products"])

PRODUCT_NOT_FOUND = "Produit non trouvé"
UNKNOWN_PRODUCT_OR_SALON = "Produit ou salon inconnu"


def _product_fields(product: Product, category_name: str | None) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "reference": product.reference,
        "category_id": product.category_id,
        "category_name": category_name,
        "purchase_price": money_float(product.purchase_price),
        "sale_price": money_float(product.sale_price),
        "is_active": product.is_active,
        "created_at": product.created_at,
    }


def _stock_out(stock: ProductStock, salon_name: str | None = None, salon_city: str | None = None) -> StockOut:
    return StockOut(
        id=stock.id,
        product_id=stock.product_id,
        salon_id=stock.salon_id,
        quantity=stock.quantity,
        alert_threshold=stock.alert_threshold,
        salon_name=salon_name,
        salon_city=salon_city,
    )


def _movement_out(movement: StockMovement, **names) -> MovementOut:
    return MovementOut(
        id=movement.id,
        product_id=movement.product_id,
        salon_id=movement.salon_id,
        movement_type=movement.movement_type,
        quantity=movement.quantity,
        previous_stock=movement.previous_stock,
        new_stock=movement.new_stock,
        unit_price=money_float(movement.unit_price) if movement.unit_price is not None else None,
        total_price=money_float(movement.total_price) if movement.total_price is not None else None,
        reason=movement.reason,
        created_at=movement.created_at,
        **names,
    )


def _product_with_category(db: Session, product_id: str) -> tuple[Product, str | None]:
    row = db.execute(
        select(Product, ProductCategory.name)
        .outerjoin(ProductCategory, ProductCategory.id == Product.category_id)
        .where(Product.id == product_id)
    ).first()
    if not row:
        raise HTTPException(status_code=404, detail=PRODUCT_NOT_FOUND)
    return row[0], row[1]


@router.get("", response_model=list[ProductWithTotalsOut], summary="List active products with stock totals")
def list_products(db: Session = Depends(get_db)):
    rows = db.execute(
        select(
            Product,
            ProductCategory.name,
            func.coalesce(func.sum(ProductStock.quantity), 0),
            func.count(func.distinct(ProductStock.salon_id)),
        )
        .outerjoin(ProductCategory, ProductCategory.id == Product.category_id)
        .outerjoin(ProductStock, ProductStock.product_id == Product.id)
        .where(Product.is_active.is_(True))
        .group_by(Product.id, ProductCategory.name)
        .order_by(Product.name)
    ).all()
    return [
        ProductWithTotalsOut(
            **_product_fields(product, category_name),
            total_stock=int(total_stock),
            salon_count=int(salon_count),
        )
        for product, category_name, total_stock, salon_count in rows
    ]


@router.get("/salon/{salon_id}", response_model=list[SalonProductOut], summary="Active products with a salon's stock")
def list_salon_products(salon_id: str, db: Session = Depends(get_db)):
    rows = db.execute(
        select(Product, ProductCategory.name, ProductStock)
        .outerjoin(ProductCategory, ProductCategory.id == Product.category_id)
        .outerjoin(
            ProductStock,
            (ProductStock.product_id == Product.id) & (ProductStock.salon_id == salon_id),
        )
        .where(Product.is_active.is_(True))
        .order_by(Product.name)
    ).all()
    return [
        SalonProductOut(
            **_product_fields(product, category_name),
            stock_quantity=stock.quantity if stock else 0,
            alert_threshold=stock.alert_threshold if stock else DEFAULT_ALERT_THRESHOLD,
            stock_id=stock.id if stock else None,
        )
        for product, category_name, stock in rows
    ]


def _low_stock_stmt():
    return (
        select(Product, ProductCategory.name, ProductStock, Salon.name, Salon.city)
        .join(ProductStock, ProductStock.product_id == Product.id)
        .join(Salon, Salon.id == ProductStock.salon_id)
        .outerjoin(ProductCategory, ProductCategory.id == Product.category_id)
        .where(
            ProductStock.quantity <= ProductStock.alert_threshold,
            Product.is_active.is_(True),
        )
        .order_by(ProductStock.quantity, Product.name)
    )


def _low_stock_out(rows) -> list[LowStockProductOut]:
    return [
        LowStockProductOut(
            **_product_fields(product, category_name),
            stock_quantity=stock.quantity,
            alert_threshold=stock.alert_threshold,
            salon_id=stock.salon_id,
            salon_name=salon_name,
            salon_city=salon_city,
        )
        for product, category_name, stock, salon_name, salon_city in rows
    ]


@router.get("/low-stock", response_model=list[LowStockProductOut], summary="Products at or under their alert threshold")
def list_low_stock(db: Session = Depends(get_db)):
    return _low_stock_out(db.execute(_low_stock_stmt()).all())


@router.get("/low-stock/salon/{salon_id}", response_model=list[LowStockProductOut])
def list_salon_low_stock(salon_id: str, db: Session = Depends(get_db)):
    rows = db.execute(_low_stock_stmt().where(ProductStock.salon_id == salon_id)).all()
    return _low_stock_out(rows)


@router.get("/summary", response_model=StockSummaryOut, summary="Stock totals and valuation")
def stock_summary(salon_id: Optional[str] = None, db: Session = Depends(get_db)):
    stmt = select(
        func.count(func.distinct(Product.id)),
        func.coalesce(func.sum(ProductStock.quantity), 0),
        func.coalesce(func.sum(ProductStock.quantity * Product.purchase_price), 0),
        func.coalesce(func.sum(ProductStock.quantity * Product.sale_price), 0),
        func.count(case((ProductStock.quantity <= ProductStock.alert_threshold, 1))),
    ).outerjoin(ProductStock, ProductStock.product_id == Product.id)
    if salon_id:
        stmt = stmt.where(ProductStock.salon_id == salon_id)
    total_products, total_stock, value_purchase, value_sale, low_count = db.execute(stmt).one()
    return StockSummaryOut(
        total_products=int(total_products),
        total_stock=int(total_stock),
        stock_value_purchase=money_float(value_purchase),
        stock_value_sale=money_float(value_sale),
        low_stock_count=int(low_count),
    )


@router.get("/movements", response_model=list[MovementOut], summary="Stock movement history")
def list_movements(
    salon_id: Optional[str] = None,
    product_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    stmt = (
        select(StockMovement, Product.name, Product.reference, Salon.name, ProductCategory.name)
        .join(Product, Product.id == StockMovement.product_id)
        .join(Salon, Salon.id == StockMovement.salon_id)
        .outerjoin(ProductCategory, ProductCategory.id == Product.category_id)
    )
    if salon_id:
        stmt = stmt.where(StockMovement.salon_id == salon_id)
    if product_id:
        stmt = stmt.where(StockMovement.product_id == product_id)
    if start_date:
        stmt = stmt.where(StockMovement.created_at >= day_start(start_date))
    if end_date:
        # end date is inclusive
        stmt = stmt.where(StockMovement.created_at < day_start(end_date + timedelta(days=1)))
    rows = db.execute(stmt.order_by(StockMovement.created_at.desc()).limit(limit)).all()
    return [
        _movement_out(
            movement,
            product_name=product_name,
            product_reference=reference,
            salon_name=salon_name,
            category_name=category_name,
        )
        for movement, product_name, reference, salon_name, category_name in rows
    ]


@router.post(
    "/stock",
    response_model=StockOut,
    status_code=status.HTTP_201_CREATED,
    summary="Set stock level for a product in a salon",
    responses=error_responses(400, 409, 500),
)
def set_stock(payload: StockSetIn, db: Session = Depends(get_db)):
    try:
        stock = get_or_create_stock(db, payload.product_id, payload.salon_id)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=UNKNOWN_PRODUCT_OR_SALON) from None
    stock.quantity = payload.quantity
    stock.alert_threshold = payload.alert_threshold
    commit_or_conflict(db, detail=UNKNOWN_PRODUCT_OR_SALON)
    db.refresh(stock)
    return _stock_out(stock)


@router.patch(
    "/stock/{stock_id}",
    response_model=StockOut,
    summary="Adjust a stock level",
    description="Applies `quantity_change` and records the matching movement in one transaction.",
    responses=error_responses(400, 404, 500),
)
def adjust_stock(stock_id: str, payload: StockAdjustIn, db: Session = Depends(get_db)):
    stock = db.get(ProductStock, stock_id)
    if not stock:
        raise HTTPException(status_code=404, detail="Stock non trouvé")
    movement_type = payload.movement_type or ("entry" if payload.quantity_change > 0 else "exit")
    try:
        apply_movement(
            db,
            stock,
            quantity_change=payload.quantity_change,
            movement_type=movement_type,
            reason=payload.reason,
            unit_price=payload.unit_price,
        )
    except InsufficientStockError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Stock insuffisant") from None
    db.commit()
    db.refresh(stock)
    return _stock_out(stock)


@router.post(
    "/movement",
    response_model=MovementCreateOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a stock movement",
    description=(
        "`exit`, `sale` and `transfer_out` remove stock, `entry` and `transfer_in` add it, "
        "`adjustment` applies the quantity with the sign given."
    ),
    responses=error_responses(400, 409, 500),
)
def record_movement(payload: MovementIn, db: Session = Depends(get_db)):
    try:
        stock = get_or_create_stock(db, payload.product_id, payload.salon_id)
        movement = apply_movement(
            db,
            stock,
            quantity_change=signed_quantity(payload.movement_type, payload.quantity),
            movement_type=payload.movement_type,
            reason=payload.reason,
            unit_price=payload.unit_price,
        )
    except InsufficientStockError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Stock insuffisant pour cette opération") from None
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=UNKNOWN_PRODUCT_OR_SALON) from None
    commit_or_conflict(db, detail=UNKNOWN_PRODUCT_OR_SALON)
    db.refresh(movement)
    return MovementCreateOut(movement=_movement_out(movement), new_stock=movement.new_stock)


@router.get("/{product_id}/stock", response_model=list[StockOut], summary="Stock of a product in every salon")
def list_product_stock(product_id: str, db: Session = Depends(get_db)):
    rows = db.execute(
        select(ProductStock, Salon.name, Salon.city)
        .join(Salon, Salon.id == ProductStock.salon_id)
        .where(ProductStock.product_id == product_id)
        .order_by(Salon.name)
    ).all()
    return [_stock_out(stock, salon_name, salon_city) for stock, salon_name, salon_city in rows]


@router.get("/{product_id}", response_model=ProductOut, responses=error_responses(404, 500))
def get_product(product_id: str, db: Session = Depends(get_db)):
    product, category_name = _product_with_category(db, product_id)
    return ProductOut(**_product_fields(product, category_name))


@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400, 409, 500),
)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    product = Product(
        name=payload.name,
        reference=payload.reference,
        category_id=payload.category_id,
        purchase_price=to_money(payload.purchase_price),
        sale_price=to_money(payload.sale_price),
    )
    db.add(product)
    commit_or_conflict(db, detail="Catégorie inconnue")
    product, category_name = _product_with_category(db, product.id)
    return ProductOut(**_product_fields(product, category_name))


@router.put("/{product_id}", response_model=ProductOut, responses=error_responses(400, 404, 409, 500))
def update_product(product_id: str, payload: ProductUpdate, db: Session = Depends(get_db)):
    product, _ = _product_with_category(db, product_id)
    fields = payload.model_fields_set
    if "name" in fields and payload.name is not None:
        product.name = payload.name
    for name in ("reference", "category_id"):
        if name in fields:
            setattr(product, name, getattr(payload, name) or None)
    for name in ("purchase_price", "sale_price"):
        if name in fields and getattr(payload, name) is not None:
            setattr(product, name, to_money(getattr(payload, name)))
    if "is_active" in fields and payload.is_active is not None:
        product.is_active = payload.is_active
    commit_or_conflict(db, detail="Catégorie inconnue")
    product, category_name = _product_with_category(db, product_id)
    return ProductOut(**_product_fields(product, category_name))


@router.delete(
    "/{product_id}",
    response_model=ProductDeleteOut,
    summary="Deactivate product",
    description="Soft delete: the product is kept with `is_active = false`.",
    responses=error_responses(404, 500),
)
def delete_product(product_id: str, db: Session = Depends(get_db)):
    product, category_name = _product_with_category(db, product_id)
    product.is_active = False
    db.commit()
    db.refresh(product)
    return ProductDeleteOut(message="Produit supprimé", product=ProductOut(**_product_fields(product, category_name)))
