from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.models.product import ProductCategory
from salon_api.schemas.product import CategoryDeleteOut, CategoryIn, CategoryOut

router = APIRouter(prefix="/product-categories", tags=["products"])

CATEGORY_NOT_FOUND = "Catégorie non trouvée"
CATEGORY_EXISTS = "Catégorie déjà existante"


def _category_out(category: ProductCategory) -> CategoryOut:
    return CategoryOut(id=category.id, name=category.name, created_at=category.created_at)


def _category_or_404(db: Session, category_id: str) -> ProductCategory:
    category = db.get(ProductCategory, category_id)
    if not category:
        raise HTTPException(status_code=404, detail=CATEGORY_NOT_FOUND)
    return category


@router.get("", response_model=list[CategoryOut], summary="List product categories")
def list_categories(db: Session = Depends(get_db)):
    rows = db.execute(select(ProductCategory).order_by(ProductCategory.name)).scalars()
    return [_category_out(c) for c in rows]


@router.get("/{category_id}", response_model=CategoryOut, responses=error_responses(404, 500))
def get_category(category_id: str, db: Session = Depends(get_db)):
    return _category_out(_category_or_404(db, category_id))


@router.post(
    "",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400, 409, 500),
)
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    category = ProductCategory(name=payload.name)
    db.add(category)
    commit_or_conflict(db, detail=CATEGORY_EXISTS)
    db.refresh(category)
    return _category_out(category)


@router.put("/{category_id}", response_model=CategoryOut, responses=error_responses(400, 404, 409, 500))
def update_category(category_id: str, payload: CategoryIn, db: Session = Depends(get_db)):
    category = _category_or_404(db, category_id)
    category.name = payload.name
    commit_or_conflict(db, detail=CATEGORY_EXISTS)
    db.refresh(category)
    return _category_out(category)


@router.delete("/{category_id}", response_model=CategoryDeleteOut, responses=error_responses(404, 500))
def delete_category(category_id: str, db: Session = Depends(get_db)):
    category = _category_or_404(db, category_id)
    deleted = _category_out(category)
    db.delete(category)
    commit_or_conflict(db)
    return CategoryDeleteOut(message="Catégorie supprimée", category=deleted)
