from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.connection import get_identity_db
from app.dependencies.auth import require_auth
from app.models.category import Category
from app.schemas.category import CategoryCreate, CategoryRename, CategoryResponse
from app.services.category_service import create_category, list_categories, rename_category

router = APIRouter(prefix="/categories", tags=["Categories"])


def _to_response(category: Category, include_children: bool) -> CategoryResponse:
    children = []
    if include_children:
        children = [_to_response(child, False) for child in category.children]
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        icon=category.icon,
        parent_id=category.parent_id,
        created_at=category.created_at,
        children=children,
    )


@router.get("/", response_model=List[CategoryResponse])
def list_all(
    parent_id: Optional[str] = None,
    include_children: bool = False,
    db: Session = Depends(get_identity_db),
):
    """parent_id=root returns top-level categories only."""
    return [_to_response(c, include_children) for c in list_categories(db, parent_id)]


@router.post("/", response_model=CategoryResponse, status_code=201, dependencies=[Depends(require_auth)])
def create(data: CategoryCreate, db: Session = Depends(get_identity_db)):
    return _to_response(create_category(db, data), False)


@router.put("/{category_id}", response_model=CategoryResponse, dependencies=[Depends(require_auth)])
def rename(category_id: str, body: CategoryRename, db: Session = Depends(get_identity_db)):
    return _to_response(rename_category(db, category_id, body.name), False)
