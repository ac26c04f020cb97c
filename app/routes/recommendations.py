from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.connection import get_catalog_db
from app.dependencies.auth import require_retailer
from app.schemas.product import ProductResponse
from app.services.product_service import get_recommendations

router = APIRouter(tags=["Recommendations"])


@router.get(
    "/recommendations",
    response_model=List[ProductResponse],
    dependencies=[Depends(require_retailer)],
)
def recommendations(
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_catalog_db),
):
    return [ProductResponse.from_model(p) for p in get_recommendations(db, limit)]
