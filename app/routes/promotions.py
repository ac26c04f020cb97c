from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.database.connection import get_catalog_db, get_identity_db
from app.dependencies.auth import require_company
from app.models.user import Company
from app.schemas.promotion import PromotionCreate, PromotionResponse
from app.services.promotion_service import (
    activate_promotion, create_promotion, deactivate_promotion,
    get_promotion, list_promotions,
)

router = APIRouter(prefix="/promotions", tags=["Promotions"])


def _owned_promotion(db: Session, promotion_id: str, company: Company):
    promotion = get_promotion(db, promotion_id)
    if not promotion:
        raise NotFoundError("Promotion not found")
    if promotion.company_id != company.id:
        raise PermissionDeniedError("Unauthorized: You can only manage your own promotions")
    return promotion


@router.post("/", response_model=PromotionResponse, status_code=201)
def create(
    data: PromotionCreate,
    company: Company = Depends(require_company),
    identity_db: Session = Depends(get_identity_db),
    catalog_db: Session = Depends(get_catalog_db),
):
    return create_promotion(identity_db, catalog_db, company.id, data)


@router.get("/", response_model=List[PromotionResponse])
def list_all(company_id: Optional[str] = None, db: Session = Depends(get_identity_db)):
    return list_promotions(db, company_id=company_id)


@router.post("/{promotion_id}/activate", response_model=PromotionResponse)
def activate(
    promotion_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_identity_db),
):
    _owned_promotion(db, promotion_id, company)
    return activate_promotion(db, promotion_id)


@router.post("/{promotion_id}/deactivate", response_model=PromotionResponse)
def deactivate(
    promotion_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_identity_db),
):
    _owned_promotion(db, promotion_id, company)
    return deactivate_promotion(db, promotion_id)
