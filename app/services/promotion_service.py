import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models.product import Product
from app.models.promotion import Promotion, PromotionProduct
from app.models.user import Company
from app.schemas.promotion import PromotionCreate, to_naive_utc

logger = logging.getLogger(__name__)


def _check_linked_products(
    catalog_db: Session, company_id: str, product_ids: List[str]
) -> None:
    """Cross-store check: every linked product exists and belongs to the company."""
    if not product_ids:
        return
    found = {
        p.id: p
        for p in catalog_db.query(Product).filter(Product.id.in_(product_ids)).all()
    }
    for product_id in product_ids:
        product = found.get(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        if product.company_id != company_id:
            raise PermissionDeniedError(
                f"Product {product_id} does not belong to this company"
            )


# ---------- CREATE ----------

def create_promotion(
    identity_db: Session,
    catalog_db: Session,
    company_id: str,
    data: PromotionCreate,
) -> Promotion:
    company = identity_db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise NotFoundError("Company not found")

    product_ids = list(dict.fromkeys(data.product_ids))
    _check_linked_products(catalog_db, company_id, product_ids)

    promotion = Promotion(
        company_id=company_id,
        name=data.name,
        description=data.description,
        type=data.type.value,
        value=data.value,
        start_date=data.start_date,
        end_date=data.end_date,
        is_active=data.is_active,
    )
    for product_id in product_ids:
        promotion.products.append(PromotionProduct(product_id=product_id))

    identity_db.add(promotion)
    identity_db.commit()
    identity_db.refresh(promotion)
    logger.info("promotion %s created for %d product(s)", promotion.id, len(product_ids))
    return promotion


# ---------- READ ----------

def get_promotion(identity_db: Session, promotion_id: str) -> Optional[Promotion]:
    return identity_db.query(Promotion).filter(Promotion.id == promotion_id).first()


def list_promotions(
    identity_db: Session, company_id: Optional[str] = None
) -> List[Promotion]:
    query = identity_db.query(Promotion)
    if company_id:
        query = query.filter(Promotion.company_id == company_id)
    return query.order_by(Promotion.start_date.desc()).all()


def get_active_promotions(
    identity_db: Session, product_id: str, now: Optional[datetime] = None
) -> List[Promotion]:
    """Promotions linked to ``product_id`` whose window contains ``now``."""
    now = to_naive_utc(now or datetime.utcnow())
    return (
        identity_db.query(Promotion)
        .join(PromotionProduct, PromotionProduct.promotion_id == Promotion.id)
        .filter(
            PromotionProduct.product_id == product_id,
            Promotion.is_active.is_(True),
            Promotion.start_date <= now,
            Promotion.end_date > now,
        )
        .all()
    )


# ---------- STATE TRANSITIONS ----------

def _set_active(identity_db: Session, promotion_id: str, active: bool) -> Promotion:
    promotion = get_promotion(identity_db, promotion_id)
    if not promotion:
        raise NotFoundError("Promotion not found")
    if promotion.is_active != active:
        promotion.is_active = active
        identity_db.commit()
        identity_db.refresh(promotion)
    return promotion


def activate_promotion(identity_db: Session, promotion_id: str) -> Promotion:
    promotion = get_promotion(identity_db, promotion_id)
    if promotion and promotion.end_date <= datetime.utcnow():
        raise ValidationError("Promotion already ended; cannot activate.")
    return _set_active(identity_db, promotion_id, True)


def deactivate_promotion(identity_db: Session, promotion_id: str) -> Promotion:
    return _set_active(identity_db, promotion_id, False)
