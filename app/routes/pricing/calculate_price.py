import logging
from time import perf_counter

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.connection import get_catalog_db, get_identity_db
from app.schemas.pricing import PricingResponse
from app.services.pricing_service.calculate_price import calculate_pricing

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pricing & Calculation"])


@router.get("/products/{product_id}/pricing", response_model=PricingResponse)
def calculate_price(
    product_id: str,
    request: Request,
    quantity: int = Query(gt=0),
    catalog_db: Session = Depends(get_catalog_db),
    identity_db: Session = Depends(get_identity_db),
):
    """
    Price an order quantity for a product:

    1. Validate min/max order quantity and stock
    2. Pick the best of volume tier vs. running promotion (ties go to the promotion)
    3. Base price when neither applies
    """
    # ---- measure calculation time ----
    start = perf_counter()
    breakdown = calculate_pricing(
        catalog_db=catalog_db,
        identity_db=identity_db,
        product_id=product_id,
        quantity=quantity,
    )
    duration_ms = (perf_counter() - start) * 1000.0

    if duration_ms > settings.SLOW_PRICING_MS:
        logger.warning(
            "Price calculation for product %s took %.2f ms (quantity=%d)",
            product_id, duration_ms, quantity,
        )

    metrics = getattr(request.app.state, "metrics", None)
    if metrics is not None:
        metrics["pricing_calculations"] = metrics.get("pricing_calculations", 0) + 1

    return PricingResponse(**breakdown.model_dump(), calculated_in_ms=duration_ms)
