import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.enums.discounts import DiscountSource, DiscountType, PromotionType
from app.models.product import Product
from app.models.promotion import Promotion
from app.schemas.pricing import AppliedDiscount, PriceBreakdown
from app.schemas.promotion import to_naive_utc
from app.schemas.product import VolumeTier
from app.services import inventory_validator
from app.services.promotion_service import get_active_promotions

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# ===================== VOLUME TIERS =====================


def _volume_tiers(product: Product) -> List[VolumeTier]:
    return [VolumeTier.model_validate(tier) for tier in (product.bulk_pricing or [])]


def _applicable_tier(tiers: Iterable[VolumeTier], quantity: int) -> Optional[VolumeTier]:
    """The tier with the largest min_quantity not exceeding ``quantity``."""
    eligible = [t for t in tiers if t.min_quantity <= quantity]
    if not eligible:
        return None
    return max(eligible, key=lambda t: t.min_quantity)


def _tier_savings(base_price: Decimal, tier: VolumeTier, quantity: int) -> Decimal:
    """Total saved across the order: per-unit reduction times quantity."""
    if tier.discount_type == DiscountType.percentage:
        per_unit = base_price * tier.discount / HUNDRED
    else:
        per_unit = tier.discount
    per_unit = min(per_unit, base_price)
    return per_unit * quantity


# ===================== PROMOTIONS =====================


def _promotion_savings(base_price: Decimal, promotion: Promotion, quantity: int) -> Decimal:
    """
    Percentage promotions scale with quantity; fixed promotions are a flat
    reduction on the whole order.
    """
    value = _to_decimal(promotion.value)
    if PromotionType(promotion.type) is PromotionType.percentage_discount:
        saved = base_price * quantity * value / HUNDRED
    else:
        saved = value
    return min(saved, base_price * quantity)


def _best_promotion(
    base_price: Decimal,
    promotions: Iterable[Promotion],
    quantity: int,
    now: datetime,
) -> Tuple[Optional[Promotion], Decimal]:
    best: Optional[Promotion] = None
    best_saved = Decimal("0")
    for promotion in promotions:
        if not promotion.is_running(now):
            continue
        saved = _promotion_savings(base_price, promotion, quantity)
        if best is None or saved > best_saved:
            best, best_saved = promotion, saved
    return best, best_saved


# ===================== RESOLVER =====================


def resolve_price(
    product: Product,
    promotions: Iterable[Promotion],
    quantity: int,
    now: Optional[datetime] = None,
) -> PriceBreakdown:
    """
    Compute the effective unit and total price for an already validated
    quantity.

    Business rules:
    - The volume tier with the highest min_quantity <= quantity is the tier
      candidate.
    - The running promotion saving the most is the promotion candidate.
    - Both are compared on total amount saved across the order; the larger
      wins, ties go to the promotion. Discounts never stack.
    - unit_price is rounded half-up to cents and total_price is exactly
      unit_price * quantity.
    """
    if quantity <= 0:
        raise ValidationError("quantity must be a positive integer")

    now = to_naive_utc(now or datetime.utcnow())
    base_price = _to_decimal(product.base_price)

    discount: Optional[AppliedDiscount] = None
    saved = Decimal("0")

    # ---- 1) Volume tier ----
    tier = _applicable_tier(_volume_tiers(product), quantity)
    if tier is not None:
        tier_saved = _tier_savings(base_price, tier, quantity)
        if tier_saved > 0:
            saved = tier_saved
            discount = AppliedDiscount(
                type=tier.discount_type,
                value=tier.discount,
                amount=tier_saved,
                source=DiscountSource.volume_tier,
            )

    # ---- 2) Promotions ----
    promotion, promo_saved = _best_promotion(base_price, promotions, quantity, now)
    if promotion is not None and promo_saved > 0 and promo_saved >= saved:
        saved = promo_saved
        discount = AppliedDiscount(
            type=PromotionType(promotion.type).discount_type,
            value=_to_decimal(promotion.value),
            amount=promo_saved,
            source=DiscountSource.promotion,
            promotion_id=promotion.id,
        )

    # ---- 3) Totals ----
    unit_price = _round_money(base_price - saved / quantity)
    total_price = _round_money(unit_price * quantity)
    if discount is not None:
        # report what the rounded prices actually save
        discount.amount = _round_money(base_price * quantity - total_price)

    return PriceBreakdown(
        product_id=product.id,
        currency=product.currency,
        base_price=_round_money(base_price),
        quantity=quantity,
        unit_price=unit_price,
        total_price=total_price,
        discount=discount,
    )


def calculate_pricing(
    catalog_db: Session,
    identity_db: Session,
    product_id: str,
    quantity: int,
    now: Optional[datetime] = None,
) -> PriceBreakdown:
    """Look up the product and its promotions, validate, then resolve."""
    if quantity <= 0:
        raise ValidationError("quantity must be a positive integer")

    product = catalog_db.query(Product).filter(Product.id == product_id).first()
    if not product or not product.is_active:
        raise NotFoundError("Product not found")

    inventory_validator.validate(product, quantity)

    now = to_naive_utc(now or datetime.utcnow())
    promotions = get_active_promotions(identity_db, product_id, now)
    breakdown = resolve_price(product, promotions, quantity, now=now)

    logger.debug(
        "priced %s x%d: unit=%s total=%s source=%s",
        product_id,
        quantity,
        breakdown.unit_price,
        breakdown.total_price,
        breakdown.discount.source.value if breakdown.discount else None,
    )
    return breakdown
