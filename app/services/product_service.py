import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.enums.sorting import ProductSortBy, SortOrder
from app.models.category import Category
from app.models.inventory_log import InventoryLog
from app.models.price_history import PriceHistory
from app.models.product import Product
from app.models.user import Company
from app.schemas.product import ProductCreate, ProductSearchQuery, ProductUpdate, VolumeTier

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(name: str, sku: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to one hyphen, trim hyphens."""
    return _NON_ALNUM.sub("-", f"{name} {sku}".lower()).strip("-")


def record_price_change(
    db: Session,
    product_id: str,
    old_price: Optional[Decimal],
    new_price: Decimal,
    reason: str,
):
    history = PriceHistory(
        product_id=product_id,
        old_price=old_price,
        new_price=new_price,
        reason=reason,
    )
    db.add(history)


def _tiers_to_json(tiers: List[VolumeTier]) -> list:
    ordered = sorted(tiers, key=lambda t: t.min_quantity)
    return [t.model_dump(mode="json") for t in ordered]


# --------------------------
# CREATE PRODUCT
# --------------------------
def create_product(
    catalog_db: Session,
    identity_db: Session,
    company_id: str,
    data: ProductCreate,
) -> Product:
    company = identity_db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise NotFoundError("Company not found")

    category = identity_db.query(Category).filter(Category.id == data.category_id).first()
    if not category:
        raise NotFoundError("Category not found")

    if catalog_db.query(Product).filter(Product.sku == data.sku).first():
        raise ConflictError("SKU already exists")

    specifications = dict(data.specifications)
    if data.weight is not None:
        specifications["weight"] = data.weight
    if data.dimensions is not None:
        specifications["dimensions"] = data.dimensions.model_dump()

    now = datetime.utcnow()
    product = Product(
        company_id=company_id,
        sku=data.sku,
        name=data.name,
        description=data.description,
        short_description=data.short_description,
        barcode=data.barcode,
        # snapshot of the category names; later renames do not propagate
        category_primary=category.name,
        category_secondary=category.parent.name if category.parent else None,
        tags=list(data.tags),
        base_price=data.base_price,
        currency=data.currency or settings.DEFAULT_CURRENCY,
        bulk_pricing=_tiers_to_json(data.bulk_pricing),
        min_order_qty=data.min_order_qty,
        max_order_qty=data.max_order_qty,
        available=data.stock_quantity,
        reserved=0,
        reorder_level=data.low_stock_alert,
        inventory_updated_at=now,
        is_active=True,
        visible_to=list(data.visible_to),
        regions=list(data.regions),
        specifications=specifications,
        media={
            "images": list(data.images),
            "videos": list(data.videos),
            "documents": list(data.documents),
        },
        slug=generate_slug(data.name, data.sku),
        meta_title=data.meta_title,
        meta_description=data.meta_description,
        keywords=list(data.tags),
        created_at=now,
        updated_at=now,
    )
    catalog_db.add(product)
    catalog_db.flush()

    record_price_change(catalog_db, product.id, None, data.base_price, "Initial price")

    catalog_db.commit()
    catalog_db.refresh(product)
    logger.info("product %s (%s) created by company %s", product.id, product.sku, company_id)
    return product


# --------------------------
# GET PRODUCT
# --------------------------
def get_product(db: Session, product_id: str) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()


def get_product_or_404(db: Session, product_id: str) -> Product:
    product = get_product(db, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def get_editable_product(db: Session, product_id: str) -> Product:
    """Deactivation is terminal: writes other than deactivate are refused."""
    product = get_product_or_404(db, product_id)
    if not product.is_active:
        raise ValidationError("Product is deactivated")
    return product


# --------------------------
# SEARCH PRODUCTS
# --------------------------
def _matches_lists(product: Product, search: ProductSearchQuery) -> bool:
    if search.tags and not set(search.tags) & set(product.tags or []):
        return False
    if search.region:
        regions = product.regions or []
        if "all" not in regions and search.region not in regions:
            return False
    if search.visible_to:
        viewers = product.visible_to or []
        if "all" not in viewers and search.visible_to not in viewers:
            return False
    return True


def search_products(
    catalog_db: Session,
    identity_db: Session,
    search: ProductSearchQuery,
) -> Tuple[List[Product], int]:
    """
    Returns (items, total_count) for active products matching ``search``.
    page is 1-based.

    ``category_id`` is resolved to the category's current name and matched
    against the snapshot taken at creation, so products created before a
    rename are not found under the renamed category.
    """
    query = catalog_db.query(Product).filter(Product.is_active.is_(True))

    if search.query:
        pattern = f"%{search.query.lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.description).like(pattern),
                func.lower(Product.short_description).like(pattern),
            )
        )

    if search.category_id:
        category = (
            identity_db.query(Category).filter(Category.id == search.category_id).first()
        )
        if not category:
            return [], 0
        query = query.filter(Product.category_primary == category.name)

    if search.company_id:
        query = query.filter(Product.company_id == search.company_id)

    if search.min_price is not None:
        query = query.filter(Product.base_price >= search.min_price)
    if search.max_price is not None:
        query = query.filter(Product.base_price <= search.max_price)

    if search.in_stock:
        query = query.filter(Product.available > 0)

    # popularity has no signal in the catalog yet; falls back to recency
    sort_column = {
        ProductSortBy.name: Product.name,
        ProductSortBy.price: Product.base_price,
        ProductSortBy.created: Product.created_at,
        ProductSortBy.popularity: Product.created_at,
    }[search.sort_by]
    if search.sort_order == SortOrder.asc:
        query = query.order_by(sort_column.asc(), Product.id.asc())
    else:
        query = query.order_by(sort_column.desc(), Product.id.asc())

    # list-valued fields live in JSON columns; filter them after the SQL pass
    matches = [p for p in query.all() if _matches_lists(p, search)]

    offset = (search.page - 1) * search.limit
    return matches[offset:offset + search.limit], len(matches)


# --------------------------
# PRODUCTS BY COMPANY
# --------------------------
def get_products_by_company(
    db: Session,
    company_id: str,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Product], int]:
    page = max(page, 1)
    limit = max(limit, 1)
    query = db.query(Product).filter(
        Product.company_id == company_id,
        Product.is_active.is_(True),
    )
    total = query.with_entities(func.count()).scalar() or 0
    items = (
        query.order_by(Product.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


# --------------------------
# RECOMMENDATIONS
# --------------------------
def get_recommendations(db: Session, limit: int = 10) -> List[Product]:
    """Latest active, in-stock products."""
    return (
        db.query(Product)
        .filter(Product.is_active.is_(True), Product.available > 0)
        .order_by(Product.created_at.desc())
        .limit(limit)
        .all()
    )


# --------------------------
# UPDATE PRODUCT
# --------------------------
# null on these keeps the stored value
_REQUIRED_FIELDS = (
    "name", "base_price", "min_order_qty", "low_stock_alert",
    "specifications", "tags", "regions", "visible_to",
)

_FIELD_MAP = {
    "low_stock_alert": "reorder_level",
}


def update_product(db: Session, product_id: str, data: ProductUpdate) -> Product:
    product = get_editable_product(db, product_id)
    changes = data.model_dump(exclude_unset=True)

    min_qty = changes.get("min_order_qty", product.min_order_qty)
    max_qty = changes.get("max_order_qty", product.max_order_qty)
    if max_qty is not None and min_qty is not None and max_qty < min_qty:
        raise ValidationError("max_order_qty must not be lower than min_order_qty")

    new_price = changes.get("base_price")
    if new_price is not None and new_price != product.base_price:
        record_price_change(db, product_id, product.base_price, new_price, "Price update")

    for key, value in changes.items():
        if key in _REQUIRED_FIELDS and value is None:
            continue
        setattr(product, _FIELD_MAP.get(key, key), value)

    if changes.get("tags") is not None:
        product.keywords = list(changes["tags"])

    product.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(product)
    return product


# --------------------------
# UPDATE BASE PRICE + HISTORY
# --------------------------
def update_base_price(db: Session, product_id: str, new_base_price: Decimal) -> Product:
    if new_base_price <= 0:
        raise ValidationError("Price must be positive")

    product = get_editable_product(db, product_id)
    if new_base_price != product.base_price:
        record_price_change(
            db, product_id,
            old_price=product.base_price,
            new_price=new_base_price,
            reason="Price update",
        )
        product.base_price = new_base_price
        product.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(product)
    return product


# --------------------------
# UPDATE VOLUME TIERS
# --------------------------
def update_bulk_pricing(db: Session, product_id: str, tiers: List[VolumeTier]) -> Product:
    product = get_editable_product(db, product_id)

    thresholds = [t.min_quantity for t in tiers]
    if len(thresholds) != len(set(thresholds)):
        raise ValidationError("Volume tiers must have distinct min_quantity values")

    product.bulk_pricing = _tiers_to_json(tiers)
    product.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(product)
    return product


# --------------------------
# UPDATE INVENTORY
# --------------------------
def update_inventory(
    db: Session,
    product_id: str,
    new_available: int,
    reason: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Product:
    """
    Overwrite the available count. Concurrent writers race and the last
    write wins; no threshold is enforced beyond non-negativity.
    """
    if new_available < 0:
        raise ValidationError("Stock quantity cannot be negative")

    product = get_editable_product(db, product_id)
    previous = product.stock_quantity
    now = datetime.utcnow()

    product.available = new_available
    product.inventory_updated_at = now
    product.updated_at = now

    delta = new_available - previous
    db.add(
        InventoryLog(
            product_id=product.id,
            company_id=product.company_id,
            action="add" if delta > 0 else "remove" if delta < 0 else "adjust",
            quantity=abs(delta),
            previous_quantity=previous,
            new_quantity=new_available,
            reason=reason,
            user_id=user_id,
        )
    )

    db.commit()
    db.refresh(product)

    if new_available <= product.reorder_level:
        logger.warning(
            "Low stock alert for product %s (%s): %d remaining, reorder level %d",
            product.id,
            product.name,
            new_available,
            product.reorder_level,
        )
    return product


def get_inventory_logs(db: Session, product_id: str, limit: int = 50) -> List[InventoryLog]:
    return (
        db.query(InventoryLog)
        .filter(InventoryLog.product_id == product_id)
        .order_by(InventoryLog.created_at.desc(), InventoryLog.id.desc())
        .limit(limit)
        .all()
    )


# --------------------------
# DEACTIVATE PRODUCT (soft delete)
# --------------------------
def deactivate_product(db: Session, product_id: str) -> Product:
    product = get_product_or_404(db, product_id)
    if not product.is_active:
        return product

    product.is_active = False
    product.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(product)
    logger.info("product %s deactivated", product_id)
    return product


# --------------------------
# GET PRICE HISTORY
# --------------------------
def get_price_history(
    db: Session,
    product_id: str,
    page: int = 1,
    page_size: int = 50,
) -> Tuple[List[PriceHistory], int]:
    """
    Returns (items, total_count)
    page is 1-based.
    """
    if page < 1:
        page = 1
    MAX_PAGE_SIZE = 200
    if page_size < 1:
        page_size = 1
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE

    query = db.query(PriceHistory).filter(PriceHistory.product_id == product_id)

    total = query.with_entities(func.count()).scalar() or 0

    offset = (page - 1) * page_size
    items = (
        query
        .order_by(PriceHistory.changed_at.desc(), PriceHistory.id.desc())
        .offset(offset)
        .limit(page_size)
        .all()
    )

    return items, total
