from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.connection import get_catalog_db, get_identity_db
from app.dependencies.auth import ensure_owner, require_company
from app.enums.sorting import ProductSortBy, SortOrder
from app.models.user import Company
from app.schemas.price_history import (
    PriceHistoryPageMeta,
    PriceHistoryPageResponse,
    PriceHistoryResponse,
)
from app.schemas.product import (
    BasePriceUpdateRequest,
    BulkPricingUpdateRequest,
    InventoryUpdateRequest,
    PageMeta,
    ProductCreate,
    ProductPageResponse,
    ProductResponse,
    ProductSearchQuery,
    ProductUpdate,
)
from app.services.product_service import (
    create_product, deactivate_product, get_price_history,
    get_product_or_404, get_products_by_company, search_products,
    update_base_price, update_bulk_pricing, update_inventory, update_product,
)

router = APIRouter(prefix="/products", tags=["Product Catalog"])


# SEARCH
@router.get("/", response_model=ProductPageResponse)
def search(
    query: Optional[str] = None,
    category_id: Optional[str] = None,
    company_id: Optional[str] = None,
    min_price: Optional[float] = Query(default=None, ge=0),
    max_price: Optional[float] = Query(default=None, ge=0),
    in_stock: bool = True,
    tags: List[str] = Query(default=[]),
    region: Optional[str] = None,
    visible_to: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    sort_by: ProductSortBy = ProductSortBy.created,
    sort_order: SortOrder = SortOrder.desc,
    catalog_db: Session = Depends(get_catalog_db),
    identity_db: Session = Depends(get_identity_db),
):
    search_query = ProductSearchQuery(
        query=query,
        category_id=category_id,
        company_id=company_id,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        tags=tags,
        region=region,
        visible_to=visible_to,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    items, total = search_products(catalog_db, identity_db, search_query)
    return ProductPageResponse(
        items=[ProductResponse.from_model(p) for p in items],
        pagination=PageMeta.build(page, limit, total),
    )


# CREATE
@router.post("/", response_model=ProductResponse, status_code=201)
def create(
    data: ProductCreate,
    company: Company = Depends(require_company),
    catalog_db: Session = Depends(get_catalog_db),
    identity_db: Session = Depends(get_identity_db),
):
    product = create_product(catalog_db, identity_db, company.id, data)
    return ProductResponse.from_model(product)


# LIST BY COMPANY
@router.get("/company/{company_id}", response_model=ProductPageResponse)
def list_by_company(
    company_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_catalog_db),
):
    items, total = get_products_by_company(db, company_id, page, limit)
    return ProductPageResponse(
        items=[ProductResponse.from_model(p) for p in items],
        pagination=PageMeta.build(page, limit, total),
    )


# GET BY ID
@router.get("/{product_id}", response_model=ProductResponse)
def get(product_id: str, db: Session = Depends(get_catalog_db)):
    return ProductResponse.from_model(get_product_or_404(db, product_id))


# UPDATE
@router.put("/{product_id}", response_model=ProductResponse)
def update(
    product_id: str,
    data: ProductUpdate,
    company: Company = Depends(require_company),
    db: Session = Depends(get_catalog_db),
):
    ensure_owner(get_product_or_404(db, product_id), company)
    return ProductResponse.from_model(update_product(db, product_id, data))


# DEACTIVATE (soft delete)
@router.delete("/{product_id}", response_model=ProductResponse)
def deactivate(
    product_id: str,
    company: Company = Depends(require_company),
    db: Session = Depends(get_catalog_db),
):
    ensure_owner(get_product_or_404(db, product_id), company)
    return ProductResponse.from_model(deactivate_product(db, product_id))


# INVENTORY
@router.put("/{product_id}/inventory", response_model=ProductResponse)
def set_inventory(
    product_id: str,
    body: InventoryUpdateRequest,
    company: Company = Depends(require_company),
    db: Session = Depends(get_catalog_db),
):
    ensure_owner(get_product_or_404(db, product_id), company)
    product = update_inventory(
        db, product_id, body.quantity, reason=body.reason, user_id=company.user_id
    )
    return ProductResponse.from_model(product)


# BASE PRICE UPDATE
@router.put("/{product_id}/base-price", response_model=ProductResponse)
def update_price(
    product_id: str,
    body: BasePriceUpdateRequest,
    company: Company = Depends(require_company),
    db: Session = Depends(get_catalog_db),
):
    ensure_owner(get_product_or_404(db, product_id), company)
    return ProductResponse.from_model(update_base_price(db, product_id, body.new_base_price))


# VOLUME TIERS
@router.put("/{product_id}/bulk-pricing", response_model=ProductResponse)
def set_bulk_pricing(
    product_id: str,
    body: BulkPricingUpdateRequest,
    company: Company = Depends(require_company),
    db: Session = Depends(get_catalog_db),
):
    ensure_owner(get_product_or_404(db, product_id), company)
    return ProductResponse.from_model(update_bulk_pricing(db, product_id, body.tiers))


# PRICE HISTORY
@router.get("/{product_id}/price-history", response_model=PriceHistoryPageResponse)
def view_history(
    product_id: str,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    company: Company = Depends(require_company),
    db: Session = Depends(get_catalog_db),
):
    ensure_owner(get_product_or_404(db, product_id), company)
    items, total = get_price_history(db, product_id, page, page_size)
    return PriceHistoryPageResponse(
        items=[PriceHistoryResponse.model_validate(h) for h in items],
        meta=PriceHistoryPageMeta(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        ),
    )
