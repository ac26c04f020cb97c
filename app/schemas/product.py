from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from app.enums.discounts import DiscountType
from app.enums.sorting import ProductSortBy, SortOrder


class VolumeTier(BaseModel):
    min_quantity: int = Field(gt=0)
    discount: Decimal = Field(ge=0)
    discount_type: DiscountType = DiscountType.percentage


class Dimensions(BaseModel):
    length: float = Field(gt=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    sku: str = Field(min_length=1)
    category_id: str = Field(min_length=1)
    base_price: Decimal = Field(gt=0)
    stock_quantity: int = Field(ge=0)

    description: Optional[str] = None
    short_description: Optional[str] = None
    barcode: Optional[str] = None
    currency: Optional[str] = None
    min_order_qty: int = Field(default=1, gt=0)
    max_order_qty: Optional[int] = Field(default=None, gt=0)
    low_stock_alert: int = Field(default=10, ge=0)
    bulk_pricing: List[VolumeTier] = []

    images: List[str] = []
    videos: List[str] = []
    documents: List[str] = []
    weight: Optional[float] = Field(default=None, gt=0)
    dimensions: Optional[Dimensions] = None
    specifications: Dict[str, Any] = {}

    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: List[str] = []
    regions: List[str] = ["all"]
    visible_to: List[str] = ["all"]

    @model_validator(mode="after")
    def _check_order_bounds(self):
        if self.max_order_qty is not None and self.max_order_qty < self.min_order_qty:
            raise ValueError("max_order_qty must not be lower than min_order_qty")
        return self


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    short_description: Optional[str] = None
    barcode: Optional[str] = None
    base_price: Optional[Decimal] = Field(default=None, gt=0)
    min_order_qty: Optional[int] = Field(default=None, gt=0)
    max_order_qty: Optional[int] = Field(default=None, gt=0)
    low_stock_alert: Optional[int] = Field(default=None, ge=0)
    specifications: Optional[Dict[str, Any]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: Optional[List[str]] = None
    regions: Optional[List[str]] = None
    visible_to: Optional[List[str]] = None


class InventoryUpdateRequest(BaseModel):
    quantity: int
    reason: Optional[str] = None


class BasePriceUpdateRequest(BaseModel):
    new_base_price: Decimal = Field(gt=0)


class BulkPricingUpdateRequest(BaseModel):
    tiers: List[VolumeTier]


# ---------- Document sections ----------

class CategoryInfo(BaseModel):
    primary: str
    secondary: Optional[str] = None
    tags: List[str] = []


class PricingInfo(BaseModel):
    base_price: Decimal
    currency: str
    bulk_pricing: List[VolumeTier] = []


class InventoryInfo(BaseModel):
    available: int
    reserved: int
    reorder_level: int
    last_updated: Optional[datetime] = None


class VisibilityInfo(BaseModel):
    is_active: bool
    visible_to: List[str] = []
    regions: List[str] = []


class MediaInfo(BaseModel):
    images: List[str] = []
    videos: List[str] = []
    documents: List[str] = []


class SeoInfo(BaseModel):
    slug: str
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: List[str] = []


class ProductResponse(BaseModel):
    id: str
    company_id: str
    sku: str
    name: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    barcode: Optional[str] = None
    category: CategoryInfo
    pricing: PricingInfo
    min_order_qty: int
    max_order_qty: Optional[int] = None
    inventory: InventoryInfo
    visibility: VisibilityInfo
    specifications: Dict[str, Any] = {}
    media: MediaInfo
    seo: SeoInfo
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, product) -> "ProductResponse":
        media = product.media or {}
        return cls(
            id=product.id,
            company_id=product.company_id,
            sku=product.sku,
            name=product.name,
            description=product.description,
            short_description=product.short_description,
            barcode=product.barcode,
            category=CategoryInfo(
                primary=product.category_primary,
                secondary=product.category_secondary,
                tags=product.tags or [],
            ),
            pricing=PricingInfo(
                base_price=product.base_price,
                currency=product.currency,
                bulk_pricing=product.bulk_pricing or [],
            ),
            min_order_qty=product.min_order_qty,
            max_order_qty=product.max_order_qty,
            inventory=InventoryInfo(
                available=product.available,
                reserved=product.reserved,
                reorder_level=product.reorder_level,
                last_updated=product.inventory_updated_at,
            ),
            visibility=VisibilityInfo(
                is_active=product.is_active,
                visible_to=product.visible_to or [],
                regions=product.regions or [],
            ),
            specifications=product.specifications or {},
            media=MediaInfo(
                images=media.get("images", []),
                videos=media.get("videos", []),
                documents=media.get("documents", []),
            ),
            seo=SeoInfo(
                slug=product.slug,
                meta_title=product.meta_title,
                meta_description=product.meta_description,
                keywords=product.keywords or [],
            ),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


# ---------- Search ----------

class ProductSearchQuery(BaseModel):
    query: Optional[str] = None
    category_id: Optional[str] = None
    company_id: Optional[str] = None
    min_price: Optional[Decimal] = Field(default=None, ge=0)
    max_price: Optional[Decimal] = Field(default=None, ge=0)
    in_stock: bool = True
    tags: List[str] = []
    region: Optional[str] = None
    visible_to: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    sort_by: ProductSortBy = ProductSortBy.created
    sort_order: SortOrder = SortOrder.desc


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PageMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            pages=(total + limit - 1) // limit,
            has_next=page * limit < total,
            has_prev=page > 1,
        )


class ProductPageResponse(BaseModel):
    items: List[ProductResponse]
    pagination: PageMeta
