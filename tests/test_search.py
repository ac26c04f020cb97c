from decimal import Decimal

import pytest

from app.enums.sorting import ProductSortBy, SortOrder
from app.schemas.product import ProductSearchQuery
from app.services.category_service import rename_category
from app.services.product_service import (
    deactivate_product,
    get_products_by_company,
    get_recommendations,
    search_products,
)
from factories import make_category, make_company, make_product


@pytest.fixture()
def catalog(catalog_db, identity_db):
    acme = make_company(identity_db, "Acme Supplies")
    bolt = make_company(identity_db, "Bolt Wholesale")
    tools = make_category(identity_db, "Tools")
    paint = make_category(identity_db, "Paint")

    products = {
        "drill": make_product(
            catalog_db, identity_db, acme, tools,
            name="Cordless Drill", sku="T-1", base_price=Decimal("120.00"),
            tags=["power", "cordless"], regions=["eu"],
        ),
        "hammer": make_product(
            catalog_db, identity_db, acme, tools,
            name="Claw Hammer", sku="T-2", base_price=Decimal("15.00"),
            description="Forged steel head", tags=["hand"],
        ),
        "primer": make_product(
            catalog_db, identity_db, bolt, paint,
            name="Wall Primer", sku="P-1", base_price=Decimal("30.00"),
            stock_quantity=0, visible_to=["verified"],
        ),
        "enamel": make_product(
            catalog_db, identity_db, bolt, paint,
            name="Gloss Enamel", sku="P-2", base_price=Decimal("45.00"),
        ),
    }
    return {"acme": acme, "bolt": bolt, "tools": tools, "paint": paint, **products}


def _skus(items):
    return sorted(p.sku for p in items)


@pytest.mark.order(1)
def test_default_search_hides_out_of_stock(catalog_db, identity_db, catalog):
    items, total = search_products(catalog_db, identity_db, ProductSearchQuery())

    assert total == 3
    assert _skus(items) == ["P-2", "T-1", "T-2"]


def test_include_out_of_stock(catalog_db, identity_db, catalog):
    _, total = search_products(catalog_db, identity_db, ProductSearchQuery(in_stock=False))
    assert total == 4


def test_text_search_is_case_insensitive(catalog_db, identity_db, catalog):
    items, _ = search_products(catalog_db, identity_db, ProductSearchQuery(query="FORGED"))
    assert _skus(items) == ["T-2"]


def test_category_filter_uses_category_name(catalog_db, identity_db, catalog):
    items, _ = search_products(
        catalog_db, identity_db, ProductSearchQuery(category_id=catalog["tools"].id)
    )
    assert _skus(items) == ["T-1", "T-2"]


def test_unknown_category_matches_nothing(catalog_db, identity_db, catalog):
    items, total = search_products(
        catalog_db, identity_db, ProductSearchQuery(category_id="missing")
    )
    assert items == [] and total == 0


def test_price_range_and_company(catalog_db, identity_db, catalog):
    items, _ = search_products(
        catalog_db, identity_db,
        ProductSearchQuery(min_price=Decimal("20"), max_price=Decimal("130"), company_id=catalog["acme"].id),
    )
    assert _skus(items) == ["T-1"]


def test_tags_match_any(catalog_db, identity_db, catalog):
    items, _ = search_products(
        catalog_db, identity_db, ProductSearchQuery(tags=["hand", "cordless"])
    )
    assert _skus(items) == ["T-1", "T-2"]


def test_region_and_visibility(catalog_db, identity_db, catalog):
    items, _ = search_products(catalog_db, identity_db, ProductSearchQuery(region="us"))
    # drill is eu-only; "all" matches every region
    assert _skus(items) == ["P-2", "T-2"]

    items, _ = search_products(
        catalog_db, identity_db, ProductSearchQuery(visible_to="guest", in_stock=False)
    )
    assert "P-1" not in _skus(items)


def test_sort_by_price(catalog_db, identity_db, catalog):
    items, _ = search_products(
        catalog_db, identity_db,
        ProductSearchQuery(sort_by=ProductSortBy.price, sort_order=SortOrder.asc),
    )
    assert [p.sku for p in items] == ["T-2", "P-2", "T-1"]


def test_pagination(catalog_db, identity_db, catalog):
    query = ProductSearchQuery(sort_by=ProductSortBy.name, sort_order=SortOrder.asc, limit=2)
    first, total = search_products(catalog_db, identity_db, query)
    second, _ = search_products(catalog_db, identity_db, query.model_copy(update={"page": 2}))

    assert total == 3
    assert [p.name for p in first] == ["Claw Hammer", "Cordless Drill"]
    assert [p.name for p in second] == ["Gloss Enamel"]


def test_deactivated_products_never_returned(catalog_db, identity_db, catalog):
    deactivate_product(catalog_db, catalog["hammer"].id)

    items, _ = search_products(catalog_db, identity_db, ProductSearchQuery(in_stock=False))
    assert "T-2" not in _skus(items)

    company_items, company_total = get_products_by_company(catalog_db, catalog["acme"].id)
    assert company_total == 1
    assert _skus(company_items) == ["T-1"]


def test_recommendations_are_in_stock_only(catalog_db, identity_db, catalog):
    recommended = get_recommendations(catalog_db, limit=10)
    assert "P-1" not in _skus(recommended)
    assert len(recommended) == 3


def test_category_filter_uses_current_name_not_snapshot(catalog_db, identity_db, catalog):
    rename_category(identity_db, catalog["paint"].id, "Coatings")

    items, total = search_products(
        catalog_db, identity_db, ProductSearchQuery(category_id=catalog["paint"].id)
    )
    assert items == [] and total == 0

    fresh = make_product(
        catalog_db, identity_db, catalog["bolt"], catalog["paint"],
        name="Floor Sealer", sku="P-3",
    )
    items, _ = search_products(
        catalog_db, identity_db, ProductSearchQuery(category_id=catalog["paint"].id)
    )
    assert _skus(items) == [fresh.sku]
