from decimal import Decimal

import pytest

from app.main import app
from factories import auth_headers, make_category, make_company, make_product, make_retailer


def _company_headers(company):
    return auth_headers(company.user_id, "company")


@pytest.mark.order(1)
def test_register_login_me(client):
    resp = client.post(
        "/auth/register",
        json={
            "user_type": "retailer",
            "email": "shop@corner.example.com",
            "password": "password123",
            "business_name": "Corner Shop",
            "contact_person": "Sam Lee",
        },
    )
    assert resp.status_code == 201
    assert resp.json()["display_name"] == "Corner Shop"

    resp = client.post(
        "/auth/login",
        data={"username": "shop@corner.example.com", "password": "password123"},
    )
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["role"] == "retailer"


def test_bad_login_is_401(client):
    resp = client.post("/auth/login", data={"username": "nobody@example.com", "password": "x"})
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthenticated"


def test_unknown_product_is_404(client):
    resp = client.get("/products/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"kind": "not_found", "message": "Product not found"}


@pytest.mark.order(2)
def test_create_and_price_product(client, identity_db):
    company = make_company(identity_db)
    category = make_category(identity_db, "Fasteners")

    resp = client.post(
        "/products/",
        headers=_company_headers(company),
        json={
            "name": "Hex Bolt M8",
            "sku": "HB-M8",
            "category_id": category.id,
            "base_price": "0.40",
            "stock_quantity": 10000,
            "min_order_qty": 100,
            "bulk_pricing": [{"min_quantity": 1000, "discount": "10"}],
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["category"]["primary"] == "Fasteners"
    assert body["seo"]["slug"] == "hex-bolt-m8-hb-m8"
    product_id = body["id"]

    resp = client.get(f"/products/{product_id}/pricing", params={"quantity": 1000})
    assert resp.status_code == 200
    priced = resp.json()
    assert Decimal(priced["unit_price"]) == Decimal("0.36")
    assert Decimal(priced["total_price"]) == Decimal("360.00")
    assert priced["discount"]["source"] == "volume_tier"
    assert priced["calculated_in_ms"] >= 0

    resp = client.get(f"/products/{product_id}/pricing", params={"quantity": 50})
    assert resp.status_code == 400
    assert resp.json() == {"kind": "validation", "message": "below minimum order quantity"}


def test_pricing_requires_positive_quantity(client):
    resp = client.get("/products/anything/pricing", params={"quantity": 0})
    assert resp.status_code == 422


def test_duplicate_sku_is_409(client, identity_db, catalog_db):
    company = make_company(identity_db)
    category = make_category(identity_db)
    make_product(catalog_db, identity_db, company, category, sku="SKU-1")

    resp = client.post(
        "/products/",
        headers=_company_headers(company),
        json={
            "name": "Copy",
            "sku": "SKU-1",
            "category_id": category.id,
            "base_price": "10",
            "stock_quantity": 1,
        },
    )
    assert resp.status_code == 409
    assert resp.json()["kind"] == "conflict"


def test_create_product_requires_token(client):
    resp = client.post("/products/", json={})
    assert resp.status_code == 401


def test_retailer_cannot_create_product(client, identity_db):
    retailer = make_retailer(identity_db)
    resp = client.post(
        "/products/",
        headers=auth_headers(retailer.user_id, "retailer"),
        json={
            "name": "Anything",
            "sku": "R-1",
            "category_id": "x",
            "base_price": "1",
            "stock_quantity": 1,
        },
    )
    assert resp.status_code == 403
    assert resp.json()["kind"] == "forbidden"


def test_only_owner_can_deactivate(client, identity_db, catalog_db):
    owner = make_company(identity_db, "Owner Co")
    intruder = make_company(identity_db, "Intruder Co")
    category = make_category(identity_db)
    product = make_product(catalog_db, identity_db, owner, category)

    resp = client.delete(f"/products/{product.id}", headers=_company_headers(intruder))
    assert resp.status_code == 403

    for _ in range(2):
        resp = client.delete(f"/products/{product.id}", headers=_company_headers(owner))
        assert resp.status_code == 200
        assert resp.json()["visibility"]["is_active"] is False

    resp = client.get(f"/products/{product.id}/pricing", params={"quantity": 1})
    assert resp.status_code == 404


def test_inventory_update_endpoint(client, identity_db, catalog_db):
    company = make_company(identity_db)
    category = make_category(identity_db)
    product = make_product(catalog_db, identity_db, company, category)

    resp = client.put(
        f"/products/{product.id}/inventory",
        headers=_company_headers(company),
        json={"quantity": 7, "reason": "damaged stock"},
    )
    assert resp.status_code == 200
    assert resp.json()["inventory"]["available"] == 7

    resp = client.put(
        f"/products/{product.id}/inventory",
        headers=_company_headers(company),
        json={"quantity": -3},
    )
    assert resp.status_code == 400


def test_price_history_endpoint(client, identity_db, catalog_db):
    company = make_company(identity_db)
    category = make_category(identity_db)
    product = make_product(catalog_db, identity_db, company, category)

    client.put(
        f"/products/{product.id}/base-price",
        headers=_company_headers(company),
        json={"new_base_price": "110.00"},
    )
    resp = client.get(f"/products/{product.id}/price-history", headers=_company_headers(company))
    assert resp.status_code == 200
    assert resp.json()["meta"]["total"] == 2


def test_search_endpoint(client, identity_db, catalog_db):
    company = make_company(identity_db)
    category = make_category(identity_db)
    make_product(catalog_db, identity_db, company, category, sku="S-1", name="Blue Paint")
    make_product(catalog_db, identity_db, company, category, sku="S-2", name="Red Paint")

    resp = client.get("/products/", params={"query": "blue"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"]["total"] == 1
    assert body["items"][0]["sku"] == "S-1"


def test_recommendations_are_retailer_only(client, identity_db):
    company = make_company(identity_db)
    resp = client.get("/recommendations", headers=_company_headers(company))
    assert resp.status_code == 403


class _UpStore:
    def __init__(self, name):
        self.name = name

    def ping(self):
        return True


def test_health_reports_both_stores(client):
    app.state.identity_store = _UpStore("identity")
    app.state.catalog_store = _UpStore("catalog")

    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["identity_store_ok"] is True
    assert body["catalog_store_ok"] is True


def test_inventory_update_on_deactivated_product_is_400(client, identity_db, catalog_db):
    company = make_company(identity_db)
    category = make_category(identity_db)
    product = make_product(catalog_db, identity_db, company, category)
    client.delete(f"/products/{product.id}", headers=_company_headers(company))

    resp = client.put(
        f"/products/{product.id}/inventory",
        headers=_company_headers(company),
        json={"quantity": 5},
    )
    assert resp.status_code == 400
    assert resp.json() == {"kind": "validation", "message": "Product is deactivated"}
