"""HTTP tests for the product endpoints."""

import pytest


def _payload(**overrides):
    body = {
        "name": "Widget",
        "description": "A useful widget",
        "sku": "wid-001",
        "category": "Hardware",
        "price": 9.5,
        "quantity": 10,
        "minStockLevel": 5,
    }
    body.update(overrides)
    return body


@pytest.fixture()
def owner(register):
    return register("owner@x.com")


@pytest.fixture()
def create_product(client, owner):
    def _create(headers=None, **overrides):
        response = client.post("/api/products", json=_payload(**overrides), headers=headers or owner[1])
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


class TestCreate:
    def test_create_returns_camel_case_product(self, client, owner):
        response = client.post("/api/products", json=_payload(), headers=owner[1])

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Product created successfully"
        assert "error" not in body
        assert "errors" not in body
        product = body["data"]
        assert product["sku"] == "WID-001"
        assert product["userId"] == owner[0]["id"]
        assert product["minStockLevel"] == 5
        assert product["lowStock"] is False
        assert product["stockStatus"] == "IN_STOCK"
        assert product["isActive"] is True

    def test_requires_authentication(self, client):
        assert client.post("/api/products", json=_payload()).status_code == 401

    def test_duplicate_sku_is_case_insensitive(self, client, owner, create_product):
        create_product()

        response = client.post("/api/products", json=_payload(sku="WID-001"), headers=owner[1])
        assert response.status_code == 409
        assert response.json()["message"] == "Product with this SKU already exists"

    def test_validation_errors_list_fields(self, client, owner):
        response = client.post(
            "/api/products",
            json=_payload(price=-1, quantity=-3, images=["not a url"]),
            headers=owner[1],
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        fields = {e["field"] for e in body["errors"]}
        assert {"price", "quantity"} <= fields
        assert any(f.startswith("images") for f in fields)


class TestStockLifecycle:
    def test_stock_status_follows_quantity(self, client, owner, create_product):
        product = create_product(quantity=10, minStockLevel=5)
        url = f"/api/products/{product['id']}/stock"

        data = client.put(url, json={"quantity": 5}, headers=owner[1]).json()["data"]
        assert data["stockStatus"] == "LOW_STOCK"
        assert data["lowStock"] is True

        data = client.put(url, json={"quantity": 0}, headers=owner[1]).json()["data"]
        assert data["stockStatus"] == "OUT_OF_STOCK"

    def test_negative_stock_is_rejected(self, client, owner, create_product):
        product = create_product()

        response = client.put(f"/api/products/{product['id']}/stock", json={"quantity": -1}, headers=owner[1])
        assert response.status_code == 400
        assert response.json()["message"] == "Quantity cannot be negative"

    def test_adjust_stock(self, client, owner, create_product):
        product = create_product(quantity=10)
        url = f"/api/products/{product['id']}/adjust-stock"

        response = client.post(url, json={"adjustment": -4}, headers=owner[1])
        assert response.status_code == 200
        assert response.json()["message"] == "Stock adjusted successfully"
        assert response.json()["data"]["quantity"] == 6

        response = client.post(url, json={"adjustment": -7}, headers=owner[1])
        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock for this adjustment"

        current = client.get(f"/api/products/{product['id']}", headers=owner[1]).json()["data"]
        assert current["quantity"] == 6


class TestOwnership:
    def test_other_users_see_not_found(self, client, register, create_product):
        product = create_product()
        _, stranger = register("stranger@x.com")
        _, manager = register("manager@x.com", role="manager")

        for headers in (stranger, manager):
            assert client.get(f"/api/products/{product['id']}", headers=headers).status_code == 404
            response = client.put(f"/api/products/{product['id']}", json={"price": 1}, headers=headers)
            assert response.status_code == 404
            assert response.json()["message"] == "Product not found or access denied"
            assert client.delete(f"/api/products/{product['id']}", headers=headers).status_code == 404

    def test_admin_bypasses_ownership(self, client, register, create_product):
        product = create_product()
        _, admin = register("root@x.com", role="admin")

        assert client.get(f"/api/products/{product['id']}", headers=admin).status_code == 200
        response = client.put(f"/api/products/{product['id']}", json={"price": 12}, headers=admin)
        assert response.status_code == 200
        assert response.json()["data"]["price"] == 12
        assert response.json()["data"]["userId"] == product["userId"]

    def test_unknown_product(self, client, owner):
        assert client.get("/api/products/does-not-exist", headers=owner[1]).status_code == 404


class TestUpdateAndDelete:
    def test_partial_update(self, client, owner, create_product):
        product = create_product()

        response = client.put(
            f"/api/products/{product['id']}",
            json={"name": "Gadget", "minStockLevel": 2},
            headers=owner[1],
        )
        data = response.json()["data"]
        assert data["name"] == "Gadget"
        assert data["minStockLevel"] == 2
        assert data["sku"] == "WID-001"
        assert data["price"] == 9.5

    def test_blank_sku_and_name_are_rejected(self, client, owner, create_product):
        product = create_product()

        response = client.put(
            f"/api/products/{product['id']}", json={"sku": "   ", "name": "   "}, headers=owner[1]
        )
        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"sku", "name"}

        current = client.get(f"/api/products/{product['id']}", headers=owner[1]).json()["data"]
        assert current["sku"] == "WID-001"
        assert current["name"] == "Widget"

    def test_update_to_taken_sku(self, client, owner, create_product):
        create_product(sku="A-1")
        second = create_product(sku="B-1")

        response = client.put(f"/api/products/{second['id']}", json={"sku": "a-1"}, headers=owner[1])
        assert response.status_code == 409

    def test_soft_delete_hides_product_but_keeps_sku(self, client, owner, create_product):
        product = create_product()

        response = client.delete(f"/api/products/{product['id']}", headers=owner[1])
        assert response.status_code == 200
        assert response.json()["message"] == "Product deleted successfully"

        assert client.get(f"/api/products/{product['id']}", headers=owner[1]).status_code == 404
        listing = client.get("/api/products", headers=owner[1]).json()["data"]
        assert listing["data"] == []
        assert listing["pagination"]["total"] == 0

        response = client.post("/api/products", json=_payload(), headers=owner[1])
        assert response.status_code == 409


class TestListing:
    @pytest.fixture()
    def catalogue(self, create_product):
        create_product(name="Laptop", sku="LAP-1", category="Electronics", price=999, quantity=3)
        create_product(name="Mouse", sku="MOU-1", category="Electronics", price=25, quantity=0,
                       description="Wireless mouse")
        create_product(name="Desk", sku="DSK-1", category="Furniture", price=250, quantity=40)

    def test_pagination_metadata(self, client, owner, catalogue):
        body = client.get("/api/products", params={"page": 2, "limit": 2}, headers=owner[1]).json()

        assert body["success"] is True
        assert len(body["data"]["data"]) == 1
        assert body["data"]["pagination"] == {
            "page": 2,
            "limit": 2,
            "total": 3,
            "pages": 2,
            "hasNext": False,
            "hasPrev": True,
        }

    def test_limit_above_maximum_is_rejected(self, client, owner):
        response = client.get("/api/products", params={"limit": 101}, headers=owner[1])
        assert response.status_code == 400

    def test_filters_and_sorting(self, client, owner, catalogue):
        params = {"category": "Electronics", "sortBy": "price", "sortOrder": "asc"}
        data = client.get("/api/products", params=params, headers=owner[1]).json()["data"]["data"]
        assert [p["name"] for p in data] == ["Mouse", "Laptop"]

        data = client.get("/api/products", params={"inStock": "true"}, headers=owner[1]).json()["data"]["data"]
        assert {p["name"] for p in data} == {"Laptop", "Desk"}

        params = {"minPrice": 100, "maxPrice": 500}
        data = client.get("/api/products", params=params, headers=owner[1]).json()["data"]["data"]
        assert [p["name"] for p in data] == ["Desk"]

    def test_search(self, client, owner, catalogue):
        body = client.get("/api/products/search", params={"search": "wireless"}, headers=owner[1]).json()
        assert body["message"] == "Search completed successfully"
        assert [p["name"] for p in body["data"]["data"]] == ["Mouse"]

    def test_listing_spans_all_owners(self, client, register, catalogue):
        _, other = register("other@x.com")

        listing = client.get("/api/products", headers=other).json()["data"]
        assert listing["pagination"]["total"] == 3

        mine = client.get("/api/products/my-products", headers=other).json()["data"]
        assert mine == []

    def test_low_stock_and_stats_are_scoped(self, client, register, owner, catalogue):
        low = client.get("/api/products/low-stock", headers=owner[1]).json()["data"]
        assert {p["name"] for p in low} == {"Laptop", "Mouse"}

        stats = client.get("/api/products/stats", headers=owner[1]).json()["data"]
        assert stats == {
            "totalProducts": 3,
            "totalValue": 999 * 3 + 250 * 40,
            "lowStockCount": 2,
            "outOfStockCount": 1,
        }

        _, other = register("other@x.com")
        stats = client.get("/api/products/stats", headers=other).json()["data"]
        assert stats["totalProducts"] == 0
        assert stats["totalValue"] == 0

    def test_categories_and_category_route(self, client, owner, catalogue):
        categories = client.get("/api/products/categories", headers=owner[1]).json()["data"]
        assert categories == ["Electronics", "Furniture"]

        data = client.get("/api/products/category/Furniture", headers=owner[1]).json()["data"]
        assert [p["name"] for p in data] == ["Desk"]

    def test_sku_lookup_is_admin_only(self, client, register, owner, catalogue):
        assert client.get("/api/products/sku/lap-1", headers=owner[1]).status_code == 403

        _, admin = register("root@x.com", role="admin")
        response = client.get("/api/products/sku/lap-1", headers=admin)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Laptop"


class TestBulkStock:
    def test_plain_users_are_refused(self, client, owner, create_product):
        product = create_product()

        response = client.post(
            "/api/products/bulk-stock",
            json={"updates": [{"productId": product["id"], "quantity": 3}]},
            headers=owner[1],
        )
        assert response.status_code == 403

    def test_manager_updates_own_products(self, client, register):
        _, manager = register("manager@x.com", role="manager")
        ids = []
        for sku in ("A-1", "B-1"):
            response = client.post("/api/products", json=_payload(sku=sku), headers=manager)
            ids.append(response.json()["data"]["id"])

        response = client.post(
            "/api/products/bulk-stock",
            json={"updates": [{"productId": ids[0], "quantity": 1}, {"productId": ids[1], "quantity": 0}]},
            headers=manager,
        )
        assert response.status_code == 200
        assert [p["quantity"] for p in response.json()["data"]] == [1, 0]

    def test_failure_keeps_earlier_updates(self, client, register):
        _, manager = register("manager@x.com", role="manager")
        product = client.post("/api/products", json=_payload(), headers=manager).json()["data"]

        response = client.post(
            "/api/products/bulk-stock",
            json={"updates": [
                {"productId": product["id"], "quantity": 42},
                {"productId": "missing", "quantity": 1},
            ]},
            headers=manager,
        )
        assert response.status_code == 404

        current = client.get(f"/api/products/{product['id']}", headers=manager).json()["data"]
        assert current["quantity"] == 42

    def test_empty_batch_is_invalid(self, client, register):
        _, manager = register("manager@x.com", role="manager")
        response = client.post("/api/products/bulk-stock", json={"updates": []}, headers=manager)
        assert response.status_code == 400
