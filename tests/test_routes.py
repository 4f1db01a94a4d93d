import json

from sqlalchemy.exc import OperationalError

from discount_app.adapters.checkout_function import parse_rule_config


class TestApplyCartDiscount:
    def test_prices_cart(self, client, make_rule):
        make_rule(id="r1", name="Twenty off", type="percentage", value=20, product_ids=["123"])

        response = client.post("/api/cart/apply-discount", json={
            "items": [
                {"productId": "gid://shopify/Product/123", "quantity": 2, "unitPrice": 100.0},
                {"productId": "456", "quantity": 1, "unitPrice": 50},
            ]
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True

        cart = body["cart"]
        first, second = cart["items"]
        assert first["lineId"] == "0"
        assert first["unitPrice"] == 10000
        assert first["discount"]["ruleId"] == "r1"
        assert first["discount"]["name"] == "Twenty off"
        assert first["discount"]["perUnitAmount"] == 2000
        assert first["discount"]["lineAmount"] == 4000
        assert first["lineTotal"] == 16000
        assert second["discount"] is None
        assert second["lineTotal"] == 5000

        assert cart["subtotal"] == 25000
        assert cart["totalDiscount"] == 4000
        assert cart["total"] == 21000
        assert cart["discountsApplied"] == 1
        assert cart["currency"] == "USD"

    def test_keeps_caller_line_ids(self, client, make_rule):
        response = client.post("/api/cart/apply-discount", json={
            "items": [
                {"lineId": "b", "productId": "1", "quantity": 1, "unitPrice": 1},
                {"lineId": "a", "productId": "2", "quantity": 1, "unitPrice": 1},
            ]
        })
        assert [item["lineId"] for item in response.json()["cart"]["items"]] == ["b", "a"]

    def test_converts_major_units(self, client, make_rule):
        make_rule(id="r1", type="fixed", value=250)

        response = client.post("/api/cart/apply-discount", json={
            "items": [{"productId": "1", "quantity": 3, "unitPrice": 19.99}]
        })

        item = response.json()["cart"]["items"][0]
        assert item["unitPrice"] == 1999
        assert item["lineSubtotal"] == 5997
        assert item["lineTotal"] == 5997 - 750

    def test_empty_items(self, client):
        response = client.post("/api/cart/apply-discount", json={"items": []})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_missing_items(self, client):
        response = client.post("/api/cart/apply-discount", json={})
        assert response.status_code == 400

    def test_items_not_a_list(self, client):
        response = client.post("/api/cart/apply-discount", json={"items": "nope"})
        assert response.status_code == 422

    def test_missing_field_rejects_whole_cart(self, client, make_rule):
        make_rule(id="r1", value=10)

        response = client.post("/api/cart/apply-discount", json={
            "items": [
                {"productId": "1", "quantity": 1, "unitPrice": 10},
                {"productId": "2", "quantity": 1},
            ]
        })

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "unitPrice" in body["message"]
        assert "cart" not in body

    def test_non_positive_quantity(self, client):
        response = client.post("/api/cart/apply-discount", json={
            "items": [{"productId": "1", "quantity": 0, "unitPrice": 10}]
        })
        assert response.status_code == 400

    def test_negative_price(self, client):
        response = client.post("/api/cart/apply-discount", json={
            "items": [{"productId": "1", "quantity": 1, "unitPrice": -10}]
        })
        assert response.status_code == 400

    def test_rule_store_failure(self, client, monkeypatch):
        def broken(session):
            raise OperationalError("SELECT", {}, Exception("database is down"))

        monkeypatch.setattr("discount_app.routes.cart_pricing.fetch_active_rules", broken)

        response = client.post("/api/cart/apply-discount", json={
            "items": [{"productId": "1", "quantity": 1, "unitPrice": 10}]
        })

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to apply discounts"}


class TestDiscounts:
    def test_list_active(self, client, make_rule):
        make_rule(id="a", value=10)
        make_rule(id="b", value=10, active=False)

        body = client.get("/api/discounts/").json()

        assert body["success"] is True
        assert body["count"] == 1
        assert body["discounts"][0]["id"] == "a"

    def test_get_one(self, client, make_rule):
        make_rule(id="r1", name="Summer")

        response = client.get("/api/discounts/r1")

        assert response.status_code == 200
        assert response.json()["discount"]["name"] == "Summer"

    def test_get_missing(self, client):
        assert client.get("/api/discounts/nope").status_code == 404

    def test_function_configuration(self, client, make_rule):
        make_rule(id="r1", type="percentage", value=20, product_ids=["123"])
        make_rule(id="r2", type="fixed", value=1500)
        make_rule(id="bad", type="percentage", value=500)

        body = client.get("/api/discounts/function-configuration").json()

        assert body["count"] == 2
        rules = parse_rule_config(body["configuration"])
        assert [rule.id for rule in rules] == ["r1", "r2"]
        assert json.loads(body["configuration"])["discounts"][1]["value"] == 1500


class TestProductDiscountProxy:
    def test_requires_product_id(self, client):
        response = client.get("/apps/proxy/product-discount")
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Product ID is required"}

    def test_returns_rules_and_resolved_discount(self, client, make_rule):
        make_rule(id="r1", name="Twenty off", type="percentage", value=20, product_ids=["123"])
        make_rule(id="r2", type="fixed", value=1500)
        make_rule(id="r3", type="fixed", value=9000, product_ids=["999"])

        response = client.get(
            "/apps/proxy/product-discount",
            params={"productId": "gid://shopify/Product/123", "unitPrice": 10000},
        )

        assert response.status_code == 200
        assert response.headers["cache-control"] == "public, max-age=300"
        body = response.json()
        assert body["success"] is True
        assert body["productId"] == "123"
        assert body["discount"]["ruleId"] == "r1"
        assert body["discount"]["perUnitAmount"] == 2000
        assert sorted(rule["id"] for rule in body["rules"]) == ["r1", "r2"]

    def test_without_price_returns_rules_only(self, client, make_rule):
        make_rule(id="r1", type="percentage", value=20)

        body = client.get("/apps/proxy/product-discount", params={"productId": "1"}).json()

        assert body["discount"] is None
        assert len(body["rules"]) == 1

    def test_no_rules(self, client):
        body = client.get("/apps/proxy/product-discount", params={"productId": "1"}).json()
        assert body == {"success": True, "productId": "1", "discount": None, "rules": []}


class TestHealth:
    def test_counts_rules(self, client, make_rule):
        make_rule(id="a", value=10)
        make_rule(id="b", type="percentage", value=500)
        make_rule(id="c", value=10, active=False)

        body = client.get("/health/check").json()

        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["activeRules"] == 2
        assert body["usableRules"] == 1
        assert body["timestamp"].endswith("+00:00")

    def test_rule_store_down(self, client, monkeypatch):
        def broken(session):
            raise OperationalError("SELECT", {}, Exception("database is down"))

        monkeypatch.setattr("discount_app.routes.health.fetch_active_records", broken)

        body = client.get("/health/check").json()

        assert body["status"] == "degraded"
        assert body["database"] == "failed"
        assert body["activeRules"] is None
