import pytest


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["currency"] == "INR"


def test_supplier_crud(client):
    response = client.post("/api/v1/suppliers", json={"name": "Zen Packaging", "lead_time": 5})
    assert response.status_code == 201
    supplier_id = response.json()["id"]
    assert supplier_id.startswith("SUP-")

    duplicate = client.post("/api/v1/suppliers", json={"name": "zen packaging"})
    assert duplicate.status_code == 400
    assert duplicate.json()["success"] is False

    listing = client.get("/api/v1/suppliers", params={"search": "zen"}).json()
    assert listing["total"] == 1

    assert client.delete(f"/api/v1/suppliers/{supplier_id}").status_code == 200
    assert client.get(f"/api/v1/suppliers/{supplier_id}").status_code == 404


def test_bad_body_is_422(client):
    response = client.post("/api/v1/suppliers", json={"name": ""})
    assert response.status_code == 422
    assert response.json()["details"][0]["loc"][-1] == "name"


def test_missing_recipe_is_404(client):
    assert client.get("/api/v1/recipes/RCP-MISSING").status_code == 404
    assert client.get("/api/v1/recipes/RCP-MISSING/cost-analysis").status_code == 404


def test_supplier_in_use_is_409(client, supplier, catalogue):
    response = client.delete(f"/api/v1/suppliers/{supplier.id}")
    assert response.status_code == 409
    assert response.json()["error"] == "Conflict"


def test_batch_analysis_endpoints(client, product, litre_variant):
    response = client.post("/api/v1/batches", json={
        "batch_name": "Lotion run",
        "items": [{
            "product_id": product.id,
            "variants": [{"variant_id": litre_variant.id, "total_fill_quantity": 10, "fill_unit": "kg"}],
        }],
    })
    assert response.status_code == 201
    batch_id = response.json()["id"]

    cost = client.get(f"/api/v1/batches/{batch_id}/cost-analysis").json()
    assert cost["total_units"] == 10
    assert cost["materials_cost"] == pytest.approx(255)
    assert cost["total_cost"] == pytest.approx(285)
    assert cost["total_revenue"] == pytest.approx(600)

    requirements = client.get(f"/api/v1/batches/{batch_id}/requirements").json()
    assert requirements["overview"]["material_count"] == 2
    assert requirements["overview"]["packaging_count"] == 1
    assert requirements["overview"]["label_count"] == 2
    assert requirements["critical_shortages"] == []

    orders = client.post(f"/api/v1/batches/{batch_id}/purchase-orders", json={"shortages_only": False})
    assert orders.status_code == 201
    assert len(orders.json()) == 1

    assert client.get("/api/v1/batches/BAT-MISSING/requirements").status_code == 404


def test_inventory_listing(client, catalogue):
    listing = client.get("/api/v1/inventory").json()
    assert listing["total"] == 5
    assert all(item["is_tracked"] is False for item in listing["items"])

    generated = client.post("/api/v1/inventory/generate", params={"min_stock_level": 1})
    assert generated.status_code == 201
    assert len(generated.json()) == 5
    assert client.get("/api/v1/inventory/stats").json()["tracked_items"] == 5


def test_purchase_order_status_conflict(client, supplier, catalogue):
    response = client.post("/api/v1/purchase-orders", json={
        "supplier_id": supplier.id,
        "items": [{"item_type": "material", "item_id": catalogue["material_a"].id, "quantity": 10}],
    })
    assert response.status_code == 201
    order = response.json()
    assert order["total_cost"] == pytest.approx(210)

    conflict = client.patch(f"/api/v1/purchase-orders/{order['id']}/status", json={"status": "delivered"})
    assert conflict.status_code == 409

    submitted = client.patch(f"/api/v1/purchase-orders/{order['id']}/status", json={"status": "submitted"})
    assert submitted.json()["status"] == "submitted"
