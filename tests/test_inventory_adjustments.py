from sqlalchemy import update

from florist.models.inventory_adjustment import InventoryAdjustment
from florist.models.product import Product
from florist.schemas.inventory_adjustment import InventoryAdjustmentCreate
from florist.services import adjustment_service


def _stock(db, product_id):
    return db.get(Product, product_id, populate_existing=True).current_stock


def _adjustment(product_id, direction="Outgoing", quantity=2, reason="damaged", **extra):
    body = {
        "productId": product_id,
        "adjustmentDate": "2026-10-19T12:00:00",
        "adjustmentType": direction,
        "quantity": quantity,
        "reason": reason,
    }
    body.update(extra)
    return body


def test_outgoing_adjustment_decreases_stock(client, db, make_product):
    product = make_product(stock=6)

    resp = client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id))

    assert resp.status_code == 201
    body = resp.json()
    assert body["adjustmentType"] == "Outgoing"
    assert body["reason"] == "damaged"
    assert body["notes"] is None
    assert _stock(db, product.id) == 4


def test_incoming_adjustment_increases_stock(client, db, make_product):
    product = make_product(stock=6)

    resp = client.post(
        "/api/v1/inventory-adjustments",
        json=_adjustment(product.id, direction="Incoming", quantity=3, reason="other", notes="Found in cooler"),
    )

    assert resp.status_code == 201
    assert resp.json()["reason"] == "Found in cooler"
    assert _stock(db, product.id) == 9


def test_other_reason_without_notes(client, make_product):
    product = make_product(stock=6)

    resp = client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id, reason="other"))

    assert resp.json()["reason"] == "Other"


def test_non_positive_quantity_rejected_before_any_write(client, db, make_product):
    product = make_product(stock=6)
    before = db.query(InventoryAdjustment).count()

    for quantity in (0, -2):
        resp = client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id, quantity=quantity))
        assert resp.status_code == 400

    assert db.query(InventoryAdjustment).count() == before
    assert _stock(db, product.id) == 6


def test_unknown_reason_and_direction_rejected(client, make_product):
    product = make_product()

    assert client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id, reason="stolen")).status_code == 400
    assert client.post(
        "/api/v1/inventory-adjustments", json=_adjustment(product.id, direction="Sideways")
    ).status_code == 400


def test_unknown_product_rejected(client, db):
    resp = client.post("/api/v1/inventory-adjustments", json=_adjustment("ghost"))

    assert resp.status_code == 400
    assert db.query(InventoryAdjustment).count() == 0


def test_adjustment_date_defaults_to_now(client, make_product):
    product = make_product(stock=6)
    body = _adjustment(product.id)
    del body["adjustmentDate"]

    resp = client.post("/api/v1/inventory-adjustments", json=body)

    assert resp.status_code == 201
    assert resp.json()["adjustmentDate"]


def test_idempotent_manual_adjustment(client, db, make_product):
    product = make_product(stock=6)
    headers = {"Idempotency-Key": "adj-7"}

    first = client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id), headers=headers)
    second = client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id), headers=headers)

    assert (first.status_code, second.status_code) == (201, 200)
    assert first.json()["id"] == second.json()["id"]
    assert _stock(db, product.id) == 4


def test_key_committed_by_concurrent_request_is_replayed(client, db, make_product, lookup_misses_once):
    product = make_product(stock=6)
    headers = {"Idempotency-Key": "adj-retry"}
    first = client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id), headers=headers)

    lookup_misses_once()
    second = client.post("/api/v1/inventory-adjustments", json=_adjustment(product.id), headers=headers)

    assert (first.status_code, second.status_code) == (201, 200)
    assert first.json()["id"] == second.json()["id"]
    assert _stock(db, product.id) == 4
    assert db.query(InventoryAdjustment).filter_by(idempotency_key="adj-retry").count() == 1


def test_whitespace_idempotency_key_counts_as_none(db, make_product):
    product = make_product(stock=6)
    data = InventoryAdjustmentCreate.model_validate(_adjustment(product.id))

    first, first_created = adjustment_service.create_inventory_adjustment(db, data, idempotency_key="   ")
    second, second_created = adjustment_service.create_inventory_adjustment(db, data, idempotency_key="")

    assert first_created and second_created
    assert first.id != second.id
    assert first.idempotency_key is None
    assert _stock(db, product.id) == 2


def test_adjustment_date_offset_is_converted_to_utc(client, make_product):
    product = make_product(stock=6)

    resp = client.post(
        "/api/v1/inventory-adjustments",
        json=_adjustment(product.id, adjustmentDate="2026-10-19T23:30:00-02:00"),
    )

    assert resp.status_code == 201
    assert resp.json()["adjustmentDate"] == "2026-10-20T01:30:00"


def test_adjustment_history_by_product(client, make_product):
    roses = make_product(name="Roses", stock=6)
    lilies = make_product(name="Lilies", stock=2)
    client.post("/api/v1/inventory-adjustments", json=_adjustment(roses.id, adjustmentDate="2099-01-01T00:00:00"))

    history = client.get(f"/api/v1/inventory-adjustments/product/{roses.id}").json()
    everything = client.get("/api/v1/inventory-adjustments").json()

    assert [a["reason"] for a in history] == ["damaged", "Initial stock"]
    assert len(everything) == 3
    assert {a["productId"] for a in everything} == {roses.id, lilies.id}
    assert client.get(f"/api/v1/inventory-adjustments/{history[0]['id']}").json()["quantity"] == 2
    assert client.get("/api/v1/inventory-adjustments/product/ghost").status_code == 404
    assert client.get("/api/v1/inventory-adjustments/ghost").status_code == 404


def test_reconcile_endpoints(client, db, make_product):
    product = make_product(stock=5)
    db.execute(update(Product).where(Product.id == product.id).values(current_stock=8))
    db.commit()

    report = client.get("/api/v1/inventory-adjustments/reconcile").json()
    assert report == [{
        "productId": product.id,
        "name": "Roses",
        "currentStock": 8,
        "ledgerStock": 5,
        "drift": 3,
    }]

    fixed = client.post("/api/v1/inventory-adjustments/reconcile").json()
    assert fixed[0]["currentStock"] == 5
    assert _stock(db, product.id) == 5
    assert client.get("/api/v1/inventory-adjustments/reconcile", params={"only_drift": "true"}).json() == []
