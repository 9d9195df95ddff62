"""Roses bought, sold and written off, end to end over the API."""

from florist.models.inventory_adjustment import InventoryAdjustment


def test_roses_purchase_sale_and_damage(client, db):
    product = client.post("/api/v1/products", json={"name": "Roses", "currentStock": 0}).json()
    r1 = product["id"]
    assert product["currentStock"] == 0

    resp = client.post("/api/v1/purchases", json={
        "purchase": {
            "invoiceNumber": "INV-1",
            "orderDate": "2026-10-18T08:00:00",
            "supplier": "Acme",
            "deliveryCost": 5,
            "totalAmount": 55,
        },
        "items": [{"productId": r1, "quantity": 10, "unitPrice": 5}],
    })
    assert resp.status_code == 201
    assert client.get(f"/api/v1/products/{r1}").json()["currentStock"] == 10
    incoming = db.query(InventoryAdjustment).filter_by(product_id=r1).all()
    assert [(a.adjustment_type.value, a.quantity) for a in incoming] == [("Incoming", 10)]

    resp = client.post("/api/v1/sales", json={
        "sale": {
            "customerName": "Jane",
            "customerContact": "555-1234",
            "saleDate": "2026-10-19T10:00:00",
            "saleAmount": 30,
        },
        "items": [{"productId": r1, "quantity": 4}],
    })
    assert resp.status_code == 201
    assert client.get(f"/api/v1/products/{r1}").json()["currentStock"] == 6
    outgoing = db.query(InventoryAdjustment).filter_by(product_id=r1, reason="Sale: Jane").one()
    assert (outgoing.adjustment_type.value, outgoing.quantity) == ("Outgoing", 4)

    resp = client.post("/api/v1/inventory-adjustments", json={
        "productId": r1,
        "adjustmentDate": "2026-10-19T18:00:00",
        "adjustmentType": "Outgoing",
        "quantity": 2,
        "reason": "damaged",
    })
    assert resp.status_code == 201
    assert client.get(f"/api/v1/products/{r1}").json()["currentStock"] == 4

    # stored stock and ledger agree after the whole sequence
    report = client.get("/api/v1/inventory-adjustments/reconcile").json()
    assert report[0]["ledgerStock"] == 4
    assert report[0]["drift"] == 0

    history = client.get(f"/api/v1/products/{r1}/detail").json()["adjustments"]
    assert [a["reason"] for a in history] == ["damaged", "Sale: Jane", "Purchase: INV-1"]
