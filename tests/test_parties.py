def test_create_party_starts_at_opening_balance(client, make_party):
    party = make_party(name="Sharma & Sons", opening_balance=500)

    assert party["type"] == "customer"
    assert party["opening_balance"] == 500
    assert party["current_balance"] == 500


def test_list_parties_filtered_by_type(client, make_party):
    customer = make_party(name="Customer", type="customer")
    supplier = make_party(name="Supplier", type="supplier")

    all_ids = [party["id"] for party in client.get("/api/v1/parties").json()]
    assert all_ids == [supplier["id"], customer["id"]]

    suppliers = client.get("/api/v1/parties", params={"type": "supplier"}).json()
    assert [party["id"] for party in suppliers] == [supplier["id"]]


def test_update_party_keeps_balances(client, make_party):
    party = make_party(opening_balance=100)
    response = client.put(f"/api/v1/parties/{party['id']}", json={"contact": "98765 43210"})

    assert response.status_code == 200
    assert response.json()["contact"] == "98765 43210"
    assert response.json()["current_balance"] == 100


def test_balance_fields_cannot_be_edited(client, make_party):
    party = make_party()
    response = client.put(f"/api/v1/parties/{party['id']}", json={"current_balance": 1000})
    assert response.status_code == 400


def test_party_detail_lists_invoices_and_payments(client, make_item, make_party, make_invoice):
    item = make_item()
    party = make_party()
    invoice = make_invoice(party["id"], [{"item_id": item["id"], "quantity": 1}])
    client.post("/api/v1/payments", json={
        "type": "in", "party_id": party["id"], "amount": 50, "invoice_id": invoice["id"]
    })

    detail = client.get(f"/api/v1/parties/{party['id']}").json()
    assert [inv["invoice_number"] for inv in detail["invoices"]] == [invoice["invoice_number"]]
    assert len(detail["payments"]) == 1
    assert detail["payments"][0]["invoice"]["id"] == invoice["id"]


def test_delete_party(client, make_party):
    party = make_party()
    assert client.delete(f"/api/v1/parties/{party['id']}").status_code == 200
    assert client.get(f"/api/v1/parties/{party['id']}").status_code == 404


def test_delete_party_with_invoices_conflicts(client, make_party, make_invoice):
    party = make_party()
    make_invoice(party["id"], [{"description": "Labour", "quantity": 1, "rate": 100}])

    assert client.delete(f"/api/v1/parties/{party['id']}").status_code == 409


def test_delete_party_with_payments_conflicts(client, make_party):
    party = make_party()
    client.post("/api/v1/payments", json={"type": "in", "party_id": party["id"], "amount": 10})

    assert client.delete(f"/api/v1/parties/{party['id']}").status_code == 409


def test_unknown_party_type_is_400(client):
    response = client.post("/api/v1/parties", json={"name": "X", "type": "employee"})
    assert response.status_code == 400
