"""
Tests for the general hospital inventory.
"""
BASE = "/api/v1/inventory"


def _item(name, quantity=100, min_stock_level=20, category="Medication"):
    return {
        "name": name,
        "category": category,
        "quantity": quantity,
        "min_stock_level": min_stock_level,
        "unit": "tablets",
        "price": 2.5,
        "supplier": {"name": "MedSupply Ltd", "contact": "+94112223344"},
        "expiry_date": "2027-06-30",
    }


def _create(client, headers, **kwargs):
    response = client.post(BASE, json=_item(**kwargs), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["inventory"]


def test_admin_creates_item(client, auth):
    item = _create(client, auth("admin"), name="Paracetamol 500mg")
    assert item["is_active"] is True
    assert item["supplier"]["name"] == "MedSupply Ltd"
    assert item["expiry_date"] == "2027-06-30"


def test_missing_field_returns_422(client, auth):
    response = client.post(BASE, json={"name": "Gauze"}, headers=auth("admin"))
    assert response.status_code == 422


def test_staff_cannot_create(client, auth):
    response = client.post(BASE, json=_item("Gauze"), headers=auth("staff"))
    assert response.status_code == 403


def test_list_sorted_and_filtered(client, auth):
    headers = auth("admin")
    _create(client, headers, name="Syringes", category="Supplies")
    _create(client, headers, name="Amoxicillin", category="Medication")

    listed = client.get(BASE, headers=auth("staff")).json()["inventory"]
    assert [i["name"] for i in listed] == ["Amoxicillin", "Syringes"]

    supplies = client.get(BASE, params={"category": "Supplies"}, headers=headers).json()["inventory"]
    assert [i["name"] for i in supplies] == ["Syringes"]


def test_low_stock_includes_items_at_minimum(client, auth):
    headers = auth("admin")
    _create(client, headers, name="At minimum", quantity=20, min_stock_level=20)
    _create(client, headers, name="Below", quantity=5, min_stock_level=20)
    _create(client, headers, name="Plenty", quantity=21, min_stock_level=20)

    low = client.get(f"{BASE}/low-stock", headers=headers).json()["low_stock_items"]
    assert [i["name"] for i in low] == ["At minimum", "Below"]

    filtered = client.get(BASE, params={"low_stock": "true"}, headers=headers).json()["inventory"]
    assert [i["name"] for i in filtered] == ["At minimum", "Below"]


def test_low_stock_is_admin_only(client, auth):
    assert client.get(f"{BASE}/low-stock", headers=auth("doctor")).status_code == 403


def test_update_item(client, auth):
    headers = auth("admin")
    item = _create(client, headers, name="Bandages")

    response = client.put(
        f"{BASE}/{item['id']}",
        json={"quantity": 3, "supplier": None},
        headers=headers,
    )
    assert response.status_code == 200
    updated = response.json()["inventory"]
    assert updated["quantity"] == 3
    assert updated["supplier"] is None
    assert updated["name"] == "Bandages"


def test_deactivated_item_leaves_listing(client, auth):
    headers = auth("admin")
    item = _create(client, headers, name="Old stock")
    client.put(f"{BASE}/{item['id']}", json={"is_active": False}, headers=headers)

    assert client.get(BASE, headers=headers).json()["inventory"] == []


def test_update_unknown_item_returns_404(client, auth):
    response = client.put(f"{BASE}/9999", json={"quantity": 1}, headers=auth("admin"))
    assert response.status_code == 404
