from salon_api.models import utcnow


HOLIDAY = {
    "name": "Women's Day",
    "type": "holiday",
    "value": 10,
    "isPercentage": True,
    "applyToAllServices": True,
}


def create_rule(client, headers, **overrides):
    return client.post("/api/discounts", json=dict(HOLIDAY, **overrides), headers=headers)


def test_create_rule(client, manager_headers):
    response = create_rule(client, manager_headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["type"] == "HOLIDAY"
    assert data["isActive"] is True
    assert data["services"] == []


def test_unknown_type(client, manager_headers):
    assert create_rule(client, manager_headers, type="FLASH").status_code == 400


def test_duplicate_name(client, manager_headers):
    create_rule(client, manager_headers)
    response = create_rule(client, manager_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "A discount rule with this name already exists."}


def test_service_specific_rule(client, manager_headers, services):
    response = create_rule(
        client,
        manager_headers,
        applyToAllServices=False,
        serviceIds=[services["Two Lines Cornrows"].id],
    )
    assert [s["name"] for s in response.json()["data"]["services"]] == ["Two Lines Cornrows"]


def test_update_replaces_service_links(client, manager_headers, services):
    rule = create_rule(
        client, manager_headers, applyToAllServices=False, serviceIds=[services["Shampoo"].id]
    ).json()["data"]

    response = client.put(
        f"/api/discounts/{rule['id']}",
        json={"serviceIds": [services["Protein Treatment"].id], "value": 15},
        headers=manager_headers,
    )
    data = response.json()["data"]
    assert data["value"] == 15
    assert [s["name"] for s in data["services"]] == ["Protein Treatment"]

    response = client.put(
        f"/api/discounts/{rule['id']}", json={"applyToAllServices": True}, headers=manager_headers
    )
    assert response.json()["data"]["services"] == []


def test_delete_frees_the_name(client, manager_headers, staff_headers):
    rule = create_rule(client, manager_headers).json()["data"]

    response = client.delete(f"/api/discounts/{rule['id']}", headers=manager_headers)
    assert response.status_code == 204

    assert client.get("/api/discounts", headers=staff_headers).json()["data"] == []
    assert create_rule(client, manager_headers).status_code == 201


def test_deleted_rule_cannot_be_deleted_again(client, manager_headers):
    rule = create_rule(client, manager_headers).json()["data"]
    assert client.delete(f"/api/discounts/{rule['id']}", headers=manager_headers).status_code == 204

    response = client.delete(f"/api/discounts/{rule['id']}", headers=manager_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Discount not found"}


def test_unknown_rule(client, manager_headers):
    response = client.put("/api/discounts/999", json={"value": 5}, headers=manager_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Discount not found"}


def test_staff_cannot_manage_rules(client, staff_headers):
    assert create_rule(client, staff_headers).status_code == 403


def test_active_rule_applies_to_sales(client, db_session, manager_headers, customer, services):
    customer.sale_count = 1
    customer.birth_month = utcnow().month % 12 + 1
    db_session.commit()
    create_rule(client, manager_headers, maxDiscount=800)

    sale = client.post(
        "/api/sales",
        json={"customerId": customer.id, "serviceIds": [services["Protein Treatment"].id]},
        headers=manager_headers,
    ).json()["data"]
    discounts = {d["type"]: d["discountAmount"] for d in sale["discounts"]}
    assert discounts.get("HOLIDAY") == 800


def test_notify_customers(client, manager_headers, customer, no_outbound_messages):
    rule = create_rule(client, manager_headers).json()["data"]

    response = client.post(
        f"/api/discounts/{rule['id']}/notify",
        json={"customerIds": [customer.id], "message": "Hi {name}, 10% off this week!"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["data"]["stats"] == {"sent": 1, "failed": 0}
    assert body["message"] == "Processed 1 customers"
    assert no_outbound_messages["sms"] == [(customer.phone, "Hi Marie, 10% off this week!")]


def test_notify_requires_customers_and_message(client, manager_headers, customer):
    rule = create_rule(client, manager_headers).json()["data"]
    url = f"/api/discounts/{rule['id']}/notify"

    response = client.post(url, json={"customerIds": [], "message": "Hello"}, headers=manager_headers)
    assert response.json() == {"error": "No customers selected"}

    response = client.post(url, json={"customerIds": [customer.id], "message": " "}, headers=manager_headers)
    assert response.json() == {"error": "Message is required"}
