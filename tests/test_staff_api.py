from conftest import auth_headers, make_user

from salon_api.models import ROLE_STAFF


def sell(client, headers, customer, services, staff_ids):
    return client.post(
        "/api/sales",
        json={
            "customerId": customer.id,
            "serviceIds": [services["Protein Treatment"].id],
            "staffIds": staff_ids,
        },
        headers=headers,
    )


def test_directory(client, staff_headers, admin_user, manager_user, staff_user):
    data = client.get("/api/staff", headers=staff_headers).json()["data"]
    assert {u["id"] for u in data} == {admin_user.id, manager_user.id, staff_user.id}

    stylists = client.get("/api/staff?role=staff", headers=staff_headers).json()["data"]
    assert [u["id"] for u in stylists] == [staff_user.id]


def test_unknown_staff_member(client, staff_headers):
    response = client.get("/api/staff/999", headers=staff_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Staff member not found"}


def test_update_staff(client, admin_headers, staff_user, manager_user):
    response = client.put(f"/api/staff/{staff_user.id}", json={"name": "Aline U."}, headers=admin_headers)
    assert response.json()["data"]["name"] == "Aline U."

    clash = client.put(
        f"/api/staff/{staff_user.id}", json={"phone": manager_user.phone}, headers=admin_headers
    )
    assert clash.status_code == 400
    assert clash.json() == {"error": "Phone number already in use by another user"}


def test_reactivation_refused_while_phone_taken(client, db_session, admin_headers):
    former = make_user(db_session, "Former Stylist", "0788000050", ROLE_STAFF, is_active=False)
    make_user(db_session, "New Stylist", "0788000050", ROLE_STAFF)

    response = client.put(f"/api/staff/{former.id}", json={"isActive": True}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Phone number already in use by another user"}

    db_session.refresh(former)
    assert former.is_active is False


def test_only_admin_updates(client, manager_headers, staff_user):
    assert client.put(f"/api/staff/{staff_user.id}", json={"name": "X"}, headers=manager_headers).status_code == 403


def test_performance(client, db_session, manager_headers, staff_user, customer, services):
    sell(client, manager_headers, customer, services, [staff_user.id])
    sell(client, manager_headers, customer, services, [])

    data = client.get(f"/api/staff/{staff_user.id}/performance?period=today", headers=manager_headers).json()["data"]
    assert data["staff"]["id"] == staff_user.id
    assert data["metrics"]["totalSales"] == 1
    assert data["metrics"]["uniqueCustomers"] == 1
    assert data["metrics"]["serviceCategories"] == [{"category": "HAIR_TREATMENTS", "count": 1}]
    assert data["sales"][0]["services"] == ["Protein Treatment"]
    assert len(data["performanceChart"]) == 1


def test_all_performance_sorted_by_revenue(client, db_session, manager_headers, staff_user, customer, services):
    busy = make_user(db_session, "Busy Stylist", "0788000005", ROLE_STAFF)
    sell(client, manager_headers, customer, services, [busy.id])
    sell(client, manager_headers, customer, services, [busy.id, staff_user.id])

    rows = client.get("/api/staff/performance", headers=manager_headers).json()["data"]
    assert rows[0]["staffId"] == busy.id
    assert rows[0]["totalSales"] == 2
    assert rows[1]["staffId"] == staff_user.id

    assert client.get("/api/staff/performance", headers=auth_headers(busy)).status_code == 403


def test_invalid_period(client, manager_headers, staff_user):
    response = client.get(f"/api/staff/{staff_user.id}/performance?period=year", headers=manager_headers)
    assert response.status_code == 400
