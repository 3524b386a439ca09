NEW_SERVICE = {
    "name": "Knotless Braids",
    "category": "cornrows_braids",
    "description": "Medium knotless",
    "singlePrice": 25000,
    "childPrice": 20000,
    "duration": 240,
}


def test_list_is_grouped_by_category(client, staff_headers, services):
    data = client.get("/api/services", headers=staff_headers).json()["data"]
    assert [s["name"] for s in data] == ["Two Lines Cornrows", "Protein Treatment", "Shampoo"]

    treatments = client.get("/api/services?category=hair_treatments", headers=staff_headers).json()["data"]
    assert {s["name"] for s in treatments} == {"Protein Treatment", "Shampoo"}


def test_create_service(client, manager_headers):
    response = client.post("/api/services", json=NEW_SERVICE, headers=manager_headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["category"] == "CORNROWS_BRAIDS"
    assert data["combinedPrice"] is None
    assert data["isActive"] is True


def test_staff_cannot_create(client, staff_headers):
    assert client.post("/api/services", json=NEW_SERVICE, headers=staff_headers).status_code == 403


def test_unknown_category(client, manager_headers):
    response = client.post("/api/services", json=dict(NEW_SERVICE, category="NAILS"), headers=manager_headers)
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "category"


def test_duplicate_name_is_case_insensitive(client, manager_headers, services):
    response = client.post(
        "/api/services", json=dict(NEW_SERVICE, name="shampoo"), headers=manager_headers
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Service with this name already exists"}


def test_update_service(client, manager_headers, services):
    shampoo = services["Shampoo"]
    response = client.put(
        f"/api/services/{shampoo.id}", json={"singlePrice": 8000}, headers=manager_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["singlePrice"] == 8000
    assert response.json()["data"]["name"] == "Shampoo"

    clash = client.put(
        f"/api/services/{shampoo.id}", json={"name": "Protein Treatment"}, headers=manager_headers
    )
    assert clash.status_code == 400


def test_delete_deactivates(client, admin_headers, staff_headers, services):
    shampoo = services["Shampoo"]
    response = client.delete(f"/api/services/{shampoo.id}", headers=admin_headers)
    assert response.status_code == 200

    active = client.get("/api/services", headers=staff_headers).json()["data"]
    assert shampoo.id not in [s["id"] for s in active]

    inactive = client.get("/api/services?isActive=false", headers=staff_headers).json()["data"]
    assert [s["id"] for s in inactive] == [shampoo.id]


def test_only_admin_deletes(client, manager_headers, services):
    assert client.delete(f"/api/services/{services['Shampoo'].id}", headers=manager_headers).status_code == 403


def test_unknown_service(client, staff_headers):
    assert client.get("/api/services/999", headers=staff_headers).json() == {"error": "Service not found"}
