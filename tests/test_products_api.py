def sell(client, headers, customer, product, quantity=1):
    return client.post(
        "/api/sales",
        json={"customerId": customer.id, "products": [{"productId": product.id, "quantity": quantity}]},
        headers=headers,
    )


def test_create_product(client, manager_headers):
    response = client.post(
        "/api/products", json={"name": "Argan Oil", "price": 8000, "quantity": 4}, headers=manager_headers
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["quantity"] == 4
    assert data["totalRevenue"] == 0


def test_duplicate_name(client, manager_headers, product):
    response = client.post(
        "/api/products", json={"name": "shea butter", "price": 1000}, headers=manager_headers
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Product with this name already exists"}


def test_negative_price_rejected(client, manager_headers):
    response = client.post("/api/products", json={"name": "Gel", "price": -1}, headers=manager_headers)
    assert response.status_code == 400


def test_list_includes_revenue(client, staff_headers, customer, product):
    sell(client, staff_headers, customer, product, quantity=2)

    data = client.get("/api/products", headers=staff_headers).json()["data"]
    assert data[0]["totalRevenue"] == 10000
    assert data[0]["quantity"] == 8

    single = client.get(f"/api/products/{product.id}", headers=staff_headers).json()["data"]
    assert single["totalRevenue"] == 10000


def test_increase_stock(client, manager_headers, product):
    response = client.post(
        f"/api/products/{product.id}/increase-stock", json={"quantity": 5}, headers=manager_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["quantity"] == 15


def test_increase_stock_needs_positive_quantity(client, manager_headers, product):
    response = client.post(
        f"/api/products/{product.id}/increase-stock", json={"quantity": 0}, headers=manager_headers
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Quantity must be greater than 0"}


def test_delete_unsold_product(client, manager_headers, staff_headers, product):
    response = client.delete(f"/api/products/{product.id}", headers=manager_headers)
    assert response.json()["data"] == {"deleted": True}
    assert client.get(f"/api/products/{product.id}", headers=staff_headers).status_code == 404


def test_delete_sold_product_deactivates(client, manager_headers, customer, product):
    sell(client, manager_headers, customer, product)

    response = client.delete(f"/api/products/{product.id}", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["data"] == {"deleted": False}

    inactive = client.get("/api/products?isActive=false", headers=manager_headers).json()["data"]
    assert [p["id"] for p in inactive] == [product.id]


def test_update_product(client, manager_headers, product):
    response = client.put(
        f"/api/products/{product.id}", json={"price": 5500, "description": "250ml"}, headers=manager_headers
    )
    data = response.json()["data"]
    assert data["price"] == 5500
    assert data["description"] == "250ml"
