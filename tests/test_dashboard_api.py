import pytest

from salon_api.models import utcnow


@pytest.fixture
def sold(client, db_session, manager_headers, customer, services):
    """Two sales for the fixture customer, outside their birthday month"""
    customer.birth_month = utcnow().month % 12 + 1
    db_session.commit()
    for name in ("Shampoo", "Protein Treatment"):
        client.post(
            "/api/sales",
            json={"customerId": customer.id, "serviceIds": [services[name].id]},
            headers=manager_headers,
        )
    db_session.refresh(customer)
    return customer


def test_stats_overview(client, manager_headers, sold):
    data = client.get("/api/dashboard/stats", headers=manager_headers).json()["data"]
    overview = data["overview"]
    assert overview["totalCustomers"] == 1
    assert overview["newCustomers"] == 1
    assert overview["totalServices"] == 3
    assert overview["periodSales"] == 2
    assert overview["allTimeSales"] == 2
    assert overview["totalRevenue"] == 17000
    assert overview["averageSaleValue"] == 8500
    assert overview["customerRetentionRate"] == 100.0

    assert data["topServices"][0]["name"] == "Protein Treatment"
    assert len(data["revenueTrend"]) == 30
    assert data["revenueTrend"][-1]["revenue"] == 17000
    assert data["topCustomers"][0]["id"] == sold.id
    assert data["period"] == "month"


def test_weekly_and_yearly_trend(client, manager_headers, sold):
    week = client.get("/api/dashboard/stats?period=week", headers=manager_headers).json()["data"]
    assert len(week["revenueTrend"]) == 7

    year = client.get("/api/dashboard/stats?period=year", headers=manager_headers).json()["data"]
    assert len(year["revenueTrend"]) == 12


def test_sixth_sale_candidates(client, db_session, manager_headers, customer):
    customer.sale_count = 5
    db_session.commit()
    data = client.get("/api/dashboard/stats", headers=manager_headers).json()["data"]
    assert [c["id"] for c in data["sixthSaleEligible"]] == [customer.id]


def test_upcoming_birthdays(client, db_session, manager_headers, customer):
    today = utcnow()
    customer.birth_day = today.day
    customer.birth_month = today.month
    db_session.commit()
    data = client.get("/api/dashboard/stats", headers=manager_headers).json()["data"]
    assert data["upcomingBirthdays"][0]["daysUntilBirthday"] == 0


def test_invalid_period(client, manager_headers):
    assert client.get("/api/dashboard/stats?period=decade", headers=manager_headers).status_code == 400


def test_staff_cannot_view(client, staff_headers):
    assert client.get("/api/dashboard/stats", headers=staff_headers).status_code == 403


def test_analytics(client, manager_headers, sold):
    data = client.get("/api/dashboard/analytics?period=quarter", headers=manager_headers).json()["data"]
    assert data["categoryRevenue"] == [
        {"category": "HAIR_TREATMENTS", "revenue": 17000, "services": 2, "quantity": 2}
    ]
    assert sum(h["sales"] for h in data["peakHours"]) == 2
