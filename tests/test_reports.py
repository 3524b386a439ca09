from datetime import date, datetime
from types import SimpleNamespace

from salon_api.domain.dashboard import analytics
from salon_api.domain.staff import performance

NOW = datetime(2026, 5, 20, 15, 0)


def make_sale(customer_id, amount, when, categories=()):
    lines = [SimpleNamespace(service=SimpleNamespace(category=c)) for c in categories]
    return SimpleNamespace(customer_id=customer_id, final_amount=amount, sale_date=when, services=lines)


SALES = [
    make_sale(1, 10000, datetime(2026, 5, 18, 10), ["HAIR_TREATMENTS", "CORNROWS_BRAIDS"]),
    make_sale(2, 6000, datetime(2026, 5, 18, 16), ["HAIR_TREATMENTS"]),
    make_sale(1, 8000, datetime(2026, 5, 19, 11), ["STYLING_SERVICE"]),
]


class TestStaffPerformance:
    def test_totals_equal_sum_of_sales(self):
        summary = performance.summarize_sales(SALES)
        assert summary == {
            "totalSales": 3,
            "totalRevenue": 24000,
            "averageRevenuePerSale": 8000,
            "uniqueCustomers": 2,
        }

    def test_empty_period(self):
        assert performance.summarize_sales([])["averageRevenuePerSale"] == 0

    def test_category_breakdown_most_frequent_first(self):
        assert performance.service_category_breakdown(SALES) == [
            {"category": "HAIR_TREATMENTS", "count": 2},
            {"category": "CORNROWS_BRAIDS", "count": 1},
            {"category": "STYLING_SERVICE", "count": 1},
        ]

    def test_daily_chart_sorted_by_date(self):
        chart = performance.daily_chart(list(reversed(SALES)))
        assert chart == [
            {"date": "2026-05-18", "sales": 2, "revenue": 16000},
            {"date": "2026-05-19", "sales": 1, "revenue": 8000},
        ]

    def test_periods(self):
        start, end = performance.resolve_period("today", NOW)
        assert start == datetime(2026, 5, 20)
        assert end > NOW

        start, _ = performance.resolve_period("week", NOW)
        assert (NOW - start).days == 7

        start, _ = performance.resolve_period(None, NOW)
        assert (NOW - start).days == 30

        explicit = (datetime(2026, 1, 1), datetime(2026, 2, 1))
        assert performance.resolve_period("week", NOW, *explicit) == explicit


class TestDashboardAnalytics:
    def test_retention_rate(self):
        assert analytics.retention_rate(1, 3) == 33.33
        assert analytics.retention_rate(0, 0) == 0.0

    def test_weekly_trend_is_zero_filled(self):
        amounts = [(s.sale_date, s.final_amount) for s in SALES]
        trend = analytics.revenue_trend(amounts, "week", NOW)
        assert len(trend) == 7
        assert trend[-1]["date"] == "2026-05-20"
        by_date = {row["date"]: row["revenue"] for row in trend}
        assert by_date["2026-05-18"] == 16000
        assert by_date["2026-05-20"] == 0

    def test_yearly_trend_has_twelve_months(self):
        trend = analytics.revenue_trend([(datetime(2025, 7, 3), 5000)], "year", NOW)
        assert [row["date"] for row in trend][0] == "2025-06"
        assert trend[-1]["date"] == "2026-05"
        assert {row["date"]: row["revenue"] for row in trend}["2025-07"] == 5000

    def test_category_revenue(self):
        rows = [
            ("HAIR_TREATMENTS", 1, 7000, 1),
            ("HAIR_TREATMENTS", 2, 10000, 1),
            ("HAIR_TREATMENTS", 1, 7000, 1),
            ("CORNROWS_BRAIDS", 3, 7000, 1),
        ]
        assert analytics.category_revenue(rows)[0] == {
            "category": "HAIR_TREATMENTS",
            "revenue": 24000,
            "services": 2,
            "quantity": 3,
        }

    def test_peak_hours_busiest_first(self):
        amounts = [(datetime(2026, 5, d, 10), 1000) for d in (1, 2, 3)] + [(datetime(2026, 5, 1, 16), 5000)]
        hours = analytics.peak_hours(amounts)
        assert hours[0] == {"hour": 10, "sales": 3, "revenue": 3000}
        assert hours[1]["hour"] == 16

    def test_upcoming_birthdays(self):
        customers = [
            SimpleNamespace(id=1, full_name="A", phone="1", birth_day=22, birth_month=5),
            SimpleNamespace(id=2, full_name="B", phone="2", birth_day=2, birth_month=1),
            SimpleNamespace(id=3, full_name="C", phone="3", birth_day=20, birth_month=5),
        ]
        upcoming = analytics.upcoming_birthdays(customers, date(2026, 5, 20))
        assert [(row["id"], row["daysUntilBirthday"]) for row in upcoming] == [(3, 0), (1, 2)]

    def test_leap_day_birthday(self):
        assert analytics.days_until_birthday(29, 2, date(2027, 2, 27)) == 1
