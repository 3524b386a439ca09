"""Staff performance aggregation

Plain reductions over a list of already-loaded sales, so the numbers always
equal the sum of the sales they were computed from.
"""

from datetime import datetime, timedelta
from typing import Optional

PERIOD_DAYS = {"week": 7, "month": 30}


def resolve_period(
    period: Optional[str],
    now: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """[start, end) window for a report.

    Explicit bounds win. Otherwise ``today`` starts at midnight, ``week`` and
    ``month`` look back 7 and 30 days. Unknown periods fall back to ``month``.
    """
    if start is not None and end is not None:
        return start, end
    if period == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0), now + timedelta(seconds=1)
    days = PERIOD_DAYS.get(period or "month", PERIOD_DAYS["month"])
    return now - timedelta(days=days), now + timedelta(seconds=1)


def summarize_sales(sales: list) -> dict:
    total_sales = len(sales)
    total_revenue = sum(s.final_amount or 0 for s in sales)
    return {
        "totalSales": total_sales,
        "totalRevenue": total_revenue,
        "averageRevenuePerSale": total_revenue / total_sales if total_sales else 0,
        "uniqueCustomers": len({s.customer_id for s in sales}),
    }


def service_category_breakdown(sales: list) -> list[dict]:
    """Number of service lines per category, most frequent first"""
    counts: dict[str, int] = {}
    for sale in sales:
        for line in sale.services:
            category = line.service.category
            counts[category] = counts.get(category, 0) + 1
    return [
        {"category": category, "count": count}
        for category, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def daily_chart(sales: list) -> list[dict]:
    """Sales count and revenue per calendar day, oldest first"""
    days: dict[str, dict] = {}
    for sale in sales:
        key = sale.sale_date.date().isoformat()
        bucket = days.setdefault(key, {"date": key, "sales": 0, "revenue": 0.0})
        bucket["sales"] += 1
        bucket["revenue"] += sale.final_amount or 0
    return [days[key] for key in sorted(days)]
