"""Dashboard aggregation helpers

Bucketing and ranking over rows already fetched by the repository.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable

PERIOD_DAYS = {"week": 7, "month": 30, "quarter": 90, "year": 365}
SIXTH_SALE_COUNTS = (5, 11, 17, 23, 29)
BIRTHDAY_WINDOW_DAYS = 7


def period_start(period: str, now: datetime) -> datetime:
    """Start of a look-back window, unknown periods mean a month"""
    return now - timedelta(days=PERIOD_DAYS.get(period, PERIOD_DAYS["month"]))


def retention_rate(returning: int, total: int) -> float:
    """Share of active customers with more than one sale, as a percentage"""
    if not total:
        return 0.0
    return round(returning / total * 100, 2)


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def revenue_trend(sales: Iterable[tuple[datetime, float]], period: str, now: datetime) -> list[dict]:
    """
    Revenue per day (week, month) or per calendar month (year).

    Every bucket in the window is present, empty ones with zero revenue.
    """
    if period == "year":
        buckets = {}
        for offset in range(-11, 1):
            year, month = _shift_month(now.year, now.month, offset)
            key = f"{year:04d}-{month:02d}"
            buckets[key] = {"date": key, "day": date(year, month, 1).strftime("%b"), "revenue": 0.0}
        for sale_date, amount in sales:
            key = sale_date.strftime("%Y-%m")
            if key in buckets:
                buckets[key]["revenue"] += amount or 0
        return list(buckets.values())

    days = 30 if period == "month" else 7
    label = "%b %d" if period == "month" else "%a"
    buckets = {}
    for offset in range(days - 1, -1, -1):
        day = (now - timedelta(days=offset)).date()
        buckets[day.isoformat()] = {"date": day.isoformat(), "day": day.strftime(label), "revenue": 0.0}
    for sale_date, amount in sales:
        key = sale_date.date().isoformat()
        if key in buckets:
            buckets[key]["revenue"] += amount or 0
    return list(buckets.values())


def category_revenue(lines: Iterable[tuple[str, int, float, int]]) -> list[dict]:
    """
    Fold (category, service_id, total_price, quantity) rows into per-category stats.

    ``services`` is the number of distinct services sold in the category.
    """
    stats: dict[str, dict] = {}
    seen: dict[str, set] = {}
    for category, service_id, total_price, quantity in lines:
        entry = stats.setdefault(category, {"category": category, "revenue": 0.0, "services": 0, "quantity": 0})
        entry["revenue"] += total_price or 0
        entry["quantity"] += quantity or 0
        seen.setdefault(category, set()).add(service_id)
        entry["services"] = len(seen[category])
    return sorted(stats.values(), key=lambda entry: entry["revenue"], reverse=True)


def peak_hours(sales: Iterable[tuple[datetime, float]]) -> list[dict]:
    """Sales and revenue per hour of day, busiest hour first"""
    hours: dict[int, dict] = {}
    for sale_date, amount in sales:
        entry = hours.setdefault(sale_date.hour, {"hour": sale_date.hour, "sales": 0, "revenue": 0.0})
        entry["sales"] += 1
        entry["revenue"] += amount or 0
    return sorted(hours.values(), key=lambda entry: (-entry["sales"], entry["hour"]))


def days_until_birthday(birth_day: int, birth_month: int, today: date) -> int:
    for year in (today.year, today.year + 1):
        # 29 February falls on the 28th outside leap years
        day = min(birth_day, calendar.monthrange(year, birth_month)[1])
        birthday = date(year, birth_month, day)
        if birthday >= today:
            return (birthday - today).days
    return 366


def upcoming_birthdays(customers: Iterable, today: date, window_days: int = BIRTHDAY_WINDOW_DAYS) -> list[dict]:
    upcoming = []
    for customer in customers:
        days = days_until_birthday(customer.birth_day, customer.birth_month, today)
        if days <= window_days:
            upcoming.append(
                {
                    "id": customer.id,
                    "fullName": customer.full_name,
                    "phone": customer.phone,
                    "birthDay": customer.birth_day,
                    "birthMonth": customer.birth_month,
                    "daysUntilBirthday": days,
                }
            )
    return sorted(upcoming, key=lambda row: row["daysUntilBirthday"])
