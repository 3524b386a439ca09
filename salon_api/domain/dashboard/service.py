"""Dashboard service - headline numbers and revenue analytics"""

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from ...models import utcnow
from . import analytics
from .repository import DashboardRepository

logger = logging.getLogger(__name__)


def _customer_summary(customer) -> dict:
    return {
        "id": customer.id,
        "fullName": customer.full_name,
        "phone": customer.phone,
        "saleCount": customer.sale_count,
        "totalSpent": customer.total_spent,
        "lastSale": customer.last_sale,
        "createdAt": customer.created_at,
    }


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = DashboardRepository()

    def get_stats(self, period: str = "month") -> dict:
        now = utcnow()
        since = analytics.period_start(period, now)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        total_customers = self.repo.count_active_customers(self.db)
        total_revenue, average_sale = self.repo.revenue_totals(self.db)

        # Trend windows are fixed: 7 days, 30 days or 12 calendar months
        if period == "year":
            trend_since = today.replace(day=1) - timedelta(days=366)
        else:
            trend_since = today - timedelta(days=30 if period == "month" else 7)

        stats = {
            "overview": {
                "newCustomers": self.repo.count_new_customers(self.db, today, today + timedelta(days=1)),
                "totalCustomers": total_customers,
                "totalServices": self.repo.count_active_services(self.db),
                "activeStaff": self.repo.count_active_staff(self.db),
                "periodSales": self.repo.count_sales(self.db, since),
                "allTimeSales": self.repo.count_sales(self.db),
                "totalRevenue": total_revenue,
                "averageSaleValue": average_sale,
                "customerRetentionRate": analytics.retention_rate(
                    self.repo.count_returning_customers(self.db), total_customers
                ),
            },
            "topServices": self.repo.top_services(self.db, since),
            "revenueTrend": analytics.revenue_trend(
                self.repo.sale_amounts_since(self.db, trend_since), period, now
            ),
            "topCustomers": [_customer_summary(c) for c in self.repo.recent_customers(self.db)],
            "upcomingBirthdays": analytics.upcoming_birthdays(
                self.repo.active_customers(self.db), today.date()
            ),
            "sixthSaleEligible": [
                _customer_summary(c)
                for c in self.repo.sixth_sale_candidates(self.db, analytics.SIXTH_SALE_COUNTS)
            ],
            "period": period,
        }
        logger.debug(f"📊 Dashboard stats computed for period={period}")
        return stats

    def get_analytics(self, period: str = "month") -> dict:
        since = analytics.period_start(period, utcnow())
        return {
            "categoryRevenue": analytics.category_revenue(self.repo.service_lines_since(self.db, since)),
            "peakHours": analytics.peak_hours(self.repo.sale_amounts_since(self.db, since)),
            "period": period,
        }
