"""
Unit tests for the analytics dashboard
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import Mock

from marketdesk.services.analytics_service import (
    build_dashboard, timeframe_window, orders_by_status, top_shops, AnalyticsService,
)

ORDERS = [
    {"id": 1, "created_at": datetime(2025, 6, 10, 9), "price": 100, "status": "processing",
     "shop_id": 1, "shop_name": "Clay Corner", "product_title": "Mug"},
    {"id": 2, "created_at": datetime(2025, 6, 12, 9), "price": 50, "status": None,
     "shop_id": 2, "shop_name": "Glass Works", "product_title": "Vase"},
    {"id": 3, "created_at": datetime(2025, 6, 5, 9), "price": 100, "status": "completed",
     "shop_id": 1, "shop_name": "Clay Corner", "product_title": "Mug"},
]

SHOPS = [
    {"id": 1, "shop_name": "Clay Corner", "logo_url": None, "created_at": datetime(2025, 6, 9)},
    {"id": 2, "shop_name": "Glass Works", "logo_url": None, "created_at": datetime(2024, 1, 1)},
]

USERS = [
    {"id": "u1", "full_name": "Bea", "registration_date": None, "created_at": datetime(2025, 6, 14)},
    {"id": "u2", "full_name": "Cal", "registration_date": datetime(2025, 6, 3), "created_at": datetime(2025, 6, 3)},
]

PRODUCTS = [
    {"id": 5, "title": "Mug", "shop_name": "Clay Corner",
     "created_at": datetime(2025, 6, 11, tzinfo=timezone.utc)},
]


@pytest.fixture
def dashboard(fixed_now):
    return build_dashboard("week", SHOPS, USERS, PRODUCTS, ORDERS, fixed_now)


class TestTimeframeWindow:

    def test_week(self, fixed_now):
        previous_start, start, end = timeframe_window("week", fixed_now)

        assert start == datetime(2025, 6, 8, 12)
        assert previous_start == datetime(2025, 6, 1, 12)
        assert end == fixed_now

    def test_month_previous_window_is_equally_long(self, fixed_now):
        previous_start, start, _ = timeframe_window("month", fixed_now)

        assert start == datetime(2025, 5, 15, 12)
        assert previous_start == datetime(2025, 4, 14, 12)


class TestBuildDashboard:

    def test_counts_and_growth(self, dashboard):
        assert dashboard["orders"] == {"count": 2, "previous": 1, "growth": 100.0}
        assert dashboard["users"]["count"] == 1
        assert dashboard["users"]["previous"] == 1
        assert dashboard["users"]["growth"] == 0.0

    def test_growth_is_100_with_empty_previous_period(self, dashboard):
        assert dashboard["shops"] == {"count": 1, "previous": 0, "growth": 100.0}
        assert dashboard["products"]["growth"] == 100.0

    def test_revenue(self, dashboard):
        assert dashboard["revenue"] == {"total": 150.0, "previous_period": 100.0, "growth": 50.0}

    def test_daily_revenue_ascending(self, dashboard):
        assert dashboard["daily_revenue"] == [
            {"date": "2025-06-10", "amount": 100.0},
            {"date": "2025-06-12", "amount": 50.0},
        ]

    def test_monthly_buckets(self, dashboard):
        assert dashboard["monthly"]["orders"][5] == 2
        assert sum(dashboard["monthly"]["orders"]) == 2

    def test_recent_activity_newest_first(self, dashboard):
        recent_orders = dashboard["recent"]["orders"]

        assert [o["id"] for o in recent_orders] == [2, 1]
        assert dashboard["recent"]["users"][0]["full_name"] == "Bea"


def test_orders_by_status_marks_missing_as_unknown():
    assert orders_by_status(ORDERS[:2]) == [
        {"status": "processing", "count": 1},
        {"status": "unknown", "count": 1},
    ]


def test_top_shops_by_revenue():
    ranked = top_shops(ORDERS)

    assert ranked[0] == {"id": 1, "name": "Clay Corner", "orders": 2, "revenue": 200.0}
    assert ranked[1]["id"] == 2


class TestAnalyticsService:

    def test_rejects_unknown_timeframe(self):
        with pytest.raises(ValueError):
            AnalyticsService(repository=Mock()).get_dashboard(timeframe="decade")

    def test_loads_two_periods(self, fixed_now):
        repo = Mock()
        repo.fetch_orders.return_value = ORDERS
        repo.fetch_profiles.return_value = USERS
        repo.fetch_shops.return_value = SHOPS
        repo.fetch_products.return_value = PRODUCTS

        result = AnalyticsService(repository=repo).get_dashboard("week", now=fixed_now)

        repo.fetch_orders.assert_called_once_with(from_date=datetime(2025, 6, 1, 12))
        assert result["timeframe"] == "week"
