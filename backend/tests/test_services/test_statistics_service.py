"""
Unit tests for marketplace statistics and delivery statistics
"""
import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

from marketdesk.services.statistics_service import build_statistics, StatisticsService
from marketdesk.services.delivery_stats_service import build_delivery_statistics, DeliveryStatisticsService

MONTH_START = datetime(2025, 6, 1)

SHOPS = [
    {"id": 1, "shop_name": "Clay Corner", "owner": "o1", "owner_name": "Omar",
     "visit_count": 30, "created_at": datetime(2025, 6, 10)},
    {"id": 2, "shop_name": "Glass Works", "owner": "o2", "owner_name": "Gil",
     "visit_count": 50, "created_at": datetime(2024, 1, 1)},
]

PRODUCTS = [
    {"id": 5, "title": "Mug", "shop": 1, "category": 1, "price": Decimal("10"),
     "view_count": 100, "cart_count": 3, "images": ["mug.png"], "created_at": datetime(2025, 6, 2)},
    {"id": 6, "title": "Vase", "shop": 2, "category": 1, "price": Decimal("25"),
     "view_count": 5, "cart_count": 9, "images": None, "created_at": datetime(2023, 5, 1)},
    {"id": 7, "title": "Lamp", "shop": 2, "category": 2, "price": Decimal("99"),
     "view_count": None, "cart_count": None, "images": [], "created_at": None},
]

ORDERS = [
    {"id": 1, "product_id": 5, "shop_id": 1, "price": Decimal("10"), "created_at": datetime(2025, 6, 5)},
    {"id": 2, "product_id": 5, "shop_id": 1, "price": Decimal("10"), "created_at": datetime(2025, 6, 6)},
    {"id": 3, "product_id": 6, "shop_id": 2, "price": Decimal("25"), "created_at": datetime(2025, 6, 7)},
]

CATEGORIES = [
    {"id": 1, "title": "Kitchen"},
    {"id": 2, "title": "Decor"},
    {"id": 3, "title": "Empty"},
]


@pytest.fixture
def stats():
    return build_statistics(SHOPS, PRODUCTS, ORDERS, CATEGORIES, MONTH_START)


class TestBuildStatistics:

    def test_totals(self, stats):
        assert stats["totals"] == {
            "shops": 1,
            "products": 1,
            "orders": 3,
            "visits": 80,
            "views": 105,
            "cart_adds": 12,
        }

    def test_all_time_counts_everything_dated_or_not(self):
        totals = build_statistics(SHOPS, PRODUCTS, ORDERS, CATEGORIES, None)["totals"]

        assert totals["shops"] == 2
        assert totals["products"] == 3

    def test_top_shops_by_visits(self, stats):
        top = stats["top_shops"]

        assert [s["id"] for s in top] == [2, 1]
        assert top[0]["products_count"] == 2
        assert top[0]["orders_count"] == 1
        assert top[1]["orders_count"] == 2

    def test_most_viewed_and_carted(self, stats):
        assert stats["most_viewed_products"][0]["id"] == 5
        assert stats["most_viewed_products"][0]["image_url"] == "mug.png"
        assert stats["most_carted_products"][0]["id"] == 6
        assert stats["most_carted_products"][0]["image_url"] is None

    def test_top_categories_by_views(self, stats):
        top = stats["top_categories"][0]

        assert top["title"] == "Kitchen"
        assert top["view_count"] == 105
        assert top["products_count"] == 2
        assert top["shops_count"] == 2

    def test_sales_rankings_skip_entries_without_orders(self, stats):
        sales = stats["sales"]

        assert [s["id"] for s in sales["shops"]] == [2, 1]
        assert sales["shops"][0]["total_revenue"] == 25.0
        assert sales["shops"][1]["total_orders"] == 2

        assert [p["id"] for p in sales["products"]] == [6, 5]
        assert sales["products"][1]["total_revenue"] == 20.0

        assert len(sales["categories"]) == 1
        assert sales["categories"][0]["total_orders"] == 3
        assert sales["categories"][0]["total_revenue"] == 45.0


class TestStatisticsService:

    def test_filters_narrow_products_and_orders(self):
        repo = Mock()
        repo.fetch_shops.return_value = SHOPS[:1]
        repo.fetch_products.return_value = PRODUCTS[:1]
        repo.fetch_orders.return_value = ORDERS[:2]
        repo.fetch_categories.return_value = CATEGORIES

        result = StatisticsService(repository=repo).get_statistics(
            time_range="month", shop_ids=[1], now=datetime(2025, 6, 15, 12)
        )

        repo.fetch_shops.assert_called_once_with(shop_ids=[1], owner_ids=None)
        repo.fetch_products.assert_called_once_with(shop_ids=[1])
        repo.fetch_orders.assert_called_once_with(from_date=MONTH_START, shop_ids=[1])
        assert result["totals"]["orders"] == 2

    def test_owner_without_shops_yields_empty_statistics(self):
        repo = Mock()
        repo.fetch_shops.return_value = []
        repo.fetch_categories.return_value = CATEGORIES

        result = StatisticsService(repository=repo).get_statistics(owner_ids=["nobody"])

        repo.fetch_products.assert_not_called()
        repo.fetch_orders.assert_not_called()
        assert result["totals"]["orders"] == 0
        assert result["sales"]["shops"] == []


DELIVERY_ORDERS = [
    {"id": 1, "status": "processing", "shop": 1, "assigned_driver_id": 7},
    {"id": 2, "status": "on_the_way", "shop": 1, "assigned_driver_id": None},
    {"id": 3, "status": "completed", "shop": 2, "assigned_driver_id": 8},
    {"id": 4, "status": "completed", "shop": 3, "assigned_driver_id": 7},
]

COMPANIES = [
    {"id": 10, "company_name": "Fast Couriers", "logo_url": None, "drivers_count": 3, "cars_count": 2},
    {"id": 11, "company_name": "Slow Post", "logo_url": None, "drivers_count": 1, "cars_count": 0},
]

LINKED_SHOPS = [
    {"id": 1, "delivery_companies_id": 10},
    {"id": 2, "delivery_companies_id": 10},
    {"id": 3, "delivery_companies_id": 11},
]


class TestDeliveryStatistics:

    def test_overall_counts(self):
        overall = build_delivery_statistics(DELIVERY_ORDERS, COMPANIES, LINKED_SHOPS)["overall"]

        assert overall == {
            "total_companies": 2,
            "total_processing": 1,
            "total_on_the_way": 1,
            "total_completed": 2,
            "total_drivers": 4,
            "total_cars": 2,
        }

    def test_top_companies_by_orders(self):
        top = build_delivery_statistics(DELIVERY_ORDERS, COMPANIES, LINKED_SHOPS)["top_companies"]

        assert [c["id"] for c in top] == [10, 11]
        assert top[0]["total_orders"] == 3
        assert top[0]["processing_orders"] == 1
        assert top[0]["on_the_way_orders"] == 1
        assert top[0]["completed_orders"] == 1

    def test_driver_filter_narrows_overall_counts_only(self):
        result = build_delivery_statistics(DELIVERY_ORDERS, COMPANIES, LINKED_SHOPS, driver_ids=[7])

        assert result["overall"]["total_processing"] == 1
        assert result["overall"]["total_on_the_way"] == 0
        assert result["overall"]["total_completed"] == 1
        assert result["top_companies"][0]["total_orders"] == 3

    def test_shop_filter(self):
        overall = build_delivery_statistics(DELIVERY_ORDERS, COMPANIES, LINKED_SHOPS, shop_ids=[2])["overall"]

        assert overall["total_completed"] == 1
        assert overall["total_processing"] == 0

    def test_service_uses_time_range_start(self):
        repo = Mock()
        repo.get_statistics_data.return_value = {
            "orders": DELIVERY_ORDERS, "companies": COMPANIES, "shops": LINKED_SHOPS,
        }

        DeliveryStatisticsService(repository=repo).get_statistics(
            time_range="week", now=datetime(2025, 6, 15, 12)
        )

        repo.get_statistics_data.assert_called_once_with(since=datetime(2025, 6, 8))
