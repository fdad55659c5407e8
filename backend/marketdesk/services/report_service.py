"""
Report Service
Sales, shop, product and user reports over an optional date range

All numbers are computed in memory from the row sets returned by
AnalyticsRepository. Commission is a flat 10% of revenue.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta

from marketdesk.repositories.analytics_repository import AnalyticsRepository
from marketdesk.services.metrics import to_float, round2, growth_rate, as_naive, utc_now

logger = logging.getLogger(__name__)

REPORT_COMMISSION_RATE = 0.10


def _revenue(orders: List[dict]) -> float:
    return sum(to_float(o.get("price")) for o in orders)


def build_report(
    orders: List[dict],
    shops: List[dict],
    products: List[dict],
    users: List[dict],
    categories: List[dict],
    now: datetime
) -> Dict[str, Any]:
    """
    Build the full report from already-filtered row sets

    Growth compares the reported orders against those of the one-month
    window ending now (0 when that window has no revenue).
    """
    total_revenue = _revenue(orders)
    total_orders = len(orders)
    average_order_value = total_revenue / total_orders if total_orders else 0.0

    previous_start = now - relativedelta(months=1)
    previous_orders = [
        o for o in orders
        if o.get("created_at") and previous_start <= as_naive(o["created_at"]) < now
    ]
    previous_revenue = _revenue(previous_orders)
    overall_growth = growth_rate(total_revenue, previous_revenue)

    # 12 trailing months ending with the current month
    monthly_revenue = []
    for i in range(11, -1, -1):
        month = now - relativedelta(months=i)
        month_orders = [
            o for o in orders
            if o.get("created_at")
            and as_naive(o["created_at"]).month == month.month
            and as_naive(o["created_at"]).year == month.year
        ]
        monthly_revenue.append({"month": month.strftime("%b"), "revenue": round2(_revenue(month_orders))})

    # Shop earnings
    shop_earnings = []
    for shop in shops:
        shop_orders = [o for o in orders if o.get("shop_id") == shop["id"]]
        revenue = _revenue(shop_orders)
        previous_shop_revenue = _revenue([o for o in previous_orders if o.get("shop_id") == shop["id"]])
        shop_earnings.append({
            "shop_id": shop["id"],
            "shop_name": shop.get("shop_name") or "Unknown Shop",
            "owner_name": shop.get("owner_name") or "Unknown Owner",
            "logo_url": shop.get("logo_url"),
            "total_revenue": round2(revenue),
            "total_orders": len(shop_orders),
            "commission_earned": round2(revenue * REPORT_COMMISSION_RATE),
            "growth_rate": round2(growth_rate(revenue, previous_shop_revenue)),
        })
    shop_earnings.sort(key=lambda s: s["total_revenue"], reverse=True)

    top_performing_shops = [
        {
            "id": e["shop_id"],
            "shop_name": e["shop_name"],
            "owner_name": e["owner_name"],
            "total_revenue": e["total_revenue"],
            "order_count": e["total_orders"],
            "logo_url": e["logo_url"],
            "growth_rate": e["growth_rate"],
        }
        for e in shop_earnings[:10]
    ]

    # Top selling products by revenue
    products_by_id = {p["id"]: p for p in products}
    product_sales: Dict[int, Dict[str, Any]] = {}
    for order in orders:
        product_id = order.get("product_id")
        if product_id is None:
            continue
        entry = product_sales.setdefault(product_id, {"order": order, "sales": 0, "revenue": 0.0})
        entry["sales"] += 1
        entry["revenue"] += to_float(order.get("price"))

    top_selling_products = []
    for product_id, entry in product_sales.items():
        product = products_by_id.get(product_id, {})
        images = product.get("images") or []
        top_selling_products.append({
            "id": product_id,
            "title": entry["order"].get("product_title") or "Unknown Product",
            "shop_name": entry["order"].get("shop_name") or "Unknown Shop",
            "total_sales": entry["sales"],
            "revenue": round2(entry["revenue"]),
            "views": product.get("view_count") or 0,
            "image_url": images[0] if images else None,
        })
    top_selling_products.sort(key=lambda p: p["revenue"], reverse=True)
    top_selling_products = top_selling_products[:10]

    # Category performance
    categories_performance = []
    for category in categories:
        category_product_ids = {p["id"] for p in products if p.get("category") == category["id"]}
        category_orders = [o for o in orders if o.get("product_id") in category_product_ids]
        categories_performance.append({
            "category_id": category["id"],
            "category_name": category.get("title") or "Unknown Category",
            "product_count": len(category_product_ids),
            "total_sales": len(category_orders),
            "revenue": round2(_revenue(category_orders)),
        })
    categories_performance.sort(key=lambda c: c["revenue"], reverse=True)

    # Users: registrations per day over the last 30 days
    registration_days = [
        as_naive(u["registration_date"]).date()
        for u in users if u.get("registration_date")
    ]
    today = now.date()
    user_growth_trend = []
    for i in range(29, -1, -1):
        day = today - timedelta(days=i)
        user_growth_trend.append({
            "date": day.isoformat(),
            "count": sum(1 for d in registration_days if d == day),
        })

    thirty_days_ago = now - timedelta(days=30)
    new_registrations = sum(
        1 for u in users
        if u.get("registration_date") and as_naive(u["registration_date"]) >= thirty_days_ago
    )

    return {
        "sales": {
            "total_revenue": round2(total_revenue),
            "total_orders": total_orders,
            "average_order_value": round2(average_order_value),
            "growth_rate": round2(overall_growth),
            "monthly_revenue": monthly_revenue,
        },
        "shops": {
            "total_shops": len(shops),
            "active_shops": sum(1 for s in shops if not s.get("status") or s.get("status") == "active"),
            "shop_earnings": shop_earnings,
            "top_performing_shops": top_performing_shops,
        },
        "products": {
            "total_products": len(products),
            "total_views": sum(p.get("view_count") or 0 for p in products),
            "top_selling_products": top_selling_products,
            "categories_performance": categories_performance,
        },
        "users": {
            "total_users": len(users),
            "new_registrations": new_registrations,
            "user_growth_trend": user_growth_trend,
        },
    }


def compare_shops(shop_earnings: List[Dict[str, Any]], shop_a: int, shop_b: int) -> Dict[str, Any]:
    """
    Side-by-side earnings of two shops

    Raises:
        LookupError: when either shop is not in the report
    """
    by_id = {e["shop_id"]: e for e in shop_earnings}
    missing = [s for s in (shop_a, shop_b) if s not in by_id]
    if missing:
        raise LookupError(f"Shop(s) not found in report: {', '.join(str(m) for m in missing)}")

    first, second = by_id[shop_a], by_id[shop_b]
    return {
        "shops": [first, second],
        "difference": {
            "total_revenue": round2(first["total_revenue"] - second["total_revenue"]),
            "total_orders": first["total_orders"] - second["total_orders"],
            "commission_earned": round2(first["commission_earned"] - second["commission_earned"]),
        },
    }


class ReportService:
    """Fetches the filtered row sets and builds reports"""

    def __init__(self, repository: Optional[AnalyticsRepository] = None):
        self.repository = repository or AnalyticsRepository()

    def get_report(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        shop_ids: Optional[List[int]] = None,
        category_ids: Optional[List[int]] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or utc_now()

        orders = self.repository.fetch_orders(from_date=start_date, to_date=end_date)
        shops = self.repository.fetch_shops(shop_ids=shop_ids)
        products = self.repository.fetch_products(shop_ids=shop_ids, category_ids=category_ids)
        users = self.repository.fetch_profiles(from_date=start_date, to_date=end_date, registered_only=True)
        categories = self.repository.fetch_categories()

        logger.debug(
            f"Report over {len(orders)} orders, {len(shops)} shops, "
            f"{len(products)} products, {len(users)} users"
        )
        return build_report(orders, shops, products, users, categories, now)

    def compare(
        self,
        shop_a: int,
        shop_b: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        report = self.get_report(start_date=start_date, end_date=end_date, shop_ids=[shop_a, shop_b], now=now)
        return compare_shops(report["shops"]["shop_earnings"], shop_a, shop_b)
