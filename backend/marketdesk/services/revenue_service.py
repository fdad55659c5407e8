"""
Revenue Service
Platform revenue and commissions, current year against last year

Revenue is the sum of the ordered products' prices; commissions are taken at
the default commission rate.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from marketdesk.core.config import settings
from marketdesk.repositories.analytics_repository import AnalyticsRepository
from marketdesk.services.metrics import to_float, round2, growth_rate, as_naive, utc_now

logger = logging.getLogger(__name__)

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

SHOP_SORT_FIELDS = ("shop_name", "owner_name", "revenue", "commission", "commission_rate", "balance", "orders_count")


def build_revenue_summary(
    orders: List[dict],
    shops: List[dict],
    now: datetime,
    commission_rate: float = 0.10
) -> Dict[str, Any]:
    """
    Aggregate order rows into the revenue dashboard

    Args:
        orders: Order rows (created_at, price, shop_id)
        shops: Shop rows (id, shop_name, owner_name, balance)
        now: Reference time; the current year is now.year
        commission_rate: Platform share of revenue

    Returns:
        Dict with stats, monthly series and the per-shop table
    """
    current_year = now.year
    last_year = current_year - 1

    current_orders = [o for o in orders if o.get("created_at") and as_naive(o["created_at"]).year == current_year]
    last_orders = [o for o in orders if o.get("created_at") and as_naive(o["created_at"]).year == last_year]

    current_revenue = sum(to_float(o.get("price")) for o in current_orders)
    last_revenue = sum(to_float(o.get("price")) for o in last_orders)

    current_commissions = current_revenue * commission_rate
    last_commissions = last_revenue * commission_rate

    revenue_growth = growth_rate(current_revenue, last_revenue)
    commission_growth = growth_rate(current_commissions, last_commissions)
    combined_growth = (revenue_growth + commission_growth) / 2

    monthly_revenue = [0.0] * 12
    monthly_commissions = [0.0] * 12
    for order in current_orders:
        month = as_naive(order["created_at"]).month - 1
        price = to_float(order.get("price"))
        monthly_revenue[month] += price
        monthly_commissions[month] += price * commission_rate

    shops_by_id = {shop["id"]: shop for shop in shops}
    per_shop: Dict[int, Dict[str, Any]] = {}
    for order in current_orders:
        shop_id = order.get("shop_id")
        if shop_id is None:
            continue

        price = to_float(order.get("price"))
        entry = per_shop.get(shop_id)
        if entry is None:
            shop = shops_by_id.get(shop_id, {})
            entry = {
                "id": shop_id,
                "shop_name": shop.get("shop_name") or order.get("shop_name") or "Unknown Shop",
                "owner_name": shop.get("owner_name") or "Unknown Owner",
                "revenue": 0.0,
                "commission": 0.0,
                "commission_rate": commission_rate * 100,
                "balance": to_float(shop.get("balance")),
                "orders_count": 0,
            }
            per_shop[shop_id] = entry

        entry["revenue"] += price
        entry["commission"] += price * commission_rate
        entry["orders_count"] += 1

    shop_rows = [
        {**row, "revenue": round2(row["revenue"]), "commission": round2(row["commission"])}
        for row in per_shop.values()
    ]

    return {
        "stats": {
            "total_revenue": round2(current_revenue),
            "total_commissions": round2(current_commissions),
            "combined_revenue": round2(current_revenue + current_commissions),
            "last_year_revenue": round2(last_revenue),
            "last_year_commissions": round2(last_commissions),
            "revenue_growth": round2(revenue_growth),
            "commission_growth": round2(commission_growth),
            "combined_growth": round2(combined_growth),
        },
        "monthly": {
            "months": list(MONTH_LABELS),
            "revenue": [round2(v) for v in monthly_revenue],
            "commissions": [round2(v) for v in monthly_commissions],
        },
        "shops": shop_rows,
    }


def search_and_sort_shops(
    rows: List[Dict[str, Any]],
    search: Optional[str] = None,
    sort_by: str = "revenue",
    direction: str = "desc"
) -> List[Dict[str, Any]]:
    """Filter the per-shop table by shop or owner name and sort it"""
    if sort_by not in SHOP_SORT_FIELDS:
        raise ValueError(f"Invalid sort field: {sort_by}")

    if search:
        needle = search.lower()
        rows = [
            r for r in rows
            if needle in r["shop_name"].lower() or needle in r["owner_name"].lower()
        ]

    def key(row):
        value = row.get(sort_by)
        return value.lower() if isinstance(value, str) else value

    return sorted(rows, key=key, reverse=(direction == "desc"))


class RevenueService:
    """Loads order and shop rows and builds the revenue dashboard"""

    def __init__(self, repository: Optional[AnalyticsRepository] = None):
        self.repository = repository or AnalyticsRepository()

    def get_summary(
        self,
        now: Optional[datetime] = None,
        search: Optional[str] = None,
        sort_by: str = "revenue",
        direction: str = "desc"
    ) -> Dict[str, Any]:
        now = now or utc_now()
        since = datetime(now.year - 1, 1, 1)

        orders = self.repository.fetch_orders(from_date=since)
        shops = self.repository.fetch_shops()
        logger.debug(f"Revenue summary over {len(orders)} orders and {len(shops)} shops")

        summary = build_revenue_summary(orders, shops, now, settings.DEFAULT_COMMISSION_RATE)
        summary["shops"] = search_and_sort_shops(summary["shops"], search, sort_by, direction)
        return summary
