"""
Analytics Dashboard Service

Counts, revenue and growth for a timeframe ending now (`week`, `month` or
`year`) compared with the equally long window just before it. Growth on
this dashboard is 100 when the previous window is empty.
"""
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from marketdesk.repositories.analytics_repository import AnalyticsRepository
from marketdesk.services.metrics import to_float, round2, growth_rate, as_naive, utc_now

logger = logging.getLogger(__name__)

TIMEFRAMES = ("week", "month", "year")
RECENT_ITEMS = 5
TOP_SHOPS = 5


def timeframe_window(timeframe: str, now: datetime) -> Tuple[datetime, datetime, datetime]:
    """
    (previous_start, start, end) of a timeframe ending now

    Unknown timeframes fall back to `month`.
    """
    if timeframe == "week":
        start = now - timedelta(days=7)
    elif timeframe == "year":
        start = now - relativedelta(years=1)
    else:
        start = now - relativedelta(months=1)
    return start - (now - start), start, now


def _created(row: dict, *fields: str) -> Optional[datetime]:
    for field in fields:
        if row.get(field):
            return as_naive(row[field])
    return None


def _split(rows: List[dict], previous_start: datetime, start: datetime, end: datetime,
           *fields: str) -> Tuple[List[dict], List[dict]]:
    """Rows created in [start, end] and in [previous_start, start)"""
    current, previous = [], []
    for row in rows:
        created = _created(row, *fields)
        if created is None:
            continue
        if start <= created <= end:
            current.append(row)
        elif previous_start <= created < start:
            previous.append(row)
    return current, previous


def _revenue(orders: List[dict]) -> float:
    return sum(to_float(o.get("price")) for o in orders)


def daily_revenue(orders: List[dict]) -> List[Dict[str, Any]]:
    """Revenue per order date, ascending"""
    by_day: Dict[str, float] = {}
    for order in orders:
        day = as_naive(order["created_at"]).date().isoformat()
        by_day[day] = by_day.get(day, 0.0) + to_float(order.get("price"))
    return [{"date": day, "amount": round2(amount)} for day, amount in sorted(by_day.items())]


def orders_by_status(orders: List[dict]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = OrderedDict()
    for order in orders:
        status = order.get("status") or "unknown"
        counts[status] = counts.get(status, 0) + 1
    return [{"status": status, "count": count} for status, count in counts.items()]


def top_shops(orders: List[dict], limit: int = TOP_SHOPS) -> List[Dict[str, Any]]:
    by_shop: Dict[int, Dict[str, Any]] = {}
    for order in orders:
        shop_id = order.get("shop_id")
        if shop_id is None:
            continue
        entry = by_shop.setdefault(shop_id, {
            "id": shop_id,
            "name": order.get("shop_name") or "Unknown Shop",
            "orders": 0,
            "revenue": 0.0,
        })
        entry["orders"] += 1
        entry["revenue"] += to_float(order.get("price"))

    ranked = sorted(by_shop.values(), key=lambda s: s["revenue"], reverse=True)[:limit]
    return [{**s, "revenue": round2(s["revenue"])} for s in ranked]


def monthly_counts(rows: List[dict], *fields: str) -> List[int]:
    """Counts per calendar month (index 0 = January)"""
    buckets = [0] * 12
    for row in rows:
        created = _created(row, *fields)
        if created is not None:
            buckets[created.month - 1] += 1
    return buckets


def _most_recent(rows: List[dict], keys: Tuple[str, ...], *fields: str) -> List[Dict[str, Any]]:
    dated = [(r, _created(r, *fields)) for r in rows]
    dated = [(r, d) for r, d in dated if d is not None]
    dated.sort(key=lambda pair: pair[1], reverse=True)
    return [
        {**{k: r.get(k) for k in keys}, "created_at": d.isoformat()}
        for r, d in dated[:RECENT_ITEMS]
    ]


def build_dashboard(
    timeframe: str,
    shops: List[dict],
    users: List[dict],
    products: List[dict],
    orders: List[dict],
    now: datetime
) -> Dict[str, Any]:
    previous_start, start, end = timeframe_window(timeframe, now)

    current_shops, previous_shops = _split(shops, previous_start, start, end, "created_at")
    current_users, previous_users = _split(users, previous_start, start, end, "registration_date", "created_at")
    current_products, previous_products = _split(products, previous_start, start, end, "created_at")
    current_orders, previous_orders = _split(orders, previous_start, start, end, "created_at")

    current_revenue = _revenue(current_orders)
    previous_revenue = _revenue(previous_orders)

    def counted(current: List[dict], previous: List[dict]) -> Dict[str, Any]:
        return {
            "count": len(current),
            "previous": len(previous),
            "growth": round2(growth_rate(len(current), len(previous), empty_baseline=100.0)),
        }

    return {
        "timeframe": timeframe if timeframe in TIMEFRAMES else "month",
        "period": {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "previous_start": previous_start.isoformat(),
        },
        "shops": counted(current_shops, previous_shops),
        "users": counted(current_users, previous_users),
        "products": counted(current_products, previous_products),
        "orders": counted(current_orders, previous_orders),
        "revenue": {
            "total": round2(current_revenue),
            "previous_period": round2(previous_revenue),
            "growth": round2(growth_rate(current_revenue, previous_revenue, empty_baseline=100.0)),
        },
        "daily_revenue": daily_revenue(current_orders),
        "orders_by_status": orders_by_status(current_orders),
        "top_shops": top_shops(current_orders),
        "monthly": {
            "shops": monthly_counts(current_shops, "created_at"),
            "products": monthly_counts(current_products, "created_at"),
            "users": monthly_counts(current_users, "registration_date", "created_at"),
            "orders": monthly_counts(current_orders, "created_at"),
        },
        "recent": {
            "shops": _most_recent(current_shops, ("id", "shop_name", "logo_url"), "created_at"),
            "users": _most_recent(current_users, ("id", "full_name"), "registration_date", "created_at"),
            "products": _most_recent(current_products, ("id", "title", "shop_name"), "created_at"),
            "orders": _most_recent(current_orders, ("id", "product_title", "shop_name", "status"), "created_at"),
        },
    }


class AnalyticsService:
    """Loads two timeframes' worth of rows and builds the dashboard"""

    def __init__(self, repository: Optional[AnalyticsRepository] = None):
        self.repository = repository or AnalyticsRepository()

    def get_dashboard(self, timeframe: str = "month", now: Optional[datetime] = None) -> Dict[str, Any]:
        if timeframe not in TIMEFRAMES:
            raise ValueError(f"Invalid timeframe: {timeframe}. Use one of {', '.join(TIMEFRAMES)}")

        now = now or utc_now()
        previous_start, _, _ = timeframe_window(timeframe, now)

        orders = self.repository.fetch_orders(from_date=previous_start)
        users = self.repository.fetch_profiles(from_date=previous_start)
        shops = self.repository.fetch_shops()
        products = self.repository.fetch_products()

        logger.debug(f"Analytics {timeframe}: {len(orders)} orders since {previous_start.isoformat()}")
        return build_dashboard(timeframe, shops, users, products, orders, now)
