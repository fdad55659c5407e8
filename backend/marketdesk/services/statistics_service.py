"""
Statistics Service

Marketplace engagement and sales rankings over a named time range
(`today`, `week`, `month`, `quarter`, `year`; anything else = all time),
optionally narrowed to some shops and/or some shop owners.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from marketdesk.repositories.analytics_repository import AnalyticsRepository
from marketdesk.services.metrics import to_float, round2, range_start, as_naive, utc_now

logger = logging.getLogger(__name__)

RANKING_LIMIT = 50


def _since(rows: List[dict], start: Optional[datetime]) -> List[dict]:
    if start is None:
        return list(rows)
    return [r for r in rows if r.get("created_at") and as_naive(r["created_at"]) >= start]


def build_statistics(
    shops: List[dict],
    products: List[dict],
    orders: List[dict],
    categories: List[dict],
    start: Optional[datetime],
    limit: int = RANKING_LIMIT
) -> Dict[str, Any]:
    """
    Args:
        shops / products / orders: Rows already narrowed to the selected shops
        categories: Every category
        start: Start of the time range (None = all time)
    """
    period_shops = _since(shops, start)
    period_products = _since(products, start)
    period_orders = _since(orders, start)

    products_per_shop: Dict[int, int] = {}
    for p in products:
        products_per_shop[p.get("shop")] = products_per_shop.get(p.get("shop"), 0) + 1

    orders_per_shop: Dict[int, int] = {}
    revenue_per_shop: Dict[int, float] = {}
    orders_per_product: Dict[int, int] = {}
    for o in period_orders:
        orders_per_shop[o.get("shop_id")] = orders_per_shop.get(o.get("shop_id"), 0) + 1
        revenue_per_shop[o.get("shop_id")] = revenue_per_shop.get(o.get("shop_id"), 0.0) + to_float(o.get("price"))
        orders_per_product[o.get("product_id")] = orders_per_product.get(o.get("product_id"), 0) + 1

    # Engagement
    top_shops = sorted(shops, key=lambda s: s.get("visit_count") or 0, reverse=True)[:limit]
    top_shops = [
        {
            "id": s["id"],
            "shop_name": s.get("shop_name"),
            "logo_url": s.get("logo_url"),
            "owner": s.get("owner"),
            "owner_name": s.get("owner_name"),
            "visit_count": s.get("visit_count") or 0,
            "products_count": products_per_shop.get(s["id"], 0),
            "orders_count": orders_per_shop.get(s["id"], 0),
        }
        for s in top_shops
    ]

    def product_row(p: dict) -> Dict[str, Any]:
        images = p.get("images") or []
        return {
            "id": p["id"],
            "title": p.get("title"),
            "shop_name": p.get("shop_name"),
            "category_name": p.get("category_name"),
            "price": to_float(p.get("price")),
            "view_count": p.get("view_count") or 0,
            "cart_count": p.get("cart_count") or 0,
            "image_url": images[0] if images else None,
        }

    most_viewed = [product_row(p) for p in sorted(products, key=lambda p: p.get("view_count") or 0, reverse=True)[:limit]]
    most_carted = [product_row(p) for p in sorted(products, key=lambda p: p.get("cart_count") or 0, reverse=True)[:limit]]

    # Categories by product views
    category_rows = []
    for category in categories:
        category_products = [p for p in products if p.get("category") == category["id"]]
        category_rows.append({
            "id": category["id"],
            "title": category.get("title"),
            "view_count": sum(p.get("view_count") or 0 for p in category_products),
            "products_count": len(category_products),
            "shops_count": len({p.get("shop") for p in category_products if p.get("shop") is not None}),
        })
    top_categories = sorted(category_rows, key=lambda c: c["view_count"], reverse=True)[:limit]

    # Sales rankings (only entries with at least one order)
    shop_sales = [
        {
            "id": s["id"],
            "shop_name": s.get("shop_name"),
            "owner_name": s.get("owner_name"),
            "total_orders": orders_per_shop.get(s["id"], 0),
            "total_revenue": round2(revenue_per_shop.get(s["id"], 0.0)),
            "products_count": products_per_shop.get(s["id"], 0),
        }
        for s in shops
    ]
    shop_sales = sorted((s for s in shop_sales if s["total_orders"] > 0),
                        key=lambda s: s["total_revenue"], reverse=True)[:limit]

    product_sales = []
    for p in products:
        count = orders_per_product.get(p["id"], 0)
        product_sales.append({
            "id": p["id"],
            "title": p.get("title"),
            "shop_name": p.get("shop_name"),
            "price": to_float(p.get("price")),
            "total_orders": count,
            "total_revenue": round2(count * to_float(p.get("price"))),
        })
    product_sales = sorted((p for p in product_sales if p["total_orders"] > 0),
                           key=lambda p: p["total_revenue"], reverse=True)[:limit]

    category_sales = []
    for category in categories:
        category_products = [p for p in products if p.get("category") == category["id"]]
        count = sum(orders_per_product.get(p["id"], 0) for p in category_products)
        revenue = sum(orders_per_product.get(p["id"], 0) * to_float(p.get("price")) for p in category_products)
        category_sales.append({
            "id": category["id"],
            "title": category.get("title"),
            "total_orders": count,
            "total_revenue": round2(revenue),
            "products_count": len(category_products),
            "shops_count": len({p.get("shop") for p in category_products if p.get("shop") is not None}),
        })
    category_sales = sorted((c for c in category_sales if c["total_orders"] > 0),
                            key=lambda c: c["total_revenue"], reverse=True)[:limit]

    return {
        "totals": {
            "shops": len(period_shops),
            "products": len(period_products),
            "orders": len(period_orders),
            "visits": sum(s.get("visit_count") or 0 for s in shops),
            "views": sum(p.get("view_count") or 0 for p in products),
            "cart_adds": sum(p.get("cart_count") or 0 for p in products),
        },
        "top_shops": top_shops,
        "most_viewed_products": most_viewed,
        "most_carted_products": most_carted,
        "top_categories": top_categories,
        "sales": {
            "shops": shop_sales,
            "products": product_sales,
            "categories": category_sales,
        },
    }


class StatisticsService:
    """Loads shops, products and orders for the selected filters"""

    def __init__(self, repository: Optional[AnalyticsRepository] = None):
        self.repository = repository or AnalyticsRepository()

    def get_statistics(
        self,
        time_range: str = "all",
        shop_ids: Optional[List[int]] = None,
        owner_ids: Optional[List[str]] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or utc_now()
        start = range_start(time_range, now)

        shops = self.repository.fetch_shops(shop_ids=shop_ids, owner_ids=owner_ids)

        # Products and orders follow the shops that survived the filters
        scoped_shop_ids = None
        if shop_ids or owner_ids:
            scoped_shop_ids = [s["id"] for s in shops]

        if scoped_shop_ids is not None and not scoped_shop_ids:
            products, orders = [], []
        else:
            products = self.repository.fetch_products(shop_ids=scoped_shop_ids)
            orders = self.repository.fetch_orders(from_date=start, shop_ids=scoped_shop_ids)

        categories = self.repository.fetch_categories()

        logger.debug(f"Statistics {time_range}: {len(shops)} shops, {len(products)} products, {len(orders)} orders")
        return build_statistics(shops, products, orders, categories, start)
