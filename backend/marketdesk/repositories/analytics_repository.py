"""
Analytics Repository - flat row sets for the reporting services

Revenue, reports, the analytics dashboard and the statistics page all
aggregate the same handful of row sets in memory. This repository fetches
those rows (already joined) and leaves every calculation to the services.
"""
from datetime import datetime
from typing import List, Optional, Any
from marketdesk.core.database import get_db_connection_dict


class AnalyticsRepository:
    """
    Row sets returned as plain dicts:

    - orders: id, status, created_at, product_id, product_title, price,
      category_id, shop_id, shop_name
    - shops: id, shop_name, logo_url, status, owner, owner_name, balance,
      visit_count, created_at, delivery_companies_id
    - products: id, title, price, shop, shop_name, category, category_name,
      view_count, cart_count, images, created_at
    - profiles: id, full_name, registration_date, created_at
    - categories: id, title
    """

    @staticmethod
    def _fetch(query: str, params: List[Any]) -> List[dict]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def fetch_orders(
        self,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        shop_ids: Optional[List[int]] = None
    ) -> List[dict]:
        """Orders with their product price and shop (revenue is the product price)"""
        conditions = []
        params: List[Any] = []

        if from_date:
            conditions.append("o.created_at >= %s")
            params.append(from_date)

        if to_date:
            conditions.append("o.created_at <= %s")
            params.append(to_date)

        if shop_ids:
            conditions.append("p.shop = ANY(%s)")
            params.append(list(shop_ids))

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        return self._fetch(f"""
            SELECT
                o.id, o.status, o.created_at, o.product_id,
                p.title as product_title,
                p.price,
                p.category as category_id,
                p.shop as shop_id,
                s.shop_name
            FROM orders o
            LEFT JOIN products p ON o.product_id = p.id
            LEFT JOIN shops s ON p.shop = s.id
            WHERE {where_clause}
            ORDER BY o.created_at ASC
        """, params)

    def fetch_shops(
        self,
        shop_ids: Optional[List[int]] = None,
        owner_ids: Optional[List[str]] = None
    ) -> List[dict]:
        conditions = []
        params: List[Any] = []

        if shop_ids:
            conditions.append("s.id = ANY(%s)")
            params.append(list(shop_ids))

        if owner_ids:
            conditions.append("s.owner = ANY(%s)")
            params.append(list(owner_ids))

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        return self._fetch(f"""
            SELECT
                s.id, s.shop_name, s.logo_url, s.status, s.owner,
                s.balance, s.visit_count, s.created_at, s.delivery_companies_id,
                p.full_name as owner_name
            FROM shops s
            LEFT JOIN profiles p ON s.owner = p.id
            WHERE {where_clause}
            ORDER BY s.created_at DESC
        """, params)

    def fetch_products(
        self,
        shop_ids: Optional[List[int]] = None,
        category_ids: Optional[List[int]] = None
    ) -> List[dict]:
        conditions = []
        params: List[Any] = []

        if shop_ids:
            conditions.append("p.shop = ANY(%s)")
            params.append(list(shop_ids))

        if category_ids:
            conditions.append("p.category = ANY(%s)")
            params.append(list(category_ids))

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        return self._fetch(f"""
            SELECT
                p.id, p.title, p.price, p.shop, p.category, p.images,
                p.view_count, p.cart_count, p.created_at,
                s.shop_name,
                c.title as category_name
            FROM products p
            LEFT JOIN shops s ON p.shop = s.id
            LEFT JOIN categories c ON p.category = c.id
            WHERE {where_clause}
            ORDER BY p.created_at DESC
        """, params)

    def fetch_profiles(
        self,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        registered_only: bool = False
    ) -> List[dict]:
        """
        Profiles, optionally registered within a date range

        The range is matched on registration_date, falling back to created_at
        unless registered_only is set (profiles without a registration date
        then never match a range).
        """
        date_column = "registration_date" if registered_only else "COALESCE(registration_date, created_at)"
        conditions = []
        params: List[Any] = []

        if from_date:
            conditions.append(f"{date_column} >= %s")
            params.append(from_date)

        if to_date:
            conditions.append(f"{date_column} <= %s")
            params.append(to_date)

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        return self._fetch(f"""
            SELECT id, full_name, registration_date, created_at
            FROM profiles
            WHERE {where_clause}
            ORDER BY COALESCE(registration_date, created_at) DESC
        """, params)

    def fetch_categories(self) -> List[dict]:
        return self._fetch("SELECT id, title FROM categories ORDER BY title", [])
