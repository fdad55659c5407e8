"""
Accounting Repository - completed orders and shop transactions for the
receipts and statements pages
"""
from datetime import datetime
from typing import List, Optional, Any

from marketdesk.core.database import get_db_connection_dict
from marketdesk.domain.order import STATUS_ALIASES, COMPLETED
from marketdesk.repositories.sql_helpers import shop_scope

COMPLETED_LABELS = sorted(label for label, status in STATUS_ALIASES.items() if status == COMPLETED)


class AccountingRepository:
    """
    Row sets returned as plain dicts:

    - completed orders: id, created_at, product_id, product_title, price,
      shop_id, shop_name, buyer_id, buyer_name
    - transactions: id, shop_id, type, amount, description, created_at
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

    def fetch_completed_orders(
        self,
        shop_ids: Optional[List[int]] = None,
        shop_id: Optional[int] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None
    ) -> List[dict]:
        """
        Completed orders (any stored completed label) with buyer and product price,
        newest first

        Args:
            shop_ids: Restrict to these shops (None = every shop)
            shop_id: Filter by a single shop
            from_date: Created on or after
            to_date: Created on or before
        """
        conditions = ["o.status = ANY(%s)"]
        params: List[Any] = [list(COMPLETED_LABELS)]

        scope, scope_params = shop_scope("p.shop", shop_ids)
        if scope:
            conditions.append(scope)
            params.extend(scope_params)

        if shop_id is not None:
            conditions.append("p.shop = %s")
            params.append(shop_id)

        if from_date:
            conditions.append("o.created_at >= %s")
            params.append(from_date)

        if to_date:
            conditions.append("o.created_at <= %s")
            params.append(to_date)

        where_clause = " AND ".join(conditions)

        return self._fetch(f"""
            SELECT
                o.id, o.created_at, o.product_id,
                p.title as product_title,
                p.price,
                p.shop as shop_id,
                s.shop_name,
                o.buyer_id,
                b.full_name as buyer_name
            FROM orders o
            LEFT JOIN products p ON o.product_id = p.id
            LEFT JOIN shops s ON p.shop = s.id
            LEFT JOIN profiles b ON o.buyer_id = b.id
            WHERE {where_clause}
            ORDER BY o.created_at DESC
        """, params)

    def fetch_transactions(
        self,
        shop_id: int,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None
    ) -> List[dict]:
        conditions = ["shop_id = %s"]
        params: List[Any] = [shop_id]

        if from_date:
            conditions.append("created_at >= %s")
            params.append(from_date)

        if to_date:
            conditions.append("created_at <= %s")
            params.append(to_date)

        return self._fetch(f"""
            SELECT id, shop_id, type, amount, description, created_at
            FROM shop_transactions
            WHERE {" AND ".join(conditions)}
            ORDER BY created_at DESC
        """, params)
