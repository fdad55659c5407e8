"""
Shop Repository - Data Access Layer for Shops

Handles all database queries for shops and their balance transactions.
Balance recalculation itself lives in database functions (see
services/balance_service.py).
"""
from typing import List, Optional, Tuple, Dict, Any
from marketdesk.domain.shop import Shop, ShopTransaction
from marketdesk.core.database import get_db_connection_dict
from marketdesk.repositories.sql_helpers import build_set_clause, build_insert, shop_scope


SHOP_COLUMNS = (
    "shop_name", "shop_desc", "logo_url", "cover_image_url", "owner",
    "status", "address", "phone", "delivery_companies_id",
    "category_shop_id", "subcategory_shop_id",
)

SHOP_SELECT = """
    SELECT
        s.id, s.shop_name, s.shop_desc, s.logo_url, s.cover_image_url,
        s.owner, s.status, s.address, s.phone, s.balance,
        s.visit_count, s.delivery_companies_id, s.created_at,
        s.category_shop_id, s.subcategory_shop_id,
        p.full_name as owner_name,
        cs.title as category_shop_name,
        css.title as subcategory_shop_name
    FROM shops s
    LEFT JOIN profiles p ON s.owner = p.id
    LEFT JOIN categories_shop cs ON s.category_shop_id = cs.id
    LEFT JOIN categories_sub_shop css ON s.subcategory_shop_id = css.id
"""


class ShopRepository:
    """
    Repository for Shop data access

    Every read joins the owner's profile (`owner_name`) and the shop
    category and subcategory titles.
    """

    @staticmethod
    def _map_row_to_shop(row: dict) -> Shop:
        return Shop(
            id=row['id'],
            shop_name=row['shop_name'],
            shop_desc=row.get('shop_desc'),
            logo_url=row.get('logo_url'),
            cover_image_url=row.get('cover_image_url'),
            owner=row.get('owner'),
            owner_name=row.get('owner_name'),
            status=row.get('status'),
            address=row.get('address'),
            phone=row.get('phone'),
            balance=row.get('balance') or 0,
            visit_count=row.get('visit_count') or 0,
            delivery_companies_id=row.get('delivery_companies_id'),
            category_shop_id=row.get('category_shop_id'),
            category_shop_name=row.get('category_shop_name'),
            subcategory_shop_id=row.get('subcategory_shop_id'),
            subcategory_shop_name=row.get('subcategory_shop_name'),
            created_at=row.get('created_at')
        )

    def find_all(
        self,
        shop_ids: Optional[List[int]] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Shop], int]:
        """
        Find shops with filters

        Args:
            shop_ids: Restrict to these shops (None = every shop)
            search: Search in shop name
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of shops, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            scope, scope_params = shop_scope("s.id", shop_ids)
            if scope:
                conditions.append(scope)
                params.extend(scope_params)

            if search:
                conditions.append("s.shop_name ILIKE %s")
                params.append(f"%{search}%")

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM shops s
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                {SHOP_SELECT}
                WHERE {where_clause}
                ORDER BY s.created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            rows = cursor.fetchall()
            return [self._map_row_to_shop(row) for row in rows], total

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, shop_id: int) -> Optional[Shop]:
        """Find a shop by ID with its owner name"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(SHOP_SELECT + " WHERE s.id = %s", (shop_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_shop(row)

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> Shop:
        """Insert a shop and return it"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, SHOP_COLUMNS)
            cursor.execute(f"""
                INSERT INTO shops ({columns})
                VALUES ({placeholders})
                RETURNING *
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_shop(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, shop_id: int, fields: Dict[str, Any]) -> Optional[Shop]:
        """
        Update the given columns of a shop

        Returns:
            The updated shop, or None if it does not exist
        """
        set_clause, params = build_set_clause(fields, SHOP_COLUMNS)
        if not set_clause:
            return self.find_by_id(shop_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE shops
                SET {set_clause}
                WHERE id = %s
                RETURNING *
            """, params + [shop_id])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_shop(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, shop_id: int) -> bool:
        """Delete a shop; returns False when it does not exist"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM shops WHERE id = %s RETURNING id", (shop_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_transactions(
        self,
        shop_id: int,
        limit: int = 100,
        offset: int = 0
    ) -> List[ShopTransaction]:
        """Balance transactions of a shop, newest first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, shop_id, type, amount, description, created_at, created_by
                FROM shop_transactions
                WHERE shop_id = %s
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, (shop_id, limit, offset))

            return [ShopTransaction(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()
