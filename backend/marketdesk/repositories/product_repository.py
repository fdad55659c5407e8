"""
Product Repository - Data Access Layer for Products and Categories

Handles all database queries for products and returns Product domain models.
"""
from typing import List, Optional, Tuple, Dict, Any
from marketdesk.domain.product import Product, Category
from marketdesk.core.database import get_db_connection_dict
from marketdesk.repositories.sql_helpers import build_set_clause, build_insert, shop_scope


PRODUCT_COLUMNS = ("title", "desc", "price", "shop", "category", "subcategory_id", "brand_id", "images")
CATEGORY_COLUMNS = ("title", "desc", "image_url")

PRODUCT_SELECT = """
    SELECT
        p.id, p.title, p."desc", p.price, p.shop, p.category, p.subcategory_id,
        p.brand_id, p.images, p.view_count, p.cart_count, p.created_at,
        s.shop_name,
        c.title as category_name,
        sc.title as subcategory_name,
        b.brand as brand_name
    FROM products p
    LEFT JOIN shops s ON p.shop = s.id
    LEFT JOIN categories c ON p.category = c.id
    LEFT JOIN categories_sub sc ON p.subcategory_id = sc.id
    LEFT JOIN categories_brands b ON p.brand_id = b.id
"""


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        return Product(
            id=row['id'],
            title=row['title'],
            desc=row.get('desc'),
            price=row.get('price') or 0,
            shop=row.get('shop'),
            shop_name=row.get('shop_name'),
            category=row.get('category'),
            category_name=row.get('category_name'),
            subcategory_id=row.get('subcategory_id'),
            subcategory_name=row.get('subcategory_name'),
            brand_id=row.get('brand_id'),
            brand_name=row.get('brand_name'),
            images=row.get('images'),
            view_count=row.get('view_count') or 0,
            cart_count=row.get('cart_count') or 0,
            created_at=row.get('created_at')
        )

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Internal product ID

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(PRODUCT_SELECT + " WHERE p.id = %s", (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        shop_ids: Optional[List[int]] = None,
        shop_id: Optional[int] = None,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        brand_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters

        Args:
            shop_ids: Restrict to these shops (None = every shop)
            shop_id: Filter by a single shop
            category_id: Filter by category
            subcategory_id: Filter by subcategory
            brand_id: Filter by brand
            search: Search in title
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            scope, scope_params = shop_scope("p.shop", shop_ids)
            if scope:
                conditions.append(scope)
                params.extend(scope_params)

            if shop_id is not None:
                conditions.append("p.shop = %s")
                params.append(shop_id)

            if category_id is not None:
                conditions.append("p.category = %s")
                params.append(category_id)

            if subcategory_id is not None:
                conditions.append("p.subcategory_id = %s")
                params.append(subcategory_id)

            if brand_id is not None:
                conditions.append("p.brand_id = %s")
                params.append(brand_id)

            if search:
                conditions.append("p.title ILIKE %s")
                params.append(f"%{search}%")

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products p
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                {PRODUCT_SELECT}
                WHERE {where_clause}
                ORDER BY p.created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            rows = cursor.fetchall()
            return [self._map_row_to_product(row) for row in rows], total

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> Product:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, PRODUCT_COLUMNS)
            cursor.execute(f"""
                INSERT INTO products ({columns})
                VALUES ({placeholders})
                RETURNING *
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: int, fields: Dict[str, Any]) -> Optional[Product]:
        set_clause, params = build_set_clause(fields, PRODUCT_COLUMNS)
        if not set_clause:
            return self.find_by_id(product_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET {set_clause}
                WHERE id = %s
                RETURNING *
            """, params + [product_id])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, product_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE id = %s RETURNING id", (product_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()


class CategoryRepository:
    """Repository for product categories"""

    def find_all(self) -> List[Category]:
        """All categories ordered by title"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, title, "desc", image_url, created_at
                FROM categories
                ORDER BY title ASC
            """)
            return [Category(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, category_id: int) -> Optional[Category]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, title, "desc", image_url, created_at
                FROM categories
                WHERE id = %s
            """, (category_id,))

            row = cursor.fetchone()
            return Category(**dict(row)) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> Category:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, CATEGORY_COLUMNS)
            cursor.execute(f"""
                INSERT INTO categories ({columns})
                VALUES ({placeholders})
                RETURNING id, title, "desc", image_url, created_at
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return Category(**dict(row))

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, category_id: int, fields: Dict[str, Any]) -> Optional[Category]:
        set_clause, params = build_set_clause(fields, CATEGORY_COLUMNS)
        if not set_clause:
            return self.find_by_id(category_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE categories
                SET {set_clause}
                WHERE id = %s
                RETURNING id, title, "desc", image_url, created_at
            """, params + [category_id])

            row = cursor.fetchone()
            conn.commit()
            return Category(**dict(row)) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, category_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM categories WHERE id = %s RETURNING id", (category_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
