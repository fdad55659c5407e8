"""
Catalog Repository - Data Access Layer for the catalog taxonomies

Product subcategories, shop brands and the shop directory categories are
small lookup tables with the same CRUD shape; TaxonomyRepository holds the
shared queries and each subclass names its table, columns and joins.
"""
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel

from marketdesk.domain.catalog import Subcategory, Brand, ShopCategory, ShopSubcategory
from marketdesk.core.database import get_db_connection_dict
from marketdesk.repositories.sql_helpers import build_set_clause, build_insert, shop_scope


class TaxonomyRepository:
    """
    CRUD over one taxonomy table

    Subclasses set:
        table: Table name
        alias: Alias of the table inside `select`
        columns: Writable columns
        select: SELECT ... FROM ... (with joins) without WHERE
        order_by: ORDER BY expression for lists
        model: Domain model rows are mapped to
    """

    table: str = ""
    alias: str = ""
    columns: Tuple[str, ...] = ()
    select: str = ""
    order_by: str = ""
    model: Type[BaseModel] = BaseModel

    def _find(self, conditions: List[str], params: List[Any]) -> List[Any]:
        where_clause = " AND ".join(conditions) if conditions else "1=1"

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                {self.select}
                WHERE {where_clause}
                ORDER BY {self.order_by}
            """, params)
            return [self.model(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, item_id: int) -> Optional[Any]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"{self.select} WHERE {self.alias}.id = %s", (item_id,))
            row = cursor.fetchone()
            return self.model(**dict(row)) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> Any:
        """Insert a row and return it with its joined names"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, self.columns)
            cursor.execute(f"""
                INSERT INTO {self.table} ({columns})
                VALUES ({placeholders})
                RETURNING id
            """, params)

            new_id = cursor.fetchone()['id']
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

        return self.find_by_id(new_id)

    def update(self, item_id: int, fields: Dict[str, Any]) -> Optional[Any]:
        """Update whitelisted fields; None when the row does not exist"""
        set_clause, params = build_set_clause(fields, self.columns)
        if not set_clause:
            return self.find_by_id(item_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE {self.table}
                SET {set_clause}
                WHERE id = %s
                RETURNING id
            """, params + [item_id])

            updated = cursor.fetchone()
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

        return self.find_by_id(item_id) if updated else None

    def delete(self, item_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"DELETE FROM {self.table} WHERE id = %s RETURNING id", (item_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()


class SubcategoryRepository(TaxonomyRepository):
    """Product subcategories (categories_sub) with their parent category title"""

    table = "categories_sub"
    alias = "sc"
    columns = ("title", "desc", "category_id")
    select = """
        SELECT sc.id, sc.title, sc."desc", sc.category_id, sc.created_at,
               c.title as category_name
        FROM categories_sub sc
        LEFT JOIN categories c ON sc.category_id = c.id
    """
    order_by = "sc.title ASC"
    model = Subcategory

    def find_all(self, category_id: Optional[int] = None) -> List[Subcategory]:
        if category_id is None:
            return self._find([], [])
        return self._find(["sc.category_id = %s"], [category_id])


class BrandRepository(TaxonomyRepository):
    """Shop brands (categories_brands), newest first"""

    table = "categories_brands"
    alias = "b"
    columns = ("brand", "description", "image_url", "shop_id")
    select = """
        SELECT b.id, b.brand, b.description, b.image_url, b.shop_id, b.created_at,
               s.shop_name
        FROM categories_brands b
        LEFT JOIN shops s ON b.shop_id = s.id
    """
    order_by = "b.created_at DESC"
    model = Brand

    def find_all(
        self,
        shop_ids: Optional[List[int]] = None,
        shop_id: Optional[int] = None,
        search: Optional[str] = None
    ) -> List[Brand]:
        """
        Brands, optionally filtered

        Args:
            shop_ids: Restrict to these shops (None = every shop)
            shop_id: Filter by a single shop
            search: Search in brand name
        """
        conditions = []
        params: List[Any] = []

        scope, scope_params = shop_scope("b.shop_id", shop_ids)
        if scope:
            conditions.append(scope)
            params.extend(scope_params)

        if shop_id is not None:
            conditions.append("b.shop_id = %s")
            params.append(shop_id)

        if search:
            conditions.append("b.brand ILIKE %s")
            params.append(f"%{search}%")

        return self._find(conditions, params)


class ShopCategoryRepository(TaxonomyRepository):
    """Shop directory categories (categories_shop)"""

    table = "categories_shop"
    alias = "cs"
    columns = ("title", "description", "image_url")
    select = """
        SELECT cs.id, cs.title, cs.description, cs.image_url, cs.created_at
        FROM categories_shop cs
    """
    order_by = "cs.title ASC"
    model = ShopCategory

    def find_all(self) -> List[ShopCategory]:
        return self._find([], [])


class ShopSubcategoryRepository(TaxonomyRepository):
    """Shop directory subcategories (categories_sub_shop) with their parent title"""

    table = "categories_sub_shop"
    alias = "css"
    columns = ("title", "description", "image_url", "category_id")
    select = """
        SELECT css.id, css.title, css.description, css.image_url, css.category_id,
               css.created_at, cs.title as category_name
        FROM categories_sub_shop css
        LEFT JOIN categories_shop cs ON css.category_id = cs.id
    """
    order_by = "css.created_at DESC"
    model = ShopSubcategory

    def find_all(self, category_id: Optional[int] = None) -> List[ShopSubcategory]:
        if category_id is None:
            return self._find([], [])
        return self._find(["css.category_id = %s"], [category_id])
