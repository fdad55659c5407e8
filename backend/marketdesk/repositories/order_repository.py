"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders, their comments and tracking
entries, and returns Order domain models with their related data
(product and shop, buyer, driver, delivery pricing, selected features).
"""
from typing import List, Optional, Dict, Any, Set
from marketdesk.domain.order import (
    Order, OrderProduct, OrderComment, TrackingEntry, SelectedFeature,
    DriverRef, CompanyRef, DeliveryMethodRef, DeliveryLocationRef,
)
from marketdesk.core.database import get_db_connection_dict
from marketdesk.repositories.sql_helpers import build_set_clause, build_insert, shop_scope


# Columns the back-office is allowed to write
ORDER_COLUMNS = (
    "product_id", "buyer_id", "shop", "status", "confirmed", "comment",
    "shipping_method", "shipping_address", "payment_method",
    "assigned_driver_id", "assigned_delivery_company_id",
    "delivery_method_id", "delivery_location_method_id",
    "selected_feature_value_ids", "total",
)

ORDER_SELECT = """
    SELECT
        o.id, o.product_id, o.buyer_id, o.shop, o.status, o.confirmed, o.comment,
        o.shipping_method, o.shipping_address, o.payment_method,
        o.assigned_driver_id, o.assigned_delivery_company_id,
        o.delivery_method_id, o.delivery_location_method_id,
        o.selected_feature_value_ids, o.total, o.created_at,
        p.title as product_title,
        p.price as product_price,
        p.images as product_images,
        p.shop as product_shop,
        s.shop_name,
        b.full_name as buyer_name,
        b.email as buyer_email,
        d.name as driver_name,
        d.phone as driver_phone,
        d.avatar_url as driver_avatar_url,
        dc.company_name,
        dm.label as delivery_method_label,
        dm.delivery_time as delivery_method_time,
        dm.price as delivery_method_price,
        dlm.location_name,
        dlm.price_addition as location_price_addition
    FROM orders o
    LEFT JOIN products p ON o.product_id = p.id
    LEFT JOIN shops s ON p.shop = s.id
    LEFT JOIN profiles b ON o.buyer_id = b.id
    LEFT JOIN delivery_drivers d ON o.assigned_driver_id = d.id
    LEFT JOIN delivery_companies dc ON o.assigned_delivery_company_id = dc.id
    LEFT JOIN delivery_methods dm ON o.delivery_method_id = dm.id
    LEFT JOIN delivery_location_methods dlm ON o.delivery_location_method_id = dlm.id
"""


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    Returns Order domain models with related data.
    """

    @staticmethod
    def _map_row_to_order(row: dict, features: Optional[Dict[int, SelectedFeature]] = None) -> Order:
        """
        Map a joined order row to the Order domain model

        `features` maps products_features_values ids to resolved features;
        ids that cannot be resolved are skipped.
        """
        features = features or {}
        feature_ids = row.get('selected_feature_value_ids') or []

        product = None
        if row.get('product_id') is not None:
            product = OrderProduct(
                id=row['product_id'],
                title=row.get('product_title'),
                price=row.get('product_price'),
                images=row.get('product_images'),
                shop=row.get('product_shop'),
                shop_name=row.get('shop_name')
            )

        driver = None
        if row.get('assigned_driver_id') is not None:
            driver = DriverRef(
                id=row['assigned_driver_id'],
                name=row.get('driver_name'),
                phone=row.get('driver_phone'),
                avatar_url=row.get('driver_avatar_url')
            )

        company = None
        if row.get('assigned_delivery_company_id') is not None:
            company = CompanyRef(
                id=row['assigned_delivery_company_id'],
                company_name=row.get('company_name')
            )

        delivery_method = None
        if row.get('delivery_method_id') is not None:
            delivery_method = DeliveryMethodRef(
                id=row['delivery_method_id'],
                label=row.get('delivery_method_label'),
                delivery_time=row.get('delivery_method_time'),
                price=row.get('delivery_method_price')
            )

        location = None
        if row.get('delivery_location_method_id') is not None:
            location = DeliveryLocationRef(
                id=row['delivery_location_method_id'],
                location_name=row.get('location_name'),
                price_addition=row.get('location_price_addition')
            )

        return Order(
            id=row['id'],
            product_id=row.get('product_id'),
            buyer_id=row.get('buyer_id'),
            shop=row.get('shop') or row.get('product_shop'),
            status=row.get('status'),
            confirmed=bool(row.get('confirmed')),
            comment=row.get('comment'),
            shipping_method=row.get('shipping_method'),
            shipping_address=row.get('shipping_address'),
            payment_method=row.get('payment_method'),
            assigned_driver_id=row.get('assigned_driver_id'),
            assigned_delivery_company_id=row.get('assigned_delivery_company_id'),
            delivery_method_id=row.get('delivery_method_id'),
            delivery_location_method_id=row.get('delivery_location_method_id'),
            selected_feature_value_ids=feature_ids,
            total=row.get('total'),
            created_at=row.get('created_at'),
            product=product,
            buyer_name=row.get('buyer_name'),
            buyer_email=row.get('buyer_email'),
            assigned_driver=driver,
            assigned_delivery_company=company,
            delivery_method=delivery_method,
            delivery_location_method=location,
            selected_features=[features[fid] for fid in feature_ids if fid in features]
        )

    @staticmethod
    def _fetch_features(cursor, feature_ids: List[int]) -> Dict[int, SelectedFeature]:
        """Resolve feature value ids to {label, value, price_addition} in one query"""
        if not feature_ids:
            return {}

        cursor.execute("""
            SELECT v.id, v.value, v.price_addition, l.label
            FROM products_features_values v
            JOIN products_features_labels l ON v.feature_label_id = l.id
            WHERE v.id = ANY(%s)
        """, (feature_ids,))

        return {
            row['id']: SelectedFeature(
                label=row.get('label'),
                value=row.get('value'),
                price_addition=row.get('price_addition')
            )
            for row in cursor.fetchall()
        }

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID with all related data

        Args:
            order_id: Internal order ID

        Returns:
            Order or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(ORDER_SELECT + " WHERE o.id = %s", (order_id,))

            row = cursor.fetchone()
            if not row:
                return None

            features = self._fetch_features(cursor, list(row.get('selected_feature_value_ids') or []))
            return self._map_row_to_order(row, features)

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        shop_ids: Optional[List[int]] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Order]:
        """
        Find orders newest first

        Args:
            shop_ids: Restrict to orders whose product belongs to these shops
                (None = every shop)
            from_date: Orders created on or after this date
            to_date: Orders created on or before this date
            limit: Maximum results to return (None = all)
            offset: Number of results to skip

        Returns:
            List of orders with their selected features resolved
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

            if from_date:
                conditions.append("o.created_at >= %s")
                params.append(from_date)

            if to_date:
                conditions.append("o.created_at <= %s")
                params.append(to_date)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            query = f"""
                {ORDER_SELECT}
                WHERE {where_clause}
                ORDER BY o.created_at DESC
            """
            if limit is not None:
                query += " LIMIT %s OFFSET %s"
                params = params + [limit, offset]

            cursor.execute(query, params)
            rows = cursor.fetchall()

            if not rows:
                return []

            # Resolve every selected feature of the page in ONE QUERY
            all_feature_ids = sorted({
                fid for row in rows for fid in (row.get('selected_feature_value_ids') or [])
            })
            features = self._fetch_features(cursor, all_feature_ids)

            return [self._map_row_to_order(row, features) for row in rows]

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> int:
        """Insert an order and return its id"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, ORDER_COLUMNS)
            cursor.execute(f"""
                INSERT INTO orders ({columns})
                VALUES ({placeholders})
                RETURNING id
            """, params)

            order_id = cursor.fetchone()['id']
            conn.commit()
            return order_id

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, order_id: int, fields: Dict[str, Any]) -> bool:
        """
        Update the whitelisted columns of an order

        Returns:
            False when the order does not exist
        """
        set_clause, params = build_set_clause(fields, ORDER_COLUMNS)
        if not set_clause:
            raise ValueError("No updatable order fields given")

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE orders
                SET {set_clause}
                WHERE id = %s
                RETURNING id
            """, params + [order_id])

            updated = cursor.fetchone()
            conn.commit()
            return updated is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, order_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM orders WHERE id = %s RETURNING id", (order_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    # ========================================
    # Comments
    # ========================================

    def find_comments(self, order_id: int) -> List[OrderComment]:
        """Comments of an order with author names, newest first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT c.id, c.order_id, c.user_id, c.comment, c.created_at,
                       p.full_name as author_name
                FROM order_comments c
                LEFT JOIN profiles p ON c.user_id = p.id
                WHERE c.order_id = %s
                ORDER BY c.created_at DESC
            """, (order_id,))

            return [OrderComment(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def add_comment(self, order_id: int, user_id: Optional[str], comment: str) -> OrderComment:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO order_comments (order_id, user_id, comment)
                VALUES (%s, %s, %s)
                RETURNING id, order_id, user_id, comment, created_at
            """, (order_id, user_id, comment))

            row = cursor.fetchone()
            conn.commit()
            return OrderComment(**dict(row))

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete_comment(self, order_id: int, comment_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM order_comments
                WHERE id = %s AND order_id = %s
                RETURNING id
            """, (comment_id, order_id))

            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_order_ids_with_comments(self) -> Set[int]:
        """Ids of every order that has at least one comment"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT DISTINCT order_id FROM order_comments")
            return {row['order_id'] for row in cursor.fetchall()}

        finally:
            cursor.close()
            conn.close()

    # ========================================
    # Tracking
    # ========================================

    def find_tracking(self, order_id: int) -> List[TrackingEntry]:
        """Tracking entries of an order with author names, oldest first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT t.id, t.order_id, t.user_id, t.action, t.created_at,
                       p.full_name as author_name
                FROM order_tracking t
                LEFT JOIN profiles p ON t.user_id = p.id
                WHERE t.order_id = %s
                ORDER BY t.created_at ASC
            """, (order_id,))

            return [TrackingEntry(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def add_tracking(self, order_id: int, user_id: Optional[str], action: str) -> TrackingEntry:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO order_tracking (order_id, user_id, action)
                VALUES (%s, %s, %s)
                RETURNING id, order_id, user_id, action, created_at
            """, (order_id, user_id, action))

            row = cursor.fetchone()
            conn.commit()
            return TrackingEntry(**dict(row))

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
