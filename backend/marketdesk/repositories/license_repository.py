"""
License Repository - Data Access Layer for Licenses and Subscriptions
"""
from typing import List, Optional, Dict, Any
from marketdesk.domain.license import License, Subscription
from marketdesk.core.database import get_db_connection_dict
from marketdesk.repositories.sql_helpers import build_set_clause, build_insert


LICENSE_COLUMNS = ("title", "desc", "price", "shops", "products")


class LicenseRepository:
    """
    Repository for License data access
    """

    def find_all(self) -> List[License]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, title, "desc", price, shops, products, created_at
                FROM licenses
                ORDER BY created_at DESC
            """)
            return [License(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, license_id: int) -> Optional[License]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT id, title, "desc", price, shops, products, created_at
                FROM licenses
                WHERE id = %s
            """, (license_id,))
            row = cursor.fetchone()
            return License(**dict(row)) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> License:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, LICENSE_COLUMNS)
            cursor.execute(f"""
                INSERT INTO licenses ({columns})
                VALUES ({placeholders})
                RETURNING id, title, "desc", price, shops, products, created_at
            """, params)
            row = cursor.fetchone()
            conn.commit()
            return License(**dict(row))

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, license_id: int, fields: Dict[str, Any]) -> Optional[License]:
        set_clause, params = build_set_clause(fields, LICENSE_COLUMNS)
        if not set_clause:
            return self.find_by_id(license_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE licenses
                SET {set_clause}
                WHERE id = %s
                RETURNING id, title, "desc", price, shops, products, created_at
            """, params + [license_id])
            row = cursor.fetchone()
            conn.commit()
            return License(**dict(row)) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, license_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM licenses WHERE id = %s RETURNING id", (license_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_subscription(self, subscription_id: int) -> Optional[Subscription]:
        """Subscription with its license and subscriber profile"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    sub.id, sub.license_id, sub.profile_id, sub.status, sub.created_at,
                    l.title as license_title,
                    l."desc" as license_desc,
                    l.price as license_price,
                    l.shops as license_shops,
                    l.products as license_products,
                    l.created_at as license_created_at,
                    p.full_name as profile_name,
                    p.email as profile_email
                FROM subscriptions sub
                LEFT JOIN licenses l ON sub.license_id = l.id
                LEFT JOIN profiles p ON sub.profile_id = p.id
                WHERE sub.id = %s
            """, (subscription_id,))

            row = cursor.fetchone()
            if not row:
                return None

            license = None
            if row.get('license_id') is not None and row.get('license_title') is not None:
                license = License(
                    id=row['license_id'],
                    title=row['license_title'],
                    desc=row.get('license_desc'),
                    price=row.get('license_price') or 0,
                    shops=row.get('license_shops') or 0,
                    products=row.get('license_products') or 0,
                    created_at=row.get('license_created_at')
                )

            return Subscription(
                id=row['id'],
                license_id=row.get('license_id'),
                profile_id=str(row['profile_id']) if row.get('profile_id') is not None else None,
                status=row.get('status'),
                created_at=row.get('created_at'),
                license=license,
                profile_name=row.get('profile_name'),
                profile_email=row.get('profile_email')
            )

        finally:
            cursor.close()
            conn.close()
