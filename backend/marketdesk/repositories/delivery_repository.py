"""
Delivery Repository - Data Access Layer for Delivery Companies, Drivers and Cars

Companies are returned with their delivery methods (and the per-location
price additions of each method) when fetched one at a time.
"""
from datetime import datetime
from typing import List, Optional, Dict, Any
from marketdesk.domain.delivery import (
    DeliveryCompany, DeliveryMethod, DeliveryLocationMethod, Driver, Car,
)
from marketdesk.core.database import get_db_connection_dict
from marketdesk.repositories.sql_helpers import build_set_clause, build_insert


COMPANY_COLUMNS = (
    "company_name", "owner_name", "company_number", "phone", "email",
    "address", "details", "logo_url", "cover_image_url", "latitude", "longitude",
)
DRIVER_COLUMNS = ("name", "phone", "id_number", "avatar_url", "delivery_companies_id")
CAR_COLUMNS = (
    "plate_number", "brand", "model", "color", "capacity", "car_number",
    "car_model", "delivery_companies_id", "delivery_drivers_id",
)


class DeliveryCompanyRepository:
    """
    Repository for delivery companies and their delivery methods
    """

    @staticmethod
    def _insert_methods(cursor, company_id: int, methods: List[Dict[str, Any]]) -> None:
        for method in methods:
            cursor.execute("""
                INSERT INTO delivery_methods (delivery_company_id, label, delivery_time, price, is_active)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING id
            """, (
                company_id,
                method['label'],
                method.get('delivery_time'),
                method.get('price', 0),
                method.get('is_active', True),
            ))
            method_id = cursor.fetchone()['id']

            for location in method.get('locations') or []:
                cursor.execute("""
                    INSERT INTO delivery_location_methods (delivery_method_id, location_name, price_addition, is_active)
                    VALUES (%s, %s, %s, %s)
                """, (
                    method_id,
                    location['location_name'],
                    location.get('price_addition', 0),
                    location.get('is_active', True),
                ))

    def find_all(self, search: Optional[str] = None) -> List[DeliveryCompany]:
        """Companies with their driver and car counts, newest first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if search:
                conditions.append("(dc.company_name ILIKE %s OR dc.owner_name ILIKE %s)")
                params.extend([f"%{search}%", f"%{search}%"])

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT
                    dc.*,
                    (SELECT COUNT(*) FROM delivery_drivers d WHERE d.delivery_companies_id = dc.id) as drivers_count,
                    (SELECT COUNT(*) FROM delivery_cars c WHERE c.delivery_companies_id = dc.id) as cars_count
                FROM delivery_companies dc
                WHERE {where_clause}
                ORDER BY dc.created_at DESC
            """, params)

            return [DeliveryCompany(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, company_id: int) -> Optional[DeliveryCompany]:
        """Company with its delivery methods and location price additions"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    dc.*,
                    (SELECT COUNT(*) FROM delivery_drivers d WHERE d.delivery_companies_id = dc.id) as drivers_count,
                    (SELECT COUNT(*) FROM delivery_cars c WHERE c.delivery_companies_id = dc.id) as cars_count
                FROM delivery_companies dc
                WHERE dc.id = %s
            """, (company_id,))

            row = cursor.fetchone()
            if not row:
                return None

            cursor.execute("""
                SELECT id, label, delivery_time, price, is_active
                FROM delivery_methods
                WHERE delivery_company_id = %s
                ORDER BY id
            """, (company_id,))
            method_rows = cursor.fetchall()

            locations_by_method: Dict[int, List[DeliveryLocationMethod]] = {}
            if method_rows:
                cursor.execute("""
                    SELECT id, delivery_method_id, location_name, price_addition, is_active
                    FROM delivery_location_methods
                    WHERE delivery_method_id = ANY(%s)
                    ORDER BY id
                """, ([m['id'] for m in method_rows],))

                for loc in cursor.fetchall():
                    locations_by_method.setdefault(loc['delivery_method_id'], []).append(
                        DeliveryLocationMethod(
                            id=loc['id'],
                            location_name=loc['location_name'],
                            price_addition=loc.get('price_addition') or 0,
                            is_active=loc.get('is_active', True)
                        )
                    )

            company = dict(row)
            company['methods'] = [
                DeliveryMethod(
                    id=m['id'],
                    label=m['label'],
                    delivery_time=m.get('delivery_time'),
                    price=m.get('price') or 0,
                    is_active=m.get('is_active', True),
                    locations=locations_by_method.get(m['id'], [])
                )
                for m in method_rows
            ]
            return DeliveryCompany(**company)

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any], methods: List[Dict[str, Any]]) -> int:
        """Insert a company with its nested methods in one transaction; returns the id"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, COMPANY_COLUMNS)
            cursor.execute(f"""
                INSERT INTO delivery_companies ({columns})
                VALUES ({placeholders})
                RETURNING id
            """, params)
            company_id = cursor.fetchone()['id']

            self._insert_methods(cursor, company_id, methods)

            conn.commit()
            return company_id

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(
        self,
        company_id: int,
        fields: Dict[str, Any],
        methods: Optional[List[Dict[str, Any]]] = None
    ) -> bool:
        """
        Update a company; when `methods` is given every existing method
        (and its location prices) is replaced

        Returns:
            False when the company does not exist
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT id FROM delivery_companies WHERE id = %s", (company_id,))
            if not cursor.fetchone():
                return False

            set_clause, params = build_set_clause(fields, COMPANY_COLUMNS)
            if set_clause:
                cursor.execute(f"""
                    UPDATE delivery_companies
                    SET {set_clause}
                    WHERE id = %s
                """, params + [company_id])

            if methods is not None:
                cursor.execute("""
                    DELETE FROM delivery_location_methods
                    WHERE delivery_method_id IN (
                        SELECT id FROM delivery_methods WHERE delivery_company_id = %s
                    )
                """, (company_id,))
                cursor.execute("DELETE FROM delivery_methods WHERE delivery_company_id = %s", (company_id,))
                self._insert_methods(cursor, company_id, methods)

            conn.commit()
            return True

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, company_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM delivery_companies WHERE id = %s RETURNING id", (company_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def get_statistics_data(self, since: Optional[datetime] = None) -> Dict[str, List[dict]]:
        """
        Raw rows for the delivery statistics dashboard

        Returns:
            Dict with:
            - orders: confirmed delivery orders {id, status, shop, assigned_driver_id, created_at}
            - companies: {id, company_name, logo_url, drivers_count, cars_count}
            - shops: {id, delivery_companies_id}
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            params = []
            date_filter = ""
            if since:
                date_filter = " AND o.created_at >= %s"
                params.append(since)

            # shipping_method is stored JSON-encoded by the storefront
            cursor.execute(f"""
                SELECT o.id, o.status, COALESCE(o.shop, p.shop) as shop,
                       o.assigned_driver_id, o.created_at
                FROM orders o
                LEFT JOIN products p ON o.product_id = p.id
                WHERE o.confirmed = true
                  AND o.shipping_method IN ('"delivery"', 'delivery')
                {date_filter}
            """, params)
            orders = cursor.fetchall()

            cursor.execute("""
                SELECT
                    dc.id, dc.company_name, dc.logo_url,
                    (SELECT COUNT(*) FROM delivery_drivers d WHERE d.delivery_companies_id = dc.id) as drivers_count,
                    (SELECT COUNT(*) FROM delivery_cars c WHERE c.delivery_companies_id = dc.id) as cars_count
                FROM delivery_companies dc
            """)
            companies = cursor.fetchall()

            cursor.execute("""
                SELECT id, delivery_companies_id
                FROM shops
                WHERE delivery_companies_id IS NOT NULL
            """)
            shops = cursor.fetchall()

            return {
                'orders': [dict(r) for r in orders],
                'companies': [dict(r) for r in companies],
                'shops': [dict(r) for r in shops],
            }

        finally:
            cursor.close()
            conn.close()


class DriverRepository:
    """Repository for delivery drivers"""

    DRIVER_SELECT = """
        SELECT d.id, d.name, d.phone, d.id_number, d.avatar_url,
               d.delivery_companies_id, d.created_at,
               dc.company_name
        FROM delivery_drivers d
        LEFT JOIN delivery_companies dc ON d.delivery_companies_id = dc.id
    """

    def find_all(self, company_id: Optional[int] = None) -> List[Driver]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            if company_id is not None:
                cursor.execute(self.DRIVER_SELECT + " WHERE d.delivery_companies_id = %s ORDER BY d.name", (company_id,))
            else:
                cursor.execute(self.DRIVER_SELECT + " ORDER BY d.name")
            return [Driver(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, driver_id: int) -> Optional[Driver]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(self.DRIVER_SELECT + " WHERE d.id = %s", (driver_id,))
            row = cursor.fetchone()
            return Driver(**dict(row)) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_for_shop(self, shop_id: int) -> List[Driver]:
        """
        Drivers able to deliver for a shop

        These are the drivers of every delivery company actively linked to
        the shop through shop_delivery_companies.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(self.DRIVER_SELECT + """
                WHERE d.delivery_companies_id IN (
                    SELECT delivery_company_id
                    FROM shop_delivery_companies
                    WHERE shop_id = %s AND is_active = true
                )
                ORDER BY d.name
            """, (shop_id,))
            return [Driver(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, DRIVER_COLUMNS)
            cursor.execute(f"""
                INSERT INTO delivery_drivers ({columns})
                VALUES ({placeholders})
                RETURNING id
            """, params)
            driver_id = cursor.fetchone()['id']
            conn.commit()
            return driver_id

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, driver_id: int, fields: Dict[str, Any]) -> bool:
        set_clause, params = build_set_clause(fields, DRIVER_COLUMNS)
        if not set_clause:
            return self.find_by_id(driver_id) is not None

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE delivery_drivers
                SET {set_clause}
                WHERE id = %s
                RETURNING id
            """, params + [driver_id])
            updated = cursor.fetchone()
            conn.commit()
            return updated is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, driver_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM delivery_drivers WHERE id = %s RETURNING id", (driver_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()


class CarRepository:
    """Repository for delivery cars"""

    CAR_SELECT = """
        SELECT c.id, c.plate_number, c.brand, c.model, c.color, c.capacity,
               c.car_number, c.car_model, c.delivery_companies_id,
               c.delivery_drivers_id, c.created_at,
               dc.company_name,
               d.name as driver_name
        FROM delivery_cars c
        LEFT JOIN delivery_companies dc ON c.delivery_companies_id = dc.id
        LEFT JOIN delivery_drivers d ON c.delivery_drivers_id = d.id
    """

    def find_all(self, company_id: Optional[int] = None) -> List[Car]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            if company_id is not None:
                cursor.execute(self.CAR_SELECT + " WHERE c.delivery_companies_id = %s ORDER BY c.created_at DESC", (company_id,))
            else:
                cursor.execute(self.CAR_SELECT + " ORDER BY c.created_at DESC")
            return [Car(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, car_id: int) -> Optional[Car]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(self.CAR_SELECT + " WHERE c.id = %s", (car_id,))
            row = cursor.fetchone()
            return Car(**dict(row)) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, CAR_COLUMNS)
            cursor.execute(f"""
                INSERT INTO delivery_cars ({columns})
                VALUES ({placeholders})
                RETURNING id
            """, params)
            car_id = cursor.fetchone()['id']
            conn.commit()
            return car_id

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, car_id: int, fields: Dict[str, Any]) -> bool:
        set_clause, params = build_set_clause(fields, CAR_COLUMNS)
        if not set_clause:
            return self.find_by_id(car_id) is not None

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE delivery_cars
                SET {set_clause}
                WHERE id = %s
                RETURNING id
            """, params + [car_id])
            updated = cursor.fetchone()
            conn.commit()
            return updated is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, car_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM delivery_cars WHERE id = %s RETURNING id", (car_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
