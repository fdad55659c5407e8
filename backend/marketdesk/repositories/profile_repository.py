"""
Profile Repository - Data Access Layer for Users

Handles profiles, their global role (user_roles) and their shop
assignments (user_roles_shop).
"""
from typing import List, Optional, Tuple, Dict, Any
from marketdesk.domain.profile import Profile, UserShop
from marketdesk.core.database import get_db_connection_dict
from marketdesk.repositories.sql_helpers import build_set_clause, build_insert


PROFILE_COLUMNS = (
    "id", "full_name", "username", "email", "phone", "avatar_url", "country",
    "address", "location", "website", "status", "role",
)

PROFILE_SELECT = """
    SELECT
        p.id, p.full_name, p.username, p.email, p.phone, p.avatar_url,
        p.country, p.address, p.location, p.website, p.status, p.role,
        p.registration_date, p.created_at,
        r.name as role_name
    FROM profiles p
    LEFT JOIN user_roles r ON p.role = r.id
"""


class ProfileRepository:
    """
    Repository for Profile data access
    """

    @staticmethod
    def _fetch_shops(cursor, user_ids: List[str]) -> Dict[str, List[UserShop]]:
        if not user_ids:
            return {}

        cursor.execute("""
            SELECT urs.user_id, urs.shop_id, urs.role, s.shop_name
            FROM user_roles_shop urs
            LEFT JOIN shops s ON urs.shop_id = s.id
            WHERE urs.user_id = ANY(%s)
            ORDER BY urs.shop_id
        """, (user_ids,))

        shops_by_user: Dict[str, List[UserShop]] = {}
        for row in cursor.fetchall():
            shops_by_user.setdefault(str(row['user_id']), []).append(
                UserShop(shop_id=row['shop_id'], role=row['role'], shop_name=row.get('shop_name'))
            )
        return shops_by_user

    @staticmethod
    def _replace_shops(cursor, user_id: str, shops: List[Dict[str, Any]]) -> None:
        cursor.execute("DELETE FROM user_roles_shop WHERE user_id = %s", (user_id,))
        for shop in shops:
            cursor.execute("""
                INSERT INTO user_roles_shop (user_id, shop_id, role)
                VALUES (%s, %s, %s)
            """, (user_id, shop['shop_id'], shop.get('role', 'shop_editor')))

    def find_all(
        self,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Profile], int]:
        """
        Find users with filters

        Args:
            search: Search in full name or email
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of profiles with shop assignments, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if search:
                conditions.append("(p.full_name ILIKE %s OR p.email ILIKE %s)")
                params.extend([f"%{search}%", f"%{search}%"])

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM profiles p
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                {PROFILE_SELECT}
                WHERE {where_clause}
                ORDER BY p.created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])
            rows = cursor.fetchall()

            shops_by_user = self._fetch_shops(cursor, [str(row['id']) for row in rows])

            return [
                Profile(**{**dict(row), 'id': str(row['id']), 'shops': shops_by_user.get(str(row['id']), [])})
                for row in rows
            ], total

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, user_id: str) -> Optional[Profile]:
        """Profile with role name and shop assignments"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(PROFILE_SELECT + " WHERE p.id = %s", (user_id,))
            row = cursor.fetchone()
            if not row:
                return None

            shops_by_user = self._fetch_shops(cursor, [str(row['id'])])
            return Profile(**{**dict(row), 'id': str(row['id']), 'shops': shops_by_user.get(str(row['id']), [])})

        finally:
            cursor.close()
            conn.close()

    def get_access(self, user_id: str) -> Dict[str, Any]:
        """
        Role name and assigned shop ids of a user, used to build the request
        user context

        Returns:
            Dict with full_name, role_name (None when the profile is missing)
            and shop_ids
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT p.full_name, r.name as role_name
                FROM profiles p
                LEFT JOIN user_roles r ON p.role = r.id
                WHERE p.id = %s
            """, (user_id,))
            row = cursor.fetchone()

            cursor.execute("""
                SELECT shop_id
                FROM user_roles_shop
                WHERE user_id = %s
                ORDER BY shop_id
            """, (user_id,))
            shop_ids = [r['shop_id'] for r in cursor.fetchall()]

            return {
                'full_name': row['full_name'] if row else None,
                'role_name': row['role_name'] if row else None,
                'shop_ids': shop_ids,
            }

        finally:
            cursor.close()
            conn.close()

    def create(self, fields: Dict[str, Any]) -> str:
        """Insert a profile and return its id"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            columns, placeholders, params = build_insert(fields, PROFILE_COLUMNS)
            cursor.execute(f"""
                INSERT INTO profiles ({columns})
                VALUES ({placeholders})
                RETURNING id
            """, params)
            user_id = str(cursor.fetchone()['id'])
            conn.commit()
            return user_id

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(
        self,
        user_id: str,
        fields: Dict[str, Any],
        shops: Optional[List[Dict[str, Any]]] = None
    ) -> bool:
        """
        Update a profile; `shops` replaces every shop assignment when given

        Returns:
            False when the profile does not exist
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT id FROM profiles WHERE id = %s", (user_id,))
            if not cursor.fetchone():
                return False

            set_clause, params = build_set_clause(
                fields, [c for c in PROFILE_COLUMNS if c != "id"]
            )
            if set_clause:
                cursor.execute(f"""
                    UPDATE profiles
                    SET {set_clause}
                    WHERE id = %s
                """, params + [user_id])

            if shops is not None:
                self._replace_shops(cursor, user_id, shops)

            conn.commit()
            return True

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, user_id: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM user_roles_shop WHERE user_id = %s", (user_id,))
            cursor.execute("DELETE FROM profiles WHERE id = %s RETURNING id", (user_id,))
            deleted = cursor.fetchone()
            conn.commit()
            return deleted is not None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
