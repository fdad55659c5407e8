"""
Unit tests for ProfileRepository
"""
from unittest.mock import patch
from uuid import UUID

from marketdesk.repositories.profile_repository import ProfileRepository

USER_ID = UUID('6f1c8a52-9d0e-4b1a-8f3e-2a7b5c4d3e21')

PROFILE_ROW = {
    'id': USER_ID, 'full_name': 'Omar Owner', 'username': None, 'email': 'omar@shop.test',
    'phone': None, 'avatar_url': None, 'country': None, 'address': None, 'location': None,
    'website': None, 'status': 'active', 'role': 2, 'registration_date': None,
    'created_at': None, 'role_name': 'shop_owner',
}


class TestProfileRepository:

    @patch('marketdesk.repositories.profile_repository.get_db_connection_dict')
    def test_find_by_id_attaches_shops(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = PROFILE_ROW
        mock_cursor.fetchall.return_value = [
            {'user_id': USER_ID, 'shop_id': 1, 'role': 'shop_owner', 'shop_name': 'Clay Corner'},
        ]

        profile = ProfileRepository().find_by_id(str(USER_ID))

        assert profile.id == str(USER_ID)
        assert profile.role_name == 'shop_owner'
        assert profile.shops[0].shop_name == 'Clay Corner'

    @patch('marketdesk.repositories.profile_repository.get_db_connection_dict')
    def test_find_all_skips_shop_query_for_empty_page(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'total': 0}
        mock_cursor.fetchall.return_value = []

        profiles, total = ProfileRepository().find_all(search='nobody')

        assert (profiles, total) == ([], 0)
        assert mock_cursor.execute.call_count == 2

    @patch('marketdesk.repositories.profile_repository.get_db_connection_dict')
    def test_get_access(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'full_name': 'Omar Owner', 'role_name': 'shop_owner'}
        mock_cursor.fetchall.return_value = [{'shop_id': 1}, {'shop_id': 2}]

        access = ProfileRepository().get_access('owner-uuid')

        assert access == {'full_name': 'Omar Owner', 'role_name': 'shop_owner', 'shop_ids': [1, 2]}

    @patch('marketdesk.repositories.profile_repository.get_db_connection_dict')
    def test_get_access_without_profile(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = None
        mock_cursor.fetchall.return_value = []

        access = ProfileRepository().get_access('ghost')

        assert access['role_name'] is None
        assert access['shop_ids'] == []

    @patch('marketdesk.repositories.profile_repository.get_db_connection_dict')
    def test_update_replaces_shop_assignments(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'id': 'owner-uuid'}

        updated = ProfileRepository().update(
            'owner-uuid', {'full_name': 'Omar O.', 'id': 'other'},
            shops=[{'shop_id': 3, 'role': 'shop_owner'}, {'shop_id': 4}],
        )

        assert updated is True
        calls = mock_cursor.execute.call_args_list
        update_sql, update_params = calls[1][0]
        assert '"id"' not in update_sql
        assert update_params == ['Omar O.', 'owner-uuid']
        assert calls[2][0][1] == ('owner-uuid',)
        assert calls[3][0][1] == ('owner-uuid', 3, 'shop_owner')
        assert calls[4][0][1] == ('owner-uuid', 4, 'shop_editor')
        mock_conn.commit.assert_called_once()
