"""
Unit tests for AccountingRepository
"""
from unittest.mock import patch
from datetime import datetime

from marketdesk.repositories.accounting_repository import AccountingRepository, COMPLETED_LABELS


class TestFetchCompletedOrders:

    def test_completed_labels_cover_legacy_statuses(self):
        assert COMPLETED_LABELS == ["Completed", "Delivered", "completed"]

    @patch('marketdesk.repositories.accounting_repository.get_db_connection_dict')
    def test_scoped_with_range(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = [{'id': 10, 'buyer_name': 'Bea Buyer'}]
        start = datetime(2025, 1, 1)

        rows = AccountingRepository().fetch_completed_orders(shop_ids=[1, 2], from_date=start)

        assert rows == [{'id': 10, 'buyer_name': 'Bea Buyer'}]
        sql, params = mock_cursor.execute.call_args[0]
        assert "o.status = ANY(%s)" in sql
        assert "p.shop = ANY(%s)" in sql
        assert "LEFT JOIN profiles b ON o.buyer_id = b.id" in sql
        assert "ORDER BY o.created_at DESC" in sql
        assert params == [COMPLETED_LABELS, [1, 2], start]
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('marketdesk.repositories.accounting_repository.get_db_connection_dict')
    def test_no_accessible_shops(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = []

        AccountingRepository().fetch_completed_orders(shop_ids=[])

        assert "1=0" in mock_cursor.execute.call_args[0][0]


class TestFetchTransactions:

    @patch('marketdesk.repositories.accounting_repository.get_db_connection_dict')
    def test_by_shop_and_range(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = []
        end = datetime(2025, 6, 30)

        AccountingRepository().fetch_transactions(1, to_date=end)

        sql, params = mock_cursor.execute.call_args[0]
        assert "FROM shop_transactions" in sql
        assert "shop_id = %s AND created_at <= %s" in sql
        assert params == [1, end]
