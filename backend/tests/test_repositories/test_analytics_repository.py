"""
Unit tests for AnalyticsRepository date filters
"""
from datetime import datetime
from unittest.mock import patch

from marketdesk.repositories.analytics_repository import AnalyticsRepository

START = datetime(2025, 1, 1)
END = datetime(2025, 3, 31)


class TestFetchProfiles:

    @patch('marketdesk.repositories.analytics_repository.get_db_connection_dict')
    def test_registered_only_matches_registration_date(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = [{'id': 'u1', 'full_name': 'Bea', 'registration_date': START, 'created_at': START}]

        rows = AnalyticsRepository().fetch_profiles(from_date=START, to_date=END, registered_only=True)

        query, params = mock_cursor.execute.call_args[0]
        assert "registration_date >= %s" in query
        assert "registration_date <= %s" in query
        assert "COALESCE(registration_date, created_at) >=" not in query
        assert params == [START, END]
        assert rows[0]['id'] == 'u1'
        mock_conn.close.assert_called_once()

    @patch('marketdesk.repositories.analytics_repository.get_db_connection_dict')
    def test_default_falls_back_to_created_at(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = []

        AnalyticsRepository().fetch_profiles(from_date=START)

        query, params = mock_cursor.execute.call_args[0]
        assert "COALESCE(registration_date, created_at) >= %s" in query
        assert params == [START]

    @patch('marketdesk.repositories.analytics_repository.get_db_connection_dict')
    def test_no_range_is_unfiltered(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = []

        AnalyticsRepository().fetch_profiles(registered_only=True)

        query, params = mock_cursor.execute.call_args[0]
        assert "WHERE 1=1" in query
        assert params == []
