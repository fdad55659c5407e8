"""
Unit tests for the delivery repositories
"""
import pytest
from unittest.mock import patch
from datetime import datetime
from decimal import Decimal

from marketdesk.repositories.delivery_repository import (
    DeliveryCompanyRepository, DriverRepository,
)

COMPANY_ROW = {
    'id': 10, 'company_name': 'Fast Couriers', 'owner_name': 'Fay', 'company_number': None,
    'phone': None, 'email': None, 'address': None, 'details': None, 'logo_url': None,
    'cover_image_url': None, 'latitude': None, 'longitude': None,
    'created_at': datetime(2025, 1, 1), 'drivers_count': 3, 'cars_count': 2,
}


class TestDeliveryCompanyRepository:

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_find_by_id_nests_methods_and_locations(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = COMPANY_ROW
        mock_cursor.fetchall.side_effect = [
            [
                {'id': 1, 'label': 'Express', 'delivery_time': '24h', 'price': Decimal('20'), 'is_active': True},
                {'id': 2, 'label': 'Economy', 'delivery_time': '3d', 'price': None, 'is_active': False},
            ],
            [
                {'id': 5, 'delivery_method_id': 1, 'location_name': 'North',
                 'price_addition': Decimal('5'), 'is_active': True},
            ],
        ]

        company = DeliveryCompanyRepository().find_by_id(10)

        assert company.drivers_count == 3
        assert [m.label for m in company.methods] == ['Express', 'Economy']
        assert company.methods[0].locations[0].location_name == 'North'
        assert company.methods[1].price == Decimal('0')
        assert company.methods[1].locations == []
        assert mock_cursor.execute.call_args_list[2][0][1] == ([1, 2],)

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_find_by_id_missing(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = None

        assert DeliveryCompanyRepository().find_by_id(404) is None
        assert mock_cursor.execute.call_count == 1

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_create_inserts_methods_in_one_transaction(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.side_effect = [{'id': 10}, {'id': 1}]

        company_id = DeliveryCompanyRepository().create(
            {'company_name': 'Fast Couriers', 'owner_name': 'Fay'},
            [{'label': 'Express', 'price': 20, 'locations': [{'location_name': 'North', 'price_addition': 5}]}],
        )

        assert company_id == 10
        # company, method, location
        assert mock_cursor.execute.call_count == 3
        assert mock_cursor.execute.call_args_list[2][0][1] == (1, 'North', 5, True)
        mock_conn.commit.assert_called_once()

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_create_rolls_back_when_a_method_fails(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'id': 10}
        mock_cursor.execute.side_effect = [None, Exception("bad method")]

        with pytest.raises(Exception, match="bad method"):
            DeliveryCompanyRepository().create({'company_name': 'Fast'}, [{'label': 'Express'}])

        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_update_missing_company(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = None

        assert DeliveryCompanyRepository().update(404, {'phone': '123'}) is False
        mock_conn.commit.assert_not_called()

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_update_replaces_methods(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'id': 10}

        updated = DeliveryCompanyRepository().update(10, {}, methods=[])

        assert updated is True
        statements = [c[0][0] for c in mock_cursor.execute.call_args_list]
        assert any("DELETE FROM delivery_methods" in s for s in statements)
        assert not any("UPDATE delivery_companies" in s for s in statements)

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_statistics_data_filters_confirmed_delivery_orders(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.side_effect = [
            [{'id': 1, 'status': 'processing', 'shop': 1, 'assigned_driver_id': None, 'created_at': None}],
            [{'id': 10, 'company_name': 'Fast', 'logo_url': None, 'drivers_count': 1, 'cars_count': 0}],
            [{'id': 1, 'delivery_companies_id': 10}],
        ]

        since = datetime(2025, 6, 1)
        data = DeliveryCompanyRepository().get_statistics_data(since=since)

        orders_sql, orders_params = mock_cursor.execute.call_args_list[0][0]
        assert "o.confirmed = true" in orders_sql
        assert "o.created_at >= %s" in orders_sql
        assert orders_params == [since]
        assert data['shops'] == [{'id': 1, 'delivery_companies_id': 10}]


class TestDriverRepository:

    @patch('marketdesk.repositories.delivery_repository.get_db_connection_dict')
    def test_find_for_shop_uses_active_links(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = [{
            'id': 7, 'name': 'Dan Driver', 'phone': None, 'id_number': None, 'avatar_url': None,
            'delivery_companies_id': 10, 'created_at': None, 'company_name': 'Fast Couriers',
        }]

        drivers = DriverRepository().find_for_shop(1)

        assert drivers[0].company_name == 'Fast Couriers'
        sql, params = mock_cursor.execute.call_args[0]
        assert "shop_delivery_companies" in sql
        assert "is_active = true" in sql
        assert params == (1,)
