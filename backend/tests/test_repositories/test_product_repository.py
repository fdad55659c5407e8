"""
Unit tests for ProductRepository and CategoryRepository

These tests validate repository logic without requiring a database connection.
"""
import pytest
from unittest.mock import patch
from datetime import datetime
from decimal import Decimal

from marketdesk.repositories.product_repository import ProductRepository, CategoryRepository
from marketdesk.domain.product import Product, Category


def product_row(**overrides):
    row = {
        'id': 5,
        'title': 'Ceramic Mug',
        'desc': 'Hand thrown',
        'price': Decimal('100.00'),
        'shop': 1,
        'category': 2,
        'images': ['https://cdn.test/mug.png'],
        'view_count': 40,
        'cart_count': None,
        'created_at': datetime(2025, 5, 1),
        'shop_name': 'Clay Corner',
        'category_name': 'Kitchen',
    }
    row.update(overrides)
    return row


class TestProductRepository:
    """Test ProductRepository methods"""

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_find_by_id_returns_product(self, mock_get_conn, mock_db):
        """find_by_id maps the joined row to a Product"""
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = product_row()

        product = ProductRepository().find_by_id(5)

        assert isinstance(product, Product)
        assert product.title == 'Ceramic Mug'
        assert product.shop_name == 'Clay Corner'
        assert product.category_name == 'Kitchen'
        assert product.cart_count == 0
        assert product.cover_image == 'https://cdn.test/mug.png'

        mock_cursor.execute.assert_called_once()
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_find_by_id_returns_none_when_not_found(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = None

        assert ProductRepository().find_by_id(999) is None

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_find_all_returns_products_and_count(self, mock_get_conn, mock_db):
        """find_all applies scope and filters to both the count and the page"""
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'total': 2}
        mock_cursor.fetchall.return_value = [product_row(), product_row(id=6, images=None)]

        products, total = ProductRepository().find_all(
            shop_ids=[1, 2], category_id=2, search='mug', limit=10, offset=20
        )

        assert total == 2
        assert [p.id for p in products] == [5, 6]
        assert products[1].images == []

        count_sql, count_params = mock_cursor.execute.call_args_list[0][0]
        assert "p.shop = ANY(%s)" in count_sql
        assert "p.category = %s" in count_sql
        assert "p.title ILIKE %s" in count_sql
        assert count_params == [[1, 2], 2, '%mug%']

        _, page_params = mock_cursor.execute.call_args_list[1][0]
        assert page_params == [[1, 2], 2, '%mug%', 10, 20]

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_find_all_by_subcategory_and_brand(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'total': 1}
        mock_cursor.fetchall.return_value = [
            product_row(subcategory_id=7, subcategory_name='Mugs', brand_id=3, brand_name='Kiln Co')
        ]

        products, _ = ProductRepository().find_all(subcategory_id=7, brand_id=3)

        count_sql, count_params = mock_cursor.execute.call_args_list[0][0]
        assert "p.subcategory_id = %s" in count_sql
        assert "p.brand_id = %s" in count_sql
        assert count_params == [7, 3]
        assert products[0].subcategory_name == 'Mugs'
        assert products[0].to_dict()['brand_name'] == 'Kiln Co'

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_find_all_with_no_accessible_shops(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = {'total': 0}
        mock_cursor.fetchall.return_value = []

        products, total = ProductRepository().find_all(shop_ids=[])

        assert products == []
        count_sql = mock_cursor.execute.call_args_list[0][0][0]
        assert "1=0" in count_sql

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_update_without_fields_reads_product(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = product_row()

        product = ProductRepository().update(5, {'view_count': 9000})

        assert product.id == 5
        mock_conn.commit.assert_not_called()

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_update_quotes_desc_column(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.return_value = product_row(desc='Glazed')

        product = ProductRepository().update(5, {'desc': 'Glazed'})

        sql, params = mock_cursor.execute.call_args[0]
        assert '"desc" = %s' in sql
        assert params == ['Glazed', 5]
        assert product.desc == 'Glazed'
        mock_conn.commit.assert_called_once()

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_create_rolls_back_on_error(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.execute.side_effect = Exception("violates foreign key")

        with pytest.raises(Exception, match="foreign key"):
            ProductRepository().create({'title': 'Mug', 'price': 10, 'shop': 99})

        mock_conn.rollback.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_delete(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchone.side_effect = [{'id': 5}, None]

        repo = ProductRepository()
        assert repo.delete(5) is True
        assert repo.delete(5) is False


class TestCategoryRepository:

    @patch('marketdesk.repositories.product_repository.get_db_connection_dict')
    def test_find_all(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = [
            {'id': 2, 'title': 'Kitchen', 'desc': None, 'image_url': None, 'created_at': None},
        ]

        categories = CategoryRepository().find_all()

        assert categories == [Category(id=2, title='Kitchen')]
