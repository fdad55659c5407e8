"""
API tests for /api/v1/accounting
"""
from unittest.mock import patch

RECEIPT = {
    "id": 10, "invoice_number": "RCP-10", "order_id": 10, "customer": "Bea Buyer",
    "shop_id": 1, "shop_name": "Clay Corner", "product_title": "Ceramic Mug",
    "total_amount": 100.0, "created_at": None,
}


class TestReceiptsApi:

    @patch('marketdesk.api.accounting.AccountingService')
    def test_owner_receipts_are_scoped(self, mock_service_class, client, login, shop_owner):
        login(shop_owner)
        mock_service_class.return_value.get_receipts.return_value = [RECEIPT]

        response = client.get("/api/v1/accounting/receipts?search=bea")

        assert response.status_code == 200
        assert response.json()["data"][0]["invoice_number"] == "RCP-10"
        mock_service_class.return_value.get_receipts.assert_called_once_with(
            shop_ids=[1, 2], shop_id=None, search="bea", sort_by="created_at", direction="desc"
        )

    def test_foreign_shop_filter_is_forbidden(self, client, login, shop_owner):
        login(shop_owner)

        assert client.get("/api/v1/accounting/receipts?shop_id=3").status_code == 403

    @patch('marketdesk.api.accounting.AccountingService')
    def test_invalid_sort_field(self, mock_service_class, client, login, super_admin):
        login(super_admin)
        mock_service_class.return_value.get_receipts.side_effect = ValueError("Invalid sort field: shop_id")

        response = client.get("/api/v1/accounting/receipts?sort_by=shop_id")

        assert response.status_code == 400


class TestStatementsApi:

    @patch('marketdesk.api.accounting.AccountingService')
    def test_owner_gets_own_statement(self, mock_service_class, client, login, shop_owner):
        login(shop_owner)
        mock_service_class.return_value.get_statement.return_value = {
            "lines": [], "totals": {"income": 0.0, "expenses": 0.0, "net": 0.0, "orders_count": 0},
            "shop": {"id": 1, "shop_name": "Clay Corner"}, "from_date": None, "to_date": None,
        }

        response = client.get("/api/v1/accounting/statements/1")

        assert response.status_code == 200
        assert response.json()["data"]["shop"]["shop_name"] == "Clay Corner"
        mock_service_class.return_value.get_statement.assert_called_once_with(1, from_date=None, to_date=None)

    def test_foreign_statement_is_forbidden(self, client, login, shop_owner):
        login(shop_owner)

        assert client.get("/api/v1/accounting/statements/3").status_code == 403

    @patch('marketdesk.api.accounting.AccountingService')
    def test_missing_shop(self, mock_service_class, client, login, super_admin):
        login(super_admin)
        mock_service_class.return_value.get_statement.side_effect = LookupError("Shop 42 not found")

        assert client.get("/api/v1/accounting/statements/42").status_code == 404

    @patch('marketdesk.api.accounting.AccountingService')
    def test_reversed_range(self, mock_service_class, client, login, super_admin):
        login(super_admin)
        mock_service_class.return_value.get_statement.side_effect = ValueError("from_date must not be after to_date")

        response = client.get(
            "/api/v1/accounting/statements/1?from_date=2025-07-01T00:00:00&to_date=2025-06-01T00:00:00"
        )

        assert response.status_code == 400
