"""
Unit tests for receipts and shop statements
"""
import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

from marketdesk.domain.shop import Shop
from marketdesk.services.accounting_service import (
    build_receipt, search_and_sort_receipts, build_statement, AccountingService,
)

ORDERS = [
    {"id": 12, "created_at": datetime(2025, 6, 3), "price": Decimal("40.00"), "product_title": "Bowl",
     "shop_id": 1, "shop_name": "Clay Corner", "buyer_name": "Bea Buyer"},
    {"id": 10, "created_at": datetime(2025, 6, 1), "price": Decimal("100.00"), "product_title": "Ceramic Mug",
     "shop_id": 1, "shop_name": "Clay Corner", "buyer_name": None},
]

TRANSACTIONS = [
    {"id": 1, "type": "recharge", "amount": Decimal("25.00"), "description": "Top up",
     "created_at": datetime(2025, 6, 2)},
    {"id": 2, "type": "withdraw", "amount": Decimal("30.00"), "description": None,
     "created_at": datetime(2025, 6, 4)},
]


class TestReceipts:

    def test_receipt_shape(self):
        receipt = build_receipt(ORDERS[1])

        assert receipt["invoice_number"] == "RCP-10"
        assert receipt["order_id"] == 10
        assert receipt["customer"] == "Unknown Customer"
        assert receipt["total_amount"] == 100.0

    def test_missing_price_is_zero(self):
        assert build_receipt({"id": 1, "price": None})["total_amount"] == 0.0

    def test_search_by_invoice_or_customer(self):
        receipts = [build_receipt(o) for o in ORDERS]

        assert [r["id"] for r in search_and_sort_receipts(receipts, search="bea")] == [12]
        assert [r["id"] for r in search_and_sort_receipts(receipts, search="rcp-10")] == [10]

    def test_invoice_numbers_sort_numerically(self):
        receipts = [build_receipt({"id": 9}), build_receipt({"id": 10})]

        ordered = search_and_sort_receipts(receipts, sort_by="invoice_number", direction="asc")

        assert [r["invoice_number"] for r in ordered] == ["RCP-9", "RCP-10"]

    def test_newest_first_by_default(self):
        receipts = [build_receipt(o) for o in reversed(ORDERS)]

        assert [r["id"] for r in search_and_sort_receipts(receipts)] == [12, 10]

    def test_invalid_sort_field(self):
        with pytest.raises(ValueError, match="Invalid sort field"):
            search_and_sort_receipts([], sort_by="shop_id")


class TestBuildStatement:

    def test_totals(self):
        totals = build_statement(ORDERS, TRANSACTIONS, 0.10)["totals"]

        assert totals["income"] == 165.0
        assert totals["expenses"] == 44.0
        assert totals["net"] == 121.0
        assert totals["orders_count"] == 2

    def test_lines_newest_first(self):
        lines = build_statement(ORDERS, TRANSACTIONS, 0.10)["lines"]

        assert lines[0]["id"] == "transaction-2"
        assert lines[0]["title"] == "Withdrawal"
        assert lines[0]["type"] == "expense"
        assert [line["id"] for line in lines[1:3]] == ["order-12", "commission-12"]
        assert lines[2]["amount"] == 4.0
        assert lines[2]["description"] == "10% of RCP-12"

    def test_unknown_transaction_type_is_skipped(self):
        statement = build_statement([], [{"id": 3, "type": "refund", "amount": 5, "created_at": None}])

        assert statement["lines"] == []
        assert statement["totals"]["net"] == 0.0


class TestAccountingService:

    def test_receipts_are_scoped(self):
        repo = Mock()
        repo.fetch_completed_orders.return_value = ORDERS

        receipts = AccountingService(repository=repo, shop_repository=Mock()).get_receipts(shop_ids=[1, 2])

        assert len(receipts) == 2
        repo.fetch_completed_orders.assert_called_once_with(shop_ids=[1, 2], shop_id=None)

    def test_statement(self):
        repo = Mock()
        repo.fetch_completed_orders.return_value = ORDERS
        repo.fetch_transactions.return_value = TRANSACTIONS
        shops = Mock()
        shops.find_by_id.return_value = Shop(id=1, shop_name="Clay Corner")
        start = datetime(2025, 6, 1)

        statement = AccountingService(repository=repo, shop_repository=shops).get_statement(1, from_date=start)

        assert statement["shop"] == {"id": 1, "shop_name": "Clay Corner"}
        assert statement["totals"]["net"] == 121.0
        repo.fetch_completed_orders.assert_called_once_with(shop_id=1, from_date=start, to_date=None)
        repo.fetch_transactions.assert_called_once_with(1, from_date=start, to_date=None)

    def test_statement_for_missing_shop(self):
        shops = Mock()
        shops.find_by_id.return_value = None

        with pytest.raises(LookupError, match="Shop 9 not found"):
            AccountingService(repository=Mock(), shop_repository=shops).get_statement(9)

    def test_statement_with_reversed_range(self):
        with pytest.raises(ValueError):
            AccountingService(repository=Mock(), shop_repository=Mock()).get_statement(
                1, from_date=datetime(2025, 7, 1), to_date=datetime(2025, 6, 1)
            )
