"""
Accounting Service
Receipts for completed orders and per-shop statements

A receipt is issued for every completed order: RCP-<order id>, billed to the
buyer, for the ordered product's price.

A shop statement lists, over a date range:
- completed orders as income (product price)
- the platform commission on each of them as an expense
- recharge transactions as income, withdrawals as expenses
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from marketdesk.core.config import settings
from marketdesk.repositories.accounting_repository import AccountingRepository
from marketdesk.repositories.shop_repository import ShopRepository
from marketdesk.services.metrics import to_float, round2, as_naive

logger = logging.getLogger(__name__)

RECEIPT_SORT_FIELDS = ("created_at", "total_amount", "customer", "invoice_number")

UNKNOWN_CUSTOMER = "Unknown Customer"


def invoice_number(order_id: int) -> str:
    return f"RCP-{order_id}"


def build_receipt(order: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": order["id"],
        "invoice_number": invoice_number(order["id"]),
        "order_id": order["id"],
        "customer": order.get("buyer_name") or UNKNOWN_CUSTOMER,
        "shop_id": order.get("shop_id"),
        "shop_name": order.get("shop_name"),
        "product_title": order.get("product_title"),
        "total_amount": round2(to_float(order.get("price"))),
        "created_at": order.get("created_at"),
    }


def search_and_sort_receipts(
    receipts: List[Dict[str, Any]],
    search: Optional[str] = None,
    sort_by: str = "created_at",
    direction: str = "desc"
) -> List[Dict[str, Any]]:
    """Filter receipts by invoice number or customer and sort them"""
    if sort_by not in RECEIPT_SORT_FIELDS:
        raise ValueError(f"Invalid sort field: {sort_by}")

    if search:
        needle = search.lower()
        receipts = [
            r for r in receipts
            if needle in r["invoice_number"].lower() or needle in r["customer"].lower()
        ]

    def key(receipt):
        value = receipt.get(sort_by)
        if sort_by == "created_at":
            return as_naive(value) or datetime.min
        if sort_by == "invoice_number":
            return receipt["order_id"]
        return value.lower() if isinstance(value, str) else value

    return sorted(receipts, key=key, reverse=(direction == "desc"))


def build_statement(
    orders: List[Dict[str, Any]],
    transactions: List[Dict[str, Any]],
    commission_rate: float = 0.10
) -> Dict[str, Any]:
    """
    Statement lines and totals for one shop

    Args:
        orders: Completed order rows of the shop (id, created_at, price, product_title)
        transactions: Shop transaction rows (id, type, amount, description, created_at)
        commission_rate: Platform share of each order

    Returns:
        Dict with lines (newest first) and income, expenses and net totals
    """
    lines: List[Dict[str, Any]] = []

    for order in orders:
        price = to_float(order.get("price"))
        title = order.get("product_title") or f"Order {order['id']}"
        lines.append({
            "id": f"order-{order['id']}",
            "title": invoice_number(order["id"]),
            "description": title,
            "amount": round2(price),
            "type": "income",
            "created_at": order.get("created_at"),
        })
        lines.append({
            "id": f"commission-{order['id']}",
            "title": "Platform commission",
            "description": f"{commission_rate * 100:g}% of {invoice_number(order['id'])}",
            "amount": round2(price * commission_rate),
            "type": "expense",
            "created_at": order.get("created_at"),
        })

    for transaction in transactions:
        kind = transaction.get("type")
        if kind not in ("recharge", "withdraw"):
            logger.warning(f"Skipping transaction {transaction.get('id')} with unknown type {kind!r}")
            continue
        lines.append({
            "id": f"transaction-{transaction['id']}",
            "title": "Recharge" if kind == "recharge" else "Withdrawal",
            "description": transaction.get("description"),
            "amount": round2(to_float(transaction.get("amount"))),
            "type": "income" if kind == "recharge" else "expense",
            "created_at": transaction.get("created_at"),
        })

    lines.sort(key=lambda line: as_naive(line["created_at"]) or datetime.min, reverse=True)

    income = sum(line["amount"] for line in lines if line["type"] == "income")
    expenses = sum(line["amount"] for line in lines if line["type"] == "expense")

    return {
        "lines": lines,
        "totals": {
            "income": round2(income),
            "expenses": round2(expenses),
            "net": round2(income - expenses),
            "orders_count": len(orders),
        },
    }


class AccountingService:
    """Loads completed orders and transactions and builds receipts and statements"""

    def __init__(
        self,
        repository: Optional[AccountingRepository] = None,
        shop_repository: Optional[ShopRepository] = None
    ):
        self.repository = repository or AccountingRepository()
        self.shop_repository = shop_repository or ShopRepository()

    def get_receipts(
        self,
        shop_ids: Optional[List[int]] = None,
        shop_id: Optional[int] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        direction: str = "desc"
    ) -> List[Dict[str, Any]]:
        orders = self.repository.fetch_completed_orders(shop_ids=shop_ids, shop_id=shop_id)
        receipts = [build_receipt(order) for order in orders]
        return search_and_sort_receipts(receipts, search, sort_by, direction)

    def get_statement(
        self,
        shop_id: int,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Statement of one shop

        Raises:
            LookupError: shop does not exist
            ValueError: from_date after to_date
        """
        if from_date and to_date and from_date > to_date:
            raise ValueError("from_date must not be after to_date")

        shop = self.shop_repository.find_by_id(shop_id)
        if not shop:
            raise LookupError(f"Shop {shop_id} not found")

        orders = self.repository.fetch_completed_orders(shop_id=shop_id, from_date=from_date, to_date=to_date)
        transactions = self.repository.fetch_transactions(shop_id, from_date=from_date, to_date=to_date)
        logger.debug(f"Statement of shop {shop_id}: {len(orders)} orders, {len(transactions)} transactions")

        statement = build_statement(orders, transactions, settings.DEFAULT_COMMISSION_RATE)
        statement["shop"] = {"id": shop.id, "shop_name": shop.shop_name}
        statement["from_date"] = from_date
        statement["to_date"] = to_date
        return statement
