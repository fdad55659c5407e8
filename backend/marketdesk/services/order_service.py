"""
Order Service
Display formatting, list filtering and the order workflow

Workflow rules:
- confirm: confirmed = true; orders stored as pickup become ready_for_pickup, others
  (including a missing shipping method) processing
- status update: writes a tracking entry for completed / on_the_way / processing and
  recalculates the shop balance whenever the order enters or leaves `completed`; a
  failed balance update is logged and does not undo the status change
- cancel / reject: optional comment is stored as an order comment
- assign driver: moves the order on_the_way
- orders in a terminal status cannot be confirmed, cancelled, rejected or assigned
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from marketdesk.domain.order import (
    Order, OrderComment, TrackingEntry,
    ORDER_STATUSES, TRACKING_ACTIONS, DELIVERY, PICKUP,
    PROCESSING, ON_THE_WAY, COMPLETED, CANCELLED, REJECTED, READY_FOR_PICKUP,
    delivery_status, is_explicit_pickup, parse_json_field,
)
from marketdesk.domain.delivery import Driver
from marketdesk.repositories.order_repository import OrderRepository
from marketdesk.repositories.delivery_repository import DriverRepository
from marketdesk.services.balance_service import BalanceService
from marketdesk.services.order_calculations import order_totals

logger = logging.getLogger(__name__)

STATUS_TABS = ("all", "unconfirmed", PROCESSING, ON_THE_WAY, COMPLETED, READY_FOR_PICKUP, CANCELLED)
ORDER_TYPES = ("all", DELIVERY, PICKUP)


class OrderNotFoundError(LookupError):
    """Raised when an order id does not exist"""


def format_order_for_display(order: Order) -> Dict[str, Any]:
    """Flatten an order into the row shown by the orders list and preview"""
    shipping_address = parse_json_field(order.shipping_address)
    if not isinstance(shipping_address, dict):
        shipping_address = {}
    payment_method = parse_json_field(order.payment_method)

    product = order.product
    address = f"{shipping_address.get('address') or ''}, {shipping_address.get('city') or ''}, {shipping_address.get('zip') or ''}".strip()

    return {
        "id": order.id,
        "name": (product.title if product and product.title else None) or "Product",
        "image": product.images[0] if product and product.images else None,
        "buyer": order.buyer_name or shipping_address.get("name") or "Unknown Customer",
        "buyer_email": order.buyer_email,
        "shop_name": (product.shop_name if product else None) or "Unknown Shop",
        "shop": order.shop_id,
        "delivery_status": delivery_status(order.status),
        "city": shipping_address.get("city") or "Unknown City",
        "date": order.created_at.isoformat() if order.created_at else None,
        "total": f"${float(order.total or 0):.2f}",
        "status": order.display_status,
        "address": address,
        "items": [{
            "name": (product.title if product and product.title else None) or "Product",
            "quantity": 1,
            "price": float(product.price) if product and product.price is not None else 0.0,
        }],
        "shipping_method": parse_json_field(order.shipping_method),
        "shipping_address": shipping_address,
        "payment_method": payment_method,
        "product_id": order.product_id,
        "buyer_id": order.buyer_id,
        "delivery_type": order.delivery_type,
        "assigned_driver_id": order.assigned_driver_id,
        "assigned_driver": order.assigned_driver.model_dump() if order.assigned_driver else None,
        "assigned_delivery_company_id": order.assigned_delivery_company_id,
        "assigned_delivery_company": order.assigned_delivery_company.model_dump() if order.assigned_delivery_company else None,
        "confirmed": order.confirmed,
        "comment": order.comment or "",
        "delivery_method": order.delivery_method.model_dump(mode="json") if order.delivery_method else None,
        "delivery_location_method": order.delivery_location_method.model_dump(mode="json") if order.delivery_location_method else None,
        "selected_features": [f.model_dump(mode="json") for f in order.selected_features],
        "totals": order_totals(order),
    }


def matches_tab(row: Dict[str, Any], tab: str = "all", order_type: str = "all") -> bool:
    """
    Status tab and order type filter of the orders list

    processing / on_the_way / completed / ready_for_pickup only match
    confirmed orders (ready_for_pickup additionally pickup only); cancelled
    (or archived) matches cancelled and rejected orders.
    """
    status = row.get("status")
    confirmed = bool(row.get("confirmed"))

    if tab == "unconfirmed":
        matched = not confirmed
    elif tab in (PROCESSING, ON_THE_WAY, COMPLETED):
        matched = confirmed and status == tab
    elif tab == READY_FOR_PICKUP:
        matched = confirmed and status == READY_FOR_PICKUP and row.get("delivery_type") == PICKUP
    elif tab in (CANCELLED, "archived"):
        matched = status in (CANCELLED, REJECTED)
    else:
        matched = True

    if order_type in (DELIVERY, PICKUP):
        matched = matched and row.get("delivery_type") == order_type

    return matched


def matches_search(row: Dict[str, Any], search: Optional[str]) -> bool:
    """Case-insensitive match on id, product name, buyer, shop, city, delivery status and total"""
    if not search:
        return True
    needle = search.strip().lower()
    haystack = (
        str(row.get("id", "")),
        row.get("name") or "",
        row.get("buyer") or "",
        row.get("shop_name") or "",
        row.get("city") or "",
        row.get("delivery_status") or "",
        row.get("total") or "",
    )
    return any(needle in value.lower() for value in haystack)


def filter_orders(
    rows: Iterable[Dict[str, Any]],
    tab: str = "all",
    search: Optional[str] = None,
    order_type: str = "all",
    shop_ids: Optional[List[int]] = None
) -> List[Dict[str, Any]]:
    return [
        row for row in rows
        if matches_tab(row, tab, order_type)
        and matches_search(row, search)
        and (not shop_ids or row.get("shop") in shop_ids)
    ]


class OrderService:
    """
    Order workflow on top of the order repository

    Args:
        repository: OrderRepository (injectable for tests)
        balance_service: BalanceService used when orders enter or leave `completed`
        driver_repository: DriverRepository for the available drivers of a shop
    """

    def __init__(
        self,
        repository: Optional[OrderRepository] = None,
        balance_service: Optional[BalanceService] = None,
        driver_repository: Optional[DriverRepository] = None
    ):
        self.repository = repository or OrderRepository()
        self.balance_service = balance_service or BalanceService()
        self.driver_repository = driver_repository or DriverRepository()

    def get_order(self, order_id: int) -> Order:
        order = self.repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        return order

    def list_orders(
        self,
        accessible_shop_ids: Optional[List[int]],
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        shop_ids: Optional[List[int]] = None,
        tab: str = "all",
        search: Optional[str] = None,
        order_type: str = "all"
    ) -> List[Dict[str, Any]]:
        """Display rows of the caller's orders, newest first, filtered"""
        orders = self.repository.find_all(
            shop_ids=accessible_shop_ids,
            from_date=from_date,
            to_date=to_date
        )
        rows = [format_order_for_display(order) for order in orders]
        return filter_orders(rows, tab=tab, search=search, order_type=order_type, shop_ids=shop_ids)

    def _ensure_not_terminal(self, order: Order, action: str) -> None:
        if order.is_terminal:
            raise ValueError(f"Cannot {action} an order that is {order.display_status}")

    def _track(self, order_id: int, user_id: Optional[str], action: str) -> None:
        self.repository.add_tracking(order_id, user_id, action)

    def _save(self, order_id: int, fields: Dict[str, Any]) -> None:
        if not self.repository.update(order_id, fields):
            raise OrderNotFoundError(f"Order {order_id} not found")

    def confirm(self, order_id: int, user_id: Optional[str] = None) -> Order:
        order = self.get_order(order_id)
        self._ensure_not_terminal(order, "confirm")

        status = READY_FOR_PICKUP if is_explicit_pickup(order.shipping_method) else PROCESSING
        self._save(order_id, {"confirmed": True, "status": status})
        self._track(order_id, user_id, "Confirmed")
        logger.info(f"Order {order_id} confirmed ({status})")
        return self.get_order(order_id)

    def unconfirm(self, order_id: int, user_id: Optional[str] = None) -> Order:
        self.get_order(order_id)
        self._save(order_id, {"confirmed": False})
        logger.info(f"Order {order_id} unconfirmed")
        return self.get_order(order_id)

    def update_status(self, order_id: int, status: str, user_id: Optional[str] = None) -> Order:
        """
        Move an order to a new status

        Recalculates the owning shop's balance when the order enters or
        leaves `completed`.
        """
        if status not in ORDER_STATUSES:
            raise ValueError(f"Invalid status: {status}")

        order = self.get_order(order_id)
        previous = order.display_status

        self._save(order_id, {"status": status})

        action = TRACKING_ACTIONS.get(status)
        if action:
            self._track(order_id, user_id, action)

        if (status == COMPLETED or previous == COMPLETED) and status != previous and order.shop_id is not None:
            try:
                self.balance_service.recalculate(order.shop_id)
            except Exception as e:
                logger.warning(f"Balance update for shop {order.shop_id} failed after order {order_id} moved to {status}: {e}")

        logger.info(f"Order {order_id} status {previous} -> {status}")
        return self.get_order(order_id)

    def complete(self, order_id: int, user_id: Optional[str] = None) -> Order:
        return self.update_status(order_id, COMPLETED, user_id)

    def _close(self, order_id: int, status: str, action: str, verb: str,
               user_id: Optional[str], comment: Optional[str]) -> Order:
        order = self.get_order(order_id)
        self._ensure_not_terminal(order, verb)

        self._save(order_id, {"status": status})
        if comment and comment.strip():
            self.repository.add_comment(order_id, user_id, comment.strip())
        self._track(order_id, user_id, action)
        logger.info(f"Order {order_id} {status}")
        return self.get_order(order_id)

    def cancel(self, order_id: int, user_id: Optional[str] = None, comment: Optional[str] = None) -> Order:
        return self._close(order_id, CANCELLED, "Cancelled", "cancel", user_id, comment)

    def reject(self, order_id: int, user_id: Optional[str] = None, comment: Optional[str] = None) -> Order:
        return self._close(order_id, REJECTED, "Rejected", "reject", user_id, comment)

    def assign_driver(self, order_id: int, driver_id: int, user_id: Optional[str] = None) -> Order:
        order = self.get_order(order_id)
        self._ensure_not_terminal(order, "assign a driver to")

        self._save(order_id, {"assigned_driver_id": driver_id, "status": ON_THE_WAY})
        self._track(order_id, user_id, TRACKING_ACTIONS[ON_THE_WAY])
        logger.info(f"Order {order_id} assigned to driver {driver_id}")
        return self.get_order(order_id)

    def unassign_driver(self, order_id: int, user_id: Optional[str] = None) -> Order:
        self.get_order(order_id)
        self._save(order_id, {"assigned_driver_id": None})
        return self.get_order(order_id)

    def change_delivery_type(self, order_id: int, delivery_type: str, user_id: Optional[str] = None) -> Order:
        if delivery_type not in (DELIVERY, PICKUP):
            raise ValueError(f"Invalid delivery type: {delivery_type}")
        self.get_order(order_id)
        self._save(order_id, {"shipping_method": delivery_type})
        return self.get_order(order_id)

    def available_drivers(self, order: Order) -> List[Driver]:
        """Drivers of the delivery companies actively linked to the order's shop"""
        if order.shop_id is None:
            return []
        return self.driver_repository.find_for_shop(order.shop_id)

    # Comments and tracking

    def list_comments(self, order_id: int) -> List[OrderComment]:
        self.get_order(order_id)
        return self.repository.find_comments(order_id)

    def add_comment(self, order_id: int, user_id: Optional[str], comment: str) -> OrderComment:
        if not comment or not comment.strip():
            raise ValueError("Comment must not be empty")
        self.get_order(order_id)
        return self.repository.add_comment(order_id, user_id, comment.strip())

    def delete_comment(self, order_id: int, comment_id: int) -> None:
        if not self.repository.delete_comment(order_id, comment_id):
            raise OrderNotFoundError(f"Comment {comment_id} not found on order {order_id}")

    def list_tracking(self, order_id: int) -> List[TrackingEntry]:
        self.get_order(order_id)
        return self.repository.find_tracking(order_id)
