"""
Order price breakdown

An order's total is the product price plus the delivery fee (method price
and location price addition) plus the price additions of every selected
product feature.
"""
from decimal import Decimal
from typing import Dict

from marketdesk.domain.order import Order

ZERO = Decimal("0")


def calculate_subtotal(order: Order) -> Decimal:
    if order.product is None or order.product.price is None:
        return ZERO
    return Decimal(order.product.price)


def calculate_delivery_fee(order: Order) -> Decimal:
    """0 without a delivery method; otherwise method price + location addition"""
    if order.delivery_method is None:
        return ZERO

    method_price = order.delivery_method.price or ZERO
    location_addition = ZERO
    if order.delivery_location_method is not None:
        location_addition = order.delivery_location_method.price_addition or ZERO

    return Decimal(method_price) + Decimal(location_addition)


def calculate_features_total(order: Order) -> Decimal:
    return sum((Decimal(f.price_addition or ZERO) for f in order.selected_features), ZERO)


def calculate_total(order: Order) -> Decimal:
    return calculate_subtotal(order) + calculate_delivery_fee(order) + calculate_features_total(order)


def has_additions(order: Order) -> bool:
    """True when the order carries a delivery method or at least one selected feature"""
    return order.delivery_method is not None or len(order.selected_features) > 0


def order_totals(order: Order) -> Dict[str, object]:
    """Breakdown as JSON-friendly floats"""
    return {
        "subtotal": float(calculate_subtotal(order)),
        "delivery_fee": float(calculate_delivery_fee(order)),
        "features_total": float(calculate_features_total(order)),
        "total": float(calculate_total(order)),
        "has_additions": has_additions(order),
    }
