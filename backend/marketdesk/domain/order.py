"""
Order Domain Models

Represents marketplace orders, the data joined onto them (product, buyer,
driver, delivery pricing, selected product features) and the comments and
tracking entries recorded while an order moves through its workflow.

Each order is for a single product; its shop is the product's shop.
"""
import json
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Any, Literal
from datetime import datetime
from decimal import Decimal


# Canonical statuses written by the back-office
PROCESSING = "processing"
ON_THE_WAY = "on_the_way"
COMPLETED = "completed"
CANCELLED = "cancelled"
REJECTED = "rejected"
READY_FOR_PICKUP = "ready_for_pickup"

ORDER_STATUSES = (PROCESSING, ON_THE_WAY, COMPLETED, CANCELLED, REJECTED, READY_FOR_PICKUP)
TERMINAL_STATUSES = frozenset({COMPLETED, CANCELLED, REJECTED})

DELIVERY = "delivery"
PICKUP = "pickup"

# Older storefront builds wrote title-case labels; map everything onto the canonical set
STATUS_ALIASES = {
    "Active": PROCESSING,
    "Completed": COMPLETED,
    "Cancelled": CANCELLED,
    "Rejected": REJECTED,
    "Delivered": COMPLETED,
    "Pending": PROCESSING,
    "Shipped": ON_THE_WAY,
    "On The Way": ON_THE_WAY,
    "Processing": PROCESSING,
    "Ready For Pickup": READY_FOR_PICKUP,
    PROCESSING: PROCESSING,
    ON_THE_WAY: ON_THE_WAY,
    COMPLETED: COMPLETED,
    CANCELLED: CANCELLED,
    REJECTED: REJECTED,
    READY_FOR_PICKUP: READY_FOR_PICKUP,
}

DELIVERY_STATUS_MAP = {
    "Active": "preparing",
    "Completed": "delivered",
    "Cancelled": "cancelled",
    "Delivered": "delivered",
    "Pending": "pending",
    "Shipped": "shipped",
}

# Tracking action written when an order moves into a status
TRACKING_ACTIONS = {
    COMPLETED: "Completed",
    ON_THE_WAY: "On The Way",
    PROCESSING: "Processing",
}


def normalize_status(raw: Optional[str]) -> str:
    """Map a stored status label onto the canonical status (unknown -> processing)"""
    return STATUS_ALIASES.get(raw or "", PROCESSING)


def delivery_status(raw: Optional[str]) -> str:
    """Delivery status shown to couriers (unknown -> pending)"""
    return DELIVERY_STATUS_MAP.get(raw or "", "pending")


def parse_json_field(value: Any) -> Any:
    """
    Parse a JSON text column leniently

    Strings are decoded (invalid JSON -> {}); other values are returned
    as-is, with None/empty mapped to {}.
    """
    if isinstance(value, str):
        try:
            return json.loads(value)
        except (json.JSONDecodeError, ValueError):
            return {}
    return value or {}


def resolve_delivery_type(shipping_method: Any) -> str:
    """shipping_method is stored either as `delivery` or as the JSON string `"delivery"`"""
    if shipping_method == DELIVERY or shipping_method == '"delivery"':
        return DELIVERY
    return PICKUP


def is_explicit_pickup(shipping_method: Any) -> bool:
    """True only for orders stored as `pickup` (or `"pickup"`); missing values are not pickups"""
    return shipping_method == PICKUP or shipping_method == '"pickup"'


class SelectedFeature(BaseModel):
    """A product feature value chosen by the buyer (e.g. Size: XL, +5.00)"""
    label: Optional[str] = None
    value: Optional[str] = None
    price_addition: Decimal = Decimal("0")

    @field_validator("price_addition", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return v if v is not None else Decimal("0")


class DeliveryMethodRef(BaseModel):
    id: int
    label: Optional[str] = None
    delivery_time: Optional[str] = None
    price: Optional[Decimal] = None


class DeliveryLocationRef(BaseModel):
    id: int
    location_name: Optional[str] = None
    price_addition: Optional[Decimal] = None


class DriverRef(BaseModel):
    id: int
    name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class CompanyRef(BaseModel):
    id: int
    company_name: Optional[str] = None


class OrderProduct(BaseModel):
    """The ordered product as joined onto the order"""
    id: int
    title: Optional[str] = None
    price: Optional[Decimal] = None
    images: List[str] = Field(default_factory=list)
    shop: Optional[int] = None
    shop_name: Optional[str] = None

    @field_validator("images", mode="before")
    @classmethod
    def none_images(cls, v):
        return v or []


class Order(BaseModel):
    """
    Order domain model

    Fields:
        status: Status label as stored (see normalize_status)
        confirmed: Whether the shop accepted the order
        shipping_method: `delivery` / `pickup` (sometimes JSON-encoded)
        shipping_address: JSON object with name, address, city, zip
        selected_feature_value_ids: products_features_values ids chosen by the buyer
        total: Amount charged, as stored by the storefront

        # Related data (from JOINs - optional)
        product: The ordered product with its shop
        buyer_name / buyer_email: From profiles
        assigned_driver / assigned_delivery_company: Courier assignment
        delivery_method / delivery_location_method: Delivery pricing
        selected_features: Resolved feature values
    """

    id: int = Field(..., description="Internal order ID")
    product_id: Optional[int] = None
    buyer_id: Optional[str] = None
    shop: Optional[int] = None
    status: Optional[str] = None
    confirmed: bool = False
    comment: Optional[str] = None
    shipping_method: Optional[Any] = None
    shipping_address: Optional[Any] = None
    payment_method: Optional[Any] = None
    assigned_driver_id: Optional[int] = None
    assigned_delivery_company_id: Optional[int] = None
    delivery_method_id: Optional[int] = None
    delivery_location_method_id: Optional[int] = None
    selected_feature_value_ids: List[int] = Field(default_factory=list)
    total: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    # Related data (from JOINs - optional)
    product: Optional[OrderProduct] = None
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    assigned_driver: Optional[DriverRef] = None
    assigned_delivery_company: Optional[CompanyRef] = None
    delivery_method: Optional[DeliveryMethodRef] = None
    delivery_location_method: Optional[DeliveryLocationRef] = None
    selected_features: List[SelectedFeature] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("selected_feature_value_ids", mode="before")
    @classmethod
    def none_ids(cls, v):
        return v or []

    @property
    def shop_id(self) -> Optional[int]:
        if self.product and self.product.shop is not None:
            return self.product.shop
        return self.shop

    @property
    def display_status(self) -> str:
        return normalize_status(self.status)

    @property
    def delivery_type(self) -> str:
        return resolve_delivery_type(self.shipping_method)

    @property
    def is_terminal(self) -> bool:
        return self.display_status in TERMINAL_STATUSES


class OrderCreate(BaseModel):
    """Schema for creating an order from the back-office"""
    product_id: int
    buyer_id: Optional[str] = None
    status: Literal[ORDER_STATUSES] = PROCESSING
    confirmed: bool = False
    shipping_method: Literal["delivery", "pickup"] = DELIVERY
    shipping_address: Optional[dict] = None
    payment_method: Optional[dict] = None
    delivery_method_id: Optional[int] = None
    delivery_location_method_id: Optional[int] = None
    selected_feature_value_ids: List[int] = Field(default_factory=list)
    total: Optional[Decimal] = Field(None, ge=0)


class OrderUpdate(BaseModel):
    """Schema for editing an order"""
    buyer_id: Optional[str] = None
    shipping_address: Optional[dict] = None
    payment_method: Optional[dict] = None
    delivery_method_id: Optional[int] = None
    delivery_location_method_id: Optional[int] = None
    total: Optional[Decimal] = Field(None, ge=0)
    comment: Optional[str] = None


class OrderComment(BaseModel):
    id: int
    order_id: int
    user_id: Optional[str] = None
    author_name: Optional[str] = None
    comment: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TrackingEntry(BaseModel):
    id: int
    order_id: int
    user_id: Optional[str] = None
    author_name: Optional[str] = None
    action: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
