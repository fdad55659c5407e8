"""
Domain Layer - Business Entities

This layer contains Pydantic models representing marketplace rows and the
payloads used to create or update them.
"""
from marketdesk.domain.profile import Profile, UserShop
from marketdesk.domain.shop import Shop, ShopTransaction
from marketdesk.domain.product import Product, Category
from marketdesk.domain.order import Order, OrderComment, TrackingEntry, SelectedFeature
from marketdesk.domain.delivery import DeliveryCompany, DeliveryMethod, Driver, Car
from marketdesk.domain.license import License, Subscription
from marketdesk.domain.catalog import Subcategory, Brand, ShopCategory, ShopSubcategory

__all__ = [
    'Profile', 'UserShop',
    'Shop', 'ShopTransaction',
    'Product', 'Category',
    'Order', 'OrderComment', 'TrackingEntry', 'SelectedFeature',
    'DeliveryCompany', 'DeliveryMethod', 'Driver', 'Car',
    'License', 'Subscription',
    'Subcategory', 'Brand', 'ShopCategory', 'ShopSubcategory',
]
