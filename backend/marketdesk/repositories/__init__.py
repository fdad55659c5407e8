"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.
"""
from marketdesk.repositories.shop_repository import ShopRepository
from marketdesk.repositories.product_repository import ProductRepository, CategoryRepository
from marketdesk.repositories.order_repository import OrderRepository
from marketdesk.repositories.delivery_repository import (
    DeliveryCompanyRepository, DriverRepository, CarRepository,
)
from marketdesk.repositories.profile_repository import ProfileRepository
from marketdesk.repositories.license_repository import LicenseRepository
from marketdesk.repositories.analytics_repository import AnalyticsRepository
from marketdesk.repositories.catalog_repository import (
    SubcategoryRepository, BrandRepository, ShopCategoryRepository, ShopSubcategoryRepository,
)
from marketdesk.repositories.accounting_repository import AccountingRepository

__all__ = [
    'ShopRepository',
    'ProductRepository',
    'CategoryRepository',
    'OrderRepository',
    'DeliveryCompanyRepository',
    'DriverRepository',
    'CarRepository',
    'ProfileRepository',
    'LicenseRepository',
    'AnalyticsRepository',
    'SubcategoryRepository',
    'BrandRepository',
    'ShopCategoryRepository',
    'ShopSubcategoryRepository',
    'AccountingRepository',
]
