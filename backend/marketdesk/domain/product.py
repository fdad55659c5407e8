"""
Product Domain Models

Represents a product listed by a shop and the categories used to group
products.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP


def _two_decimals(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class Product(BaseModel):
    """
    Product domain model - represents a product in a shop's catalog

    Fields:
        id: Internal product ID
        title: Product title
        desc: Product description
        price: Sale price
        shop: Owning shop ID
        shop_name: Shop name (from JOIN)
        category: Category ID
        category_name: Category title (from JOIN)
        subcategory_id / subcategory_name: Subcategory (categories_sub)
        brand_id / brand_name: Brand (categories_brands)
        images: Public image URLs (first one is the cover)
        view_count: Product page views
        cart_count: Times added to a cart
    """

    id: int = Field(..., description="Internal product ID")
    title: str = Field(..., description="Product title")
    desc: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(Decimal("0"), description="Sale price", ge=0)
    shop: Optional[int] = Field(None, description="Owning shop ID")
    shop_name: Optional[str] = Field(None, description="Shop name (from JOIN)")
    category: Optional[int] = Field(None, description="Category ID")
    category_name: Optional[str] = Field(None, description="Category title (from JOIN)")
    subcategory_id: Optional[int] = None
    subcategory_name: Optional[str] = Field(None, description="Subcategory title (from JOIN)")
    brand_id: Optional[int] = None
    brand_name: Optional[str] = Field(None, description="Brand name (from JOIN)")
    images: List[str] = Field(default_factory=list)
    view_count: int = 0
    cart_count: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("images", mode="before")
    @classmethod
    def none_images(cls, v):
        return v or []

    @property
    def cover_image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump(mode="json")
        data["price"] = float(self.price)
        data["cover_image"] = self.cover_image
        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    title: str
    desc: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    shop: int
    category: Optional[int] = None
    subcategory_id: Optional[int] = None
    brand_id: Optional[int] = None
    images: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title is required")
        return v.strip()

    @field_validator("price")
    @classmethod
    def round_price(cls, v: Decimal) -> Decimal:
        return _two_decimals(v)


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    title: Optional[str] = None
    desc: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    shop: Optional[int] = None
    category: Optional[int] = None
    subcategory_id: Optional[int] = None
    brand_id: Optional[int] = None
    images: Optional[List[str]] = None

    @field_validator("price")
    @classmethod
    def round_price(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _two_decimals(v) if v is not None else v


class Category(BaseModel):
    """Product category"""
    id: int
    title: str
    desc: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryCreate(BaseModel):
    title: str
    desc: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title is required")
        return v.strip()


class CategoryUpdate(BaseModel):
    title: Optional[str] = None
    desc: Optional[str] = None
    image_url: Optional[str] = None
