"""
Catalog Taxonomy Models

Everything used to classify products and shops besides the top-level
product categories (see domain/product.py):

- Subcategory: second level under a product category (categories_sub)
- Brand: a brand registered by a shop, assigned to its products (categories_brands)
- ShopCategory / ShopSubcategory: the shop directory (categories_shop,
  categories_sub_shop), assigned to shops
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


def _required(v: Optional[str]) -> str:
    if not v or not v.strip():
        raise ValueError("must not be blank")
    return v.strip()


class Subcategory(BaseModel):
    """Product subcategory"""
    id: int
    title: str
    desc: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = Field(None, description="Parent category title (from JOIN)")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubcategoryCreate(BaseModel):
    title: str
    desc: Optional[str] = None
    category_id: int

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return _required(v)


class SubcategoryUpdate(BaseModel):
    title: Optional[str] = None
    desc: Optional[str] = None
    category_id: Optional[int] = None


class Brand(BaseModel):
    """
    Brand owned by a shop

    Fields:
        brand: Brand name
        description: Short description shown on the storefront
        image_url: Brand logo
        shop_id: Shop that registered the brand
        shop_name: Shop name (from JOIN)
    """
    id: int
    brand: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    shop_id: Optional[int] = None
    shop_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BrandCreate(BaseModel):
    """Brand name, description and shop are required"""
    brand: str
    description: str
    shop_id: int
    image_url: Optional[str] = None

    @field_validator("brand", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _required(v)


class BrandUpdate(BaseModel):
    brand: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class ShopCategory(BaseModel):
    """Top level of the shop directory"""
    id: int
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ShopCategoryCreate(BaseModel):
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return _required(v)


class ShopCategoryUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class ShopSubcategory(BaseModel):
    """Second level of the shop directory"""
    id: int
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = Field(None, description="Parent shop category title (from JOIN)")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ShopSubcategoryCreate(BaseModel):
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category_id: int

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return _required(v)


class ShopSubcategoryUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[int] = None
