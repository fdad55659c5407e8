"""
Shop Domain Models

Represents a vendor shop on the marketplace and the money movements
recorded against its platform balance.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal


TRANSACTION_TYPES = ("recharge", "withdraw")


class Shop(BaseModel):
    """
    Shop domain model

    Fields:
        id: Internal shop ID
        shop_name: Public shop name
        owner: Profile id of the shop owner
        owner_name: Owner full name (from JOIN with profiles)
        status: Shop status (active, inactive, ...); NULL counts as active
        balance: Platform balance maintained by the balance RPC functions
        visit_count: Storefront visits
        delivery_companies_id: Delivery company serving this shop
        category_shop_id / subcategory_shop_id: Shop directory classification
    """

    id: int = Field(..., description="Internal shop ID")
    shop_name: str = Field(..., description="Shop name")
    shop_desc: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    owner: Optional[str] = Field(None, description="Owner profile id")
    owner_name: Optional[str] = Field(None, description="Owner name (from JOIN)")
    status: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    balance: Decimal = Field(Decimal("0"), description="Platform balance")
    visit_count: int = 0
    delivery_companies_id: Optional[int] = None
    category_shop_id: Optional[int] = None
    category_shop_name: Optional[str] = Field(None, description="Shop category title (from JOIN)")
    subcategory_shop_id: Optional[int] = None
    subcategory_shop_name: Optional[str] = Field(None, description="Shop subcategory title (from JOIN)")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_active(self) -> bool:
        return self.status is None or self.status == "active"

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["balance"] = float(self.balance)
        data["is_active"] = self.is_active
        return data


class ShopCreate(BaseModel):
    """Schema for creating a shop (name and owner are required)"""
    shop_name: str
    owner: str
    shop_desc: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    status: Optional[str] = "active"
    address: Optional[str] = None
    phone: Optional[str] = None
    delivery_companies_id: Optional[int] = None
    category_shop_id: Optional[int] = None
    subcategory_shop_id: Optional[int] = None

    @field_validator("shop_name", "owner")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ShopUpdate(BaseModel):
    """Schema for updating a shop"""
    shop_name: Optional[str] = None
    shop_desc: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    owner: Optional[str] = None
    status: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    delivery_companies_id: Optional[int] = None
    category_shop_id: Optional[int] = None
    subcategory_shop_id: Optional[int] = None


class ShopTransaction(BaseModel):
    """A recharge or withdrawal recorded against a shop balance"""

    id: int
    shop_id: int
    type: Literal["recharge", "withdraw"]
    amount: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    created_at: datetime
    created_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["amount"] = float(self.amount)
        return data


class TransactionCreate(BaseModel):
    """Request body for a balance recharge or withdrawal"""
    type: Literal["recharge", "withdraw"]
    amount: Decimal
    description: Optional[str] = None
