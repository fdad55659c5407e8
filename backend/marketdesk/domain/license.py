"""
License Domain Models

A license is a subscription plan limiting how many shops and products a
shop owner may run.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal


class License(BaseModel):
    """
    License domain model

    Fields:
        price: Plan price
        shops: Maximum number of shops
        products: Maximum number of products
    """

    id: int
    title: str
    desc: Optional[str] = None
    price: Decimal = Decimal("0")
    shops: int = 0
    products: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["price"] = float(self.price)
        return data


class LicenseCreate(BaseModel):
    title: str
    desc: Optional[str] = None
    price: Decimal = Field(Decimal("0"), ge=0)
    shops: int = Field(0, ge=0)
    products: int = Field(0, ge=0)

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title is required")
        return v.strip()


class LicenseUpdate(BaseModel):
    title: Optional[str] = None
    desc: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    shops: Optional[int] = Field(None, ge=0)
    products: Optional[int] = Field(None, ge=0)


class Subscription(BaseModel):
    """A profile's subscription to a license, with both sides joined"""
    id: int
    license_id: Optional[int] = None
    profile_id: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    license: Optional[License] = None
    profile_name: Optional[str] = None
    profile_email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        if self.license is not None:
            data["license"] = self.license.to_dict()
        return data
