"""
Delivery Domain Models

Delivery companies, the delivery methods they price (with per-location
price additions), their drivers and their cars.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class DeliveryLocationMethod(BaseModel):
    """Extra price charged by a delivery method for a given location"""
    id: Optional[int] = None
    location_name: str
    price_addition: Decimal = Decimal("0")
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class DeliveryMethod(BaseModel):
    """A delivery option offered by a company (e.g. Express, 24h, 5.00)"""
    id: Optional[int] = None
    label: str
    delivery_time: Optional[str] = None
    price: Decimal = Decimal("0")
    is_active: bool = True
    locations: List[DeliveryLocationMethod] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DeliveryCompany(BaseModel):
    """
    Delivery company domain model

    Fields:
        company_name: Trading name
        owner_name: Name of the company owner
        company_number: Registration number
        drivers_count / cars_count: Aggregated counts (list queries only)
        methods: Delivery methods with their location prices (detail only)
    """

    id: int = Field(..., description="Internal company ID")
    company_name: str
    owner_name: Optional[str] = None
    company_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    details: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None

    drivers_count: int = 0
    cars_count: int = 0
    methods: List[DeliveryMethod] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class DeliveryMethodInput(BaseModel):
    label: str
    delivery_time: Optional[str] = None
    price: Decimal = Field(Decimal("0"), ge=0)
    is_active: bool = True
    locations: List[DeliveryLocationMethod] = Field(default_factory=list)


class DeliveryCompanyCreate(BaseModel):
    """Schema for creating a company (company and owner names are required)"""
    company_name: str
    owner_name: str
    company_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    details: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    methods: List[DeliveryMethodInput] = Field(default_factory=list)

    @field_validator("company_name", "owner_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class DeliveryCompanyUpdate(BaseModel):
    """Schema for updating a company; `methods` replaces every method when given"""
    company_name: Optional[str] = None
    owner_name: Optional[str] = None
    company_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    details: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    methods: Optional[List[DeliveryMethodInput]] = None


class Driver(BaseModel):
    """A courier working for a delivery company"""
    id: int
    name: str
    phone: Optional[str] = None
    id_number: Optional[str] = None
    avatar_url: Optional[str] = None
    delivery_companies_id: Optional[int] = None
    company_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class DriverCreate(BaseModel):
    name: str
    phone: Optional[str] = None
    id_number: Optional[str] = None
    avatar_url: Optional[str] = None
    delivery_companies_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class DriverUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    id_number: Optional[str] = None
    avatar_url: Optional[str] = None
    delivery_companies_id: Optional[int] = None


class Car(BaseModel):
    """A vehicle owned by a delivery company, optionally assigned to a driver"""
    id: int
    plate_number: str
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    capacity: Optional[int] = None
    car_number: Optional[str] = None
    car_model: Optional[str] = None
    delivery_companies_id: Optional[int] = None
    delivery_drivers_id: Optional[int] = None
    company_name: Optional[str] = None
    driver_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class CarCreate(BaseModel):
    plate_number: str
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    car_number: Optional[str] = None
    car_model: Optional[str] = None
    delivery_companies_id: Optional[int] = None
    delivery_drivers_id: Optional[int] = None

    @field_validator("plate_number")
    @classmethod
    def plate_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("plate_number is required")
        return v.strip()


class CarUpdate(BaseModel):
    plate_number: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    car_number: Optional[str] = None
    car_model: Optional[str] = None
    delivery_companies_id: Optional[int] = None
    delivery_drivers_id: Optional[int] = None
