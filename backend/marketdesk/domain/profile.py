"""
Profile Domain Models

Back-office users are Supabase Auth users with a row in `profiles`.
Their global role comes from `user_roles`; per-shop roles come from
`user_roles_shop`.
"""
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import Optional, List
from datetime import datetime


# Global role names stored in user_roles.name
SUPER_ADMIN = "super_admin"
SHOP_OWNER = "shop_owner"
SHOP_EDITOR = "shop_editor"
PLAIN_USER = "user"

SHOP_ROLES = (SHOP_OWNER, SHOP_EDITOR)


class UserShop(BaseModel):
    """A shop assignment for a user (row of user_roles_shop)"""
    shop_id: int
    role: str = Field(SHOP_EDITOR, description="shop_owner or shop_editor")
    shop_name: Optional[str] = None


class Profile(BaseModel):
    """
    Profile domain model - a back-office or marketplace user

    Fields:
        id: Supabase Auth user id (uuid)
        role: Reference to user_roles.id
        role_name: Role name (from JOIN with user_roles)
        registration_date: When the user signed up on the marketplace
        shops: Shop assignments (from user_roles_shop)
    """

    id: str = Field(..., description="Auth user id")
    full_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    status: Optional[str] = None

    role: Optional[int] = Field(None, description="user_roles.id")
    role_name: Optional[str] = Field(None, description="Role name (from JOIN)")

    registration_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    shops: List[UserShop] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class ProfileCreate(BaseModel):
    """Schema for creating a profile"""
    id: Optional[str] = None
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    username: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    status: Optional[str] = "active"
    role: Optional[int] = None


class ProfileUpdate(BaseModel):
    """Schema for updating a profile; `shops` replaces all shop assignments when given"""
    full_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    status: Optional[str] = None
    role: Optional[int] = None
    shops: Optional[List[UserShop]] = None
