"""
Authentication for the MarketDesk back-office API
Validates Supabase Auth JWT tokens and builds the caller's shop access context
"""
import logging
from typing import Optional, List

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel, Field

from marketdesk.core.config import settings
from marketdesk.domain.profile import SUPER_ADMIN
from marketdesk.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: Optional[str] = None
    role: str = "authenticated"


class UserContext(BaseModel):
    """
    The caller as seen by the back-office

    Super admins see every shop; everybody else only sees the shops assigned
    to them in user_roles_shop.
    """
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role_name: Optional[str] = None
    shop_ids: List[int] = Field(default_factory=list)

    @property
    def is_super_admin(self) -> bool:
        return self.role_name == SUPER_ADMIN

    @property
    def accessible_shop_ids(self) -> Optional[List[int]]:
        """Shop ids the caller may see; None means every shop"""
        if self.is_super_admin:
            return None
        return list(self.shop_ids)

    def can_access_shop(self, shop_id: Optional[int]) -> bool:
        if self.is_super_admin:
            return True
        return shop_id is not None and shop_id in self.shop_ids


class AuthConfig:
    """Authentication configuration"""

    @staticmethod
    def get_jwt_secret() -> str:
        """Get the Supabase JWT secret from settings"""
        secret = settings.SUPABASE_JWT_SECRET
        if not secret:
            raise ValueError("SUPABASE_JWT_SECRET is not set")
        return secret

    @staticmethod
    def get_jwt_algorithm() -> str:
        """Supabase Auth signs access tokens with HS256"""
        return "HS256"


def decode_supabase_token(token: str) -> dict:
    """
    Decode and validate a Supabase access token.

    Supabase JWT structure:
    {
        "sub": "user uuid",
        "email": "owner@shop.com",
        "role": "authenticated",
        "aud": "authenticated",
        "iat": 1234567890,
        "exp": 1234567890
    }
    """
    try:
        secret = AuthConfig.get_jwt_secret()
    except ValueError as e:
        logger.error(f"Authentication is not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication is not configured"
        )

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[AuthConfig.get_jwt_algorithm()],
            options={"verify_aud": False}
        )
    except JWTError as e:
        error_msg = str(e).lower()
        if "expired" in error_msg:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_supabase_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return TokenUser(
        id=user_id,
        email=payload.get("email"),
        role=payload.get("role", "authenticated")
    )


def get_user_context(user: TokenUser = Depends(get_current_user)) -> UserContext:
    """
    Dependency that loads the caller's role and shop assignments.

    Usage:
        @router.get("/shops")
        def list_shops(ctx: UserContext = Depends(get_user_context)):
            ...
    """
    try:
        access = ProfileRepository().get_access(user.id)
    except Exception as e:
        logger.error(f"Failed to load access for user {user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error loading user access: {str(e)}"
        )

    return UserContext(
        user_id=user.id,
        email=user.email,
        full_name=access.get("full_name"),
        role_name=access.get("role_name"),
        shop_ids=access.get("shop_ids", [])
    )


def require_super_admin(ctx: UserContext = Depends(get_user_context)) -> UserContext:
    """
    Dependency for super-admin-only endpoints.

    Usage:
        @router.delete("/users/{user_id}")
        def delete_user(user_id: str, ctx: UserContext = Depends(require_super_admin)):
            ...
    """
    if not ctx.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied. Required role: {SUPER_ADMIN}, your role: {ctx.role_name or 'none'}"
        )
    return ctx


def ensure_shop_access(ctx: UserContext, shop_id: Optional[int]) -> None:
    """Raise 403 when the shop is outside the caller's access"""
    if not ctx.can_access_shop(shop_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied to shop {shop_id}"
        )
