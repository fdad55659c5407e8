"""
Current user endpoint
"""
from fastapi import APIRouter, Depends

from marketdesk.core.auth import UserContext, get_user_context

router = APIRouter()


@router.get("/me")
async def get_me(ctx: UserContext = Depends(get_user_context)):
    """
    The caller's profile, role and shop access

    `accessible_shop_ids` is null for super admins (every shop).
    """
    return {
        "status": "success",
        "data": {
            "id": ctx.user_id,
            "email": ctx.email,
            "full_name": ctx.full_name,
            "role": ctx.role_name,
            "is_super_admin": ctx.is_super_admin,
            "shop_ids": ctx.shop_ids,
            "accessible_shop_ids": ctx.accessible_shop_ids,
        }
    }
