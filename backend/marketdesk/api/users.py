"""
Users API Endpoints
Profiles with their role and shop assignments (super admin only)
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional

from marketdesk.core.auth import UserContext, require_super_admin
from marketdesk.domain.profile import ProfileCreate, ProfileUpdate
from marketdesk.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_users(
    search: Optional[str] = Query(None, description="Search by name or email"),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    ctx: UserContext = Depends(require_super_admin)
):
    try:
        users, total = ProfileRepository().find_all(search=search, limit=limit, offset=offset)
        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(users),
            "data": [u.to_dict() for u in users]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")


@router.get("/{user_id}")
async def get_user(user_id: str, ctx: UserContext = Depends(require_super_admin)):
    """A profile with its role name and shop assignments"""
    try:
        user = ProfileRepository().find_by_id(user_id)
        if not user:
            raise HTTPException(status_code=404, detail=f"User {user_id} not found")

        return {"status": "success", "data": user.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user: {str(e)}")


@router.post("/", status_code=201)
async def create_user(payload: ProfileCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        repo = ProfileRepository()
        user_id = repo.create(payload.model_dump(exclude_none=True))
        logger.info(f"User {user_id} created by {ctx.user_id}")
        return {"status": "success", "data": repo.find_by_id(user_id).to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating user: {str(e)}")


@router.put("/{user_id}")
async def update_user(user_id: str, payload: ProfileUpdate, ctx: UserContext = Depends(require_super_admin)):
    """Update a profile; `shops`, when given, replaces every shop assignment"""
    try:
        fields = payload.model_dump(exclude={"shops"}, exclude_unset=True)
        shops = None
        if payload.shops is not None:
            shops = [s.model_dump() for s in payload.shops]

        repo = ProfileRepository()
        if not repo.update(user_id, fields, shops):
            raise HTTPException(status_code=404, detail=f"User {user_id} not found")

        return {"status": "success", "data": repo.find_by_id(user_id).to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating user: {str(e)}")


@router.delete("/{user_id}")
async def delete_user(user_id: str, ctx: UserContext = Depends(require_super_admin)):
    if user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    try:
        if not ProfileRepository().delete(user_id):
            raise HTTPException(status_code=404, detail=f"User {user_id} not found")

        logger.info(f"User {user_id} deleted by {ctx.user_id}")
        return {"status": "success", "message": f"User {user_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting user: {str(e)}")
