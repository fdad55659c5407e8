"""
Licenses API Endpoints
Subscription plans and the subscription preview (super admin only)
"""
from fastapi import APIRouter, HTTPException, Depends

from marketdesk.core.auth import UserContext, require_super_admin
from marketdesk.domain.license import LicenseCreate, LicenseUpdate
from marketdesk.repositories.license_repository import LicenseRepository

router = APIRouter()


@router.get("/")
async def get_licenses(ctx: UserContext = Depends(require_super_admin)):
    try:
        licenses = LicenseRepository().find_all()
        return {
            "status": "success",
            "count": len(licenses),
            "data": [lic.to_dict() for lic in licenses]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching licenses: {str(e)}")


@router.get("/subscriptions/{subscription_id}")
async def get_subscription(subscription_id: int, ctx: UserContext = Depends(require_super_admin)):
    """A subscription with its license and subscriber profile"""
    try:
        subscription = LicenseRepository().find_subscription(subscription_id)
        if not subscription:
            raise HTTPException(status_code=404, detail=f"Subscription {subscription_id} not found")

        return {"status": "success", "data": subscription.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching subscription: {str(e)}")


@router.get("/{license_id}")
async def get_license(license_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        license = LicenseRepository().find_by_id(license_id)
        if not license:
            raise HTTPException(status_code=404, detail=f"License {license_id} not found")

        return {"status": "success", "data": license.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching license: {str(e)}")


@router.post("/", status_code=201)
async def create_license(payload: LicenseCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        license = LicenseRepository().create(payload.model_dump())
        return {"status": "success", "data": license.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating license: {str(e)}")


@router.put("/{license_id}")
async def update_license(license_id: int, payload: LicenseUpdate, ctx: UserContext = Depends(require_super_admin)):
    try:
        fields = payload.model_dump(exclude_unset=True)
        if not fields:
            raise HTTPException(status_code=400, detail="No fields to update")
        if "title" in fields and not (fields["title"] or "").strip():
            raise HTTPException(status_code=400, detail="title is required")

        license = LicenseRepository().update(license_id, fields)
        if not license:
            raise HTTPException(status_code=404, detail=f"License {license_id} not found")

        return {"status": "success", "data": license.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating license: {str(e)}")


@router.delete("/{license_id}")
async def delete_license(license_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not LicenseRepository().delete(license_id):
            raise HTTPException(status_code=404, detail=f"License {license_id} not found")

        return {"status": "success", "message": f"License {license_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting license: {str(e)}")
