"""
Catalog API Endpoints
Subcategories, brands and the shop directory categories

Any signed-in user can read the taxonomies. Subcategories and the shop
directory are maintained by super admins; brands belong to a shop and
follow the caller's shop access.
"""
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Any, Dict, Optional

from marketdesk.core.auth import UserContext, get_user_context, require_super_admin, ensure_shop_access
from marketdesk.domain.catalog import (
    SubcategoryCreate, SubcategoryUpdate,
    BrandCreate, BrandUpdate,
    ShopCategoryCreate, ShopCategoryUpdate,
    ShopSubcategoryCreate, ShopSubcategoryUpdate,
)
from marketdesk.repositories.catalog_repository import (
    SubcategoryRepository, BrandRepository, ShopCategoryRepository, ShopSubcategoryRepository,
)

router = APIRouter()


def _update_fields(payload, required: str) -> Dict[str, Any]:
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    if required in fields and not (fields[required] or "").strip():
        raise HTTPException(status_code=400, detail=f"{required} is required")
    return fields


# ============================================================================
# Subcategories
# ============================================================================

@router.get("/subcategories")
async def get_subcategories(
    category_id: Optional[int] = Query(None, description="Filter by parent category"),
    ctx: UserContext = Depends(get_user_context)
):
    try:
        items = SubcategoryRepository().find_all(category_id=category_id)
        return {
            "status": "success",
            "count": len(items),
            "data": [s.model_dump(mode="json") for s in items]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching subcategories: {str(e)}")


@router.post("/subcategories", status_code=201)
async def create_subcategory(payload: SubcategoryCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        item = SubcategoryRepository().create(payload.model_dump())
        return {"status": "success", "data": item.model_dump(mode="json")}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating subcategory: {str(e)}")


@router.put("/subcategories/{subcategory_id}")
async def update_subcategory(
    subcategory_id: int,
    payload: SubcategoryUpdate,
    ctx: UserContext = Depends(require_super_admin)
):
    try:
        fields = _update_fields(payload, "title")
        item = SubcategoryRepository().update(subcategory_id, fields)
        if not item:
            raise HTTPException(status_code=404, detail=f"Subcategory {subcategory_id} not found")

        return {"status": "success", "data": item.model_dump(mode="json")}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating subcategory: {str(e)}")


@router.delete("/subcategories/{subcategory_id}")
async def delete_subcategory(subcategory_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not SubcategoryRepository().delete(subcategory_id):
            raise HTTPException(status_code=404, detail=f"Subcategory {subcategory_id} not found")

        return {"status": "success", "message": f"Subcategory {subcategory_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting subcategory: {str(e)}")


# ============================================================================
# Brands
# ============================================================================

@router.get("/brands")
async def get_brands(
    shop_id: Optional[int] = Query(None, description="Filter by shop"),
    search: Optional[str] = Query(None, description="Search by brand name"),
    ctx: UserContext = Depends(get_user_context)
):
    """Brands of the caller's shops"""
    if shop_id is not None:
        ensure_shop_access(ctx, shop_id)

    try:
        brands = BrandRepository().find_all(
            shop_ids=ctx.accessible_shop_ids,
            shop_id=shop_id,
            search=search
        )
        return {
            "status": "success",
            "count": len(brands),
            "data": [b.model_dump(mode="json") for b in brands]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching brands: {str(e)}")


@router.post("/brands", status_code=201)
async def create_brand(payload: BrandCreate, ctx: UserContext = Depends(get_user_context)):
    ensure_shop_access(ctx, payload.shop_id)
    try:
        brand = BrandRepository().create(payload.model_dump())
        return {"status": "success", "data": brand.model_dump(mode="json")}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating brand: {str(e)}")


@router.put("/brands/{brand_id}")
async def update_brand(brand_id: int, payload: BrandUpdate, ctx: UserContext = Depends(get_user_context)):
    try:
        repo = BrandRepository()
        existing = repo.find_by_id(brand_id)
        if not existing:
            raise HTTPException(status_code=404, detail=f"Brand {brand_id} not found")
        ensure_shop_access(ctx, existing.shop_id)

        fields = _update_fields(payload, "brand")
        if "description" in fields and not (fields["description"] or "").strip():
            raise HTTPException(status_code=400, detail="description is required")

        brand = repo.update(brand_id, fields)
        if not brand:
            raise HTTPException(status_code=404, detail=f"Brand {brand_id} not found")

        return {"status": "success", "data": brand.model_dump(mode="json")}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating brand: {str(e)}")


@router.delete("/brands/{brand_id}")
async def delete_brand(brand_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        repo = BrandRepository()
        existing = repo.find_by_id(brand_id)
        if not existing:
            raise HTTPException(status_code=404, detail=f"Brand {brand_id} not found")
        ensure_shop_access(ctx, existing.shop_id)

        repo.delete(brand_id)
        return {"status": "success", "message": f"Brand {brand_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting brand: {str(e)}")


# ============================================================================
# Shop directory
# ============================================================================

@router.get("/shop-categories")
async def get_shop_categories(ctx: UserContext = Depends(get_user_context)):
    try:
        items = ShopCategoryRepository().find_all()
        return {
            "status": "success",
            "count": len(items),
            "data": [c.model_dump(mode="json") for c in items]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching shop categories: {str(e)}")


@router.post("/shop-categories", status_code=201)
async def create_shop_category(payload: ShopCategoryCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        item = ShopCategoryRepository().create(payload.model_dump())
        return {"status": "success", "data": item.model_dump(mode="json")}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating shop category: {str(e)}")


@router.put("/shop-categories/{category_id}")
async def update_shop_category(
    category_id: int,
    payload: ShopCategoryUpdate,
    ctx: UserContext = Depends(require_super_admin)
):
    try:
        fields = _update_fields(payload, "title")
        item = ShopCategoryRepository().update(category_id, fields)
        if not item:
            raise HTTPException(status_code=404, detail=f"Shop category {category_id} not found")

        return {"status": "success", "data": item.model_dump(mode="json")}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating shop category: {str(e)}")


@router.delete("/shop-categories/{category_id}")
async def delete_shop_category(category_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not ShopCategoryRepository().delete(category_id):
            raise HTTPException(status_code=404, detail=f"Shop category {category_id} not found")

        return {"status": "success", "message": f"Shop category {category_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting shop category: {str(e)}")


@router.get("/shop-subcategories")
async def get_shop_subcategories(
    category_id: Optional[int] = Query(None, description="Filter by parent shop category"),
    ctx: UserContext = Depends(get_user_context)
):
    try:
        items = ShopSubcategoryRepository().find_all(category_id=category_id)
        return {
            "status": "success",
            "count": len(items),
            "data": [s.model_dump(mode="json") for s in items]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching shop subcategories: {str(e)}")


@router.post("/shop-subcategories", status_code=201)
async def create_shop_subcategory(payload: ShopSubcategoryCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        item = ShopSubcategoryRepository().create(payload.model_dump())
        return {"status": "success", "data": item.model_dump(mode="json")}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating shop subcategory: {str(e)}")


@router.put("/shop-subcategories/{subcategory_id}")
async def update_shop_subcategory(
    subcategory_id: int,
    payload: ShopSubcategoryUpdate,
    ctx: UserContext = Depends(require_super_admin)
):
    try:
        fields = _update_fields(payload, "title")
        item = ShopSubcategoryRepository().update(subcategory_id, fields)
        if not item:
            raise HTTPException(status_code=404, detail=f"Shop subcategory {subcategory_id} not found")

        return {"status": "success", "data": item.model_dump(mode="json")}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating shop subcategory: {str(e)}")


@router.delete("/shop-subcategories/{subcategory_id}")
async def delete_shop_subcategory(subcategory_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not ShopSubcategoryRepository().delete(subcategory_id):
            raise HTTPException(status_code=404, detail=f"Shop subcategory {subcategory_id} not found")

        return {"status": "success", "message": f"Shop subcategory {subcategory_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting shop subcategory: {str(e)}")
