"""
Categories API Endpoints
"""
from fastapi import APIRouter, HTTPException, Depends

from marketdesk.core.auth import UserContext, get_user_context, require_super_admin
from marketdesk.domain.product import CategoryCreate, CategoryUpdate
from marketdesk.repositories.product_repository import CategoryRepository

router = APIRouter()


@router.get("/")
async def get_categories(ctx: UserContext = Depends(get_user_context)):
    """All categories ordered by title"""
    try:
        categories = CategoryRepository().find_all()
        return {
            "status": "success",
            "count": len(categories),
            "data": [c.model_dump(mode="json") for c in categories]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching categories: {str(e)}")


@router.get("/{category_id}")
async def get_category(category_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        category = CategoryRepository().find_by_id(category_id)
        if not category:
            raise HTTPException(status_code=404, detail=f"Category {category_id} not found")

        return {"status": "success", "data": category.model_dump(mode="json")}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching category: {str(e)}")


@router.post("/", status_code=201)
async def create_category(payload: CategoryCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        category = CategoryRepository().create(payload.model_dump())
        return {"status": "success", "data": category.model_dump(mode="json")}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating category: {str(e)}")


@router.put("/{category_id}")
async def update_category(category_id: int, payload: CategoryUpdate, ctx: UserContext = Depends(require_super_admin)):
    try:
        fields = payload.model_dump(exclude_unset=True)
        if not fields:
            raise HTTPException(status_code=400, detail="No fields to update")
        if "title" in fields and not (fields["title"] or "").strip():
            raise HTTPException(status_code=400, detail="title is required")

        category = CategoryRepository().update(category_id, fields)
        if not category:
            raise HTTPException(status_code=404, detail=f"Category {category_id} not found")

        return {"status": "success", "data": category.model_dump(mode="json")}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating category: {str(e)}")


@router.delete("/{category_id}")
async def delete_category(category_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not CategoryRepository().delete(category_id):
            raise HTTPException(status_code=404, detail=f"Category {category_id} not found")

        return {"status": "success", "message": f"Category {category_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting category: {str(e)}")
