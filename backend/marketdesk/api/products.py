"""
Products API Endpoints
Handles product catalog management and queries

Products are always read and written within the caller's accessible shops.
"""
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional

from marketdesk.core.auth import UserContext, get_user_context, ensure_shop_access
from marketdesk.domain.product import ProductCreate, ProductUpdate
from marketdesk.repositories.product_repository import ProductRepository

router = APIRouter()


@router.get("/")
async def get_products(
    shop_id: Optional[int] = Query(None, description="Filter by shop"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    subcategory_id: Optional[int] = Query(None, description="Filter by subcategory"),
    brand_id: Optional[int] = Query(None, description="Filter by brand"),
    search: Optional[str] = Query(None, description="Search by title"),
    limit: int = Query(100, ge=1, le=5000),
    offset: int = Query(0, ge=0),
    ctx: UserContext = Depends(get_user_context)
):
    """
    Get all products with optional filters

    Returns products with shop and category names included
    """
    if shop_id is not None:
        ensure_shop_access(ctx, shop_id)

    try:
        repo = ProductRepository()

        products, total = repo.find_all(
            shop_ids=ctx.accessible_shop_ids,
            shop_id=shop_id,
            category_id=category_id,
            subcategory_id=subcategory_id,
            brand_id=brand_id,
            search=search,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/{product_id}")
async def get_product(product_id: int, ctx: UserContext = Depends(get_user_context)):
    """Get a single product by id"""
    try:
        product = ProductRepository().find_by_id(product_id)

        if not product:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
        ensure_shop_access(ctx, product.shop)

        return {
            "status": "success",
            "data": product.to_dict()
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.post("/", status_code=201)
async def create_product(payload: ProductCreate, ctx: UserContext = Depends(get_user_context)):
    """Create a product in one of the caller's shops (price stored with two decimals)"""
    ensure_shop_access(ctx, payload.shop)
    try:
        product = ProductRepository().create(payload.model_dump())
        return {"status": "success", "data": product.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(product_id: int, payload: ProductUpdate, ctx: UserContext = Depends(get_user_context)):
    try:
        repo = ProductRepository()
        existing = repo.find_by_id(product_id)
        if not existing:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
        ensure_shop_access(ctx, existing.shop)

        fields = payload.model_dump(exclude_unset=True)
        if not fields:
            raise HTTPException(status_code=400, detail="No fields to update")
        if "title" in fields and not (fields["title"] or "").strip():
            raise HTTPException(status_code=400, detail="title is required")
        if "price" in fields and fields["price"] is None:
            raise HTTPException(status_code=400, detail="price is required")
        if "shop" in fields:
            ensure_shop_access(ctx, fields["shop"])

        product = repo.update(product_id, fields)
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

        return {"status": "success", "data": product.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(product_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        repo = ProductRepository()
        existing = repo.find_by_id(product_id)
        if not existing:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
        ensure_shop_access(ctx, existing.shop)

        repo.delete(product_id)
        return {"status": "success", "message": f"Product {product_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")
