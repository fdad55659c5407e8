"""
Shops API Endpoints
Shop management, platform balance and balance transactions

Non-admin callers only see and edit the shops assigned to them.
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional

from marketdesk.core.auth import UserContext, get_user_context, require_super_admin, ensure_shop_access
from marketdesk.domain.shop import ShopCreate, ShopUpdate, TransactionCreate
from marketdesk.repositories.shop_repository import ShopRepository
from marketdesk.services.balance_service import BalanceService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_shops(
    search: Optional[str] = Query(None, description="Search by shop name"),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    ctx: UserContext = Depends(get_user_context)
):
    """Shops visible to the caller, newest first"""
    try:
        repo = ShopRepository()
        shops, total = repo.find_all(
            shop_ids=ctx.accessible_shop_ids,
            search=search,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(shops),
            "data": [shop.to_dict() for shop in shops]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching shops: {str(e)}")


@router.post("/balances/recalculate")
async def recalculate_all_balances(ctx: UserContext = Depends(require_super_admin)):
    """Recompute the stored balance of every shop"""
    try:
        BalanceService().recalculate_all()
        return {"status": "success", "message": "All shop balances recalculated"}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error recalculating balances: {str(e)}")


@router.get("/{shop_id}")
async def get_shop(shop_id: int, ctx: UserContext = Depends(get_user_context)):
    """Get a single shop with its owner name"""
    ensure_shop_access(ctx, shop_id)
    try:
        shop = ShopRepository().find_by_id(shop_id)
        if not shop:
            raise HTTPException(status_code=404, detail=f"Shop {shop_id} not found")

        return {"status": "success", "data": shop.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching shop: {str(e)}")


@router.post("/", status_code=201)
async def create_shop(payload: ShopCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        shop = ShopRepository().create(payload.model_dump(exclude_none=True))
        logger.info(f"Shop {shop.id} created by {ctx.user_id}")
        return {"status": "success", "data": shop.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating shop: {str(e)}")


@router.put("/{shop_id}")
async def update_shop(shop_id: int, payload: ShopUpdate, ctx: UserContext = Depends(get_user_context)):
    ensure_shop_access(ctx, shop_id)
    try:
        fields = payload.model_dump(exclude_unset=True)
        if not fields:
            raise HTTPException(status_code=400, detail="No fields to update")

        shop = ShopRepository().update(shop_id, fields)
        if not shop:
            raise HTTPException(status_code=404, detail=f"Shop {shop_id} not found")

        return {"status": "success", "data": shop.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating shop: {str(e)}")


@router.delete("/{shop_id}")
async def delete_shop(shop_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not ShopRepository().delete(shop_id):
            raise HTTPException(status_code=404, detail=f"Shop {shop_id} not found")

        logger.info(f"Shop {shop_id} deleted by {ctx.user_id}")
        return {"status": "success", "message": f"Shop {shop_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting shop: {str(e)}")


# Balance and transactions

@router.get("/{shop_id}/balance")
async def get_shop_balance(shop_id: int, ctx: UserContext = Depends(get_user_context)):
    ensure_shop_access(ctx, shop_id)
    try:
        balance = BalanceService().get_balance(shop_id)
        return {"status": "success", "data": {"shop_id": shop_id, "balance": balance}}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching balance: {str(e)}")


@router.post("/{shop_id}/balance/recalculate")
async def recalculate_shop_balance(shop_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        balance = BalanceService().recalculate(shop_id)
        return {"status": "success", "data": {"shop_id": shop_id, "balance": balance}}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error recalculating balance: {str(e)}")


@router.get("/{shop_id}/transactions")
async def get_shop_transactions(
    shop_id: int,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    ctx: UserContext = Depends(get_user_context)
):
    """Balance transactions, newest first"""
    ensure_shop_access(ctx, shop_id)
    try:
        transactions = ShopRepository().find_transactions(shop_id, limit=limit, offset=offset)
        return {
            "status": "success",
            "count": len(transactions),
            "data": [t.to_dict() for t in transactions]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching transactions: {str(e)}")


@router.post("/{shop_id}/transactions", status_code=201)
async def create_shop_transaction(
    shop_id: int,
    payload: TransactionCreate,
    ctx: UserContext = Depends(require_super_admin)
):
    """
    Recharge or withdraw through the add_shop_transaction RPC

    Amount must be > 0; a withdrawal may not exceed the current balance.
    """
    try:
        result = BalanceService().add_transaction(
            shop_id,
            payload.type,
            payload.amount,
            payload.description
        )
        return {"status": "success", "data": result}

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error recording transaction: {str(e)}")


@router.post("/{shop_id}/payout")
async def payout_shop_balance(shop_id: int, ctx: UserContext = Depends(require_super_admin)):
    """Withdraw the shop's whole balance"""
    try:
        result = BalanceService().payout_all(shop_id)
        return {"status": "success", "data": result}

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error paying out balance: {str(e)}")
