"""
Accounting API Endpoints
Receipts for completed orders and per-shop statements
"""
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional
from datetime import datetime

from marketdesk.core.auth import UserContext, get_user_context, ensure_shop_access
from marketdesk.services.accounting_service import AccountingService, RECEIPT_SORT_FIELDS

router = APIRouter()


@router.get("/receipts")
async def get_receipts(
    shop_id: Optional[int] = Query(None, description="Filter by shop"),
    search: Optional[str] = Query(None, description="Search by invoice number or customer"),
    sort_by: str = Query("created_at", description="Sort field: " + ", ".join(RECEIPT_SORT_FIELDS)),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    ctx: UserContext = Depends(get_user_context)
):
    """Receipts of completed orders in the caller's shops"""
    if shop_id is not None:
        ensure_shop_access(ctx, shop_id)

    try:
        receipts = AccountingService().get_receipts(
            shop_ids=ctx.accessible_shop_ids,
            shop_id=shop_id,
            search=search,
            sort_by=sort_by,
            direction=direction
        )
        return {"status": "success", "count": len(receipts), "data": receipts}

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching receipts: {str(e)}")


@router.get("/statements/{shop_id}")
async def get_statement(
    shop_id: int,
    from_date: Optional[datetime] = Query(None, description="Lines from this date (ISO format)"),
    to_date: Optional[datetime] = Query(None, description="Lines until this date (ISO format)"),
    ctx: UserContext = Depends(get_user_context)
):
    """
    Statement of one shop

    Returns lines (income and expenses, newest first) and totals
    """
    ensure_shop_access(ctx, shop_id)

    try:
        statement = AccountingService().get_statement(shop_id, from_date=from_date, to_date=to_date)
        return {"status": "success", "data": statement}

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error building statement: {str(e)}")
