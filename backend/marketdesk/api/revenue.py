"""
Revenue API Endpoints
Platform revenue and commissions, current year against last year
"""
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional

from marketdesk.core.auth import UserContext, require_super_admin
from marketdesk.services.revenue_service import RevenueService, SHOP_SORT_FIELDS

router = APIRouter()


@router.get("/")
async def get_revenue(
    search: Optional[str] = Query(None, description="Search shops by shop or owner name"),
    sort_by: str = Query("revenue", description="Sort field: " + ", ".join(SHOP_SORT_FIELDS)),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    ctx: UserContext = Depends(require_super_admin)
):
    """
    Revenue dashboard

    Returns:
    - stats: revenue, commissions and combined totals with year-over-year growth
    - monthly: Jan..Dec revenue and commissions of the current year
    - shops: per-shop table of the current year
    """
    try:
        summary = RevenueService().get_summary(search=search, sort_by=sort_by, direction=direction)
        return {"status": "success", "data": summary}

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching revenue: {str(e)}")
