"""
Statistics API Endpoints
Engagement (visits, views, cart adds) and sales rankings
"""
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional, List

from marketdesk.core.auth import UserContext, require_super_admin
from marketdesk.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("/")
async def get_statistics(
    time_range: str = Query("all", description="today, week, month, quarter, year or all"),
    shop_ids: Optional[List[int]] = Query(None, description="Only these shops"),
    owner_ids: Optional[List[str]] = Query(None, description="Only shops owned by these users"),
    ctx: UserContext = Depends(require_super_admin)
):
    try:
        statistics = StatisticsService().get_statistics(
            time_range=time_range,
            shop_ids=shop_ids,
            owner_ids=owner_ids
        )
        return {"status": "success", "data": statistics}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching statistics: {str(e)}")
