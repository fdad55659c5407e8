"""
Analytics API Endpoints
Dashboard counts, revenue and growth for the last week, month or year
"""
from fastapi import APIRouter, HTTPException, Query, Depends

from marketdesk.core.auth import UserContext, require_super_admin
from marketdesk.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    timeframe: str = Query("month", description="week, month or year"),
    ctx: UserContext = Depends(require_super_admin)
):
    """
    Get the analytics dashboard

    Every count is compared with the equally long period before it.
    """
    try:
        dashboard = AnalyticsService().get_dashboard(timeframe=timeframe)
        return {"status": "success", "data": dashboard}

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching analytics: {str(e)}")
