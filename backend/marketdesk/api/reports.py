"""
Reports API Endpoints
Sales, shop, product and user reports over an optional date range
"""
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional, List
from datetime import datetime

from marketdesk.core.auth import UserContext, require_super_admin
from marketdesk.services.report_service import ReportService

router = APIRouter()


@router.get("/")
async def get_report(
    start_date: Optional[datetime] = Query(None, description="Orders and registrations from this date (ISO format)"),
    end_date: Optional[datetime] = Query(None, description="Orders and registrations until this date (ISO format)"),
    shop_ids: Optional[List[int]] = Query(None, description="Only these shops"),
    category_ids: Optional[List[int]] = Query(None, description="Only products of these categories"),
    ctx: UserContext = Depends(require_super_admin)
):
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must be before end_date")

    try:
        report = ReportService().get_report(
            start_date=start_date,
            end_date=end_date,
            shop_ids=shop_ids,
            category_ids=category_ids
        )
        return {"status": "success", "data": report}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error generating report: {str(e)}")


@router.get("/compare")
async def compare_shops(
    shop_a: int = Query(..., description="First shop id"),
    shop_b: int = Query(..., description="Second shop id"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    ctx: UserContext = Depends(require_super_admin)
):
    """Earnings of two shops side by side"""
    if shop_a == shop_b:
        raise HTTPException(status_code=400, detail="Choose two different shops")

    try:
        comparison = ReportService().compare(shop_a, shop_b, start_date=start_date, end_date=end_date)
        return {"status": "success", "data": comparison}

    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error comparing shops: {str(e)}")
