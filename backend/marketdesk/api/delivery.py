"""
Delivery API Endpoints
Delivery companies (with their priced delivery methods), drivers, cars and
the delivery statistics dashboard

Super admin only.
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional, List

from marketdesk.core.auth import UserContext, require_super_admin
from marketdesk.domain.delivery import (
    DeliveryCompanyCreate, DeliveryCompanyUpdate,
    DriverCreate, DriverUpdate, CarCreate, CarUpdate,
)
from marketdesk.repositories.delivery_repository import (
    DeliveryCompanyRepository, DriverRepository, CarRepository,
)
from marketdesk.services.delivery_stats_service import DeliveryStatisticsService

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# STATISTICS
# ============================================================================

@router.get("/statistics")
async def get_delivery_statistics(
    time_range: str = Query("all", description="today, week, month, quarter, year or all"),
    shop_ids: Optional[List[int]] = Query(None, description="Only orders of these shops"),
    driver_ids: Optional[List[int]] = Query(None, description="Only orders assigned to these drivers"),
    ctx: UserContext = Depends(require_super_admin)
):
    """
    Progress of confirmed delivery orders and the 10 busiest companies

    The shop and driver filters narrow the overall status counts only.
    """
    try:
        data = DeliveryStatisticsService().get_statistics(
            time_range=time_range,
            shop_ids=shop_ids,
            driver_ids=driver_ids
        )
        return {"status": "success", "data": data}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching delivery statistics: {str(e)}")


# ============================================================================
# COMPANIES
# ============================================================================

@router.get("/companies")
async def get_companies(
    search: Optional[str] = Query(None, description="Search by company or owner name"),
    ctx: UserContext = Depends(require_super_admin)
):
    """Companies with their driver and car counts"""
    try:
        companies = DeliveryCompanyRepository().find_all(search=search)
        return {
            "status": "success",
            "count": len(companies),
            "data": [c.to_dict() for c in companies]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching delivery companies: {str(e)}")


@router.get("/companies/{company_id}")
async def get_company(company_id: int, ctx: UserContext = Depends(require_super_admin)):
    """A company with its delivery methods and their location price additions"""
    try:
        company = DeliveryCompanyRepository().find_by_id(company_id)
        if not company:
            raise HTTPException(status_code=404, detail=f"Delivery company {company_id} not found")

        return {"status": "success", "data": company.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching delivery company: {str(e)}")


@router.post("/companies", status_code=201)
async def create_company(payload: DeliveryCompanyCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        repo = DeliveryCompanyRepository()
        fields = payload.model_dump(exclude={"methods"}, exclude_none=True)
        methods = [m.model_dump() for m in payload.methods]

        company_id = repo.create(fields, methods)
        logger.info(f"Delivery company {company_id} created with {len(methods)} methods")

        return {"status": "success", "data": repo.find_by_id(company_id).to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating delivery company: {str(e)}")


@router.put("/companies/{company_id}")
async def update_company(
    company_id: int,
    payload: DeliveryCompanyUpdate,
    ctx: UserContext = Depends(require_super_admin)
):
    """Update a company; `methods`, when given, replaces every delivery method"""
    try:
        fields = payload.model_dump(exclude={"methods"}, exclude_unset=True)
        for name in ("company_name", "owner_name"):
            if name in fields and not (fields[name] or "").strip():
                raise HTTPException(status_code=400, detail=f"{name} must not be blank")

        methods = None
        if payload.methods is not None:
            methods = [m.model_dump() for m in payload.methods]

        repo = DeliveryCompanyRepository()
        if not repo.update(company_id, fields, methods):
            raise HTTPException(status_code=404, detail=f"Delivery company {company_id} not found")

        return {"status": "success", "data": repo.find_by_id(company_id).to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating delivery company: {str(e)}")


@router.delete("/companies/{company_id}")
async def delete_company(company_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not DeliveryCompanyRepository().delete(company_id):
            raise HTTPException(status_code=404, detail=f"Delivery company {company_id} not found")

        return {"status": "success", "message": f"Delivery company {company_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting delivery company: {str(e)}")


# ============================================================================
# DRIVERS
# ============================================================================

@router.get("/drivers")
async def get_drivers(
    company_id: Optional[int] = Query(None, description="Filter by delivery company"),
    ctx: UserContext = Depends(require_super_admin)
):
    try:
        drivers = DriverRepository().find_all(company_id=company_id)
        return {
            "status": "success",
            "count": len(drivers),
            "data": [d.to_dict() for d in drivers]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching drivers: {str(e)}")


@router.get("/drivers/{driver_id}")
async def get_driver(driver_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        driver = DriverRepository().find_by_id(driver_id)
        if not driver:
            raise HTTPException(status_code=404, detail=f"Driver {driver_id} not found")

        return {"status": "success", "data": driver.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching driver: {str(e)}")


@router.post("/drivers", status_code=201)
async def create_driver(payload: DriverCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        repo = DriverRepository()
        driver_id = repo.create(payload.model_dump(exclude_none=True))
        return {"status": "success", "data": repo.find_by_id(driver_id).to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating driver: {str(e)}")


@router.put("/drivers/{driver_id}")
async def update_driver(driver_id: int, payload: DriverUpdate, ctx: UserContext = Depends(require_super_admin)):
    try:
        fields = payload.model_dump(exclude_unset=True)
        if "name" in fields and not (fields["name"] or "").strip():
            raise HTTPException(status_code=400, detail="name is required")

        repo = DriverRepository()
        if not repo.update(driver_id, fields):
            raise HTTPException(status_code=404, detail=f"Driver {driver_id} not found")

        return {"status": "success", "data": repo.find_by_id(driver_id).to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating driver: {str(e)}")


@router.delete("/drivers/{driver_id}")
async def delete_driver(driver_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not DriverRepository().delete(driver_id):
            raise HTTPException(status_code=404, detail=f"Driver {driver_id} not found")

        return {"status": "success", "message": f"Driver {driver_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting driver: {str(e)}")


# ============================================================================
# CARS
# ============================================================================

@router.get("/cars")
async def get_cars(
    company_id: Optional[int] = Query(None, description="Filter by delivery company"),
    ctx: UserContext = Depends(require_super_admin)
):
    try:
        cars = CarRepository().find_all(company_id=company_id)
        return {
            "status": "success",
            "count": len(cars),
            "data": [c.to_dict() for c in cars]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching cars: {str(e)}")


@router.get("/cars/{car_id}")
async def get_car(car_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        car = CarRepository().find_by_id(car_id)
        if not car:
            raise HTTPException(status_code=404, detail=f"Car {car_id} not found")

        return {"status": "success", "data": car.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching car: {str(e)}")


@router.post("/cars", status_code=201)
async def create_car(payload: CarCreate, ctx: UserContext = Depends(require_super_admin)):
    try:
        repo = CarRepository()
        car_id = repo.create(payload.model_dump(exclude_none=True))
        return {"status": "success", "data": repo.find_by_id(car_id).to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating car: {str(e)}")


@router.put("/cars/{car_id}")
async def update_car(car_id: int, payload: CarUpdate, ctx: UserContext = Depends(require_super_admin)):
    try:
        fields = payload.model_dump(exclude_unset=True)
        if "plate_number" in fields and not (fields["plate_number"] or "").strip():
            raise HTTPException(status_code=400, detail="plate_number is required")

        repo = CarRepository()
        if not repo.update(car_id, fields):
            raise HTTPException(status_code=404, detail=f"Car {car_id} not found")

        return {"status": "success", "data": repo.find_by_id(car_id).to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating car: {str(e)}")


@router.delete("/cars/{car_id}")
async def delete_car(car_id: int, ctx: UserContext = Depends(require_super_admin)):
    try:
        if not CarRepository().delete(car_id):
            raise HTTPException(status_code=404, detail=f"Car {car_id} not found")

        return {"status": "success", "message": f"Car {car_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting car: {str(e)}")
