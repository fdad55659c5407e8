"""
Orders API Endpoints
Order list and preview, the confirm / deliver / close workflow, comments and tracking

Every order is checked against the caller's shop access through the shop
of its product.
"""
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional, List
from pydantic import BaseModel

from marketdesk.core.auth import UserContext, get_user_context, ensure_shop_access
from marketdesk.domain.order import Order, OrderCreate, OrderUpdate
from marketdesk.repositories.order_repository import OrderRepository
from marketdesk.repositories.product_repository import ProductRepository
from marketdesk.services.order_service import (
    OrderService, OrderNotFoundError, format_order_for_display, STATUS_TABS, ORDER_TYPES,
)

router = APIRouter()


# Request models
class StatusUpdate(BaseModel):
    status: str


class CloseRequest(BaseModel):
    comment: Optional[str] = None


class DriverAssignment(BaseModel):
    driver_id: int


class DeliveryTypeUpdate(BaseModel):
    delivery_type: str


class CommentCreate(BaseModel):
    comment: str


def _load_order(service: OrderService, order_id: int, ctx: UserContext) -> Order:
    """Fetch an order the caller may see (404 / 403 otherwise)"""
    try:
        order = service.get_order(order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    ensure_shop_access(ctx, order.shop_id)
    return order


def _workflow_response(order: Order) -> dict:
    return {"status": "success", "data": format_order_for_display(order)}


@router.get("/")
async def get_orders(
    tab: str = Query("all", description="Status tab: " + ", ".join(STATUS_TABS) + ", archived"),
    order_type: str = Query("all", description="Order type: " + ", ".join(ORDER_TYPES)),
    search: Optional[str] = Query(None, description="Search by id, product, buyer, shop, city or delivery status"),
    shop_ids: Optional[List[int]] = Query(None, description="Only these shops"),
    from_date: Optional[str] = Query(None, description="Filter orders from this date (ISO format)"),
    to_date: Optional[str] = Query(None, description="Filter orders until this date (ISO format)"),
    limit: int = Query(50, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    ctx: UserContext = Depends(get_user_context)
):
    """
    Get the caller's orders, newest first

    Returns display rows with totals and selected features resolved
    """
    if tab not in STATUS_TABS + ("archived",):
        raise HTTPException(status_code=400, detail=f"Unknown tab: {tab}")
    if order_type not in ORDER_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown order type: {order_type}")

    try:
        rows = OrderService().list_orders(
            accessible_shop_ids=ctx.accessible_shop_ids,
            from_date=from_date,
            to_date=to_date,
            shop_ids=shop_ids,
            tab=tab,
            search=search,
            order_type=order_type
        )
        page = rows[offset:offset + limit]

        return {
            "status": "success",
            "total": len(rows),
            "limit": limit,
            "offset": offset,
            "count": len(page),
            "data": page
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/with-comments")
async def get_order_ids_with_comments(ctx: UserContext = Depends(get_user_context)):
    """Order ids that have at least one comment (list badges)"""
    try:
        ids = sorted(OrderRepository().find_order_ids_with_comments())
        return {"status": "success", "count": len(ids), "data": ids}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching commented orders: {str(e)}")


@router.get("/{order_id}")
async def get_order(order_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        order = _load_order(OrderService(), order_id, ctx)
        return _workflow_response(order)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.post("/", status_code=201)
async def create_order(payload: OrderCreate, ctx: UserContext = Depends(get_user_context)):
    try:
        product = ProductRepository().find_by_id(payload.product_id)
        if not product:
            raise HTTPException(status_code=400, detail=f"Product {payload.product_id} does not exist")
        ensure_shop_access(ctx, product.shop)

        fields = payload.model_dump(mode="json")
        fields["shop"] = product.shop
        order_id = OrderRepository().create(fields)

        return _workflow_response(OrderService().get_order(order_id))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating order: {str(e)}")


@router.put("/{order_id}")
async def update_order(order_id: int, payload: OrderUpdate, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)

        fields = payload.model_dump(mode="json", exclude_unset=True)
        if not fields:
            raise HTTPException(status_code=400, detail="No fields to update")

        service.repository.update(order_id, fields)
        return _workflow_response(service.get_order(order_id))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating order: {str(e)}")


@router.delete("/{order_id}")
async def delete_order(order_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        service.repository.delete(order_id)
        return {"status": "success", "message": f"Order {order_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting order: {str(e)}")


# Workflow

@router.post("/{order_id}/confirm")
async def confirm_order(order_id: int, ctx: UserContext = Depends(get_user_context)):
    """Confirm: pickup orders become ready_for_pickup, others processing"""
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.confirm(order_id, ctx.user_id))

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error confirming order: {str(e)}")


@router.post("/{order_id}/unconfirm")
async def unconfirm_order(order_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.unconfirm(order_id, ctx.user_id))

    except HTTPException:
        raise
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error unconfirming order: {str(e)}")


@router.put("/{order_id}/status")
async def update_order_status(order_id: int, payload: StatusUpdate, ctx: UserContext = Depends(get_user_context)):
    """
    Move an order to a new status

    Entering or leaving `completed` recalculates the shop balance.
    """
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.update_status(order_id, payload.status, ctx.user_id))

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating order status: {str(e)}")


@router.post("/{order_id}/complete")
async def complete_order(order_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.complete(order_id, ctx.user_id))

    except HTTPException:
        raise
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error completing order: {str(e)}")


@router.post("/{order_id}/cancel")
async def cancel_order(order_id: int, payload: CloseRequest, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.cancel(order_id, ctx.user_id, payload.comment))

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error cancelling order: {str(e)}")


@router.post("/{order_id}/reject")
async def reject_order(order_id: int, payload: CloseRequest, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.reject(order_id, ctx.user_id, payload.comment))

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error rejecting order: {str(e)}")


@router.post("/{order_id}/assign-driver")
async def assign_driver(order_id: int, payload: DriverAssignment, ctx: UserContext = Depends(get_user_context)):
    """Assign a driver and move the order on_the_way"""
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.assign_driver(order_id, payload.driver_id, ctx.user_id))

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error assigning driver: {str(e)}")


@router.post("/{order_id}/unassign-driver")
async def unassign_driver(order_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.unassign_driver(order_id, ctx.user_id))

    except HTTPException:
        raise
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error unassigning driver: {str(e)}")


@router.put("/{order_id}/delivery-type")
async def change_delivery_type(order_id: int, payload: DeliveryTypeUpdate, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        return _workflow_response(service.change_delivery_type(order_id, payload.delivery_type, ctx.user_id))

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error changing delivery type: {str(e)}")


@router.get("/{order_id}/available-drivers")
async def get_available_drivers(order_id: int, ctx: UserContext = Depends(get_user_context)):
    """Drivers of the delivery companies actively linked to the order's shop"""
    try:
        service = OrderService()
        order = _load_order(service, order_id, ctx)
        drivers = service.available_drivers(order)
        return {
            "status": "success",
            "count": len(drivers),
            "data": [d.to_dict() for d in drivers]
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching drivers: {str(e)}")


# Comments and tracking

@router.get("/{order_id}/comments")
async def get_order_comments(order_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        comments = service.list_comments(order_id)
        return {
            "status": "success",
            "count": len(comments),
            "data": [c.model_dump(mode="json") for c in comments]
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comments: {str(e)}")


@router.post("/{order_id}/comments", status_code=201)
async def add_order_comment(order_id: int, payload: CommentCreate, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        comment = service.add_comment(order_id, ctx.user_id, payload.comment)
        return {"status": "success", "data": comment.model_dump(mode="json")}

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding comment: {str(e)}")


@router.delete("/{order_id}/comments/{comment_id}")
async def delete_order_comment(order_id: int, comment_id: int, ctx: UserContext = Depends(get_user_context)):
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        service.delete_comment(order_id, comment_id)
        return {"status": "success", "message": f"Comment {comment_id} deleted"}

    except HTTPException:
        raise
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting comment: {str(e)}")


@router.get("/{order_id}/tracking")
async def get_order_tracking(order_id: int, ctx: UserContext = Depends(get_user_context)):
    """Tracking entries, oldest first"""
    try:
        service = OrderService()
        _load_order(service, order_id, ctx)
        entries = service.list_tracking(order_id)
        return {
            "status": "success",
            "count": len(entries),
            "data": [e.model_dump(mode="json") for e in entries]
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching tracking: {str(e)}")
