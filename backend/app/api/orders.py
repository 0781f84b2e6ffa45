"""
Orders API Endpoints
Saddle order tracking: creation, workflow, production planning and payments

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional

from app.api.common import collection_response, item_response
from app.core.auth import (
    TokenUser,
    require_admin,
    require_order_viewer,
    require_order_creator,
    require_factory_viewer,
)
from app.domain.exceptions import ConflictError
from app.domain.order import OrderCreate, OrderUpdate, StatusChangeRequest, CancelRequest, DepositRequest
from app.domain.value_objects import OrderStatus, OrderPriority
from app.repositories.order_repository import OrderRepository
from app.services.order_service import OrderService, is_visible_to, scope_filters

router = APIRouter()


def _not_found(order_id) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Order {order_id} not found")


@router.get("/")
async def get_orders(
    fitter_id: Optional[int] = Query(None, gt=0, description="Filter by fitter"),
    customer_id: Optional[int] = Query(None, gt=0, description="Filter by customer"),
    factory_id: Optional[int] = Query(None, gt=0, description="Filter by factory"),
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[OrderPriority] = Query(None, description="Filter by priority"),
    is_urgent: Optional[bool] = Query(None, description="Filter by urgent flag"),
    search: Optional[str] = Query(None, description="Search by order number, customer name or instructions"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_order_viewer)
):
    """
    Get all orders with optional filters, newest first

    Fitters only see their own orders and factories the ones assigned to them.
    """
    try:
        repo = OrderRepository()
        scope = scope_filters(user)

        orders, total = repo.find_all(
            fitter_id=scope["fitter_id"] if scope["fitter_id"] is not None else fitter_id,
            customer_id=customer_id,
            factory_id=scope["factory_id"] if scope["factory_id"] is not None else factory_id,
            status=status_filter.value if status_filter else None,
            priority=priority.value if priority else None,
            is_urgent=is_urgent,
            search=search,
            limit=limit,
            offset=offset
        )

        return collection_response(orders, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    user: TokenUser = Depends(require_order_creator)
):
    """
    Create an order

    Prices from the order form come in cents (price_saddle, price_deposit).
    A rushed order is created with urgent priority.
    """
    try:
        order = OrderService().create_order(order_data, user)
        return item_response(order)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating order: {str(e)}")


@router.get("/search")
async def search_orders(
    q: str = Query(..., min_length=1, description="Search term"),
    limit: int = Query(50, ge=1, le=500),
    user: TokenUser = Depends(require_order_viewer)
):
    try:
        orders = OrderRepository().search(q, limit=limit, **scope_filters(user))
        return collection_response(orders)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error searching orders: {str(e)}")


@router.get("/stats")
async def get_order_stats(user: TokenUser = Depends(require_order_viewer)):
    """
    Get order statistics

    Returns:
    - Total orders
    - Urgent orders
    - Overdue orders
    - Average order value
    - Orders by status
    """
    try:
        return {
            "status": "success",
            "data": OrderRepository().get_stats(**scope_filters(user))
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/urgent")
async def get_urgent_orders(user: TokenUser = Depends(require_order_viewer)):
    try:
        return collection_response(OrderRepository().find_urgent(**scope_filters(user)))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching urgent orders: {str(e)}")


@router.get("/overdue")
async def get_overdue_orders(user: TokenUser = Depends(require_order_viewer)):
    """Open orders past their estimated delivery date, most overdue first"""
    try:
        return collection_response(OrderRepository().find_overdue(**scope_filters(user)))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching overdue orders: {str(e)}")


@router.get("/production")
async def get_orders_in_production(user: TokenUser = Depends(require_order_viewer)):
    try:
        return collection_response(OrderRepository().find_in_production(**scope_filters(user)))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders in production: {str(e)}")


@router.get("/production/schedule")
async def get_production_schedule(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user: TokenUser = Depends(require_factory_viewer)
):
    """Work queue for the factory floor: urgent orders first, then oldest first"""
    try:
        scope = scope_filters(user)
        orders = OrderRepository().get_production_schedule(limit=limit, factory_id=scope["factory_id"])
        return collection_response(orders)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching production schedule: {str(e)}")


@router.get("/requiring-deposit")
async def get_orders_requiring_deposit(user: TokenUser = Depends(require_order_viewer)):
    """Open orders with a balance still owing, largest balance first"""
    try:
        return collection_response(OrderRepository().find_requiring_deposit(**scope_filters(user)))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/customer/{customer_id}")
async def get_orders_by_customer(
    customer_id: int = Path(..., gt=0),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_order_viewer)
):
    try:
        orders, total = OrderRepository().find_all(
            customer_id=customer_id, limit=limit, offset=offset, **scope_filters(user)
        )
        return collection_response(orders, total, limit, offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/customer/{customer_id}/summary")
async def get_customer_order_summary(
    customer_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_order_viewer)
):
    try:
        return {
            "status": "success",
            "data": OrderRepository().get_customer_summary(customer_id, **scope_filters(user))
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customer summary: {str(e)}")


@router.get("/fitter/{fitter_id}")
async def get_orders_by_fitter(
    fitter_id: int = Path(..., gt=0),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_order_viewer)
):
    scope = scope_filters(user)
    if scope["fitter_id"] is not None and scope["fitter_id"] != fitter_id:
        raise HTTPException(status_code=403, detail="Fitters can only list their own orders")

    try:
        orders, total = OrderRepository().find_all(
            fitter_id=fitter_id, factory_id=scope["factory_id"], limit=limit, offset=offset
        )
        return collection_response(orders, total, limit, offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/factory/{factory_id}")
async def get_orders_by_factory(
    factory_id: int = Path(..., gt=0),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_factory_viewer)
):
    scope = scope_filters(user)
    if scope["factory_id"] is not None and scope["factory_id"] != factory_id:
        raise HTTPException(status_code=403, detail="Factories can only list their own orders")

    try:
        orders, total = OrderRepository().find_all(factory_id=factory_id, limit=limit, offset=offset)
        return collection_response(orders, total, limit, offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/number/{order_number}")
async def get_order_by_number(
    order_number: str,
    user: TokenUser = Depends(require_order_viewer)
):
    try:
        order = OrderRepository().find_by_number(order_number)
        if not order or not is_visible_to(order, user):
            raise _not_found(order_number)

        return item_response(order)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.get("/{order_id}")
async def get_order(
    order_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_order_viewer)
):
    """Get a single order, including computed payment and delivery fields"""
    try:
        order = OrderService().get_order(order_id, user)

        if not order:
            raise _not_found(order_id)

        return item_response(order)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.patch("/{order_id}")
async def update_order(
    order_data: OrderUpdate,
    order_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    """Edit an order. Send `version` to guard against concurrent edits."""
    try:
        order = OrderService().update_order(order_id, order_data, user)

        if not order:
            raise _not_found(order_id)

        return item_response(order)

    except HTTPException:
        raise
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating order: {str(e)}")


@router.patch("/{order_id}/status")
async def change_order_status(
    payload: StatusChangeRequest,
    order_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    """Move an order along its workflow"""
    try:
        order = OrderService().change_status(order_id, payload.status, user, expected_version=payload.version)

        if not order:
            raise _not_found(order_id)

        return item_response(order)

    except HTTPException:
        raise
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error changing order status: {str(e)}")


@router.patch("/{order_id}/cancel")
async def cancel_order(
    payload: CancelRequest,
    order_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        order = OrderService().cancel_order(order_id, payload.reason, user)

        if not order:
            raise _not_found(order_id)

        return item_response(order)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error cancelling order: {str(e)}")


@router.post("/{order_id}/deposit")
async def record_deposit(
    payload: DepositRequest,
    order_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        order = OrderService().record_deposit(order_id, payload.amount, user)

        if not order:
            raise _not_found(order_id)

        return item_response(order)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error recording deposit: {str(e)}")


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        if not OrderService().delete_order(order_id, user):
            raise _not_found(order_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting order: {str(e)}")
