"""Order routes."""

from typing import Optional

from fastapi import APIRouter, Query, status

from core.authorization import Action, authorize
from core.dependencies import AdminDep, AuthenticatedDep, OrderManagerDep, PrincipalDep
from schemas.order import CreateOrderRequest, Order, OrderPage, UpdateOrderStatusRequest

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=OrderPage, summary="List orders")
def list_orders(
    orders: OrderManagerDep,
    principal: PrincipalDep,
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
) -> OrderPage:
    """List the caller's orders, or every order for admins.

    Out-of-range ``page`` and ``limit`` values are clamped rather than
    rejected.
    """
    return orders.list_orders(principal, page=page, limit=limit)


@router.post(
    "",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
)
def create_order(
    req: CreateOrderRequest,
    orders: OrderManagerDep,
    principal: AuthenticatedDep,
) -> Order:
    """Place an order for the calling user.

    Stock is decremented atomically; two orders racing for the last units
    cannot both succeed.
    """
    authorize(principal, Action.PLACE_ORDER, principal.user_id)
    return orders.place_order(
        user_id=principal.user_id,
        product_id=req.product_id,
        quantity=req.quantity,
        delivery_address=req.delivery_address,
    )


@router.patch("/{order_id}/status", response_model=Order, summary="Change order status")
def update_order_status(
    order_id: str,
    req: UpdateOrderStatusRequest,
    orders: OrderManagerDep,
    admin: AdminDep,
) -> Order:
    """Move an order to any allowed status. Admin only.

    Raises:
        InvalidStatusError: If the status is not one of ORDER_STATUSES.
        NotFoundError: If the order does not exist.
    """
    return orders.update_status(order_id, req.status)


@router.delete("/{order_id}", summary="Delete an order")
def delete_order(
    order_id: str,
    orders: OrderManagerDep,
    principal: PrincipalDep,
) -> dict:
    """Delete an order. Owners may delete their own orders, admins any order.

    Stock taken by the order is not restored.
    """
    orders.delete_order(principal, order_id)
    return {"message": "Order deleted"}
