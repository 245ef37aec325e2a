from typing import Optional

from fastapi import APIRouter, Depends, status as http_status
from sqlmodel import Session

from app.database import get_session
from app.dependencies.admin import require_admin
from app.models.user import User
from app.schemas.orders_schemas import (
    OrderEnvelope,
    OrderListEnvelope,
    OrderStatusUpdate,
    PaginatedOrders,
)
from app.services import order_service
from app.services.checkout_service import checkout
from app.utils.token import get_current_user

router = APIRouter()


# -------- USER ORDERS --------

@router.post("", status_code=http_status.HTTP_201_CREATED, response_model=OrderEnvelope)
def create_order(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = checkout(session, current_user.id)

    return {
        "message": "Order created successfully",
        "order": order_service.serialize_order(session, order),
    }


@router.get("", response_model=OrderListEnvelope)
def get_user_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    orders = order_service.list_user_orders(session, current_user.id)

    return {
        "message": "Orders retrieved successfully",
        "orders": [order_service.serialize_order(session, o) for o in orders],
    }


# -------- ADMIN ORDERS (before /{order_id}) --------

@router.get("/all", response_model=PaginatedOrders)
def get_all_orders(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    data = order_service.list_all_orders(session, status, page, limit)

    return {
        "message": "All orders retrieved successfully",
        "orders": [order_service.serialize_order(session, o) for o in data["orders"]],
        "pagination": data["pagination"],
    }


@router.get("/{order_id}", response_model=OrderEnvelope)
def get_order_by_id(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = order_service.get_order(session, current_user.id, order_id)

    return {
        "message": "Order retrieved successfully",
        "order": order_service.serialize_order(session, order),
    }


@router.put("/{order_id}/status", response_model=OrderEnvelope)
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    order = order_service.set_order_status(session, order_id, data.status)

    return {
        "message": "Order status updated successfully",
        "order": order_service.serialize_order(session, order),
    }
