# app/services/order_service.py
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func, inspect
from sqlmodel import Session, select

from app.constants.order_status import OrderStatus, VALID_STATUSES
from app.exceptions import InvalidStatus, OrderForbidden, OrderNotFound
from app.models.book import Book
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.user import User
from app.utils.pagination import build_pagination, page_bounds

logger = logging.getLogger(__name__)


# -------- Order store --------

def draft(
    *,
    user_id: int,
    items: List[Dict[str, Any]],
    total_price: float,
) -> Order:
    """Unsaved pending order. `items` carry snapshot prices."""
    order = Order(
        user_id=user_id,
        total_price=total_price,
        status=OrderStatus.pending.value,
    )
    order.items = [
        OrderItem(
            book_id=item["book_id"],
            book_title=item["title"],
            price=item["price"],
            quantity=item["quantity"],
        )
        for item in items
    ]
    return order


def create(session: Session, order: Order) -> Order:
    """Insert the order and its items in one commit."""
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


def persisted_id(order: Order) -> Optional[int]:
    """Primary key of `order` if its row was written, else None. Never hits the db."""
    state = inspect(order)
    return state.identity[0] if state.has_identity else None


def find_by_id(session: Session, order_id: int) -> Optional[Order]:
    return session.get(Order, order_id)


def find_by_user(session: Session, user_id: int) -> List[Order]:
    return session.exec(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()


def _filtered(query, status: Optional[str]):
    if status:
        query = query.where(Order.status == status)
    return query


def find_all(session: Session, status: Optional[str], skip: int, limit: int) -> List[Order]:
    return session.exec(
        _filtered(select(Order), status)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset(skip)
        .limit(limit)
    ).all()


def count(session: Session, status: Optional[str]) -> int:
    return session.exec(
        _filtered(select(func.count()).select_from(Order), status)
    ).one()


def update_status(session: Session, order_id: int, status: str) -> Optional[Order]:
    order = session.get(Order, order_id)
    if not order:
        return None

    order.status = status
    order.updated_at = datetime.utcnow()
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


# -------- Queries --------

def list_user_orders(session: Session, user_id: int) -> List[Order]:
    return find_by_user(session, user_id)


def get_order(session: Session, user_id: int, order_id: int) -> Order:
    order = find_by_id(session, order_id)

    if not order:
        raise OrderNotFound()

    if order.user_id != user_id:
        raise OrderForbidden()

    return order


def list_all_orders(
    session: Session,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
) -> dict:
    page, skip, limit = page_bounds(page, page_size)

    total = count(session, status)
    orders = find_all(session, status, skip, limit)

    return {
        "orders": orders,
        "pagination": build_pagination(page=page, limit=limit, total=total),
    }


def set_order_status(session: Session, order_id: int, status: str) -> Order:
    if status not in VALID_STATUSES:
        raise InvalidStatus(status, VALID_STATUSES)

    order = update_status(session, order_id, status)
    if not order:
        raise OrderNotFound()

    logger.info(f"Order {order_id} status set to {status}")
    return order


# -------- Response formatting --------

def serialize_order(session: Session, order: Order) -> dict:
    """Order with book and user display fields filled in."""
    user = session.get(User, order.user_id)

    items = []
    for i in order.items:
        book = session.get(Book, i.book_id)
        items.append({
            "book": {
                "id": book.id,
                "title": book.title,
                "author": book.author,
                "price": book.price,
                "image": book.image,
            } if book else None,
            "book_title": i.book_title,
            "quantity": i.quantity,
            "price": i.price,
            "total": round(i.price * i.quantity, 2),
        })

    return {
        "id": order.id,
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
        } if user else None,
        "items": items,
        "total_price": order.total_price,
        "status": order.status,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }
