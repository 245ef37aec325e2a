# app/services/checkout_service.py
"""
Cart -> order checkout.

There is no transaction spanning books, the user's balance, orders and the
cart. Instead checkout validates everything up front without writing, then
commits each store change on its own (stock first, via a conditional
decrement), and on any failure walks back what was already applied.
"""
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlmodel import Session

from app.constants.order_status import OrderStatus
from app.exceptions import (
    AccountNotFound,
    BookNotFound,
    ConcurrentStockExhaustion,
    EmptyCart,
    InsufficientBalance,
    InsufficientStock,
    InvalidCartQuantity,
)
from app.models.order import Order
from app.services import account_service, cart_service, inventory_service, order_service

logger = logging.getLogger(__name__)


def checkout(session: Session, user_id: int) -> Order:
    # 1. cart
    cart_lines = cart_service.find_by_user(session, user_id)
    if not cart_lines:
        raise EmptyCart()

    # 2. account
    balance = account_service.find_balance(session, user_id)
    if balance is None:
        raise AccountNotFound()

    # 3. validation pass, read only
    lines = _snapshot_lines(session, cart_lines)

    shortages = [
        {
            "bookId": line["book_id"],
            "title": line["title"],
            "available": line["stock"],
            "requested": line["quantity"],
        }
        for line in lines
        if line["stock"] < line["quantity"]
    ]
    if shortages:
        logger.warning(f"Checkout rejected for user {user_id}: {len(shortages)} item(s) short")
        raise InsufficientStock(shortages)

    total_price = round(sum(line["price"] * line["quantity"] for line in lines), 2)
    if total_price > balance:
        logger.warning(
            f"Checkout rejected for user {user_id}: needs {total_price}, has {balance}"
        )
        raise InsufficientBalance(required=total_price, available=balance)

    logger.info(f"Checkout for user {user_id}: {len(lines)} line(s), total {total_price}")

    # 4-5. commit pass
    processed: List[Tuple[int, int]] = []
    debited = False
    order = order_service.draft(
        user_id=user_id,
        items=lines,
        total_price=total_price,
    )

    try:
        for line in lines:
            updated = inventory_service.conditional_decrement(
                session, line["book_id"], line["quantity"]
            )
            if updated is None:
                raise ConcurrentStockExhaustion(
                    line["book_id"], line["title"], line["quantity"]
                )
            processed.append((line["book_id"], line["quantity"]))

        account_service.decrement_balance(session, user_id, total_price)
        debited = True

        order_service.create(session, order)

        cart_service.delete_all_by_user(session, user_id)

    except Exception as e:
        logger.error(f"Checkout failed for user {user_id}, compensating: {e!r}")
        # the row may be committed even if create() itself raised
        order_id = order_service.persisted_id(order)
        _compensate(
            session,
            user_id=user_id,
            processed=processed,
            refund=total_price if debited else 0,
            order_id=order_id,
        )
        raise

    logger.info(f"Order {order.id} placed for user {user_id}")
    return order


def _snapshot_lines(session: Session, cart_lines) -> List[Dict[str, Any]]:
    """
    Current price/stock for every book in the cart, in cart order.

    Lines for the same book are added together so stock is checked against
    the full requested amount.
    """
    lines: Dict[int, Dict[str, Any]] = {}
    for cart_item, _ in cart_lines:
        if cart_item.quantity is None or cart_item.quantity <= 0:
            raise InvalidCartQuantity(cart_item.book_id, cart_item.quantity)

        if cart_item.book_id in lines:
            lines[cart_item.book_id]["quantity"] += cart_item.quantity
            continue

        book = inventory_service.find_by_id(session, cart_item.book_id)
        if not book:
            raise BookNotFound(cart_item.book_id)

        lines[book.id] = {
            "book_id": book.id,
            "title": book.title,
            "price": book.price,
            "stock": book.stock or 0,
            "quantity": cart_item.quantity,
        }
    return list(lines.values())


def _compensate(
    session: Session,
    *,
    user_id: int,
    processed: List[Tuple[int, int]],
    refund: float,
    order_id: Optional[int],
) -> None:
    """
    Undo every applied step, newest first. Each step is attempted even if an
    earlier one fails; failures are logged only, the caller re-raises the
    original error.
    """
    _attempt("rollback", session.rollback)

    if order_id is not None:
        _attempt(
            f"cancel order {order_id}",
            order_service.update_status,
            session, order_id, OrderStatus.cancelled.value,
            session=session,
        )

    if refund:
        _attempt(
            f"refund {refund} to user {user_id}",
            account_service.increment_balance,
            session, user_id, refund,
            session=session,
        )

    for book_id, quantity in reversed(processed):
        _attempt(
            f"restock book {book_id} by {quantity}",
            inventory_service.increment,
            session, book_id, quantity,
            session=session,
        )


def _attempt(label: str, fn, *args, session: Optional[Session] = None) -> None:
    try:
        fn(*args)
    except Exception:
        logger.exception(f"Compensation step failed: {label}")
        if session is not None:
            _attempt("rollback", session.rollback)
