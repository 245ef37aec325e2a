# app/services/cart_service.py
from typing import List, Optional, Tuple

from sqlalchemy import delete
from sqlmodel import Session, select

from app.models.book import Book
from app.models.cart import CartItem


def find_by_user(session: Session, user_id: int) -> List[Tuple[CartItem, Optional[Book]]]:
    """Cart lines in insertion order, each with its book (None if the book is gone)."""
    return session.exec(
        select(CartItem, Book)
        .join(Book, CartItem.book_id == Book.id, isouter=True)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.id)
    ).all()


def delete_all_by_user(session: Session, user_id: int) -> int:
    result = session.execute(
        delete(CartItem)
        .where(CartItem.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return result.rowcount
