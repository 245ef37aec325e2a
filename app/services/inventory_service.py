# app/services/inventory_service.py
from datetime import datetime
from typing import Optional
import logging

from sqlalchemy import update
from sqlmodel import Session

from app.models.book import Book

logger = logging.getLogger(__name__)


def find_by_id(session: Session, book_id: int) -> Optional[Book]:
    """Fresh read of a book, bypassing whatever the session already holds."""
    return session.get(Book, book_id, populate_existing=True)


def conditional_decrement(session: Session, book_id: int, quantity: int) -> Optional[Book]:
    """
    Take `quantity` off the book's stock only if that much is still there.

    Single UPDATE ... WHERE stock >= quantity, so two checkouts racing the
    same book can never push stock below zero. Returns None when the guard
    matched nothing.
    """
    result = session.execute(
        update(Book)
        .where(Book.id == book_id, Book.stock >= quantity)
        .values(stock=Book.stock - quantity, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    session.commit()

    if result.rowcount == 0:
        logger.warning(f"Conditional decrement refused: book {book_id}, qty {quantity}")
        return None

    return find_by_id(session, book_id)


def increment(session: Session, book_id: int, quantity: int) -> None:
    session.execute(
        update(Book)
        .where(Book.id == book_id)
        .values(stock=Book.stock + quantity, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    session.commit()
    logger.info(f"Restocked book {book_id} by {quantity}")
