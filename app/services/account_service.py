# app/services/account_service.py
from typing import Optional
import logging

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.user import User

logger = logging.getLogger(__name__)


def find_balance(session: Session, user_id: int) -> Optional[float]:
    return session.exec(
        select(User.balance).where(User.id == user_id)
    ).first()


def decrement_balance(session: Session, user_id: int, amount: float) -> None:
    session.execute(
        update(User)
        .where(User.id == user_id)
        .values(balance=User.balance - amount)
        .execution_options(synchronize_session=False)
    )
    session.commit()


def increment_balance(session: Session, user_id: int, amount: float) -> None:
    session.execute(
        update(User)
        .where(User.id == user_id)
        .values(balance=User.balance + amount)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    logger.info(f"Credited {amount} back to user {user_id}")
