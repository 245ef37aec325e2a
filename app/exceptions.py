# app/exceptions.py
"""
Order / checkout errors.

Every error is an HTTPException so services can raise them directly and
FastAPI renders ``{"detail": {...}}`` with the right status code.
"""
from typing import Any, Dict, List

from fastapi import HTTPException, status


class OrderError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Order request failed"

    def __init__(self, message: str | None = None, **payload: Any):
        self.message = message or self.message
        self.payload = payload
        super().__init__(
            status_code=self.status_code,
            detail={"message": self.message, **payload},
        )


# -------- 400: user input / business rules --------

class EmptyCart(OrderError):
    message = "Cart is empty"


class BookNotFound(OrderError):
    message = "One or more books not found"

    def __init__(self, book_id: int):
        super().__init__(bookId=book_id)
        self.book_id = book_id


class InvalidCartQuantity(OrderError):
    message = "Cart quantities must be positive"

    def __init__(self, book_id: int, quantity: int):
        super().__init__(bookId=book_id, quantity=quantity)
        self.book_id = book_id


class InsufficientStock(OrderError):
    message = "Insufficient stock for some items"

    def __init__(self, shortages: List[Dict[str, Any]]):
        super().__init__(shortages=shortages)
        self.shortages = shortages


class InsufficientBalance(OrderError):
    message = "Insufficient balance in your account"

    def __init__(self, required: float, available: float):
        super().__init__(required=required, available=available)
        self.required = required
        self.available = available


class InvalidStatus(OrderError):
    message = "Invalid status"

    def __init__(self, value: str, valid_statuses: List[str]):
        super().__init__(status=value, validStatuses=valid_statuses)


# -------- 404 / 403 --------

class AccountNotFound(OrderError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Account not found"


class OrderNotFound(OrderError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Order not found"


class OrderForbidden(OrderError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Unauthorized access to order"


# -------- 500: commit-phase race --------

class ConcurrentStockExhaustion(OrderError):
    """Stock ran out between validation and the conditional decrement.

    Callers should treat this as transient and retry.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Stock changed while placing the order, please retry"

    def __init__(self, book_id: int, title: str, requested: int):
        super().__init__(bookId=book_id, title=title, requested=requested)
        self.book_id = book_id
