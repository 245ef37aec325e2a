from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional


class OrderStatusUpdate(BaseModel):
    # plain str so unknown values reach the service and get a 400, not a 422
    status: str


class OrderBook(BaseModel):
    id: int
    title: str
    author: str
    price: float
    image: Optional[str] = None


class OrderUser(BaseModel):
    id: int
    username: str
    email: str


class OrderItemResponse(BaseModel):
    book: Optional[OrderBook]
    book_title: str
    quantity: int
    price: float
    total: float


class OrderResponse(BaseModel):
    id: int
    user: Optional[OrderUser]
    items: List[OrderItemResponse]
    total_price: float
    status: str
    created_at: datetime
    updated_at: datetime


class OrderEnvelope(BaseModel):
    message: str
    order: OrderResponse


class OrderListEnvelope(BaseModel):
    message: str
    orders: List[OrderResponse]


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalOrders: int
    hasNext: bool
    hasPrev: bool


class PaginatedOrders(OrderListEnvelope):
    pagination: Pagination
