from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Book(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_book_stock_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    author: str
    description: Optional[str] = None

    #Shop Details
    price: float
    stock: int = Field(default=0)
    category: Optional[str] = None
    image: Optional[str] = None

    #timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

