from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime

from app.constants.order_status import OrderStatus
from app.models.order_item import OrderItem
from app.models.user import User

class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    total_price: float

    status: str = Field(default=OrderStatus.pending.value, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # relationships (important!)
    user: Optional["User"] = Relationship()
    items: List["OrderItem"] = Relationship(back_populates="order")
