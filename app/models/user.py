from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str
    email: str = Field(index=True)
    password: str
    role: str = Field(default="user")
    can_login: bool = Field(default=True)

    # wallet funded by gift codes / top-ups, spent at checkout
    balance: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
