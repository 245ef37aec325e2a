import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SQLALCHEMY_DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from app.database import get_session
from app.main import app
from app.models import Book, CartItem, Order, User
from app.utils.token import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(username="reader", balance=100.0, role="user"):
        user = User(
            username=username,
            email=f"{username}@example.com",
            password="not-a-real-hash",
            role=role,
            balance=balance,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_book(session):
    def _make(title="Dune", price=10.0, stock=5, author="Frank Herbert"):
        book = Book(title=title, author=author, price=price, stock=stock)
        session.add(book)
        session.commit()
        session.refresh(book)
        return book
    return _make


@pytest.fixture
def add_to_cart(session):
    def _add(user_id, book_id, quantity=1):
        item = CartItem(user_id=user_id, book_id=book_id, quantity=quantity)
        session.add(item)
        session.commit()
        return item
    return _add


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"user_id": user.id})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def snapshot(session):
    """Fresh view of stock, balances, carts and orders straight from the db."""
    def _snapshot():
        session.expire_all()
        return {
            "stock": {b.id: b.stock for b in session.exec(select(Book)).all()},
            "balance": {u.id: u.balance for u in session.exec(select(User)).all()},
            "cart": len(session.exec(select(CartItem)).all()),
            "orders": len(session.exec(select(Order)).all()),
        }
    return _snapshot
