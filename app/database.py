from sqlmodel import SQLModel, create_engine, Session
from app.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,   # checks dead connections
        "pool_recycle": 1800,    # refresh every 30 min
    }


engine = create_engine(
    settings.database_url,
    echo=False,
    **_engine_options(settings.database_url)
)


def create_db_and_tables():
  from app.models import user, book, cart, order, order_item
  SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
