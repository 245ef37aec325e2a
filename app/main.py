import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.database import create_db_and_tables
from app.config import settings
from app.routes import health, orders

from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local, migrations handle everything else
    if settings.env == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Bookstore Orders API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Something went wrong!"})


app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(health.router, prefix="/health", tags=["Health"])

@app.get("/")
def root():
    return {
        "order_endpoints": [
            "/orders", "/orders/{order_id}"
        ],
        "admin_order_endpoints": [
            "/orders/all", "/orders/{order_id}/status"
        ],
        "health": [
            "/health/check"
        ]
    }
