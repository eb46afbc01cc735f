import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.health import router as health_router
from app.api.routes_auth import router as auth_router
from app.api.routes_cart import router as cart_router
from app.api.routes_catalogue import router as catalogue_router
from app.api.routes_order import router as order_router
from app.config import settings
from app.db import SessionLocal, init_db
from app.services.cart_service import purge_stale_carts
from app.utils.logging_config import configure_logging

log = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    configure_logging(settings.LOG_LEVEL)
    init_db()

    # scheduler for dropping carts nobody touched within CART_TTL_DAYS
    scheduler = BackgroundScheduler()

    def purge_job():
        db = SessionLocal()
        try:
            purge_stale_carts(db)
        except Exception:
            log.exception("cart purge failed")
        finally:
            db.close()

    scheduler.add_job(
        purge_job,
        "interval",
        seconds=settings.CART_PURGE_INTERVAL_SECONDS,
        id="purge_stale_carts",
    )
    scheduler.start()

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Bella Kids - Storefront API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(auth_router, tags=["auth"])

app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

app.include_router(cart_router, tags=["cart"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


def run():
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
