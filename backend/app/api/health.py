from fastapi import APIRouter
from sqlalchemy import text

from app.adapters.local_image_store import get_image_store
from app.db import engine

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False
    images_ok = get_image_store().health_check()

    return {
        "status": "ok" if db_ok and images_ok else "degraded",
        "db": db_ok,
        "image_store": images_ok,
    }
