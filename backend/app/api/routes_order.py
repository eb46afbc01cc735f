from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.api.routes_cart import _get_cart_uuid_cookie, _locale
from app.db import get_db
from app.services.cart_service import CartService
from app.services.order_service import (
    OrderService,
    OrderServiceException,
    StaleCartError,
)

router = APIRouter(tags=["orders"])


@router.post("/whatsapp", summary="Compose the WhatsApp order for the current cart")
def whatsapp_checkout(
    request: Request,
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    cart_svc = CartService(db, _get_cart_uuid_cookie(request))
    svc = OrderService(db)
    try:
        return svc.checkout(cart_svc, _locale(locale))
    except StaleCartError as e:
        raise HTTPException(
            status_code=409, detail={"message": str(e), "lines": e.line_indexes}
        )
    except OrderServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
