from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.db import get_db
from app.repositories.cart_repo import PersistenceError
from app.schemas.cart_schema import AddItemIn, SelectRegionIn
from app.services.cart_service import CartService, OutOfRangeError, ValidationError
from app.services.catalog_service import CatalogService, ProductNotFound
from app.services.delivery_service import UnknownRegionError, list_regions
from app.utils.i18n import Locale

router = APIRouter(tags=["cart"])

CART_COOKIE = "cart_uuid"


def _get_cart_uuid_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(CART_COOKIE)


def _locale(locale: Optional[str]) -> Locale:
    return Locale.parse(locale, Locale.parse(settings.DEFAULT_LOCALE))


def _cart_view(svc: CartService, locale: Locale, response: Response) -> dict:
    response.set_cookie(CART_COOKIE, svc.cart_uuid, httponly=False, samesite="Lax")
    region = svc.current_region()
    items = []
    for idx, line in enumerate(svc.cart.lines):
        item = line.model_dump()
        item["index"] = idx
        item["line_total"] = line.line_total
        items.append(item)
    return {
        "cart_uuid": svc.cart_uuid,
        "items": items,
        "item_count": svc.total_item_count(),
        "subtotal": svc.compute_subtotal(),
        "region": region.view(locale),
        "delivery_fee": region.fee,
        "total": svc.compute_total(region.fee),
    }


@router.get("/api/delivery-regions", summary="List delivery regions")
def delivery_regions(locale: Optional[str] = Query(None)):
    loc = _locale(locale)
    return [r.view(loc) for r in list_regions()]


@router.get("/api/cart", summary="Get cart")
def get_cart(
    request: Request,
    response: Response,
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = CartService(db, _get_cart_uuid_cookie(request))
    return _cart_view(svc, _locale(locale), response)


@router.post("/api/cart/items", summary="Add item to cart")
def add_item(
    payload: AddItemIn,
    request: Request,
    response: Response,
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    loc = _locale(locale)
    try:
        product = CatalogService(db).get_product(payload.product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    svc = CartService(db, _get_cart_uuid_cookie(request))
    try:
        svc.add_selection(product, payload.to_selection(), locale=loc)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _cart_view(svc, loc, response)


@router.delete("/api/cart/items/{line_index}", summary="Remove a cart line")
def remove_item(
    line_index: int,
    request: Request,
    response: Response,
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = CartService(db, _get_cart_uuid_cookie(request))
    try:
        svc.remove_line(line_index)
    except OutOfRangeError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _cart_view(svc, _locale(locale), response)


@router.put("/api/cart/region", summary="Select delivery region")
def select_region(
    payload: SelectRegionIn,
    request: Request,
    response: Response,
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = CartService(db, _get_cart_uuid_cookie(request))
    try:
        svc.select_region(payload.region_key)
    except UnknownRegionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _cart_view(svc, _locale(locale), response)


@router.delete("/api/cart", summary="Empty the cart")
def clear_cart(
    request: Request,
    response: Response,
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = CartService(db, _get_cart_uuid_cookie(request))
    try:
        svc.clear()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _cart_view(svc, _locale(locale), response)
