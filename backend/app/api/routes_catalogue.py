from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from app.adapters.local_image_store import ImageStoreError, get_image_store
from app.api.routes_auth import require_admin
from app.config import settings
from app.db import get_db
from app.services.catalog_service import (
    CatalogException,
    CatalogService,
    ProductNotFound,
    product_view,
)
from app.utils.i18n import Locale

router = APIRouter(tags=["catalogue"])


def _locale(locale: Optional[str]) -> Locale:
    return Locale.parse(locale, Locale.parse(settings.DEFAULT_LOCALE))


def _product_form(
    name_en: Optional[str] = Form(None),
    name_ar: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    item_id: Optional[str] = Form(None),
    old_price: Optional[str] = Form(None),
    category: Optional[str] = Form("all"),
    sizes: Optional[str] = Form(None),
    colors: Optional[str] = Form(None),
    description_en: Optional[str] = Form(None),
    description_ar: Optional[str] = Form(None),
    in_stock: Optional[str] = Form(None),
) -> dict:
    return {
        "name_en": name_en,
        "name_ar": name_ar,
        "price": price,
        "item_id": item_id,
        "old_price": old_price,
        "category": category,
        "sizes": sizes,
        "colors": colors,
        "description_en": description_en,
        "description_ar": description_ar,
        "in_stock": in_stock,
    }


@router.get("", summary="List products")
def list_products(
    category: Optional[str] = Query(None, description="category, or all/featured"),
    q: Optional[str] = Query(None, description="search term"),
    age: Optional[str] = Query(None, description="size/age label fragment"),
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = CatalogService(db)
    items = svc.list_products(category=category, search=q, age=age)
    loc = _locale(locale)
    store = get_image_store()
    return {
        "items": [product_view(p, loc, store) for p in items],
        "total": len(items),
    }


@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: str, locale: Optional[str] = Query(None), db: Session = Depends(get_db)):
    svc = CatalogService(db)
    try:
        p = svc.get_product(product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    return product_view(p, _locale(locale), get_image_store())


@router.post("", status_code=201, summary="Create product")
def create_product(
    form: dict = Depends(_product_form),
    images: Optional[List[UploadFile]] = File(None),
    image_codes: Optional[List[str]] = Form(None),
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    svc = CatalogService(db)
    try:
        p = svc.create_product(form, images or [], image_codes or [])
    except CatalogException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ImageStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return product_view(p, _locale(None), get_image_store())


@router.put("/{product_id}", summary="Edit product")
def update_product(
    product_id: str,
    form: dict = Depends(_product_form),
    images: Optional[List[UploadFile]] = File(None),
    image_codes: Optional[List[str]] = Form(None),
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    svc = CatalogService(db)
    try:
        p = svc.update_product(product_id, form, images or [], image_codes or [])
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Not found")
    except CatalogException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ImageStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return product_view(p, _locale(None), get_image_store())


@router.put("/{product_id}/toggle", summary="Toggle in-stock flag")
def toggle_stock(
    product_id: str,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    svc = CatalogService(db)
    try:
        p = svc.toggle_stock(product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Not found")
    return product_view(p, _locale(None), get_image_store())


@router.delete("/{product_id}", summary="Delete product and its images")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    svc = CatalogService(db)
    try:
        svc.delete_product(product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Not found")
    return {"message": "Deleted"}
