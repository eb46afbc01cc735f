import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.local_image_store import ImageStoreError, LocalImageStore, get_image_store
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product_schema import ProductOut
from app.utils.i18n import Locale, resolve_localized

log = logging.getLogger("catalog")

ALL_CATEGORIES = ("all", "featured")


class CatalogException(Exception):
    pass


class ProductNotFound(CatalogException):
    pass


def parse_csv(value: Optional[str]) -> List[str]:
    """'2Y, 3Y,,4Y' -> ['2Y', '3Y', '4Y']"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_price(value, field: str = "price") -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation:
        raise CatalogException(f"Invalid {field}: {value!r}")
    if d < 0:
        raise CatalogException(f"{field} must not be negative")
    return d


def parse_bool(value) -> bool:
    return value is True or (isinstance(value, str) and value.strip().lower() == "true")


def filter_products(
    products: Iterable[ProductOut],
    category: Optional[str] = None,
    search: Optional[str] = None,
    age: Optional[str] = None,
) -> List[ProductOut]:
    category = (category or "all").lower()
    term = (search or "").strip().lower()
    age = (age or "").strip().lower()

    def _matches(p: ProductOut) -> bool:
        if category not in ALL_CATEGORIES:
            if not p.category or category not in p.category.lower():
                return False
        if term:
            names = (p.name_en or "", p.name_ar or "", p.name or "")
            if not any(term in n.lower() for n in names):
                return False
        if age and not any(age in s.lower() for s in p.sizes):
            return False
        return True

    return [p for p in products if _matches(p)]


def product_view(
    product: ProductOut, locale: Locale, image_store: LocalImageStore
) -> dict:
    data = product.model_dump()
    data["display_name"] = resolve_localized(product, "name", locale)
    data["display_description"] = resolve_localized(product, "description", locale)
    data["images"] = [
        {"url": image_store.resolve(img), "variant_tag": img.variant_tag}
        for img in product.images
    ]
    return data


class CatalogService:
    def __init__(self, db: Session, image_store: Optional[LocalImageStore] = None):
        self.db = db
        self.repo = ProductRepository(db)
        self.image_store = image_store or get_image_store()

    def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        age: Optional[str] = None,
    ) -> List[ProductOut]:
        products = [ProductOut.model_validate(p) for p in self.repo.list()]
        return filter_products(products, category=category, search=search, age=age)

    def _get_row(self, product_id: str) -> Product:
        p = self.repo.get(product_id)
        if not p:
            raise ProductNotFound("Product not found")
        return p

    def get_product(self, product_id: str) -> ProductOut:
        return ProductOut.model_validate(self._get_row(product_id))

    def _store_images(
        self, files: Sequence[UploadFile], codes: Sequence[str]
    ) -> List[dict]:
        # codes pair with uploaded files by position
        stored = []
        try:
            for i, f in enumerate(files):
                tag = codes[i] if i < len(codes) else None
                stored.append(self.image_store.save(f, variant_tag=tag).to_record())
        except ImageStoreError:
            self._discard_images(stored)
            raise
        return stored

    def _discard_images(self, images: Iterable) -> None:
        for img in images:
            self.image_store.delete(img)

    def _fields(self, form: dict) -> dict:
        fields = {
            "item_id": form.get("item_id") or None,
            "name_en": form.get("name_en"),
            "name_ar": form.get("name_ar"),
            "description_en": form.get("description_en"),
            "description_ar": form.get("description_ar"),
            "category": form.get("category") or "all",
            "price": parse_price(form.get("price")),
            "old_price": parse_price(form.get("old_price"), "old_price"),
        }
        if form.get("in_stock") is not None:
            fields["in_stock"] = parse_bool(form.get("in_stock"))
        if fields["price"] is None:
            raise CatalogException("price is required")
        return fields

    def create_product(
        self, form: dict, files: Sequence[UploadFile] = (), codes: Sequence[str] = ()
    ) -> ProductOut:
        if not form.get("name_en") or not form.get("name_ar"):
            raise CatalogException("name_en and name_ar are required")
        fields = self._fields(form)
        fields.setdefault("in_stock", True)
        fields["sizes"] = parse_csv(form.get("sizes"))
        fields["colors"] = parse_csv(form.get("colors"))
        fields["images"] = self._store_images(files, codes)
        try:
            p = self.repo.create(**fields)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self._discard_images(fields["images"])
            raise
        log.info("created product %s (%s)", p.id, p.name_en)
        return ProductOut.model_validate(p)

    def update_product(
        self,
        product_id: str,
        form: dict,
        files: Sequence[UploadFile] = (),
        codes: Sequence[str] = (),
    ) -> ProductOut:
        p = self._get_row(product_id)
        fields = self._fields(form)
        # sizes/colors/in_stock only change when sent, images only when new files arrive
        if form.get("sizes"):
            fields["sizes"] = parse_csv(form.get("sizes"))
        if form.get("colors"):
            fields["colors"] = parse_csv(form.get("colors"))
        old_images = list(p.images or [])
        if files:
            fields["images"] = self._store_images(files, codes)
        try:
            self.repo.update(p, **fields)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            if files:
                self._discard_images(fields["images"])
            raise
        if files:
            self._discard_images(old_images)
        log.info("updated product %s", p.id)
        return ProductOut.model_validate(p)

    def toggle_stock(self, product_id: str) -> ProductOut:
        p = self.repo.toggle_stock(self._get_row(product_id))
        self.db.commit()
        log.info("product %s in_stock=%s", p.id, p.in_stock)
        return ProductOut.model_validate(p)

    def delete_product(self, product_id: str) -> None:
        p = self._get_row(product_id)
        images = list(p.images or [])
        self.repo.delete(p)
        self.db.commit()
        self._discard_images(images)
        log.info("deleted product %s and %s images", product_id, len(images))
