from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models.product import Product

PRODUCT_FIELDS = (
    "item_id",
    "name",
    "name_en",
    "name_ar",
    "description",
    "description_en",
    "description_ar",
    "category",
    "price",
    "old_price",
    "sizes",
    "colors",
    "images",
    "in_stock",
)


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_many(self, product_ids: Iterable[str]) -> dict:
        ids = list(set(product_ids))
        if not ids:
            return {}
        rows = self.db.query(Product).filter(Product.id.in_(ids)).all()
        return {p.id: p for p in rows}

    def list(self) -> List[Product]:
        """All products, newest first."""
        return (
            self.db.query(Product)
            .order_by(Product.created_at.desc(), Product.id)
            .all()
        )

    def create(self, **fields) -> Product:
        p = Product(**{k: v for k, v in fields.items() if k in PRODUCT_FIELDS})
        p.created_at = datetime.now(timezone.utc)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, **fields) -> Product:
        # unknown keys are ignored; concurrent admin edits are last-write-wins
        for key, value in fields.items():
            if key in PRODUCT_FIELDS:
                setattr(product, key, value)
        self.db.flush()
        return product

    def toggle_stock(self, product: Product) -> Product:
        product.in_stock = not product.in_stock
        self.db.flush()
        return product

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()
