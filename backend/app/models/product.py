from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Numeric, String, Text, func

from app.db import Base


def _new_id() -> str:
    return uuid4().hex


class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=_new_id)
    item_id = Column(String(64), nullable=True, index=True)  # internal code shown in orders
    name = Column(String(256), nullable=True)  # legacy generic name
    name_en = Column(String(256), nullable=True)
    name_ar = Column(String(256), nullable=True)
    description = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    description_ar = Column(Text, nullable=True)
    category = Column(String(64), nullable=False, default="all")
    price = Column(Numeric(10, 2), nullable=False, default=0)
    old_price = Column(Numeric(10, 2), nullable=True)
    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)
    # entries are legacy bare filenames or {"url": ..., "variantId": ...} objects
    images = Column(JSON, nullable=False, default=list)
    in_stock = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<Product id={self.id} name={self.name_en or self.name}>"
