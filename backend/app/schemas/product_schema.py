# backend/app/schemas/product_schema.py
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.services import pricing


class ProductImage(BaseModel):
    """One visual variant of a product: where the file lives and its optional style code."""

    url: str
    variant_tag: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "ProductImage":
        # legacy rows hold bare filenames, newer rows {"url": ..., "variantId": ...}
        if isinstance(raw, ProductImage):
            return raw
        if isinstance(raw, str):
            return cls(url=raw)
        if isinstance(raw, dict):
            tag = raw.get("variant_tag") or raw.get("variantTag") or raw.get("variantId")
            return cls(url=raw.get("url") or "", variant_tag=tag or None)
        raise TypeError(f"Unsupported image entry: {raw!r}")

    def to_record(self) -> dict:
        return {"url": self.url, "variantId": self.variant_tag or ""}


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    item_id: Optional[str] = None
    name: Optional[str] = None
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    category: str = "all"
    price: Decimal = Field(ge=0)
    old_price: Optional[Decimal] = None
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    images: List[ProductImage] = Field(default_factory=list)
    in_stock: bool = True
    created_at: Optional[datetime] = None

    @field_validator("sizes", "colors", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    @field_validator("images", mode="before")
    @classmethod
    def _normalize_images(cls, v):
        return [ProductImage.from_raw(raw) for raw in (v or [])]

    @computed_field
    @property
    def is_on_sale(self) -> bool:
        return pricing.is_on_sale(self.price, self.old_price)

    @computed_field
    @property
    def discount_percent(self) -> int:
        return pricing.discount_percent(self.price, self.old_price)
