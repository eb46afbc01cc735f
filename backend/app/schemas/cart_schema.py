from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class CartLine(BaseModel):
    product_id: str
    name: str
    item_id: Optional[str] = None
    unit_price: Decimal  # captured when the line was added
    size: str
    color: Optional[str] = None
    image_url: str
    variant_tag: Optional[str] = None
    quantity: int = Field(1, ge=1)

    @property
    def identity(self) -> Tuple[str, str, Optional[str], str]:
        return (self.product_id, self.size, self.color, self.image_url)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart(BaseModel):
    lines: List[CartLine] = Field(default_factory=list)
    region_key: Optional[str] = None

    def find_line(
        self, product_id: str, size: str, color: Optional[str], image_url: str
    ) -> Optional[int]:
        key = (product_id, size, color, image_url)
        return next((i for i, line in enumerate(self.lines) if line.identity == key), None)

    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    def total(self, delivery_fee) -> Decimal:
        # no delivery charge on an empty cart
        if not self.lines:
            return Decimal("0")
        return max(self.subtotal() + Decimal(str(delivery_fee)), Decimal("0"))

    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


class PendingSelection(BaseModel):
    """Variant choice being assembled in the product view before it becomes a cart line."""

    size: Optional[str] = None
    color: Optional[str] = None
    image_index: int = 0
    quantity: int = Field(1, ge=1)

    def adjust_quantity(self, delta: int) -> int:
        self.quantity = max(1, self.quantity + delta)
        return self.quantity


class AddItemIn(BaseModel):
    product_id: str
    size: Optional[str] = None
    color: Optional[str] = None
    image_index: int = Field(0, ge=0)
    quantity: int = Field(1, ge=1)

    def to_selection(self) -> PendingSelection:
        return PendingSelection(
            size=self.size,
            color=self.color,
            image_index=self.image_index,
            quantity=self.quantity,
        )


class SelectRegionIn(BaseModel):
    region_key: str
