import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from sqlalchemy.orm import Session

from app.config import settings
from app.repositories.product_repo import ProductRepository
from app.schemas.cart_schema import Cart
from app.services.cart_service import CartService
from app.services.delivery_service import DeliveryRegion
from app.services.pricing import format_amount, format_money
from app.utils.i18n import Locale, label

log = logging.getLogger("orders")

SEPARATOR = "----------------"


class OrderServiceException(Exception):
    pass


class EmptyCartError(OrderServiceException):
    pass


class StaleCartError(OrderServiceException):
    """Some lines point at products that were deleted or sold out since they were added."""

    def __init__(self, line_indexes: List[int], names: List[str]):
        self.line_indexes = line_indexes
        super().__init__("No longer available: " + ", ".join(names))


def compose_order_message(cart: Cart, region: DeliveryRegion, locale: Locale) -> str:
    """
    Render the cart as the plain-text order sent over WhatsApp.

    Output depends only on (cart, region, locale), so the same inputs always
    produce the same bytes. Per-line prices are printed as captured; the
    total is fixed to two decimals.
    """
    if not cart.lines:
        raise EmptyCartError("Cannot compose an order from an empty cart")

    cur = label(locale, "currency")
    out = [f"*{label(locale, 'whatsapp_intro')}*", ""]

    for n, line in enumerate(cart.lines, start=1):
        title = f"{n}. {line.name}"
        if line.item_id:
            title += f" (#{line.item_id})"
        out.append(title)

        details = [f"{label(locale, 'size')}: {line.size}"]
        if line.color:
            details.append(f"{label(locale, 'color')}: {line.color}")
        if line.variant_tag:
            details.append(f"{label(locale, 'variant')}: {line.variant_tag}")
        out.append("   " + " | ".join(details))
        out.append(
            f"   {line.quantity} x {cur}{format_amount(line.unit_price)}"
            f" = {cur}{format_amount(line.line_total)}"
        )

    subtotal = cart.subtotal()
    out.append("")
    out.append(SEPARATOR)
    out.append(f"{label(locale, 'subtotal')}: {cur}{format_amount(subtotal)}")
    out.append(
        f"{label(locale, 'delivery')} ({region.display_name(locale)}): "
        f"{cur}{format_amount(region.fee)}"
    )
    out.append(f"*{label(locale, 'total')}: {cur}{format_money(cart.total(region.fee))}*")
    return "\n".join(out) + "\n"


def build_whatsapp_url(message: str, phone: Optional[str] = None) -> str:
    phone = phone or settings.WHATSAPP_PHONE
    # same escaping as JavaScript's encodeURIComponent
    text = quote(message, safe="!~*'()")
    return f"https://wa.me/{phone}?text={text}"


class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.product_repo = ProductRepository(db)

    def revalidate(self, cart: Cart) -> None:
        """Re-read every line's product and refuse to check out lines that are gone or sold out."""
        products = self.product_repo.get_many(line.product_id for line in cart.lines)
        stale_idx, stale_names = [], []
        for i, line in enumerate(cart.lines):
            p = products.get(line.product_id)
            if p is None or not p.in_stock:
                stale_idx.append(i)
                stale_names.append(line.name)
        if stale_idx:
            raise StaleCartError(stale_idx, stale_names)

    def checkout(self, cart_service: CartService, locale: Locale) -> Dict:
        cart = cart_service.cart
        if not cart.lines:
            raise EmptyCartError("Cannot compose an order from an empty cart")
        self.revalidate(cart)

        region = cart_service.current_region()
        message = compose_order_message(cart, region, locale)
        log.info(
            "cart %s: composed order (%s items, total=%s, region=%s)",
            cart_service.cart_uuid,
            cart.item_count(),
            format_money(cart.total(region.fee)),
            region.key,
        )
        return {
            "message": message,
            "whatsapp_url": build_whatsapp_url(message),
            "subtotal": cart.subtotal(),
            "delivery_fee": region.fee,
            "total": cart.total(region.fee),
            "item_count": cart.item_count(),
            "region": region.view(locale),
        }
