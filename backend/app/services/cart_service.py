import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.adapters.local_image_store import LocalImageStore, get_image_store
from app.config import settings
from app.repositories.cart_repo import CartRepository
from app.schemas.cart_schema import Cart, CartLine, PendingSelection
from app.schemas.product_schema import ProductOut
from app.services.delivery_service import DeliveryRegion, get_region
from app.services.pricing import to_decimal
from app.utils.i18n import Locale, resolve_localized

log = logging.getLogger("cart")


class CartServiceException(Exception):
    pass


class ValidationError(CartServiceException):
    """A required selection is missing or the product cannot be added."""


class OutOfRangeError(CartServiceException):
    pass


class CartService:
    """
    Owns one client's cart for the duration of a request.

    Every mutation is applied to a copy, persisted, and only then swapped in,
    so a failed write never leaves the live cart ahead of the stored one.
    """

    def __init__(
        self,
        db: Session,
        cart_uuid: Optional[str] = None,
        image_store: Optional[LocalImageStore] = None,
    ):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.image_store = image_store or get_image_store()
        self.cart_uuid = None
        self.cart = self.get_or_create_cart_for_guest(cart_uuid)

    def get_or_create_cart_for_guest(self, cart_uuid: Optional[str] = None) -> Cart:
        if cart_uuid:
            c = self.cart_repo.load(cart_uuid)
            if c is not None:
                self.cart_uuid = cart_uuid
                return c
        # new carts live in memory until their first mutation
        self.cart_uuid = cart_uuid or uuid.uuid4().hex
        return Cart(region_key=settings.DEFAULT_REGION)

    def _persist(self, updated: Cart) -> Cart:
        self.cart_repo.save(self.cart_uuid, updated)
        self.cart = updated
        return self.cart

    def add_item(
        self,
        product: ProductOut,
        size: Optional[str],
        color: Optional[str] = None,
        image_url: Optional[str] = None,
        variant_tag: Optional[str] = None,
        quantity: int = 1,
        locale: Optional[Locale] = None,
    ) -> Cart:
        size = (size or "").strip()
        if not size:
            raise ValidationError("Size is required")
        if product.sizes and size not in product.sizes:
            raise ValidationError(f"Size {size!r} is not available")
        if product.colors:
            color = (color or "").strip()
            if not color:
                raise ValidationError("Color is required for this product")
            if color not in product.colors:
                raise ValidationError(f"Color {color!r} is not available")
        else:
            color = None
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        if not product.in_stock:
            raise ValidationError("Product is out of stock")

        image_url = image_url or self.image_store.placeholder
        locale = locale or Locale.parse(settings.DEFAULT_LOCALE)

        updated = self.cart.model_copy(deep=True)
        idx = updated.find_line(product.id, size, color, image_url)
        if idx is not None:
            updated.lines[idx].quantity += quantity
        else:
            updated.lines.append(
                CartLine(
                    product_id=product.id,
                    name=resolve_localized(product, "name", locale) or product.id,
                    item_id=product.item_id or None,
                    unit_price=to_decimal(product.price),
                    size=size,
                    color=color,
                    image_url=image_url,
                    variant_tag=variant_tag or None,
                    quantity=quantity,
                )
            )
        self._persist(updated)
        log.info(
            "cart %s: added %sx %s (size=%s color=%s)",
            self.cart_uuid,
            quantity,
            product.id,
            size,
            color,
        )
        return self.cart

    def add_selection(
        self,
        product: ProductOut,
        selection: PendingSelection,
        locale: Optional[Locale] = None,
    ) -> Cart:
        """Commit a pending selection, resolving its image variant to a url and tag."""
        if product.images:
            if not 0 <= selection.image_index < len(product.images):
                raise ValidationError("Unknown image variant")
            image = product.images[selection.image_index]
            image_url = self.image_store.resolve(image)
            variant_tag = image.variant_tag
        else:
            image_url, variant_tag = self.image_store.placeholder, None
        return self.add_item(
            product,
            selection.size,
            color=selection.color,
            image_url=image_url,
            variant_tag=variant_tag,
            quantity=selection.quantity,
            locale=locale,
        )

    def remove_line(self, line_index: int) -> Cart:
        if not 0 <= line_index < len(self.cart.lines):
            raise OutOfRangeError(f"No cart line at index {line_index}")
        updated = self.cart.model_copy(deep=True)
        removed = updated.lines.pop(line_index)
        self._persist(updated)
        log.info("cart %s: removed line %s (%s)", self.cart_uuid, line_index, removed.product_id)
        return self.cart

    def select_region(self, region_key: str) -> Cart:
        region = get_region(region_key)
        updated = self.cart.model_copy(deep=True)
        updated.region_key = region.key
        return self._persist(updated)

    def clear(self) -> Cart:
        return self._persist(Cart(region_key=self.cart.region_key))

    def current_region(self) -> DeliveryRegion:
        return get_region(self.cart.region_key)

    def compute_subtotal(self) -> Decimal:
        return self.cart.subtotal()

    def compute_total(self, delivery_fee=None) -> Decimal:
        if delivery_fee is None:
            delivery_fee = self.current_region().fee
        return self.cart.total(delivery_fee)

    def total_item_count(self) -> int:
        return self.cart.item_count()


def purge_stale_carts(db: Session, ttl_days: Optional[int] = None) -> int:
    ttl_days = ttl_days if ttl_days is not None else settings.CART_TTL_DAYS
    cutoff = datetime.now(timezone.utc) - timedelta(days=ttl_days)
    removed = CartRepository(db).purge_stale(cutoff)
    if removed:
        log.info("purged %s carts idle since %s", removed, cutoff.isoformat())
    return removed
