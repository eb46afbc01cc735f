import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.cart import CartRecord
from app.schemas.cart_schema import Cart

log = logging.getLogger("cart")


class PersistenceError(Exception):
    """The durable cart snapshot could not be written."""


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def _record(self, cart_uuid: str) -> Optional[CartRecord]:
        return self.db.query(CartRecord).filter(CartRecord.cart_uuid == cart_uuid).first()

    def load(self, cart_uuid: str) -> Optional[Cart]:
        rec = self._record(cart_uuid)
        if rec is None:
            return None
        return Cart.model_validate(rec.payload or {})

    def save(self, cart_uuid: str, cart: Cart) -> None:
        """Overwrite the durable snapshot for `cart_uuid` and commit."""
        payload = cart.model_dump(mode="json")
        try:
            rec = self._record(cart_uuid)
            if rec is None:
                rec = CartRecord(cart_uuid=cart_uuid)
                self.db.add(rec)
            rec.payload = payload
            rec.updated_at = datetime.now(timezone.utc)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("cart %s: persist failed: %s", cart_uuid, e)
            raise PersistenceError(f"Could not save cart: {e}") from e

    def purge_stale(self, cutoff: datetime) -> int:
        """Delete carts not written since `cutoff`. Returns the number removed."""
        try:
            removed = (
                self.db.query(CartRecord)
                .filter(CartRecord.updated_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Could not purge carts: {e}") from e
        return removed
