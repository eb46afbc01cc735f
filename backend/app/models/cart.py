from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from app.db import Base


class CartRecord(Base):
    """Durable snapshot of one client's cart, rewritten on every mutation."""

    __tablename__ = "carts"
    id = Column(Integer, primary_key=True, index=True)
    cart_uuid = Column(
        String(64), unique=True, index=True, nullable=False
    )  # client cookie identifier
    payload = Column(JSON, nullable=False, default=dict)  # serialized Cart
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), index=True
    )
