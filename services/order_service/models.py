from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import Column, Integer, String, Float, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from shared.config.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    NOT_PROCESSED = "Not processed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    status = Column(String, default=OrderStatus.PROCESSING.value, nullable=False)
    personalized_message = Column(Text, nullable=True)
    shipping_details = Column(JSON, nullable=False)
    # Payment details, flattened
    payment_order_id = Column(String, nullable=False)  # gateway's external reference
    payment_method = Column(String, nullable=True)
    payment_status = Column(String, default=PaymentStatus.PENDING.value, nullable=False)
    transaction_date = Column(DateTime(timezone=True), nullable=True)
    transaction_reference = Column(String, nullable=True)
    total = Column(Float, default=0, nullable=False)
    order_date = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @property
    def payment_details(self) -> dict:
        return {
            "order_id": self.payment_order_id,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "transaction_date": self.transaction_date,
            "transaction_reference": self.transaction_reference,
        }


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Catalog reference, not a foreign key: orders outlive deleted products
    product_id = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    discount = Column(Float, default=0, nullable=False)
    total_price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
