from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from shared.config.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    discount = Column(Float, default=0, nullable=False) # percent
    hero_image = Column(JSON, default=list, nullable=False) # image keys, max 2
    images = Column(JSON, default=list, nullable=False) # image keys, max 5
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    color = Column(String, nullable=True)
    material = Column(String, nullable=True)
    weight = Column(String, nullable=True)
    in_stock = Column(Boolean, default=True, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # Analytics signal only; adjusted with atomic UPDATEs, never read-modify-write
    sales_count = Column(Integer, default=0, nullable=False)
    best_seller = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    category = relationship("Category", back_populates="products", lazy="selectin")
