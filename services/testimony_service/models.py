from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from shared.config.database import Base


class Testimony(Base):
    __tablename__ = "testimonies"

    id = Column(Integer, primary_key=True, index=True)
    image_key = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
