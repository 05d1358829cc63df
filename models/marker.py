from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Numeric,
    Text,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, TimestampMixin


class Marker(TimestampMixin, BaseModel, Base):
    __tablename__ = "markers"

    # 8-char code printed on QR labels; generated server-side
    short_code = Column(String(8), nullable=False, unique=True, index=True)
    creator_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    strain = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=True)
    latitude = Column(Numeric(10, 8), nullable=False)
    longitude = Column(Numeric(11, 8), nullable=False)
    image_url = Column(Text, nullable=True)
    owner_name = Column(String(100), nullable=True)
    owner_contact = Column(String(50), nullable=True)

    creator = relationship("User", back_populates="markers")

    __table_args__ = (
        CheckConstraint("(quantity IS NULL) OR (quantity >= 0)", name="ck_markers_quantity_nonnegative"),
        Index("ix_markers_location", "latitude", "longitude"),
        Index("ix_markers_created_at", "created_at"),
    )
