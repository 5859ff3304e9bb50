from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Float, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.linog.models import Base

if TYPE_CHECKING:
    from app.linog.modules.image_groups.models import Image


class Marker(Base):
    __tablename__ = "markers"
    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_markers_latitude"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_markers_longitude"),
        Index("idx_markers_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    images: Mapped[list["Image"]] = relationship(
        "Image",
        back_populates="marker",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="[Image.display_order, Image.created_at, Image.id]",
    )
