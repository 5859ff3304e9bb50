from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.linog.models import Base

if TYPE_CHECKING:
    from app.linog.modules.markers.models import Marker


class ImageGroup(Base):
    __tablename__ = "image_groups"
    __table_args__ = (
        CheckConstraint("latitude IS NULL OR (latitude >= -90 AND latitude <= 90)", name="ck_image_groups_latitude"),
        CheckConstraint("longitude IS NULL OR (longitude >= -180 AND longitude <= 180)", name="ck_image_groups_longitude"),
        Index("idx_image_groups_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Required
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Optional
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    images: Mapped[list["Image"]] = relationship(
        "Image",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="[Image.display_order, Image.created_at, Image.id]",
    )


class Image(Base):
    """
    An image URL owned by exactly one image group or one marker.
    Image bytes are never stored here.
    """

    __tablename__ = "images"
    __table_args__ = (
        CheckConstraint(
            "(group_id IS NOT NULL AND marker_id IS NULL) OR (group_id IS NULL AND marker_id IS NOT NULL)",
            name="ck_images_single_owner",
        ),
        Index("idx_images_group", "group_id"),
        Index("idx_images_marker", "marker_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    group_id: Mapped[int | None] = mapped_column(ForeignKey("image_groups.id", ondelete="CASCADE"), nullable=True)
    marker_id: Mapped[int | None] = mapped_column(ForeignKey("markers.id", ondelete="CASCADE"), nullable=True)

    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    group: Mapped["ImageGroup | None"] = relationship("ImageGroup", back_populates="images")
    marker: Mapped["Marker | None"] = relationship("Marker", back_populates="images")
