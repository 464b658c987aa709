from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from netanya_local.common.db import Base, utc_now

# поля, которые владелец может менять через портал (с модерацией)
OWNER_EDITABLE_FIELDS = (
    "description_he",
    "description_ru",
    "phone",
    "whatsapp_number",
    "website_url",
    "email",
    "opening_hours_he",
    "opening_hours_ru",
    "address_he",
    "address_ru",
)


class Business(Base):
    __tablename__ = "businesses"
    __table_args__ = (
        Index("ix_businesses_category_neighborhood", "category_id", "neighborhood_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name_he: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    name_ru: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    slug_he: Mapped[str] = mapped_column(String(220), unique=True, nullable=False)
    slug_ru: Mapped[Optional[str]] = mapped_column(String(220), unique=True, nullable=True)

    description_he: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ru: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address_he: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    address_ru: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    opening_hours_he: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    opening_hours_ru: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # контакты
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    website_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # флаги
    is_visible: Mapped[bool] = mapped_column(default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_pinned: Mapped[bool] = mapped_column(default=False, nullable=False)
    pinned_order: Mapped[Optional[int]] = mapped_column(nullable=True)
    is_test: Mapped[bool] = mapped_column(default=False, nullable=False)
    serves_all_city: Mapped[bool] = mapped_column(default=False, nullable=False)

    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    subcategory_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("subcategories.id", ondelete="SET NULL"), nullable=True
    )
    neighborhood_id: Mapped[int] = mapped_column(ForeignKey("neighborhoods.id", ondelete="RESTRICT"), nullable=False)
    city_id: Mapped[int] = mapped_column(ForeignKey("cities.id", ondelete="RESTRICT"), nullable=False)
    owner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("business_owners.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    # мягкое удаление: строки никогда не удаляются физически
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
