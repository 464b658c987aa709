import enum
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import String, Text, ForeignKey, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from netanya_local.common.db import Base, utc_now


class ModStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class PendingBusiness(Base):
    """Public submission waiting for moderation. Approved rows stay as an audit trail."""

    __tablename__ = "pending_businesses"
    __table_args__ = (Index("ix_pending_businesses_status_created", "status", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # язык, на котором заполнена форма: he / ru
    language: Mapped[str] = mapped_column(String(2), default="he", nullable=False)

    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    subcategory_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("subcategories.id", ondelete="SET NULL"), nullable=True
    )
    neighborhood_id: Mapped[int] = mapped_column(ForeignKey("neighborhoods.id", ondelete="RESTRICT"), nullable=False)

    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    website_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    opening_hours: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    serves_all_city: Mapped[bool] = mapped_column(default=False, nullable=False)

    submitter_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    submitter_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)

    status: Mapped[str] = mapped_column(String(16), default=ModStatus.pending.value, nullable=False)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # бизнес, созданный при одобрении
    business_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("businesses.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class PendingBusinessEdit(Base):
    """
    Owner-proposed changes to a Business.

    ``business_id`` is unique: one row per business, a new submission overwrites
    the previous proposal. ``changes`` holds only the proposed fields.
    """

    __tablename__ = "pending_business_edits"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(
        ForeignKey("businesses.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    owner_id: Mapped[int] = mapped_column(ForeignKey("business_owners.id", ondelete="CASCADE"), nullable=False, index=True)

    changes: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    status: Mapped[str] = mapped_column(String(16), default=ModStatus.pending.value, nullable=False, index=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class CategoryRequest(Base):
    """Public request for a category that does not exist yet."""

    __tablename__ = "category_requests"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    category_name_he: Mapped[str] = mapped_column(String(100), nullable=False)
    category_name_ru: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    requester_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    requester_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    requester_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    business_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(String(16), default=ModStatus.pending.value, nullable=False, index=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True
    )
    # категория, созданная при одобрении (если админ её создал)
    created_category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
