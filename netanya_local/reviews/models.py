from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, ForeignKey, DateTime, SmallInteger, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from netanya_local.common.db import Base, utc_now


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    comment_he: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    comment_ru: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    language: Mapped[str] = mapped_column(String(2), default="he", nullable=False)
    is_approved: Mapped[bool] = mapped_column(default=True, nullable=False)
    is_flagged: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
