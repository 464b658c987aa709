from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from netanya_local.common.db import Base, utc_now

# показывать ли тестовые бизнесы в публичном поиске
SHOW_TEST_ON_PUBLIC = "show_test_on_public"


class AdminSetting(Base):
    """Key/value switches edited from the admin panel. Values are stored as text."""

    __tablename__ = "admin_settings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
