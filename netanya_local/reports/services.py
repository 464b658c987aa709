import logging
from io import BytesIO

import pandas as pd
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.admin_settings.models import AdminSetting
from netanya_local.businesses.models import Business
from netanya_local.catalog.models import Category, City, Neighborhood, Subcategory
from netanya_local.common.db import get_async_session, utc_now
from netanya_local.common.files import write_json_backup
from netanya_local.core.config import get_settings
from netanya_local.moderation.models import PendingBusiness, PendingBusinessEdit, CategoryRequest
from netanya_local.reviews.models import Review
from netanya_local.users.models import BusinessOwner

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "id", "name_he", "name_ru", "category", "subcategory", "neighborhood",
    "phone", "whatsapp_number", "website_url", "email", "address_he", "address_ru",
    "is_visible", "is_verified", "is_pinned", "is_test", "serves_all_city",
    "owner_id", "created_at", "updated_at",
]

# порядок важен для восстановления: справочники раньше бизнесов
BACKUP_MODELS = [
    ("cities", City),
    ("neighborhoods", Neighborhood),
    ("categories", Category),
    ("subcategories", Subcategory),
    ("business_owners", BusinessOwner),
    ("businesses", Business),
    ("reviews", Review),
    ("pending_businesses", PendingBusiness),
    ("pending_business_edits", PendingBusinessEdit),
    ("category_requests", CategoryRequest),
    ("admin_settings", AdminSetting),
]


def _row_to_dict(obj) -> dict:
    return {col.key: getattr(obj, col.key) for col in obj.__table__.columns}


class ExportService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def export_businesses_xlsx(self, *, include_deleted: bool = False) -> tuple[bytes, str]:
        """
        Возвращает кортеж: (байты xlsx, имя_файла).
        Категория/подкатегория/район подставляются по-русски, если есть.
        """
        stmt = (
            select(Business, Category.name_ru, Subcategory.name_ru, Neighborhood.name_ru)
            .join(Category, Category.id == Business.category_id)
            .join(Neighborhood, Neighborhood.id == Business.neighborhood_id)
            .outerjoin(Subcategory, Subcategory.id == Business.subcategory_id)
            .order_by(Business.id)
        )
        if not include_deleted:
            stmt = stmt.where(Business.deleted_at.is_(None))
        res = await self.session.execute(stmt)

        data = []
        for b, category, subcategory, neighborhood in res.all():
            data.append({
                "id": b.id,
                "name_he": b.name_he,
                "name_ru": b.name_ru or "",
                "category": category,
                "subcategory": subcategory or "",
                "neighborhood": neighborhood,
                "phone": b.phone or "",
                "whatsapp_number": b.whatsapp_number or "",
                "website_url": b.website_url or "",
                "email": b.email or "",
                "address_he": b.address_he or "",
                "address_ru": b.address_ru or "",
                "is_visible": b.is_visible,
                "is_verified": b.is_verified,
                "is_pinned": b.is_pinned,
                "is_test": b.is_test,
                "serves_all_city": b.serves_all_city,
                "owner_id": b.owner_id,
                # Excel не умеет tz-aware даты
                "created_at": b.created_at.replace(tzinfo=None) if b.created_at else None,
                "updated_at": b.updated_at.replace(tzinfo=None) if b.updated_at else None,
            })

        df = pd.DataFrame(data, columns=EXPORT_COLUMNS)
        buf = BytesIO()
        with pd.ExcelWriter(buf, engine="openpyxl") as xw:
            df.to_excel(xw, index=False, sheet_name="Businesses")

        filename = f"businesses_{utc_now().strftime('%Y%m%d')}.xlsx"
        logger.info("Exported %s businesses to %s", len(data), filename)
        return buf.getvalue(), filename


class BackupService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def collect(self) -> dict:
        tables = {}
        for name, model in BACKUP_MODELS:
            res = await self.session.execute(select(model).order_by(model.id))
            tables[name] = [_row_to_dict(row) for row in res.scalars().all()]
        return tables

    async def create_backup(self) -> dict:
        now = utc_now()
        tables = await self.collect()
        payload = {"created_at": now, "tables": tables}
        path = await write_json_backup(get_settings().BACKUP_DIR, payload, now)
        counts = {name: len(rows) for name, rows in tables.items()}
        logger.info("Backup written to %s: %s", path, counts)
        return {"success": True, "file": path.name, "counts": counts}
