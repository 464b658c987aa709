from io import BytesIO

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from netanya_local.common.common import CurrentAdmin
from netanya_local.reports.services import ExportService, BackupService
from netanya_local.users.models import AdminUser

admin_router = APIRouter(prefix="/admin", tags=["admin-reports"])


@admin_router.get(
    "/export/businesses",
    summary="Экспорт бизнесов в Excel",
    response_description="Excel-файл (.xlsx) со списком бизнесов",
)
async def export_businesses_xlsx(
    include_deleted: bool = False,
    service: ExportService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    file_bytes, filename = await service.export_businesses_xlsx(include_deleted=include_deleted)
    return StreamingResponse(
        BytesIO(file_bytes),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@admin_router.post("/backup", summary="JSON-бэкап всех таблиц в BACKUP_DIR")
async def create_backup(
    service: BackupService = Depends(),
    _: AdminUser = Depends(CurrentAdmin(require_super=True)),
):
    return await service.create_backup()
