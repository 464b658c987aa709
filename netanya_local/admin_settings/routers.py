from typing import List

from fastapi import APIRouter, Depends

from netanya_local.admin_settings import schemas
from netanya_local.admin_settings.services import AdminSettingsService
from netanya_local.common.common import CurrentAdmin
from netanya_local.users.models import AdminUser


admin_router = APIRouter(prefix="/admin/settings", tags=["admin-settings"])


@admin_router.get("", response_model=List[schemas.AdminSettingOut])
async def list_settings(
    service: AdminSettingsService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.list_settings()


@admin_router.get("/show-test-on-public", response_model=schemas.ShowTestOnPublicOut)
async def get_show_test_on_public(
    service: AdminSettingsService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return schemas.ShowTestOnPublicOut(show_test_on_public=await service.show_test_on_public())


@admin_router.post("/show-test-on-public/toggle", response_model=schemas.ShowTestOnPublicOut)
async def toggle_show_test_on_public(
    service: AdminSettingsService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return schemas.ShowTestOnPublicOut(show_test_on_public=await service.toggle_show_test_on_public(admin=admin))
