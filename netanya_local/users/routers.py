from typing import List

from fastapi import APIRouter, Depends
from starlette import status

from netanya_local.common.common import CurrentAdmin, CurrentOwner
from netanya_local.users import schemas
from netanya_local.users.models import AdminUser, BusinessOwner
from netanya_local.users.services import OwnerService, AdminAccountService

router = APIRouter(prefix="/owner", tags=["owner"])


@router.get("/me", response_model=schemas.OwnerOut)
async def me(owner: BusinessOwner = Depends(CurrentOwner())):
    return owner


admin_router = APIRouter(prefix="/admin", tags=["admin-users"])


@admin_router.get("/me", response_model=schemas.AdminOut)
async def admin_me(admin: AdminUser = Depends(CurrentAdmin())):
    return admin


@admin_router.put("/me/telegram", response_model=schemas.AdminOut, summary="Чат для уведомлений о заявках")
async def set_my_telegram(
    payload: schemas.AdminTelegramIn,
    service: AdminAccountService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.set_telegram_id(admin, payload.telegram_id)


@admin_router.get("/admins", response_model=List[schemas.AdminOut])
async def list_admins(
    service: AdminAccountService = Depends(),
    _: AdminUser = Depends(CurrentAdmin(require_super=True)),
):
    return await service.list_admins()


@admin_router.get("/owners", response_model=List[schemas.OwnerOut])
async def list_owners(
    service: OwnerService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.list_owners()


@admin_router.post("/owners", response_model=schemas.OwnerOut, status_code=status.HTTP_201_CREATED)
async def create_owner(
    payload: schemas.OwnerCreate,
    service: OwnerService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.create_owner(payload, admin=admin)
