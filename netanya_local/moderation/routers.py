from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette import status

from netanya_local.businesses.schemas import BusinessOut, OwnerBusinessOut, OwnerBusinessCreate
from netanya_local.common.common import CurrentAdmin, CurrentOwner
from netanya_local.moderation import schemas
from netanya_local.moderation.models import ModStatus
from netanya_local.moderation.ownership import OwnershipService
from netanya_local.moderation.services import (
    SubmissionService,
    ModerationService,
    OwnerPortalService,
    CategoryRequestService,
)
from netanya_local.users.models import AdminUser, BusinessOwner


# PUBLIC

router = APIRouter(prefix="/businesses", tags=["submissions"])


@router.post("/submit", response_model=schemas.SubmitResult, status_code=status.HTTP_201_CREATED)
async def submit_business(data: schemas.PendingBusinessCreate, service: SubmissionService = Depends()):
    pending = await service.submit(data)
    return schemas.SubmitResult(id=pending.id)


category_request_router = APIRouter(prefix="/category-requests", tags=["category-requests"])


@category_request_router.post("", response_model=schemas.SubmitResult, status_code=status.HTTP_201_CREATED)
async def submit_category_request(data: schemas.CategoryRequestCreate, service: CategoryRequestService = Depends()):
    request = await service.submit(data)
    return schemas.SubmitResult(id=request.id)


# ADMIN

admin_router = APIRouter(prefix="/admin", tags=["moderation"])


def _status_filter(value: str) -> Optional[ModStatus]:
    # "all" -> без фильтра
    return None if value == "all" else ModStatus(value)


@admin_router.get("/pending", response_model=List[schemas.PendingBusinessOut])
async def list_pending(
    status_: str = Query("pending", alias="status", pattern="^(pending|approved|rejected|all)$"),
    service: ModerationService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.list_pending_businesses(_status_filter(status_))


@admin_router.post("/pending/{pending_id}/approve", response_model=BusinessOut)
async def approve_pending(
    pending_id: int,
    service: ModerationService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.approve_pending_business(pending_id, admin=admin)


@admin_router.post("/pending/{pending_id}/reject", response_model=schemas.PendingBusinessOut)
async def reject_pending(
    pending_id: int,
    data: Optional[schemas.RejectIn] = None,
    service: ModerationService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.reject_pending_business(pending_id, admin=admin, reason=data.reason if data else None)


@admin_router.get("/pending-edits", response_model=List[schemas.PendingEditReviewOut])
async def list_pending_edits(
    status_: str = Query("pending", alias="status", pattern="^(pending|approved|rejected|all)$"),
    service: ModerationService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.list_pending_edits(_status_filter(status_))


@admin_router.post("/pending-edits/{edit_id}/approve", response_model=BusinessOut)
async def approve_pending_edit(
    edit_id: int,
    service: ModerationService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.approve_pending_edit(edit_id, admin=admin)


@admin_router.post("/pending-edits/{edit_id}/reject", response_model=schemas.PendingBusinessEditOut)
async def reject_pending_edit(
    edit_id: int,
    data: Optional[schemas.RejectIn] = None,
    service: ModerationService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.reject_pending_edit(edit_id, admin=admin, reason=data.reason if data else None)


@admin_router.get("/category-requests", response_model=List[schemas.CategoryRequestOut])
async def list_category_requests(
    status_: str = Query("pending", alias="status", pattern="^(pending|approved|rejected|all)$"),
    service: CategoryRequestService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.list_requests(_status_filter(status_))


@admin_router.post("/category-requests/{request_id}/approve", response_model=schemas.CategoryRequestOut)
async def approve_category_request(
    request_id: int,
    data: Optional[schemas.CategoryRequestApproveIn] = None,
    service: CategoryRequestService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    data = data or schemas.CategoryRequestApproveIn()
    return await service.approve(
        request_id, admin=admin, create_category=data.create_category, admin_notes=data.admin_notes
    )


@admin_router.post("/category-requests/{request_id}/reject", response_model=schemas.CategoryRequestOut)
async def reject_category_request(
    request_id: int,
    data: Optional[schemas.CategoryRequestRejectIn] = None,
    service: CategoryRequestService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.reject(request_id, admin=admin, admin_notes=data.admin_notes if data else None)


@admin_router.post("/link-owners", summary="Привязать бизнесы к владельцам по email заявки")
async def link_owners(
    service: OwnershipService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    linked = await service.link_all(admin=admin)
    return {"success": True, "linked": [{"business_id": b, "owner_id": o} for b, o in linked]}


# OWNER PORTAL

owner_router = APIRouter(prefix="/owner", tags=["owner"])


@owner_router.get("/businesses", response_model=List[OwnerBusinessOut])
async def my_businesses(
    service: OwnerPortalService = Depends(),
    owner: BusinessOwner = Depends(CurrentOwner()),
):
    return await service.list_businesses(owner)


@owner_router.post("/businesses", response_model=BusinessOut, status_code=status.HTTP_201_CREATED)
async def create_my_business(
    data: OwnerBusinessCreate,
    service: OwnerPortalService = Depends(),
    owner: BusinessOwner = Depends(CurrentOwner()),
):
    return await service.create_business(data, owner=owner)


@owner_router.post(
    "/businesses/{business_id}/edit",
    response_model=schemas.PendingBusinessEditOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_edit(
    business_id: int,
    data: schemas.BusinessEditProposal,
    service: OwnerPortalService = Depends(),
    owner: BusinessOwner = Depends(CurrentOwner()),
):
    return await service.submit_edit(business_id, data, owner=owner)


@owner_router.get("/submissions", response_model=List[schemas.PendingBusinessOut])
async def my_submissions(
    service: OwnerPortalService = Depends(),
    owner: BusinessOwner = Depends(CurrentOwner()),
):
    return await service.list_submissions(owner)


@owner_router.post("/submissions/{pending_id}/discard", response_model=schemas.ActionResult)
async def discard_submission(
    pending_id: int,
    service: OwnerPortalService = Depends(),
    owner: BusinessOwner = Depends(CurrentOwner()),
):
    await service.discard_rejected_submission(pending_id, owner=owner)
    return schemas.ActionResult()


@owner_router.post("/edits/{edit_id}/dismiss", response_model=schemas.ActionResult)
async def dismiss_edit(
    edit_id: int,
    service: OwnerPortalService = Depends(),
    owner: BusinessOwner = Depends(CurrentOwner()),
):
    await service.dismiss_rejected_edit(edit_id, owner=owner)
    return schemas.ActionResult()
