from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from netanya_local.businesses.schemas import (
    ContactFields,
    Language,
    blank_to_none,
    normalize_email,
)
from netanya_local.moderation.models import ModStatus


class PendingBusinessCreate(ContactFields):
    """Public "add a business" form."""

    name: str = Field(min_length=2, max_length=200)
    language: Language = "he"

    # категорию/район можно передать id или slug
    category_id: Optional[int] = None
    category_slug: Optional[str] = None
    subcategory_id: Optional[int] = None
    subcategory_slug: Optional[str] = None
    neighborhood_id: Optional[int] = None
    neighborhood_slug: Optional[str] = None

    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=300)
    opening_hours: Optional[str] = None
    serves_all_city: bool = False

    submitter_name: Optional[str] = Field(None, max_length=100)
    submitter_email: Optional[str] = Field(None, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "description", "address", "opening_hours", "submitter_name",
        "category_slug", "subcategory_slug", "neighborhood_slug",
        mode="before",
    )
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("submitter_email", mode="before")
    @classmethod
    def _submitter_email(cls, v):
        return normalize_email(v)

    @model_validator(mode="after")
    def _references(self):
        if self.category_id is None and not self.category_slug:
            raise ValueError("category_id or category_slug is required")
        if self.neighborhood_id is None and not self.neighborhood_slug:
            raise ValueError("neighborhood_id or neighborhood_slug is required")
        return self


class BusinessEditProposal(ContactFields):
    """Owner portal edit. Only the fields actually sent are proposed."""

    description_he: Optional[str] = None
    description_ru: Optional[str] = None
    opening_hours_he: Optional[str] = None
    opening_hours_ru: Optional[str] = None
    address_he: Optional[str] = Field(None, max_length=300)
    address_ru: Optional[str] = Field(None, max_length=300)

    @field_validator(
        "description_he", "description_ru", "opening_hours_he", "opening_hours_ru",
        "address_he", "address_ru",
        mode="before",
    )
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    def proposed_changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class RejectIn(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)

    @field_validator("reason", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class PendingBusinessOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    language: str
    category_id: int
    subcategory_id: Optional[int] = None
    neighborhood_id: int
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None
    website_url: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    opening_hours: Optional[str] = None
    serves_all_city: bool
    submitter_name: Optional[str] = None
    submitter_email: Optional[str] = None
    status: ModStatus
    rejection_reason: Optional[str] = None
    business_id: Optional[int] = None
    created_at: datetime
    reviewed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PendingBusinessEditOut(BaseModel):
    id: int
    business_id: int
    owner_id: int
    changes: Dict[str, Any]
    status: ModStatus
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    reviewed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PendingEditReviewOut(PendingBusinessEditOut):
    """Admin queue item: proposal plus the current values of the touched fields."""

    business_name_he: str
    current: Dict[str, Any]


class SubmitResult(BaseModel):
    success: bool = True
    id: int


class ActionResult(BaseModel):
    success: bool = True


# ---------- category requests ----------
class CategoryRequestCreate(BaseModel):
    """Public "my category is missing" form."""

    category_name_he: str = Field(min_length=1, max_length=100)
    category_name_ru: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    requester_name: Optional[str] = Field(None, max_length=100)
    requester_email: Optional[str] = Field(None, max_length=255)
    requester_phone: Optional[str] = Field(None, max_length=30)
    business_name: Optional[str] = Field(None, max_length=200)

    @field_validator("category_name_he", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "category_name_ru", "description", "requester_name", "requester_phone", "business_name",
        mode="before",
    )
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("requester_email", mode="before")
    @classmethod
    def _requester_email(cls, v):
        return normalize_email(v)


class CategoryRequestApproveIn(BaseModel):
    # создать категорию из заявки или только закрыть заявку
    create_category: bool = False
    admin_notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("admin_notes", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class CategoryRequestRejectIn(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("admin_notes", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class CategoryRequestOut(BaseModel):
    id: int
    category_name_he: str
    category_name_ru: Optional[str] = None
    description: Optional[str] = None
    requester_name: Optional[str] = None
    requester_email: Optional[str] = None
    requester_phone: Optional[str] = None
    business_name: Optional[str] = None
    status: ModStatus
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    created_category_id: Optional[int] = None
    created_at: datetime
    reviewed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
