import re
from datetime import datetime
from typing import Optional, Literal, List
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, computed_field

from netanya_local.businesses.phone import whatsapp_url

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

Language = Literal["he", "ru"]


# ---------- normalizers (используются и в moderation.schemas) ----------
def blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def normalize_website_url(value: Optional[str]) -> Optional[str]:
    """Empty -> None; no scheme -> ``https://`` prepended; must parse as http(s) URL."""
    value = blank_to_none(value)
    if value is None:
        return None
    if not value.startswith(("http://", "https://")):
        value = f"https://{value}"
    parsed = urlparse(value)
    if not parsed.netloc or "." not in parsed.netloc:
        raise ValueError("invalid website URL")
    return value


def normalize_email(value: Optional[str]) -> Optional[str]:
    value = blank_to_none(value)
    if value is None:
        return None
    if not EMAIL_RE.match(value):
        raise ValueError("invalid email address")
    return value.lower()


def reject_null(value, info):
    """PATCH-схемы: поле можно не присылать, но явный null для NOT NULL колонки запрещён."""
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value


class ContactFields(BaseModel):
    phone: Optional[str] = Field(None, max_length=30)
    whatsapp_number: Optional[str] = Field(None, max_length=30)
    website_url: Optional[str] = Field(None, max_length=500)
    email: Optional[str] = Field(None, max_length=255)

    @field_validator("phone", "whatsapp_number", mode="before")
    @classmethod
    def _strip_phone(cls, v):
        return blank_to_none(v)

    @field_validator("website_url", mode="before")
    @classmethod
    def _website(cls, v):
        return normalize_website_url(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return normalize_email(v)


# ---------- admin ----------
class AdminBusinessCreate(ContactFields):
    name: str = Field(min_length=2, max_length=200)
    language: Language = "he"
    category_id: int
    subcategory_id: Optional[int] = None
    neighborhood_id: int
    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=300)
    opening_hours: Optional[str] = None
    serves_all_city: bool = False

    is_visible: bool = True
    is_verified: bool = False
    is_pinned: bool = False
    # созданные вручную админом по умолчанию помечаются как тестовые
    is_test: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", "address", "opening_hours", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class OwnerBusinessCreate(ContactFields):
    """Owner portal "add my business": published right away, both languages at once."""

    name_he: str = Field(min_length=2, max_length=200)
    name_ru: Optional[str] = Field(None, max_length=200)
    category_id: int
    subcategory_id: Optional[int] = None
    neighborhood_id: int
    description_he: Optional[str] = None
    description_ru: Optional[str] = None
    address_he: Optional[str] = Field(None, max_length=300)
    address_ru: Optional[str] = Field(None, max_length=300)
    opening_hours_he: Optional[str] = None
    opening_hours_ru: Optional[str] = None
    serves_all_city: bool = False

    @field_validator("name_he", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "name_ru", "description_he", "description_ru", "address_he", "address_ru",
        "opening_hours_he", "opening_hours_ru",
        mode="before",
    )
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class AdminBusinessUpdate(ContactFields):
    name_he: Optional[str] = Field(None, min_length=2, max_length=200)
    name_ru: Optional[str] = Field(None, max_length=200)
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    neighborhood_id: Optional[int] = None
    description_he: Optional[str] = None
    description_ru: Optional[str] = None
    address_he: Optional[str] = Field(None, max_length=300)
    address_ru: Optional[str] = Field(None, max_length=300)
    opening_hours_he: Optional[str] = None
    opening_hours_ru: Optional[str] = None
    serves_all_city: Optional[bool] = None
    is_visible: Optional[bool] = None
    is_verified: Optional[bool] = None
    is_pinned: Optional[bool] = None
    is_test: Optional[bool] = None

    _not_null = field_validator(
        "name_he", "category_id", "neighborhood_id", "serves_all_city",
        "is_visible", "is_verified", "is_pinned", "is_test",
    )(reject_null)

    @field_validator(
        "name_ru", "description_he", "description_ru", "address_he", "address_ru",
        "opening_hours_he", "opening_hours_ru",
        mode="before",
    )
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class SubcategoryAssign(BaseModel):
    subcategory_id: Optional[int] = None


class MoveBusinessesIn(BaseModel):
    business_ids: List[int] = Field(min_length=1)
    category_id: int
    subcategory_id: Optional[int] = None


class LinkOwnerIn(BaseModel):
    owner_email: str

    @field_validator("owner_email", mode="before")
    @classmethod
    def _email(cls, v):
        v = normalize_email(v)
        if v is None:
            raise ValueError("owner_email is required")
        return v


# ---------- output ----------
class BusinessOut(BaseModel):
    id: int
    name_he: str
    name_ru: Optional[str] = None
    slug_he: str
    slug_ru: Optional[str] = None
    description_he: Optional[str] = None
    description_ru: Optional[str] = None
    address_he: Optional[str] = None
    address_ru: Optional[str] = None
    opening_hours_he: Optional[str] = None
    opening_hours_ru: Optional[str] = None
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None
    website_url: Optional[str] = None
    email: Optional[str] = None
    is_visible: bool
    is_verified: bool
    is_pinned: bool
    pinned_order: Optional[int] = None
    is_test: bool
    serves_all_city: bool
    category_id: int
    subcategory_id: Optional[int] = None
    neighborhood_id: int
    city_id: int
    owner_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def whatsapp_url(self) -> Optional[str]:
        return whatsapp_url(self.whatsapp_number)


class OwnerBusinessOut(BaseModel):
    id: int
    name_he: str
    name_ru: Optional[str] = None
    slug_he: str
    is_visible: bool
    is_verified: bool
    average_rating: float = 0
    total_reviews: int = 0
    # есть ли открытая (pending) заявка на правку
    has_pending_edit: bool = False
    pending_edit_status: Optional[str] = None
