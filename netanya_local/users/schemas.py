from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from netanya_local.businesses.schemas import normalize_email


class OwnerCreate(BaseModel):
    email: str = Field(max_length=255)
    name: str = Field(min_length=1, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        v = normalize_email(v)
        if v is None:
            raise ValueError("email is required")
        return v


class OwnerOut(BaseModel):
    id: int
    email: str
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AdminOut(BaseModel):
    id: int
    email: str
    name: str
    is_super_admin: bool
    telegram_id: Optional[int] = None

    model_config = {"from_attributes": True}


class AdminTelegramIn(BaseModel):
    telegram_id: Optional[int] = None
