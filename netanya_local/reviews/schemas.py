from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from netanya_local.businesses.schemas import Language, blank_to_none


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)
    author_name: Optional[str] = Field(None, max_length=100)
    language: Language = "he"

    @field_validator("comment", "author_name", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class ReviewOut(BaseModel):
    id: int
    business_id: int
    rating: int
    comment_he: Optional[str] = None
    comment_ru: Optional[str] = None
    author_name: Optional[str] = None
    language: str
    is_approved: bool
    is_flagged: bool
    created_at: datetime

    model_config = {"from_attributes": True}
