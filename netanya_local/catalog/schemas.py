from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from netanya_local.businesses.schemas import reject_null

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CityOut(BaseModel):
    id: int
    name_he: str
    name_ru: str
    slug: str

    model_config = {"from_attributes": True}


class NeighborhoodCreate(BaseModel):
    city_id: int
    name_he: str = Field(min_length=1, max_length=100)
    name_ru: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=100, pattern=SLUG_PATTERN)
    display_order: int = 0


class NeighborhoodUpdate(BaseModel):
    name_he: Optional[str] = Field(None, min_length=1, max_length=100)
    name_ru: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    display_order: Optional[int] = None

    _not_null = field_validator("name_he", "name_ru", "slug", "display_order")(reject_null)


class NeighborhoodOut(BaseModel):
    id: int
    city_id: int
    name_he: str
    name_ru: str
    slug: str
    is_active: bool
    display_order: int

    model_config = {"from_attributes": True}


class SubcategoryCreate(BaseModel):
    category_id: int
    name_he: str = Field(min_length=1, max_length=100)
    name_ru: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=100, pattern=SLUG_PATTERN)
    display_order: int = 0


class SubcategoryUpdate(BaseModel):
    name_he: Optional[str] = Field(None, min_length=1, max_length=100)
    name_ru: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    display_order: Optional[int] = None

    _not_null = field_validator("name_he", "name_ru", "slug", "display_order")(reject_null)


class SubcategoryOut(BaseModel):
    id: int
    category_id: int
    name_he: str
    name_ru: str
    slug: str
    is_active: bool
    display_order: int

    model_config = {"from_attributes": True}


class CategoryCreate(BaseModel):
    name_he: str = Field(min_length=1, max_length=100)
    name_ru: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=100, pattern=SLUG_PATTERN)
    icon_name: Optional[str] = None
    is_popular: bool = False
    display_order: int = 0


class CategoryUpdate(BaseModel):
    name_he: Optional[str] = Field(None, min_length=1, max_length=100)
    name_ru: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    icon_name: Optional[str] = None
    is_popular: Optional[bool] = None
    display_order: Optional[int] = None

    _not_null = field_validator("name_he", "name_ru", "slug", "is_popular", "display_order")(reject_null)


class CategoryOut(BaseModel):
    id: int
    name_he: str
    name_ru: str
    slug: str
    icon_name: Optional[str] = None
    is_popular: bool
    is_active: bool
    display_order: int

    model_config = {"from_attributes": True}


class CategoryWithSubcategoriesOut(CategoryOut):
    subcategories: List[SubcategoryOut] = []


class SubcategoryOrderIn(BaseModel):
    # новый порядок: id подкатегорий сверху вниз
    subcategory_ids: List[int] = Field(min_length=1)
